from goldrates.domain.enums.error_source import ErrorSource
from goldrates.domain.enums.metal import VariationType

__all__ = [
    "ErrorSource",
    "VariationType",
]
