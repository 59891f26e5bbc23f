from enum import Enum


class ErrorSource(str, Enum):
    GROWW = "groww"
    EBULLION = "ebullion"
