"""City resolver — maps a user-supplied city token onto the vendor's city key."""

import logging
import re
from typing import Mapping

from goldrates.domain.enums import ErrorSource
from goldrates.domain.models import CityMatch
from goldrates.exceptions import UpstreamError

logger = logging.getLogger(__name__)

# Probed (case-insensitively) when the requested city is not in the vendor data
PRIORITY_CITIES: tuple[str, ...] = (
    "delhi",
    "mumbai",
    "kolkata",
    "bangalore",
    "chennai",
    "hyderabad",
    "navi mumbai",
)

_WHITESPACE = re.compile(r"\s+")
_SEPARATORS = re.compile(r"[\s\-]+")


def canonical_city_key(city: str) -> str:
    """Canonical cache key: trimmed, lower-cased, whitespace/hyphen runs collapsed to one hyphen."""
    return _SEPARATORS.sub("-", city.strip().lower()).strip("-")


def city_variations(city: str) -> list[str]:
    """Ordered, de-duplicated spellings of ``city`` to probe against the vendor map."""
    candidates = [
        city,
        city.replace("-", " "),
        city.replace("-", ""),
        _WHITESPACE.sub("-", city),
        city.lower(),
        city.replace("-", " ").lower(),
        city.replace("-", "").lower(),
    ]
    seen: set[str] = set()
    ordered: list[str] = []
    for candidate in candidates:
        if candidate and candidate not in seen:
            seen.add(candidate)
            ordered.append(candidate)
    return ordered


def _has_data(value: object) -> bool:
    """Vendor entries are usable unless null, empty-string, zero or false; an empty object still counts."""
    return isinstance(value, (dict, list)) or bool(value)


def resolve_city(city: str, vendor_cities: Mapping[str, object]) -> CityMatch:
    """Resolve ``city`` to a key of ``vendor_cities`` whose entry carries data.

    Never reports "not found" for a non-empty map: unresolvable input falls back
    to the first priority city present, then to the first vendor key, with
    ``matched=False``. Keys whose entry is null or blank are skipped by every
    step. Raises UpstreamError only when the vendor map is empty.
    """
    if not vendor_cities:
        raise UpstreamError("Vendor returned no cities", source=ErrorSource.GROWW)

    usable = [key for key, value in vendor_cities.items() if _has_data(value)]

    # 1. Exact probe of each spelling variation
    for variation in city_variations(city):
        if variation in vendor_cities and _has_data(vendor_cities[variation]):
            return CityMatch(matched=True, key=variation, strategy="variation")

    # 2. Case-insensitive comparison against every vendor key
    normalized = _WHITESPACE.sub(" ", city.replace("-", " ").strip().lower())
    for key in usable:
        lowered = key.lower()
        if (
            lowered == normalized
            or _WHITESPACE.sub(" ", lowered) == normalized
            or lowered.replace("-", " ") == normalized
        ):
            return CityMatch(matched=True, key=key, strategy="case_insensitive")

    # 3. Major cities, in fixed priority order
    by_lower: dict[str, str] = {}
    for key in usable:
        by_lower.setdefault(_WHITESPACE.sub(" ", key.lower()), key)
    for priority in PRIORITY_CITIES:
        if priority in by_lower:
            logger.warning("City %r not in vendor data, falling back to %r", city, by_lower[priority])
            return CityMatch(matched=False, key=by_lower[priority], strategy="priority")

    # 4. Anything at all
    first_key = usable[0] if usable else next(iter(vendor_cities))
    logger.warning("City %r not in vendor data, falling back to first vendor city %r", city, first_key)
    return CityMatch(matched=False, key=first_key, strategy="first_available")
