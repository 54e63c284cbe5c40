"""Best-effort geolocation of ISP and backbone router hostnames.

Carriers embed location hints in router names in a handful of styles:
CLLI codes (``snjsca04``), a city segment followed by a state segment
(``sunnyvale.ca``), a full city name (``dallas1``) or an airport code
(``iad08``). ``parse`` tries them in that order, most specific first, and
returns the fixed reference point of the first match.
"""

import re
from dataclasses import dataclass

from linkwatch.geo.tables import (
    CLLI_CODES,
    IATA_CODES,
    INTL_CITIES,
    STANDALONE_CITIES,
    US_CITIES,
    US_STATES,
)

_SEPARATORS_RE = re.compile(r"[._-]")
_NAME_NOISE_RE = re.compile(r"[\s.\-']")
_TRAILING_DIGITS_RE = re.compile(r"\d+$")

_US = "United States"


@dataclass(frozen=True)
class ParsedLocation:
    city: str
    region: str  # US state code, empty outside the US
    country: str
    latitude: float
    longitude: float


def normalize_name(name: str) -> str:
    """Lowercase a place name and drop spaces and punctuation."""
    return _NAME_NOISE_RE.sub("", name.lower())


def _build_locations() -> dict[str, ParsedLocation]:
    locations: dict[str, ParsedLocation] = {}
    for city, state, lat, lon in US_CITIES:
        locations[f"{normalize_name(city)},{state.lower()}"] = ParsedLocation(city, state, _US, lat, lon)
    for city, country, lat, lon in INTL_CITIES:
        locations[normalize_name(city)] = ParsedLocation(city, "", country, lat, lon)
    return locations


_LOCATIONS = _build_locations()

_CLLI = {code: _LOCATIONS[key] for code, key in CLLI_CODES.items()}
_IATA = {code: _LOCATIONS[key] for code, key in IATA_CODES.items()}

# state -> normalized city name -> location
_CITIES_BY_STATE: dict[str, dict[str, ParsedLocation]] = {}
for _key, _loc in _LOCATIONS.items():
    if _loc.country == _US:
        _CITIES_BY_STATE.setdefault(_loc.region.lower(), {})[_key.split(",")[0]] = _loc

# Longest names first so a name is never shadowed by a shorter one
_STANDALONE = {
    key.split(",")[0]: _LOCATIONS[key] for key in sorted(STANDALONE_CITIES, key=len, reverse=True)
}


def _strip_digits(segment: str) -> str:
    return _TRAILING_DIGITS_RE.sub("", segment)


def _digits_or_empty(rest: str) -> bool:
    return rest == "" or rest.isdigit()


def _match_clli(segments: list[str]) -> ParsedLocation | None:
    """4-letter place + 2-letter state + optional numeric site suffix."""
    for seg in segments:
        if len(seg) < 6:
            continue
        place, state, rest = seg[:4], seg[4:6], seg[6:]
        loc = _CLLI.get(place)
        if loc is not None and state in US_STATES and _digits_or_empty(rest):
            return ParsedLocation(loc.city, state.upper(), _US, loc.latitude, loc.longitude)
    return None


def _match_city_state(segments: list[str]) -> ParsedLocation | None:
    """A city segment immediately followed by a state segment."""
    for i in range(1, len(segments)):
        state = segments[i]
        if len(state) != 2 or state not in US_STATES:
            continue
        cities = _CITIES_BY_STATE.get(state)
        if not cities:
            continue

        # Multi-word names may be split across the preceding segments
        name = ""
        for j in range(i - 1, max(i - 4, -1), -1):
            name = _strip_digits(segments[j]) + name
            if name in cities:
                return cities[name]
    return None


def _match_city_name(segments: list[str]) -> ParsedLocation | None:
    for seg in segments:
        name = _strip_digits(seg)
        if len(name) >= 4 and name in _STANDALONE:
            return _STANDALONE[name]
    return None


def _match_iata(segments: list[str]) -> ParsedLocation | None:
    for seg in segments:
        if len(seg) < 3:
            continue
        loc = _IATA.get(seg[:3])
        if loc is not None and _digits_or_empty(seg[3:]):
            return loc
    return None


_PASSES = (_match_clli, _match_city_state, _match_city_name, _match_iata)


def parse(hostname: str | None) -> ParsedLocation | None:
    """Return the location a router hostname points at, or None."""
    if hostname is None or not hostname.strip() or hostname.strip() == "*":
        return None

    segments = _SEPARATORS_RE.split(hostname.strip().lower())
    for match in _PASSES:
        loc = match(segments)
        if loc is not None:
            return loc
    return None
