"""Address validation data models and enums.

This module defines the data structures shared by the regex parser, the
geocoder client, the Victoria filter and the validation orchestrator. All of
them are created per validation call and discarded afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ConfidenceLevel(str, Enum):
    """Coarse reliability label derived from the source of a match."""

    HIGH = "high"       # Geocoder hit or the strictest regex tier
    MEDIUM = "medium"   # Lot / road-type regex tiers with a state token
    LOW = "low"         # Loose regex tiers, or no match at all


class Source(str, Enum):
    """Subsystem that produced the final answer."""

    API = "api"
    REGEX_URBAN = "regex-urban"
    REGEX_RURAL = "regex-rural"
    NONE = "none"


class AddressType(str, Enum):
    """Kind of address recognised."""

    URBAN = "urban"
    UNKNOWN = "unknown"


class ValidationIssue(str, Enum):
    """Reasons a validation degraded or failed."""

    INVALID_INPUT = "invalid_input"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    NO_PATTERN_MATCH = "no_pattern_match"
    OUT_OF_STATE = "out_of_state"


@dataclass(slots=True, frozen=True)
class AddressComponents:
    """Structured address parts. Absent parts are empty strings."""

    house_number: str = ""
    road: str = ""
    suburb: str = ""
    state: str = ""
    postcode: str = ""

    @property
    def formatted(self) -> str:
        """Return single-line address, e.g. '90 Forman Road, Shelbourne VIC 3515'."""
        street = " ".join(p for p in (self.house_number, self.road) if p)
        locality = " ".join(p for p in (self.suburb, self.state, self.postcode) if p)
        return ", ".join(p for p in (street, locality) if p)

    def to_dict(self) -> dict[str, str]:
        return {
            "house_number": self.house_number,
            "road": self.road,
            "suburb": self.suburb,
            "state": self.state,
            "postcode": self.postcode,
        }


@dataclass(slots=True, frozen=True)
class GeocodeCandidate:
    """One record returned by the external geocoder.

    Attributes:
        display_name: Provider's free-text description of the place.
        address: Structured sub-fields (road, suburb, state, postcode, ...).
        lat: Latitude, if the provider supplied a usable one.
        lon: Longitude, if the provider supplied a usable one.
    """

    display_name: str
    address: dict[str, str] = field(default_factory=dict)
    lat: float | None = None
    lon: float | None = None

    @property
    def state(self) -> str:
        """Structured state name or code, empty when the provider omitted it."""
        return self.address.get("state", "")

    @property
    def locality(self) -> str:
        """Suburb-level locality; rural places report town/village/hamlet instead."""
        for key in ("suburb", "town", "village", "hamlet", "city", "municipality"):
            if self.address.get(key):
                return self.address[key]
        return ""

    @classmethod
    def from_dict(cls, item: dict[str, Any]) -> "GeocodeCandidate":
        """Build a candidate from a Nominatim search item."""
        raw_address = item.get("address") if isinstance(item.get("address"), dict) else {}
        address = {str(k): str(v) for k, v in raw_address.items() if v is not None}

        lat = lon = None
        try:
            if item.get("lat") is not None and item.get("lon") is not None:
                lat = float(item["lat"])
                lon = float(item["lon"])
        except (TypeError, ValueError):
            lat = lon = None

        return cls(
            display_name=str(item.get("display_name", "") or ""),
            address=address,
            lat=lat,
            lon=lon,
        )


@dataclass(slots=True, frozen=True)
class ParseResult:
    """Outcome of the regex parser."""

    is_valid: bool
    confidence: ConfidenceLevel
    components: AddressComponents | None = None
    pattern_index: int | None = None
    address_type: AddressType = AddressType.UNKNOWN
    message: str | None = None
    issue: ValidationIssue | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "isValid": self.is_valid,
            "confidence": self.confidence.value,
            "components": self.components.to_dict() if self.components else {},
            "addressType": self.address_type.value,
        }
        if self.pattern_index is not None:
            data["patternIndex"] = self.pattern_index
        if self.message is not None:
            data["message"] = self.message
        return data


@dataclass(slots=True)
class ValidationResult:
    """Unified answer of the validation orchestrator.

    Attributes:
        success: Mirrors is_valid.
        is_valid: Whether the address is considered plausible and in-state.
        confidence: Reliability label.
        source: Subsystem that produced the answer.
        address_type: Kind of address recognised.
        message: Human readable outcome.
        components: Extracted parts (None when nothing was extracted).
        formatted: Single-line address ('' when invalid).
        suggestions: In-state geocoder candidates, only from the API path.
        unmapped: True when the geocoder did not supply the answer.
        fallback: True when the regex fallback ran.
        regex_validation: The parser's own result when the fallback ran.
        issue: Why the result degraded, if it did.
    """

    success: bool
    is_valid: bool
    confidence: ConfidenceLevel
    source: Source
    address_type: AddressType
    message: str
    components: AddressComponents | None = None
    formatted: str = ""
    suggestions: list[dict[str, Any]] = field(default_factory=list)
    unmapped: bool = False
    fallback: bool = False
    regex_validation: ParseResult | None = None
    issue: ValidationIssue | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "isValid": self.is_valid,
            "confidence": self.confidence.value,
            "source": self.source.value,
            "addressType": self.address_type.value,
            "message": self.message,
            "components": self.components.to_dict() if self.components else {},
            "formatted": self.formatted,
            "suggestions": self.suggestions,
            "unmapped": self.unmapped,
            "fallback": self.fallback,
            "regexValidation": self.regex_validation.to_dict() if self.regex_validation else None,
        }
