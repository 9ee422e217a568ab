"""Tiered regular-expression parser for Victorian street addresses.

Used as the fallback when the geocoder cannot resolve an address (new
subdivisions, rural tracks). Patterns are tried strictly in order, most
specific first; the first tier that matches the whole input wins, so a loose
tier never re-splits an address a stricter tier already understood.

Tier  Shape                                                   Confidence
0     12 Main Street, Melbourne VIC 3000                      high
1     Lot 5 Estate Road, New Estate VIC 3150                  medium
2     12 Sunrise Rd Greenvale VIC 3059 (road type required)   medium
3     90 forman rd shelbourne 3515 (no state token)           low
4     7 old coach road heathcote 3523 (split road type)       low

Tier 4 accepts a subset of tier 3, so with the default ordering it only
wins when used on its own.

An extractor may still reject a match (a road-type word or state token left in
the suburb slot); the next tier is then tried.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable

from vicaddr.address_models import (
    AddressComponents,
    AddressType,
    ConfidenceLevel,
    ParseResult,
    ValidationIssue,
)
from vicaddr.config import cfg

logger = logging.getLogger(__name__)


INVALID_INPUT_MESSAGE = "Please provide a valid address"
NO_MATCH_MESSAGE = "No pattern matched"

# Road-type tokens recognised when the type is captured on its own
ROAD_TYPE_TOKENS: tuple[str, ...] = (
    "rd", "road", "st", "street", "ln", "lane", "dr", "drive",
    "ave", "avenue", "hwy", "highway", "tk", "track",
    "way", "place", "court", "close",
)

_ROAD_TYPE_TOKEN_RE = re.compile(rf"^(?:{'|'.join(ROAD_TYPE_TOKENS)})$", re.IGNORECASE)

_NUMBER = r"(\d+[A-Za-z]?)"
_LOT = r"(Lot\s+\d+[A-Za-z]?)"
_WORDS = r"([A-Za-z\s'.-]+?)"
_SEP = r"(?:\s*,\s*|\s+)"
_POSTCODE = r"(\d{4})"
_ROAD_TYPES_STATED = "Road|Rd|Street|St|Lane|Ln|Drive|Dr|Avenue|Ave|Highway|Hwy|Track|Tk"
_ROAD_TYPES_IMPLICIT = _ROAD_TYPES_STATED + "|Way|Place|Court|Close"


def _state_tokens() -> list[str]:
    """Every accepted state token, target state first."""
    return [cfg.target_state_code, cfg.target_state_name, *cfg.other_state_codes]


def _state_group() -> str:
    return r"\b(" + "|".join(re.escape(t) for t in _state_tokens()) + r")"


def _clean(value: str | None) -> str:
    return " ".join((value or "").split())


def _is_road_type(word: str) -> bool:
    return bool(_ROAD_TYPE_TOKEN_RE.match(word))


def _is_state_token(word: str) -> bool:
    return word.lower() in {t.lower() for t in _state_tokens()}


def _shift_road_type(road: str, suburb: str, comma_separated: bool) -> tuple[str, str]:
    """Move road-type words captured at the start of the suburb onto the road.

    A suburb that is only a road-type token always moves. Without a comma the
    lazy road group stops after the first word, so when the road has no type
    yet, everything up to the first road-type word in the suburb moves too.
    """
    words = suburb.split()
    if len(words) == 1 and _is_road_type(words[0]):
        return f"{road} {words[0]}", ""
    if comma_separated or not road or _is_road_type(road.split()[-1]):
        return road, suburb
    for i, word in enumerate(words[:-1]):
        if _is_road_type(word):
            return " ".join([road, *words[: i + 1]]), " ".join(words[i + 1:])
    return road, suburb


# =============================================================================
# Extractors - one per tier shape
# =============================================================================


def _extract_stated(m: re.Match) -> AddressComponents | None:
    """Groups: number, road, suburb, state, postcode.

    Returns None when the suburb turns out to be part of the road, so the
    next tier gets a chance.
    """
    house_number, road, suburb, state, postcode = m.groups()
    comma_separated = "," in m.string[m.end(2):m.start(3)]
    road, suburb = _shift_road_type(_clean(road), _clean(suburb), comma_separated)
    if not suburb:
        return None
    return AddressComponents(
        house_number=_clean(house_number),
        road=road,
        suburb=suburb,
        state=_clean(state),
        postcode=_clean(postcode),
    )


def _extract_implicit_state(m: re.Match) -> AddressComponents | None:
    """Groups: number, road, suburb, postcode. State is the target state."""
    house_number, road, suburb, postcode = m.groups()
    suburb = _clean(suburb)
    if _is_state_token(suburb):
        return None
    return AddressComponents(
        house_number=_clean(house_number),
        road=_clean(road),
        suburb=suburb,
        state=cfg.target_state_code,
        postcode=_clean(postcode),
    )


def _extract_split_road_type(m: re.Match) -> AddressComponents | None:
    """Groups: number, road words, road type, suburb, postcode.

    The road-type token is folded back onto the road name.
    """
    house_number, road, road_type, suburb, postcode = m.groups()
    suburb = _clean(suburb)
    if _is_state_token(suburb):
        return None
    return AddressComponents(
        house_number=_clean(house_number),
        road=f"{_clean(road)} {_clean(road_type)}",
        suburb=suburb,
        state=cfg.target_state_code,
        postcode=_clean(postcode),
    )


@dataclass(slots=True, frozen=True)
class PatternTier:
    """A regex tier and the way its match becomes components."""

    name: str
    pattern: re.Pattern
    confidence: ConfidenceLevel
    extractor: Callable[[re.Match], AddressComponents | None]

    def match(self, text: str) -> AddressComponents | None:
        m = self.pattern.fullmatch(text)
        if not m:
            return None
        return self.extractor(m)


def build_tiers() -> list[PatternTier]:
    """Build the ordered tier list, most specific first."""
    state = _state_group()
    flags = re.IGNORECASE
    return [
        PatternTier(
            name="standard",
            pattern=re.compile(
                rf"{_NUMBER}\s+{_WORDS}{_SEP}{_WORDS}{_SEP}{state}\s*{_POSTCODE}", flags
            ),
            confidence=ConfidenceLevel.HIGH,
            extractor=_extract_stated,
        ),
        PatternTier(
            name="lot",
            pattern=re.compile(
                rf"{_LOT}\s+{_WORDS}{_SEP}{_WORDS}{_SEP}{state}\s*{_POSTCODE}", flags
            ),
            confidence=ConfidenceLevel.MEDIUM,
            extractor=_extract_stated,
        ),
        PatternTier(
            name="road_type_stated",
            pattern=re.compile(
                rf"{_NUMBER}\s+([A-Za-z\s'.-]*?(?:{_ROAD_TYPES_STATED}))\s*,?\s*"
                rf"{_WORDS}(?:,?\s*){state}\s*{_POSTCODE}",
                flags,
            ),
            confidence=ConfidenceLevel.MEDIUM,
            extractor=_extract_stated,
        ),
        PatternTier(
            name="road_type_implicit_state",
            pattern=re.compile(
                rf"{_NUMBER}\s+([A-Za-z\s'.-]*?(?:{_ROAD_TYPES_IMPLICIT})){_SEP}"
                rf"{_WORDS}\s+{_POSTCODE}",
                flags,
            ),
            confidence=ConfidenceLevel.LOW,
            extractor=_extract_implicit_state,
        ),
        PatternTier(
            name="split_road_type",
            pattern=re.compile(
                rf"{_NUMBER}\s+([A-Za-z]+(?:\s+[A-Za-z]+)*)\s+"
                rf"({'|'.join(ROAD_TYPE_TOKENS)})\s+{_WORDS}\s+{_POSTCODE}",
                flags,
            ),
            confidence=ConfidenceLevel.LOW,
            extractor=_extract_split_road_type,
        ),
    ]


class RegexAddressParser:
    """Parses free-text Victorian addresses with ordered regex tiers.

    Stateless and total: ``parse`` returns a ParseResult for any input and
    never raises.
    """

    def __init__(self, tiers: list[PatternTier] | None = None):
        self.tiers = tiers if tiers is not None else build_tiers()
        self._target = cfg.target_state_code
        self._target_tokens = {cfg.target_state_code.lower(), cfg.target_state_name.lower()}

    def parse(self, address: Any) -> ParseResult:
        """Parse a raw address string.

        Args:
            address: Raw user input. Anything other than a non-blank string
                is rejected without trying a pattern.

        Returns:
            ParseResult with components and the index of the winning tier.
        """
        if not isinstance(address, str) or not address.strip():
            return ParseResult(
                is_valid=False,
                confidence=ConfidenceLevel.LOW,
                message=INVALID_INPUT_MESSAGE,
                issue=ValidationIssue.INVALID_INPUT,
            )

        text = address.strip()
        for index, tier in enumerate(self.tiers):
            components = tier.match(text)
            if components is None:
                continue

            logger.debug(f"Regex tier {index} ({tier.name}) matched: {text!r}")
            if components.state.lower() not in self._target_tokens:
                return ParseResult(
                    is_valid=False,
                    confidence=ConfidenceLevel.LOW,
                    pattern_index=index,
                    message=f"Address is outside {self._target}",
                    issue=ValidationIssue.OUT_OF_STATE,
                )

            return ParseResult(
                is_valid=True,
                confidence=tier.confidence,
                components=_with_state(components, self._target),
                pattern_index=index,
                address_type=AddressType.URBAN,
            )

        return ParseResult(
            is_valid=False,
            confidence=ConfidenceLevel.LOW,
            message=NO_MATCH_MESSAGE,
            issue=ValidationIssue.NO_PATTERN_MATCH,
        )


def _with_state(components: AddressComponents, state: str) -> AddressComponents:
    """Return components with the state normalised to the target code."""
    if components.state == state:
        return components
    return AddressComponents(
        house_number=components.house_number,
        road=components.road,
        suburb=components.suburb,
        state=state,
        postcode=components.postcode,
    )
