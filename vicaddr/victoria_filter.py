"""Restricts geocoder candidates to the target state (Victoria)."""

import logging
import re
from typing import Any, Iterable

from vicaddr.address_models import AddressComponents, GeocodeCandidate
from vicaddr.config import cfg
from vicaddr.regex_parser import ROAD_TYPE_TOKENS

logger = logging.getLogger(__name__)


def _token_pattern(tokens: Iterable[str]) -> re.Pattern:
    """Whole-word, case-insensitive alternation of state codes/names."""
    alternation = "|".join(re.escape(t) for t in sorted(set(tokens), key=len, reverse=True))
    return re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)


class VictoriaFilter:
    """Stable filter keeping candidates that plausibly lie in the target state.

    A candidate is kept when its display text names the target state, dropped
    when it names another state, and kept when it names none (many genuine
    in-state results omit the state). The target name followed by a road type
    ("Victoria Street") is a road name and does not count. A structured
    ``state`` field, when the provider supplies a recognisable one, takes
    precedence over the text.
    """

    def __init__(
        self,
        target_code: str | None = None,
        target_name: str | None = None,
        other_states: dict[str, str] | None = None,
    ):
        self.target_code = (target_code or cfg.target_state_code).upper()
        self.target_name = target_name or cfg.target_state_name
        self.other_states = other_states if other_states is not None else cfg.other_state_names()

        self._target_re = _token_pattern([self.target_code, self.target_name])
        # "Victoria Street" names a road, not the state
        self._street_name_re = re.compile(
            rf"\b{re.escape(self.target_name)}\s+(?:{'|'.join(ROAD_TYPE_TOKENS)})\b", re.IGNORECASE
        )
        self._other_re = _token_pattern(
            [*self.other_states.keys(), *self.other_states.values()]
        )
        self._state_lookup: dict[str, str] = {
            self.target_code.lower(): self.target_code,
            self.target_name.lower(): self.target_code,
        }
        for code, name in self.other_states.items():
            self._state_lookup[code.lower()] = code
            self._state_lookup[name.lower()] = code

    def state_code(self, state: str) -> str | None:
        """Resolve a state name or abbreviation to its code, None if unknown."""
        return self._state_lookup.get(state.strip().lower()) if state else None

    def is_in_target_state(self, candidate: GeocodeCandidate) -> bool:
        """Decide whether a single candidate is kept."""
        structured = self.state_code(candidate.state)
        if structured is not None:
            return structured == self.target_code

        text = self._street_name_re.sub(" ", candidate.display_name or "")
        if self._target_re.search(text):
            return True
        return not self._other_re.search(text)

    def filter(self, candidates: list[GeocodeCandidate]) -> list[GeocodeCandidate]:
        """Return the in-state candidates in their original order."""
        kept = [c for c in candidates if self.is_in_target_state(c)]
        if len(kept) < len(candidates):
            logger.debug(f"Victoria filter dropped {len(candidates) - len(kept)} of {len(candidates)} candidates")
        return kept

    def components(self, candidate: GeocodeCandidate) -> AddressComponents:
        """Structured components of a candidate, state reported as a code."""
        address = candidate.address
        state = self.state_code(candidate.state) or candidate.state or self.target_code
        return AddressComponents(
            house_number=address.get("house_number", ""),
            road=address.get("road", ""),
            suburb=candidate.locality,
            state=state,
            postcode=address.get("postcode", ""),
        )

    def to_suggestion(self, candidate: GeocodeCandidate) -> dict[str, Any]:
        """Reduce a candidate to the suggestion shape returned to callers."""
        components = self.components(candidate)
        formatted = components.formatted if components.road else candidate.display_name
        return {
            "formatted": formatted,
            "display_name": candidate.display_name,
            "components": components.to_dict(),
            "address": dict(candidate.address),
            "lat": candidate.lat,
            "lon": candidate.lon,
        }
