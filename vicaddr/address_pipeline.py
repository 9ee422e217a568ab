"""Address validation pipeline: geocoder first, regex fallback second.

The orchestrator runs two stages:

1. EXTERNAL_ATTEMPT: one geocoder lookup, filtered to Victoria. Any in-state
   candidate ends the pipeline with a high-confidence "api" result.
2. REGEX_FALLBACK: entered when the geocoder returned nothing, failed, or
   every candidate was out of state. The tiered regex parser decides.

Neither stage retries, and neither raises: every failure becomes a
structured, lower-confidence ValidationResult.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from vicaddr.address_models import (
    AddressType,
    ConfidenceLevel,
    ParseResult,
    Source,
    ValidationIssue,
    ValidationResult,
)
from vicaddr.config import cfg
from vicaddr.geocode_client import GeocodeClient
from vicaddr.regex_parser import INVALID_INPUT_MESSAGE, RegexAddressParser
from vicaddr.utils.resilience import (
    ValidationAuditEntry,
    ValidationAuditLog,
    sanitize_address_input,
)
from vicaddr.victoria_filter import VictoriaFilter


logger = logging.getLogger(__name__)


API_MESSAGE = "Address verified"
URBAN_MESSAGE = "Flexible address format detected - Urban address format"
RURAL_MESSAGE = "Address format recognised - not found in mapping database (possible new development or rural property)"


class AddressValidationOrchestrator:
    """Combines the geocoder, the Victoria filter and the regex parser.

    Args:
        geocoder: Any GeocodeClient; tests substitute deterministic stubs.
        parser: Regex fallback parser.
        state_filter: Target-state candidate filter.
        max_suggestions: Cap on suggestions returned from the API path.
        audit_log: Optional audit log receiving one entry per validation.
    """

    def __init__(
        self,
        geocoder: GeocodeClient,
        parser: RegexAddressParser | None = None,
        state_filter: VictoriaFilter | None = None,
        max_suggestions: int | None = None,
        audit_log: ValidationAuditLog | None = None,
    ):
        self.geocoder = geocoder
        self.parser = parser or RegexAddressParser()
        self.state_filter = state_filter or VictoriaFilter()
        self.max_suggestions = max_suggestions if max_suggestions is not None else cfg.max_suggestions
        self.audit_log = audit_log

        logger.info(
            f"AddressValidationOrchestrator initialized "
            f"(geocoder={type(geocoder).__name__}, max_suggestions={self.max_suggestions})"
        )

    async def validate(self, address: Any) -> ValidationResult:
        """Validate a raw address.

        Args:
            address: Raw user input.

        Returns:
            Unified ValidationResult. Never raises.
        """
        start = time.time()
        text = sanitize_address_input(address, max_length=cfg.max_address_length)

        if not text:
            result = ValidationResult(
                success=False,
                is_valid=False,
                confidence=ConfidenceLevel.LOW,
                source=Source.NONE,
                address_type=AddressType.UNKNOWN,
                message=INVALID_INPUT_MESSAGE,
                issue=ValidationIssue.INVALID_INPUT,
            )
        else:
            provider_available = self.geocoder.available
            try:
                result = await self._stage_external(text)
            except Exception as e:
                logger.warning(f"Geocoder raised {type(e).__name__}: {e} - using regex fallback")
                result, provider_available = None, False
            if result is None:
                result = self._stage_regex_fallback(text, provider_available)

        self._audit(text, result, start)
        return result

    async def _stage_external(self, text: str) -> ValidationResult | None:
        """Stage 1: geocoder lookup filtered to the target state."""
        candidates = await self.geocoder.lookup(text)
        if not candidates:
            logger.debug(f"No geocoder candidates for {text!r}")
            return None

        in_state = self.state_filter.filter(candidates)
        if not in_state:
            logger.debug(f"All {len(candidates)} geocoder candidates outside {self.state_filter.target_code}")
            return None

        top = in_state[0]
        suggestions = [self.state_filter.to_suggestion(c) for c in in_state[: self.max_suggestions]]
        return ValidationResult(
            success=True,
            is_valid=True,
            confidence=ConfidenceLevel.HIGH,
            source=Source.API,
            address_type=AddressType.URBAN,
            message=API_MESSAGE,
            components=self.state_filter.components(top),
            formatted=suggestions[0]["formatted"],
            suggestions=suggestions,
            unmapped=False,
            fallback=False,
        )

    def _stage_regex_fallback(self, text: str, provider_available: bool = True) -> ValidationResult:
        """Stage 2: tiered regex parse of the sanitized input."""
        parsed = self.parser.parse(text)
        issue = parsed.issue
        if issue is None and not provider_available:
            issue = ValidationIssue.PROVIDER_UNAVAILABLE
        return ValidationResult(
            success=parsed.is_valid,
            is_valid=parsed.is_valid,
            confidence=parsed.confidence,
            source=_fallback_source(parsed),
            address_type=parsed.address_type,
            message=_fallback_message(parsed),
            components=parsed.components,
            formatted=text if parsed.is_valid else "",
            suggestions=[],
            unmapped=True,
            fallback=True,
            regex_validation=parsed,
            issue=issue,
        )

    def _audit(self, text: str, result: ValidationResult, start: float) -> None:
        if self.audit_log is None:
            return
        self.audit_log.log(ValidationAuditEntry(
            timestamp=datetime.now(),
            input_address=text,
            source=result.source.value,
            confidence=result.confidence.value,
            is_valid=result.is_valid,
            unmapped=result.unmapped,
            processing_time_ms=int((time.time() - start) * 1000),
            issue=result.issue.value if result.issue else None,
        ))


def _fallback_source(parsed: ParseResult) -> Source:
    if not parsed.is_valid:
        return Source.NONE
    if parsed.confidence in (ConfidenceLevel.HIGH, ConfidenceLevel.MEDIUM):
        return Source.REGEX_URBAN
    return Source.REGEX_RURAL


def _fallback_message(parsed: ParseResult) -> str:
    if not parsed.is_valid:
        return parsed.message or "Address could not be validated"
    if parsed.confidence == ConfidenceLevel.LOW:
        return RURAL_MESSAGE
    return URBAN_MESSAGE


# ============================================================================
# Batch processing
# ============================================================================


@dataclass(slots=True)
class BatchSummary:
    """Summary statistics for a batch run."""

    total: int
    valid: int = 0
    invalid: int = 0
    unmapped: int = 0
    by_source: dict[str, int] = field(default_factory=lambda: {s.value: 0 for s in Source})
    by_confidence: dict[str, int] = field(default_factory=lambda: {c.value: 0 for c in ConfidenceLevel})
    total_time_ms: int = 0

    @property
    def valid_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return self.valid / self.total

    def add(self, result: ValidationResult) -> None:
        if result.is_valid:
            self.valid += 1
        else:
            self.invalid += 1
        if result.unmapped and result.is_valid:
            self.unmapped += 1
        self.by_source[result.source.value] += 1
        self.by_confidence[result.confidence.value] += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "valid": self.valid,
            "invalid": self.invalid,
            "unmapped": self.unmapped,
            "valid_rate": round(self.valid_rate, 3),
            "by_source": self.by_source,
            "by_confidence": self.by_confidence,
            "total_time_ms": self.total_time_ms,
        }


class BatchProcessor:
    """Sequential batch validation with a fixed delay between calls.

    The geocoder's usage policy allows about one request per second, so
    consecutive validations are spaced out by ``delay_seconds``.
    """

    def __init__(self, orchestrator: AddressValidationOrchestrator, delay_seconds: float | None = None):
        self.orchestrator = orchestrator
        self.delay_seconds = delay_seconds if delay_seconds is not None else cfg.batch_delay_seconds

    async def process_list(
        self,
        addresses: list[str],
        delay_seconds: float | None = None,
        progress_callback: Callable[[int, int], None] | None = None,
    ) -> tuple[list[ValidationResult], BatchSummary]:
        """Validate addresses one after another.

        Args:
            addresses: Raw address strings.
            delay_seconds: Override of the inter-call delay.
            progress_callback: Called with (completed, total) after each item.

        Returns:
            Tuple of (results in input order, summary).
        """
        delay = self.delay_seconds if delay_seconds is None else delay_seconds
        start = time.time()
        summary = BatchSummary(total=len(addresses))
        results: list[ValidationResult] = []

        for i, address in enumerate(addresses):
            if i > 0 and delay > 0:
                await asyncio.sleep(delay)

            result = await self.orchestrator.validate(address)
            results.append(result)
            summary.add(result)

            if progress_callback:
                progress_callback(i + 1, len(addresses))

        summary.total_time_ms = int((time.time() - start) * 1000)
        logger.info(f"Batch of {len(addresses)} validated: {summary.valid} valid, {summary.invalid} invalid")
        return results, summary
