"""Configuration with sensible defaults (geocoder on, Victoria as target state)."""

from dataclasses import dataclass, field
from os import getenv


# Full names for every Australian state/territory abbreviation
STATE_NAMES: dict[str, str] = {
    "VIC": "Victoria",
    "NSW": "New South Wales",
    "QLD": "Queensland",
    "SA": "South Australia",
    "WA": "Western Australia",
    "TAS": "Tasmania",
    "NT": "Northern Territory",
    "ACT": "Australian Capital Territory",
}


def _parse_bool(value: str, default: bool = True) -> bool:
    """Parse boolean from environment variable."""
    if not value:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_float(value: str, default: float) -> float:
    """Parse float from environment variable."""
    try:
        return float(value) if value else default
    except ValueError:
        return default


def _parse_int(value: str, default: int) -> int:
    """Parse int from environment variable."""
    try:
        return int(value) if value else default
    except ValueError:
        return default


def _parse_list(value: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Parse comma separated list from environment variable."""
    if not value:
        return default
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or default


@dataclass(slots=True, frozen=True)
class Config:
    # ==================== Geocoder (Nominatim) ====================
    # Disabled = every validation goes straight to the regex fallback
    geocoder_enabled: bool = field(
        default_factory=lambda: _parse_bool(getenv("GEOCODER_ENABLED", ""), True)
    )
    geocoder_url: str = field(
        default_factory=lambda: getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org/search")
    )
    # Nominatim policy: identify the application
    geocoder_user_agent: str = field(
        default_factory=lambda: getenv("GEOCODER_USER_AGENT", "vic-address-validator/1.0")
    )
    geocoder_email: str = field(default_factory=lambda: getenv("GEOCODER_EMAIL", ""))
    geocoder_timeout: float = field(
        default_factory=lambda: _parse_float(getenv("GEOCODER_TIMEOUT", ""), 5.0)
    )
    geocoder_country_codes: str = field(default_factory=lambda: getenv("GEOCODER_COUNTRY_CODES", "au"))
    geocoder_result_limit: int = field(
        default_factory=lambda: _parse_int(getenv("GEOCODER_RESULT_LIMIT", ""), 5)
    )

    # ==================== Target state ====================
    target_state_code: str = field(default_factory=lambda: getenv("TARGET_STATE_CODE", "VIC").upper())
    target_state_name: str = field(default_factory=lambda: getenv("TARGET_STATE_NAME", "Victoria"))
    other_state_codes: tuple[str, ...] = field(
        default_factory=lambda: _parse_list(
            getenv("OTHER_STATE_CODES", "").upper(),
            ("NSW", "QLD", "SA", "WA", "TAS", "NT", "ACT"),
        )
    )

    # ==================== Results ====================
    max_suggestions: int = field(
        default_factory=lambda: _parse_int(getenv("MAX_SUGGESTIONS", ""), 5)
    )
    max_address_length: int = field(
        default_factory=lambda: _parse_int(getenv("MAX_ADDRESS_LENGTH", ""), 500)
    )

    # ==================== Batch / audit ====================
    # Nominatim allows roughly one request per second
    batch_delay_seconds: float = field(
        default_factory=lambda: _parse_float(getenv("BATCH_DELAY_SECONDS", ""), 1.2)
    )
    audit_log_size: int = field(
        default_factory=lambda: _parse_int(getenv("AUDIT_LOG_SIZE", ""), 1000)
    )

    # ==================== Server ====================
    log_level: str = field(default_factory=lambda: getenv("LOG_LEVEL", "INFO").upper())
    cors_origins: tuple[str, ...] = field(
        default_factory=lambda: _parse_list(getenv("CORS_ORIGINS", ""), ("http://localhost:3000",))
    )

    def other_state_names(self) -> dict[str, str]:
        """Map each non-target state code to its full name."""
        return {code: STATE_NAMES.get(code, code) for code in self.other_state_codes}

    def get_geocoder_config(self) -> dict:
        """Get geocoder settings for NominatimClient."""
        return {
            "base_url": self.geocoder_url,
            "user_agent": self.geocoder_user_agent,
            "email": self.geocoder_email or None,
            "timeout": self.geocoder_timeout,
            "country_codes": self.geocoder_country_codes,
            "limit": self.geocoder_result_limit,
        }


cfg = Config()
