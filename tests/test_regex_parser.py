"""Unit tests for the tiered regex address parser.

Tests cover:
- Tier selection and confidence mapping
- Component extraction per tier shape
- Out-of-state rejection
- Invalid and unmatched input
"""

import pytest

from vicaddr.address_models import AddressType, ConfidenceLevel, ValidationIssue
from vicaddr.regex_parser import (
    INVALID_INPUT_MESSAGE,
    NO_MATCH_MESSAGE,
    RegexAddressParser,
    build_tiers,
)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def parser():
    """Parser with the default tier list."""
    return RegexAddressParser()


# ============================================================================
# Tier selection
# ============================================================================


class TestTierSelection:
    """Tests for which tier wins and what it reports."""

    def test_standard_address_is_tier_zero(self, parser):
        """Comma separated address with state and postcode matches tier 0."""
        result = parser.parse("123 Main Street, Melbourne VIC 3000")

        assert result.is_valid
        assert result.pattern_index == 0
        assert result.confidence == ConfidenceLevel.HIGH
        assert result.address_type == AddressType.URBAN
        assert result.components.house_number == "123"
        assert result.components.road == "Main Street"
        assert result.components.suburb == "Melbourne"
        assert result.components.state == "VIC"
        assert result.components.postcode == "3000"

    def test_stricter_tier_wins_over_looser(self, parser):
        """An address without commas still resolves to the first matching tier."""
        result = parser.parse("123 Main Street Melbourne VIC 3000")

        assert result.pattern_index == 0
        assert result.confidence == ConfidenceLevel.HIGH
        assert result.components.road == "Main Street"
        assert result.components.suburb == "Melbourne"
        assert result.components.postcode == "3000"

    def test_lot_address_is_medium(self, parser):
        """Lot numbers are matched by the lot tier."""
        result = parser.parse("Lot 5 Estate Road, New Estate VIC 3150")

        assert result.is_valid
        assert result.pattern_index == 1
        assert result.confidence == ConfidenceLevel.MEDIUM
        assert result.components.house_number == "Lot 5"
        assert result.components.road == "Estate Road"
        assert result.components.suburb == "New Estate"

    def test_rural_address_without_state(self, parser):
        """Lower-case address with no state token uses the implicit-state tier."""
        result = parser.parse("90 forman rd shelbourne 3515")

        assert result.is_valid
        assert result.pattern_index == 3
        assert result.confidence == ConfidenceLevel.LOW
        assert result.components.house_number == "90"
        assert result.components.road == "forman rd"
        assert result.components.suburb == "shelbourne"
        assert result.components.state == "VIC"
        assert result.components.postcode == "3515"

    def test_full_state_name_normalised_to_code(self, parser):
        result = parser.parse("12 High Street, Kyneton Victoria 3444")

        assert result.is_valid
        assert result.components.state == "VIC"

    def test_suburb_ending_in_state_letters(self, parser):
        """'Vermont' must not be read as the NT state token."""
        result = parser.parse("5 Main Street, Vermont 3133")

        assert result.is_valid
        assert result.pattern_index == 3
        assert result.components.suburb == "Vermont"
        assert result.components.state == "VIC"

    @pytest.mark.parametrize("address", [
        "123 Main Street, Melbourne VIC 3000",
        "Lot 5 Estate Road, New Estate VIC 3150",
        "90 forman rd shelbourne 3515",
        "7 old coach road heathcote 3523",
        "15a Smith St, Fitzroy vic 3065",
    ])
    def test_valid_matches_always_report_target_state(self, parser, address):
        result = parser.parse(address)

        assert result.is_valid
        assert result.components.state == "VIC"


# ============================================================================
# Out of state
# ============================================================================


class TestOutOfState:
    """Tests for addresses naming another state."""

    @pytest.mark.parametrize("address", [
        "10 George Street, Sydney NSW 2000",
        "1 Queen Street, Brisbane QLD 4000",
        "22 King William Street, Adelaide SA 5000",
    ])
    def test_other_state_is_rejected(self, parser, address):
        result = parser.parse(address)

        assert not result.is_valid
        assert result.confidence == ConfidenceLevel.LOW
        assert result.issue == ValidationIssue.OUT_OF_STATE
        assert result.message == "Address is outside VIC"
        assert result.pattern_index == 0
        assert result.components is None

    def test_out_of_state_serialises_empty_components(self, parser):
        data = parser.parse("10 George Street, Sydney NSW 2000").to_dict()

        assert data["isValid"] is False
        assert data["components"] == {}
        assert data["patternIndex"] == 0


# ============================================================================
# Invalid and unmatched input
# ============================================================================


class TestInvalidInput:
    """Tests for input the parser cannot use."""

    @pytest.mark.parametrize("address", ["", "   ", None, 42, ["90 forman rd"]])
    def test_unusable_input(self, parser, address):
        result = parser.parse(address)

        assert not result.is_valid
        assert result.confidence == ConfidenceLevel.LOW
        assert result.message == INVALID_INPUT_MESSAGE
        assert result.issue == ValidationIssue.INVALID_INPUT
        assert result.pattern_index is None

    @pytest.mark.parametrize("address", [
        "hello world",
        "Main Street Melbourne",
        "123 Main Street",
        "123 Main Street, Melbourne VIC 30000",
    ])
    def test_no_pattern_match(self, parser, address):
        result = parser.parse(address)

        assert not result.is_valid
        assert result.message == NO_MATCH_MESSAGE
        assert result.issue == ValidationIssue.NO_PATTERN_MATCH
        assert result.to_dict()["components"] == {}

    def test_parse_is_deterministic(self, parser):
        first = parser.parse("90 forman rd shelbourne 3515")
        second = parser.parse("90 forman rd shelbourne 3515")

        assert first == second


# ============================================================================
# Tier internals
# ============================================================================


class TestTierDefinitions:
    """Tests for the tier list and extractors in isolation."""

    def test_five_tiers_in_confidence_order(self):
        tiers = build_tiers()

        assert [t.confidence for t in tiers] == [
            ConfidenceLevel.HIGH,
            ConfidenceLevel.MEDIUM,
            ConfidenceLevel.MEDIUM,
            ConfidenceLevel.LOW,
            ConfidenceLevel.LOW,
        ]

    def test_split_tier_on_its_own(self):
        """The split-road-type tier folds the road type back onto the road."""
        parser = RegexAddressParser(tiers=[build_tiers()[4]])

        result = parser.parse("7 old coach road heathcote 3523")

        assert result.is_valid
        assert result.pattern_index == 0
        assert result.components.road == "old coach road"
        assert result.components.suburb == "heathcote"
        assert result.components.postcode == "3523"

    def test_split_tier_keeps_road_type_case(self):
        parser = RegexAddressParser(tiers=[build_tiers()[4]])

        components = parser.parse("7 old coach Rd heathcote 3523").components

        assert components.road == "old coach Rd"
        assert components.suburb == "heathcote"
        assert components.state == "VIC"

    def test_implicit_tiers_reject_state_as_suburb(self):
        """A state token in the suburb slot is not a suburb."""
        for index in (3, 4):
            parser = RegexAddressParser(tiers=[build_tiers()[index]])

            assert not parser.parse("12 Smith Rd VIC 3000").is_valid

    def test_road_type_tier_on_its_own(self):
        parser = RegexAddressParser(tiers=[build_tiers()[2]])

        result = parser.parse("12 Sunrise Rd Greenvale VIC 3059")

        assert result.is_valid
        assert result.confidence == ConfidenceLevel.MEDIUM
        assert result.components.road == "Sunrise Rd"
        assert result.components.suburb == "Greenvale"


# ============================================================================
# Road-type disambiguation
# ============================================================================


class TestRoadTypeDisambiguation:
    """Tests for road-type tokens captured in the suburb group."""

    @pytest.mark.parametrize("address, road, suburb", [
        ("45 Collins Street Melbourne VIC 3000", "Collins Street", "Melbourne"),
        ("12 Old Coach Road Heathcote VIC 3523", "Old Coach Road", "Heathcote"),
        ("12 Acland St St Kilda VIC 3182", "Acland St", "St Kilda"),
        ("Lot 5 Estate Road New Estate VIC 3150", "Estate Road", "New Estate"),
    ])
    def test_road_type_moves_onto_road_without_comma(self, parser, address, road, suburb):
        result = parser.parse(address)

        assert result.is_valid
        assert result.components.road == road
        assert result.components.suburb == suburb

    def test_comma_keeps_suburb_starting_with_road_type(self, parser):
        """After a comma, 'St Kilda' is the suburb."""
        result = parser.parse("12 Acland St, St Kilda VIC 3182")

        assert result.pattern_index == 0
        assert result.components.road == "Acland St"
        assert result.components.suburb == "St Kilda"

    def test_road_type_alone_is_not_a_suburb(self, parser):
        """'12 Smith Rd VIC 3000' has no suburb at all."""
        result = parser.parse("12 Smith Rd VIC 3000")

        assert not result.is_valid
        assert result.issue == ValidationIssue.NO_PATTERN_MATCH

    @pytest.mark.parametrize("index", [0, 1, 2])
    def test_stated_tiers_never_report_road_type_as_suburb(self, index):
        parser = RegexAddressParser(tiers=[build_tiers()[index]])
        address = "Lot 12 Smith Rd VIC 3000" if index == 1 else "12 Smith Rd VIC 3000"

        result = parser.parse(address)

        assert not result.is_valid

