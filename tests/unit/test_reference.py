"""
Unit tests for shipment reference parsing.
"""
import pytest

from models.purchase_order import Destination, ShipmentMode
from orders.reference import build_reference, clean_reference, parse_reference


@pytest.mark.unit
class TestParseReference:
    """Tests for parse_reference()."""

    def test_uk_sea_suffix(self):
        """Test a UK sea reference splits into base, destination and mode."""
        parsed = parse_reference("GWG048UKSEA")
        assert parsed.base == "GWG048"
        assert parsed.destination == Destination.UK
        assert parsed.mode == ShipmentMode.SEA
        assert parsed.has_suffix is True

    def test_usa_marker_maps_to_us(self):
        """Test the USA marker is read as the US destination."""
        parsed = parse_reference("GWG048USASEA")
        assert parsed.base == "GWG048"
        assert parsed.destination == Destination.US
        assert parsed.has_suffix is True

    def test_us_marker_maps_to_us(self):
        """Test the short US marker is accepted too."""
        parsed = parse_reference("GWG048USAIR")
        assert parsed.base == "GWG048"
        assert parsed.destination == Destination.US
        assert parsed.mode == ShipmentMode.AIR

    def test_air_and_truck_modes(self):
        """Test AIR and TRUCK suffixes are recognised."""
        assert parse_reference("TSH096UKAIR").mode == ShipmentMode.AIR
        assert parse_reference("TSH096USATRUCK").mode == ShipmentMode.TRUCK
        assert parse_reference("TSH096USATRUCK").base == "TSH096"

    def test_no_suffix(self):
        """Test a bare PO id has no destination and keeps its base."""
        parsed = parse_reference("TSH096")
        assert parsed.base == "TSH096"
        assert parsed.destination is None
        assert parsed.has_suffix is False

    def test_sea_is_default_mode(self):
        """Test mode defaults to SEA when no mode marker is present."""
        assert parse_reference("TSH096").mode == ShipmentMode.SEA

    def test_destination_without_mode_is_not_stripped(self):
        """Test a trailing destination without a mode keeps the full base."""
        parsed = parse_reference("GWG048UK")
        assert parsed.destination == Destination.UK
        assert parsed.base == "GWG048UK"
        assert parsed.has_suffix is False

    def test_mid_string_markers_left_alone(self):
        """Test destination markers inside the base id are not treated as a suffix."""
        parsed = parse_reference("UKB001")
        assert parsed.base == "UKB001"
        assert parsed.destination is None
        assert parsed.has_suffix is False

    def test_mode_marker_without_suffix(self):
        """Test a mode marker elsewhere in an unsuffixed reference still sets the mode."""
        parsed = parse_reference("AIRX12")
        assert parsed.mode == ShipmentMode.AIR
        assert parsed.has_suffix is False

    def test_mode_marker_in_base_beats_suffix_mode(self):
        """Test AIR anywhere in the reference takes priority over a SEA suffix."""
        parsed = parse_reference("AIRX01UKSEA")
        assert parsed.mode == ShipmentMode.AIR
        assert parsed.base == "AIRX01"
        assert parsed.destination == Destination.UK
        assert parsed.has_suffix is True

    def test_truck_in_base_beats_sea_suffix(self):
        assert parse_reference("TRUCKB7USASEA").mode == ShipmentMode.TRUCK

    def test_whitespace_and_slashes_removed(self):
        """Test the raw cell is trimmed and slashes dropped."""
        parsed = parse_reference("  GWG/048UKSEA ")
        assert parsed.raw == "GWG048UKSEA"
        assert parsed.base == "GWG048"

    def test_empty_and_none(self):
        """Test empty input never raises."""
        for raw in ("", "   ", None):
            parsed = parse_reference(raw)
            assert parsed.base == ""
            assert parsed.destination is None
            assert parsed.has_suffix is False

    def test_numeric_cell(self):
        """Test a numeric spreadsheet cell is treated as text."""
        parsed = parse_reference(12345)
        assert parsed.base == "12345"


@pytest.mark.unit
class TestBuildReference:
    """Tests for build_reference() and clean_reference()."""

    @pytest.mark.parametrize("destination", list(Destination))
    @pytest.mark.parametrize("mode", list(ShipmentMode))
    def test_parse_recovers_built_reference(self, destination, mode):
        """Test parsing a built reference gives back its parts."""
        ref = build_reference("GWG048", destination, mode)
        parsed = parse_reference(ref)
        assert parsed.base == "GWG048"
        assert parsed.destination == destination
        assert parsed.mode == mode
        assert parsed.has_suffix is True

    def test_us_written_as_usa(self):
        """Test US shipments use the USA marker."""
        assert build_reference("GWG048", Destination.US, ShipmentMode.SEA) == "GWG048USASEA"
        assert build_reference("GWG048", Destination.UK, ShipmentMode.AIR) == "GWG048UKAIR"

    def test_clean_reference(self):
        assert clean_reference(" A/B ") == "AB"
        assert clean_reference(None) == ""
