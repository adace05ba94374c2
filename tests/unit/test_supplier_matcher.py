"""
Unit tests for supplier matching functionality.
"""
import pytest

from models.supplier import Supplier
from orders.supplier_matcher import SupplierMatcher


@pytest.fixture
def suppliers() -> list:
    return [
        Supplier(id=1, name="Golden Weave Garments", code="GWG"),
        Supplier(id=2, name="Tianhe Shirt House", code="TSH"),
        Supplier(id=3, name="GW Knits", code="GW"),
    ]


@pytest.mark.unit
class TestSupplierMatcher:
    """Tests for SupplierMatcher class."""

    def test_match_by_code_exact(self, suppliers):
        """Test exact code matching."""
        result = SupplierMatcher(suppliers).match("gwg")
        assert result is not None
        assert result.supplier_id == 1
        assert result.match_method == "code_exact"
        assert result.confidence == 1.0

    def test_match_by_name_exact(self, suppliers):
        """Test case-insensitive exact name matching."""
        result = SupplierMatcher(suppliers).match("TIANHE SHIRT HOUSE")
        assert result is not None
        assert result.supplier_id == 2
        assert result.match_method == "name_exact"

    def test_match_by_fuzzy_name(self, suppliers):
        """Test fuzzy name matching with word order differences."""
        result = SupplierMatcher(suppliers).match("Garments Golden Weave")
        assert result is not None
        assert result.supplier_id == 1
        assert result.match_method == "name_fuzzy"
        assert 0.75 <= result.confidence <= 1.0

    def test_fuzzy_threshold(self, suppliers):
        """Test a high threshold rejects loose matches."""
        result = SupplierMatcher(suppliers, fuzzy_threshold=100).match("Golden Weave Garment")
        assert result is None

    def test_match_by_po_prefix(self, suppliers):
        """Test the PO base id prefix is used when the ref is blank."""
        result = SupplierMatcher(suppliers).match("", po_base="GWG048")
        assert result is not None
        assert result.supplier_id == 1
        assert result.match_method == "code_prefix"

    def test_longest_prefix_wins(self, suppliers):
        """Test GWG is preferred over GW for GWG048."""
        result = SupplierMatcher(suppliers).match(None, po_base="gwg048")
        assert result.supplier_id == 1
        result = SupplierMatcher(suppliers).match(None, po_base="GW100")
        assert result.supplier_id == 3

    def test_no_match(self, suppliers):
        assert SupplierMatcher(suppliers).match("Completely Different Co") is None

    def test_no_suppliers(self):
        assert SupplierMatcher([]).match("GWG", po_base="GWG048") is None

    def test_inactive_supplier_never_matched(self, suppliers):
        """Test inactive suppliers are ignored by every strategy."""
        inactive = Supplier(id=9, name="Old Mill Textiles", code="OMT", status="Inactive")
        matcher = SupplierMatcher([*suppliers, inactive])
        assert matcher.match("OMT") is None
        assert matcher.match("Old Mill Textiles") is None
        assert matcher.match("", po_base="OMT012") is None
