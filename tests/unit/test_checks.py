"""
Unit tests for Purchase Order discrepancy checks.
"""
import pytest

from models.purchase_order import Destination, Shipment
from orders.checks import OrderChecker


def _types(issues):
    return [d.type for d in issues]


@pytest.fixture
def ready_po(sample_po):
    """sample_po with every readiness flag done."""
    return sample_po.model_copy(update={
        "skus_created": True, "barcodes_sent": True, "polybags_sent": True,
    })


@pytest.mark.unit
class TestOrderChecker:
    """Tests for OrderChecker."""

    def test_clean_po(self, ready_po):
        """Test matching shipments and complete readiness raise nothing."""
        po = ready_po.model_copy(update={"po_splits_confirmed": True, "shipments": [
            Shipment(shipment_ref="GWG049UKSEA", destination=Destination.UK, units=100),
            Shipment(shipment_ref="GWG049USASEA", destination=Destination.US, units=60),
        ]})
        assert OrderChecker().check(po) == []

    def test_units_diverged(self, ready_po):
        """Test shipment units differing from ordered units are reported."""
        po = ready_po.model_copy(update={"shipments": [
            Shipment(shipment_ref="GWG049UKSEA", destination=Destination.UK, units=90),
        ]})
        issues = OrderChecker().check(po)
        assert _types(issues) == ["units_diverged"]
        issue = issues[0]
        assert issue.severity == "warning"
        assert issue.destination == Destination.UK
        assert issue.ordered_value == "100"
        assert issue.actual_value == "90"

    def test_no_lines_no_divergence(self):
        """Test imported POs without line items are not compared."""
        from models.purchase_order import PurchaseOrder
        po = PurchaseOrder(id="GWG048", skus_created=True, barcodes_sent=True, polybags_sent=True,
                           shipments=[Shipment(shipment_ref="GWG048UKSEA",
                                               destination=Destination.UK, units=600)])
        assert "units_diverged" not in _types(OrderChecker().check(po))

    def test_split_flag_without_shipments(self, ready_po):
        po = ready_po.model_copy(update={"po_splits_confirmed": True})
        assert _types(OrderChecker().check(po)) == ["split_without_shipments"]

    def test_readiness_outstanding(self, sample_po):
        issues = OrderChecker().check(sample_po)
        assert _types(issues).count("readiness_outstanding") == 3
        assert {d.field for d in issues} == {"skus_created", "barcodes_sent", "polybags_sent"}
        assert all(d.severity == "info" for d in issues)

    def test_unknown_status_and_checklist(self, ready_po):
        po = ready_po.model_copy(update={"shipments": [
            Shipment(shipment_ref="GWG049UKSEA", destination=Destination.UK, units=100,
                     status="Lost at sea"),
            Shipment(shipment_ref="GWG049USASEA", destination=Destination.US, units=60,
                     status="Delivered", added_to_warehouse=True, delivery_booked=True,
                     quantities_verified=True, stock_on_shopify=True),
        ]})
        types = _types(OrderChecker().check(po))
        assert "unknown_status" in types
        assert "checklist_complete_not_booked_in" in types

    @pytest.mark.parametrize("status", ["Booked in & checked", "Delivered + booked in"])
    def test_booked_in_statuses_with_complete_checklist(self, ready_po, status):
        """Test both booked-in stages satisfy a complete receiving checklist."""
        po = ready_po.model_copy(update={"shipments": [
            Shipment(shipment_ref="GWG049UKSEA", destination=Destination.UK, units=100,
                     status=status, added_to_warehouse=True, delivery_booked=True,
                     quantities_verified=True, stock_on_shopify=True),
        ]})
        assert "checklist_complete_not_booked_in" not in _types(OrderChecker().check(po))
