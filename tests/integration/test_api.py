"""
API tests for the dashboard endpoints.
"""
import pytest
from fastapi.testclient import TestClient

from dashboard import app as dashboard_app


@pytest.fixture
def client(test_config, test_db):
    """TestClient bound to the isolated test database."""
    dashboard_app._config = test_config
    dashboard_app._db = test_db
    yield TestClient(dashboard_app.app)
    dashboard_app._config = None
    dashboard_app._db = None


NEW_PO = {
    "id": "GWG049",
    "supplier_name": "Golden Weave Garments",
    "supplier_ref": "GWG",
    "lines": [
        {"product_name": "Merino Crew", "size": "M", "cost_price": 12.5, "qty_uk": 60, "qty_usa": 40},
        {"product_name": "Merino Crew", "size": "L", "cost_price": 12.5, "qty_uk": 40, "qty_usa": 20},
    ],
}


@pytest.mark.api
class TestPurchaseOrderApi:
    """Tests for PO endpoints."""

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_create_unsplit(self, client):
        response = client.post("/api/purchase-orders", json=NEW_PO)
        assert response.status_code == 201
        body = response.json()
        assert body["id"] == "GWG049"
        assert body["split_state"] == "Unsplit"
        assert body["seasonality"] == "AW25"
        assert body["currency"] == "USD"
        assert body["summary"]["grand_total"] == 2000.0

    def test_create_with_both_shipments(self, client):
        """Test UK + USA at creation confirms the split."""
        response = client.post("/api/purchase-orders",
                               json={**NEW_PO, "uk_shipment": True, "usa_shipment": True})
        body = response.json()
        assert response.status_code == 201
        assert body["po_splits_confirmed"] is True
        refs = sorted(s["shipment_ref"] for s in body["shipments"])
        assert refs == ["GWG049UKSEA", "GWG049USASEA"]

    def test_create_generates_id(self, client):
        response = client.post("/api/purchase-orders", json={**NEW_PO, "id": ""})
        assert response.status_code == 201
        assert response.json()["id"].startswith("PO-")

    def test_create_requires_supplier_name(self, client):
        response = client.post("/api/purchase-orders", json={**NEW_PO, "supplier_name": ""})
        assert response.status_code == 422

    def test_create_duplicate(self, client):
        client.post("/api/purchase-orders", json=NEW_PO)
        response = client.post("/api/purchase-orders", json=NEW_PO)
        assert response.status_code == 409

    def test_get_missing(self, client):
        assert client.get("/api/purchase-orders/NOPE").status_code == 404

    def test_split_flow(self, client):
        """Test splitting, re-splitting and adding the missing shipment."""
        client.post("/api/purchase-orders", json=NEW_PO)
        response = client.post("/api/purchase-orders/GWG049/split",
                               json={"selections": [{"destination": "UK"}]})
        assert response.status_code == 200
        body = response.json()
        assert body["split_state"] == "Split"
        assert body["shipments"][0]["units"] == 100

        again = client.post("/api/purchase-orders/GWG049/split",
                            json={"selections": [{"destination": "US"}]})
        assert again.status_code == 400

        added = client.post("/api/purchase-orders/GWG049/shipments", json={"destination": "US"})
        assert added.status_code == 201
        assert added.json()["shipment_ref"] == "GWG049USASEA"
        assert added.json()["units"] == 0

        duplicate = client.post("/api/purchase-orders/GWG049/shipments", json={"destination": "US"})
        assert duplicate.status_code == 400

    def test_split_without_selection(self, client):
        client.post("/api/purchase-orders", json=NEW_PO)
        response = client.post("/api/purchase-orders/GWG049/split", json={"selections": []})
        assert response.status_code == 400

    def test_patch_po(self, client):
        client.post("/api/purchase-orders", json=NEW_PO)
        response = client.patch("/api/purchase-orders/GWG049", json={"barcodes_sent": True})
        assert response.status_code == 200
        assert response.json()["barcodes_sent"] is True
        assert client.patch("/api/purchase-orders/GWG049", json={}).status_code == 400
        assert client.patch("/api/purchase-orders/NOPE", json={"notes": "x"}).status_code == 404

    def test_checks_and_export(self, client):
        client.post("/api/purchase-orders", json={**NEW_PO, "uk_shipment": True})
        checks = client.get("/api/purchase-orders/GWG049/checks").json()
        assert any(d["type"] == "readiness_outstanding" for d in checks)

        response = client.get("/api/purchase-orders/GWG049/export")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/xml")
        assert '<PurchaseOrder id="GWG049">' in response.text

    def test_audit(self, client):
        client.post("/api/purchase-orders", json=NEW_PO)
        entries = client.get("/api/purchase-orders/GWG049/audit").json()
        assert entries[0]["action"] == "created"
        assert entries[0]["actor"] == "dashboard"


@pytest.mark.api
class TestShipmentApi:
    """Tests for the shipment tracker endpoints."""

    def test_tracker_filters_and_patch(self, client):
        client.post("/api/purchase-orders",
                    json={**NEW_PO, "uk_shipment": True, "usa_shipment": True})
        rows = client.get("/api/shipments").json()
        assert len(rows) == 2
        assert rows[0]["supplier_name"] == "Golden Weave Garments"

        us_rows = client.get("/api/shipments", params={"dc": "US"}).json()
        assert [r["shipment_ref"] for r in us_rows] == ["GWG049USASEA"]

        shipment_id = us_rows[0]["id"]
        response = client.patch(f"/api/shipments/{shipment_id}",
                                json={"status": "Delivered", "tracking_number": "AWB123"})
        assert response.status_code == 200
        assert response.json()["status"] == "Delivered"

        delivered = client.get("/api/shipments", params={"status": "Delivered"}).json()
        assert [r["tracking_number"] for r in delivered] == ["AWB123"]
        assert client.get("/api/shipments", params={"search": "golden"}).json()
        assert client.get("/api/shipments", params={"search": "zzz"}).json() == []

    def test_patch_missing_shipment(self, client):
        assert client.patch("/api/shipments/999", json={"status": "Delivered"}).status_code == 404

    def test_stats(self, client, sample_suppliers, sample_products):
        client.post("/api/purchase-orders", json={**NEW_PO, "uk_shipment": True})
        stats = client.get("/api/stats").json()
        assert stats["total_pos"] == 1
        assert stats["total_shipments"] == 1
        assert stats["in_production"] == 1
        assert stats["active_suppliers"] == 2
        assert stats["low_stock_rows"] == 1


@pytest.mark.api
class TestImportApi:
    """Tests for the sheet upload endpoint."""

    def test_import_csv(self, client, import_csv):
        with open(import_csv, "rb") as f:
            response = client.post("/api/import", files={"file": ("po.csv", f, "text/csv")})
        assert response.status_code == 200
        report = response.json()
        assert report["created"] == ["GWG048", "TSH096", "OMT012"]
        assert report["shipments_created"] == 3

        with open(import_csv, "rb") as f:
            again = client.post("/api/import", files={"file": ("po.csv", f, "text/csv")}).json()
        assert again["created"] == []
        assert set(again["skipped"]) == {"GWG048", "TSH096", "OMT012"}

    def test_import_dry_run(self, client, import_csv):
        with open(import_csv, "rb") as f:
            report = client.post("/api/import", params={"dry_run": "true"},
                                 files={"file": ("po.csv", f, "text/csv")}).json()
        assert report["dry_run"] is True
        assert client.get("/api/purchase-orders").json() == []

    def test_import_matches_suppliers(self, client, import_csv, sample_suppliers):
        with open(import_csv, "rb") as f:
            client.post("/api/import", files={"file": ("po.csv", f, "text/csv")})
        po = client.get("/api/purchase-orders/GWG048").json()
        assert po["supplier_name"] == "Golden Weave Garments"
        assert po["supplier_id"] == sample_suppliers[0].id

    def test_import_rejects_other_files(self, client):
        response = client.post("/api/import", files={"file": ("x.pdf", b"%PDF", "application/pdf")})
        assert response.status_code == 400


@pytest.mark.api
class TestSupplierAndInventoryApi:
    """Tests for supplier and product endpoints."""

    def test_supplier_crud(self, client):
        created = client.post("/api/suppliers", json={"name": "Golden Weave Garments", "code": "GWG"})
        assert created.status_code == 201
        supplier_id = created.json()["id"]
        assert client.post("/api/suppliers", json={"name": ""}).status_code == 422

        patched = client.patch(f"/api/suppliers/{supplier_id}", json={"status": "Inactive"})
        assert patched.json()["status"] == "Inactive"
        assert [s["code"] for s in client.get("/api/suppliers", params={"search": "gwg"}).json()] == ["GWG"]

        assert client.delete(f"/api/suppliers/{supplier_id}").status_code == 200
        assert client.delete(f"/api/suppliers/{supplier_id}").status_code == 404

    def test_products(self, client, sample_products):
        assert len(client.get("/api/products").json()) == 2
        response = client.patch("/api/products/MC-NAVY/sizes", json={"sizes": {"XS": 60}})
        assert response.status_code == 200
        assert client.patch("/api/products/NOPE/sizes", json={"sizes": {}}).status_code == 404
        summary = client.get("/api/inventory/summary").json()
        assert summary["skus"] == 2
