"""
Pytest configuration and shared fixtures for the operations tracker test suite.
"""
import csv
import os
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
os.chdir(PROJECT_ROOT)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for test files."""
    tmp_path = tempfile.mkdtemp(prefix="ops_test_")
    yield Path(tmp_path)
    shutil.rmtree(tmp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> "Config":
    """Provide a test configuration with isolated directories."""
    from config import Config

    config = Config()
    # Override paths to use temp directory
    config.db_path = temp_dir / "output" / "operations.db"
    config.config_dir = temp_dir / "config"
    config.config_dir.mkdir(parents=True, exist_ok=True)
    config.default_currency = "USD"
    config.default_season = "AW25"
    config.ensure_output_dir()
    return config


@pytest.fixture
def test_db(test_config) -> "Database":
    """Provide a test database instance."""
    from orders.database import Database
    return Database(test_config.db_path)


@pytest.fixture
def sample_lines() -> list:
    """Two garment lines: 100 UK / 60 USA units in total."""
    from models.purchase_order import LineItem
    return [
        LineItem(product_name="Merino Crew", size="M", cost_price=12.5,
                 sku="MC-M", qty_uk=60, qty_usa=40, confirmed_xf=95),
        LineItem(product_name="Merino Crew", size="L", cost_price=12.5,
                 sku="MC-L", qty_uk=40, qty_usa=20, confirmed_xf=60),
    ]


@pytest.fixture
def sample_po(sample_lines) -> "PurchaseOrder":
    """An unsplit PO with line items, not yet stored."""
    from models.purchase_order import PurchaseOrder
    return PurchaseOrder(
        id="GWG049",
        supplier_name="Golden Weave Garments",
        supplier_ref="GWG",
        seasonality="AW25",
        ex_factory_date="2025-09-01",
        lines=sample_lines,
    )


@pytest.fixture
def stored_po(test_db, sample_po) -> "PurchaseOrder":
    """sample_po persisted with its lines and no shipments."""
    return test_db.create_purchase_order(sample_po, sample_po.lines, [])


@pytest.fixture
def sample_suppliers(test_db) -> list:
    """Supplier master list stored in the test database."""
    from models.supplier import Supplier
    return [
        test_db.create_supplier(Supplier(
            name="Golden Weave Garments", code="GWG", country_of_origin="Vietnam",
            product_types="Knitwear", payment_terms="30% deposit",
        )),
        test_db.create_supplier(Supplier(
            name="Tianhe Shirt House", code="TSH", country_of_origin="China",
            product_types="Shirts",
        )),
        test_db.create_supplier(Supplier(
            name="Old Mill Textiles", code="OMT", status="Inactive",
            country_of_origin="Portugal",
        )),
    ]


IMPORT_HEADER = [
    "PO #", "DC", "Supplier Ref", "Seasonality", "Status", "Units", "Cartons",
    "Freight Forwarder", "ETA", "Total Cost Value", "Import Tax Status",
    "SKUs Created", "PO Splits Confirmed",
]


@pytest.fixture
def import_rows() -> list:
    """Header plus rows for two split POs, one unsplit PO and a blank row."""
    return [
        IMPORT_HEADER,
        ["GWG048UKSEA", "UK", "GWG", "AW25", "In production", 600, 12,
         "KTL", "2025-10-01", "14,500.00", "DDP - No taxes", "TRUE", "TRUE"],
        ["GWG048USASEA", "USA", "GWG", "AW25", "In transit - awaiting freight info", 400, 8,
         "KTL", "2025-10-12", "14,500.00", "", "TRUE", "TRUE"],
        ["TSH096", "", "TSH", "SS26", "", "", "", "", "", "$3,200", "", "FALSE", "FALSE"],
        ["", "", "", "", "", "", "", "", "", "", "", "", ""],
        ["OMT012USAAIR", "USA", "OMT", "AW25", "Delivered", 150, 3,
         "JET", "2025-08-20", "2,000", "Taxes paid", "TRUE", "TRUE"],
    ]


@pytest.fixture
def import_csv(temp_dir: Path, import_rows) -> Path:
    """import_rows written as a CSV file."""
    path = temp_dir / "po_management.csv"
    with open(path, "w", newline="", encoding="utf-8") as f:
        csv.writer(f).writerows(import_rows)
    return path


@pytest.fixture
def sample_products(test_db) -> list:
    """Inventory snapshot stored in the test database."""
    from models.inventory import Product
    products = [
        Product(id="MC-NAVY", name="Merino Crew Navy", category="Knitwear",
                warehouse="UK - London",
                sizes={"XS": 10, "S": 80, "M": 120, "L": 90, "XL": 60, "XXL": 55}),
        Product(id="OX-WHITE", name="Oxford Shirt White", category="Shirts",
                warehouse="US - New Jersey",
                sizes={"XS": 60, "S": 70, "M": 200, "L": 150, "XL": 75, "XXL": 51}),
    ]
    for p in products:
        test_db.upsert_product(p)
    return products


# Configure pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "api: API tests")
