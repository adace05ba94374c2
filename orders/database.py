"""
SQLite record store for purchase orders, shipments, suppliers and inventory.

A single database file (output/operations.db) holds:

  purchase_orders  PO header fields and readiness flags
  po_lines         garment lines, owned by one PO, never edited
  shipments        one row per destination leg, edited field by field
  suppliers        supplier master list (full CRUD)
  products         inventory snapshot, stock per size as a JSON object
  audit_log        who changed what, and when

Every public method runs in its own transaction. Multi-record writes
(PO + lines + shipments, split shipments + flag) commit or roll back as one
unit. Last write wins; there is no conflict detection.

Errors
------
  StoreError            any database failure
  DuplicateRecordError  id / reference already exists (integrity violation)
  RecordNotFoundError   the id being updated does not exist
"""
import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from models.inventory import Product
from models.purchase_order import LineItem, PurchaseOrder, Shipment
from models.supplier import Supplier

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS suppliers (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    name              TEXT    NOT NULL,
    code              TEXT    NOT NULL DEFAULT '',
    status            TEXT    NOT NULL DEFAULT 'Active',
    contact           TEXT    NOT NULL DEFAULT '',
    phone             TEXT    NOT NULL DEFAULT '',
    address           TEXT    NOT NULL DEFAULT '',
    product_types     TEXT    NOT NULL DEFAULT '',
    payment_terms     TEXT    NOT NULL DEFAULT '',
    lead_time_days    TEXT    NOT NULL DEFAULT '',
    transit_time      TEXT    NOT NULL DEFAULT '',
    country_of_origin TEXT    NOT NULL DEFAULT '',
    nearest_port      TEXT    NOT NULL DEFAULT '',
    currency          TEXT    NOT NULL DEFAULT 'USD',
    notes             TEXT    NOT NULL DEFAULT '',
    created_at        TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_suppliers_name ON suppliers (name);

CREATE TABLE IF NOT EXISTS products (
    id         TEXT PRIMARY KEY,           -- SKU
    name       TEXT NOT NULL,
    category   TEXT NOT NULL DEFAULT '',
    warehouse  TEXT NOT NULL DEFAULT '',
    sizes      TEXT NOT NULL DEFAULT '{}', -- JSON object { "M": 120, ... }
    cost       REAL,
    currency   TEXT NOT NULL DEFAULT 'GBP'
);

CREATE TABLE IF NOT EXISTS purchase_orders (
    id                    TEXT PRIMARY KEY,
    supplier_id           INTEGER,
    supplier_ref          TEXT    NOT NULL DEFAULT '',
    supplier_name         TEXT    NOT NULL DEFAULT '',
    seasonality           TEXT    NOT NULL DEFAULT '',
    currency              TEXT    NOT NULL DEFAULT 'USD',
    ex_factory_date       TEXT    NOT NULL DEFAULT '',
    total_cost_value      REAL    NOT NULL DEFAULT 0,
    deposit_cost_value    REAL    NOT NULL DEFAULT 0,
    deposit_payment_date  TEXT    NOT NULL DEFAULT '',
    status                TEXT,
    notes                 TEXT    NOT NULL DEFAULT '',
    created_at            TEXT    NOT NULL,
    skus_created          INTEGER NOT NULL DEFAULT 0,
    barcodes_sent         INTEGER NOT NULL DEFAULT 0,
    polybags_sent         INTEGER NOT NULL DEFAULT 0,
    po_splits_confirmed   INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_po_created_at ON purchase_orders (created_at DESC);

CREATE TABLE IF NOT EXISTS po_lines (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    po_id         TEXT    NOT NULL REFERENCES purchase_orders (id),
    product_name  TEXT    NOT NULL DEFAULT '',
    size          TEXT    NOT NULL DEFAULT 'M',
    cost_price    REAL    NOT NULL DEFAULT 0,
    design_ref    TEXT    NOT NULL DEFAULT '',
    colour_code   TEXT    NOT NULL DEFAULT '',
    sku           TEXT    NOT NULL DEFAULT '',
    qty_uk        INTEGER NOT NULL DEFAULT 0,
    qty_usa       INTEGER NOT NULL DEFAULT 0,
    confirmed_xf  INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_lines_po ON po_lines (po_id);

CREATE TABLE IF NOT EXISTS shipments (
    id                     INTEGER PRIMARY KEY AUTOINCREMENT,
    po_id                  TEXT    NOT NULL REFERENCES purchase_orders (id),
    shipment_ref           TEXT    NOT NULL UNIQUE,
    destination            TEXT    NOT NULL,   -- UK | US
    mode                   TEXT    NOT NULL,   -- SEA | AIR | TRUCK
    status                 TEXT    NOT NULL,
    units                  INTEGER NOT NULL DEFAULT 0,
    cartons                INTEGER NOT NULL DEFAULT 0,
    freight_forwarder      TEXT    NOT NULL DEFAULT '',
    shipment_date          TEXT    NOT NULL DEFAULT '',
    eta                    TEXT    NOT NULL DEFAULT '',
    delivery_date          TEXT    NOT NULL DEFAULT '',
    booked_in_date         TEXT    NOT NULL DEFAULT '',
    tracking_number        TEXT    NOT NULL DEFAULT '',
    total_freight_cost     REAL    NOT NULL DEFAULT 0,
    unit_freight_cost_usd  REAL    NOT NULL DEFAULT 0,
    unit_freight_cost_gbp  REAL    NOT NULL DEFAULT 0,
    import_tax_status      TEXT,
    added_to_warehouse     INTEGER NOT NULL DEFAULT 0,
    delivery_booked        INTEGER NOT NULL DEFAULT 0,
    quantities_verified    INTEGER NOT NULL DEFAULT 0,
    stock_on_shopify       INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_shipments_po ON shipments (po_id);

CREATE TABLE IF NOT EXISTS audit_log (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    entity      TEXT    NOT NULL,   -- purchase_order | shipment | supplier | product
    entity_id   TEXT    NOT NULL,
    timestamp   TEXT    NOT NULL,   -- ISO-8601 UTC
    action      TEXT    NOT NULL,   -- created | updated | split | shipment_added |
                                    -- deleted | sizes_updated
    actor       TEXT    NOT NULL DEFAULT 'system',
    detail      TEXT                -- optional JSON blob with action-specific context
);

CREATE INDEX IF NOT EXISTS idx_audit_entity    ON audit_log (entity_id);
CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_log (timestamp DESC);
"""

_PO_COLUMNS = [f for f in PurchaseOrder.model_fields if f not in ("lines", "shipments")]
_LINE_COLUMNS = [f for f in LineItem.model_fields if f != "id"]
_SHIPMENT_COLUMNS = [f for f in Shipment.model_fields if f != "id"]
_SUPPLIER_COLUMNS = [f for f in Supplier.model_fields if f != "id"]

# Fields an update may never touch
_PO_IMMUTABLE = {"id", "created_at", "lines", "shipments"}
# Reference, destination and mode must stay consistent with each other
_SHIPMENT_IMMUTABLE = {"id", "po_id", "shipment_ref", "destination", "mode"}
_SUPPLIER_IMMUTABLE = {"id", "created_at"}


class StoreError(Exception):
    """The record store could not complete an operation."""


class DuplicateRecordError(StoreError):
    """A record with the same id or reference already exists."""


class RecordNotFoundError(StoreError):
    """No record with the requested id."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _insert_sql(table: str, columns: list[str]) -> str:
    return (
        f"INSERT INTO {table} ({', '.join(columns)}) "
        f"VALUES ({', '.join(':' + c for c in columns)})"
    )


def _params(model, columns: list[str]) -> dict[str, Any]:
    data = model.model_dump(mode="json")
    return {c: data.get(c) for c in columns}


class Database:
    """Thin wrapper around an SQLite database file holding operations records."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    # ------------------------------------------------------------------
    # Connection management
    # ------------------------------------------------------------------

    @contextmanager
    def _conn(self):
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=30)
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open database {self.db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")
            conn.execute("PRAGMA foreign_keys=ON")
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            raise DuplicateRecordError(str(exc)) from exc
        except sqlite3.Error as exc:
            conn.rollback()
            raise StoreError(str(exc)) from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._conn() as conn:
            conn.executescript(_SCHEMA)
        logger.debug("Database schema ready: %s", self.db_path)

    # ------------------------------------------------------------------
    # Purchase orders — writes
    # ------------------------------------------------------------------

    def next_po_id(self, year: Optional[int] = None) -> str:
        """Next generated id, PO-<year>-<seq> with seq zero-padded to 3 digits."""
        with self._conn() as conn:
            return self._next_po_id(conn, year)

    def _next_po_id(self, conn: sqlite3.Connection, year: Optional[int] = None) -> str:
        year = year or datetime.now(timezone.utc).year
        seq = conn.execute("SELECT COUNT(*) FROM purchase_orders").fetchone()[0] + 1
        while True:
            candidate = f"PO-{year}-{seq:03d}"
            exists = conn.execute(
                "SELECT 1 FROM purchase_orders WHERE id=?", (candidate,)
            ).fetchone()
            if not exists:
                return candidate
            seq += 1

    def create_purchase_order(
        self,
        po: PurchaseOrder,
        lines: list[LineItem],
        shipments: list[Shipment],
        actor: str = "system",
    ) -> PurchaseOrder:
        """
        Insert a PO with its lines and shipments in one transaction.

        An empty po.id is replaced by the next generated PO-<year>-<seq>.
        Raises DuplicateRecordError if the id (or a shipment reference)
        already exists; nothing is written in that case.
        """
        with self._conn() as conn:
            po_id = po.id or self._next_po_id(conn)
            if conn.execute("SELECT 1 FROM purchase_orders WHERE id=?", (po_id,)).fetchone():
                raise DuplicateRecordError(f"Purchase order {po_id} already exists")

            record = po.model_copy(update={"id": po_id, "created_at": po.created_at or _now()})
            conn.execute(_insert_sql("purchase_orders", _PO_COLUMNS), _params(record, _PO_COLUMNS))
            for line in lines:
                row = _params(line, _LINE_COLUMNS)
                conn.execute(
                    _insert_sql("po_lines", ["po_id", *_LINE_COLUMNS]), {"po_id": po_id, **row}
                )
            for shipment in shipments:
                self._insert_shipment(conn, shipment.model_copy(update={"po_id": po_id}))
            self._audit(conn, "purchase_order", po_id, "created", actor, {
                "lines": len(lines),
                "shipments": [s.shipment_ref for s in shipments],
            })

        logger.info("PO created: %s (%d lines, %d shipments)", po_id, len(lines), len(shipments))
        return self.get_purchase_order(po_id)

    def update_purchase_order(
        self, po_id: str, fields: dict[str, Any], actor: str = "system"
    ) -> PurchaseOrder:
        """Apply a partial update to a PO's own fields and return the stored PO."""
        bad = set(fields) & _PO_IMMUTABLE | set(fields) - set(_PO_COLUMNS)
        if bad:
            raise ValueError(f"Cannot update purchase order field(s): {sorted(bad)}")

        current = self.get_purchase_order(po_id)
        if current is None:
            raise RecordNotFoundError(f"Purchase order not found: {po_id}")
        merged = PurchaseOrder.model_validate({**current.model_dump(), **fields})

        with self._conn() as conn:
            self._update_row(conn, "purchase_orders", "id", po_id, merged, list(fields))
            self._audit(conn, "purchase_order", po_id, "updated", actor, {"fields": sorted(fields)})
        return self.get_purchase_order(po_id)

    def record_split(self, po_id: str, shipments: list[Shipment], actor: str = "system") -> None:
        """Insert the split shipments and set po_splits_confirmed, as one unit."""
        with self._conn() as conn:
            if not conn.execute("SELECT 1 FROM purchase_orders WHERE id=?", (po_id,)).fetchone():
                raise RecordNotFoundError(f"Purchase order not found: {po_id}")
            for shipment in shipments:
                self._insert_shipment(conn, shipment.model_copy(update={"po_id": po_id}))
            conn.execute("UPDATE purchase_orders SET po_splits_confirmed=1 WHERE id=?", (po_id,))
            self._audit(conn, "purchase_order", po_id, "split", actor, {
                "shipments": [s.shipment_ref for s in shipments],
            })

    def add_shipment(self, shipment: Shipment, actor: str = "system") -> Shipment:
        """Insert a single shipment for an existing PO."""
        with self._conn() as conn:
            if not conn.execute(
                "SELECT 1 FROM purchase_orders WHERE id=?", (shipment.po_id,)
            ).fetchone():
                raise RecordNotFoundError(f"Purchase order not found: {shipment.po_id}")
            shipment_id = self._insert_shipment(conn, shipment)
            self._audit(conn, "purchase_order", shipment.po_id, "shipment_added", actor, {
                "shipment_ref": shipment.shipment_ref,
            })
        return self.get_shipment(shipment_id)

    def update_shipment(
        self, shipment_id: int, fields: dict[str, Any], actor: str = "system"
    ) -> Shipment:
        """Apply a partial update to one shipment. Status is not checked against the lifecycle."""
        bad = set(fields) & _SHIPMENT_IMMUTABLE | set(fields) - set(_SHIPMENT_COLUMNS)
        if bad:
            raise ValueError(f"Cannot update shipment field(s): {sorted(bad)}")

        current = self.get_shipment(shipment_id)
        if current is None:
            raise RecordNotFoundError(f"Shipment not found: {shipment_id}")
        merged = Shipment.model_validate({**current.model_dump(), **fields})

        with self._conn() as conn:
            self._update_row(conn, "shipments", "id", shipment_id, merged, list(fields))
            self._audit(conn, "shipment", current.po_id, "updated", actor, {
                "shipment_id": shipment_id,
                "shipment_ref": current.shipment_ref,
                "fields": sorted(fields),
            })
        return self.get_shipment(shipment_id)

    def _insert_shipment(self, conn: sqlite3.Connection, shipment: Shipment) -> int:
        cur = conn.execute(
            _insert_sql("shipments", _SHIPMENT_COLUMNS), _params(shipment, _SHIPMENT_COLUMNS)
        )
        return cur.lastrowid

    def _update_row(
        self, conn: sqlite3.Connection, table: str, key: str, key_value, merged, columns: list[str]
    ) -> None:
        if not columns:
            return
        params = _params(merged, columns)
        assignments = ", ".join(f"{c}=:{c}" for c in columns)
        conn.execute(
            f"UPDATE {table} SET {assignments} WHERE {key}=:_key",
            {**params, "_key": key_value},
        )

    # ------------------------------------------------------------------
    # Purchase orders — reads
    # ------------------------------------------------------------------

    def get_purchase_order(self, po_id: str) -> Optional[PurchaseOrder]:
        """Return one PO with nested lines and shipments, or None."""
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM purchase_orders WHERE id=?", (po_id,)).fetchone()
            if row is None:
                return None
            lines = conn.execute(
                "SELECT * FROM po_lines WHERE po_id=? ORDER BY id", (po_id,)
            ).fetchall()
            shipments = conn.execute(
                "SELECT * FROM shipments WHERE po_id=? ORDER BY destination, id", (po_id,)
            ).fetchall()
        return _build_po(row, lines, shipments)

    def list_purchase_orders(self, search: Optional[str] = None) -> list[PurchaseOrder]:
        """
        Return every PO (newest first) with nested lines and shipments.

        Args:
            search:  Case-insensitive substring match on id, supplier_name or
                     supplier_ref.
        """
        clauses, params = "", []
        if search:
            clauses = "WHERE id LIKE ? OR supplier_name LIKE ? OR supplier_ref LIKE ?"
            like = f"%{search}%"
            params = [like, like, like]

        with self._conn() as conn:
            po_rows = conn.execute(
                f"SELECT * FROM purchase_orders {clauses} ORDER BY created_at DESC, id",
                params,
            ).fetchall()
            line_rows = conn.execute("SELECT * FROM po_lines ORDER BY id").fetchall()
            ship_rows = conn.execute(
                "SELECT * FROM shipments ORDER BY destination, id"
            ).fetchall()

        lines_by_po: dict[str, list] = {}
        for r in line_rows:
            lines_by_po.setdefault(r["po_id"], []).append(r)
        ships_by_po: dict[str, list] = {}
        for r in ship_rows:
            ships_by_po.setdefault(r["po_id"], []).append(r)

        return [
            _build_po(r, lines_by_po.get(r["id"], []), ships_by_po.get(r["id"], []))
            for r in po_rows
        ]

    def get_shipment(self, shipment_id: int) -> Optional[Shipment]:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM shipments WHERE id=?", (shipment_id,)).fetchone()
        return Shipment.model_validate(dict(row)) if row else None

    # ------------------------------------------------------------------
    # Suppliers
    # ------------------------------------------------------------------

    def list_suppliers(self, search: Optional[str] = None) -> list[Supplier]:
        """Suppliers by name; *search* matches name, code, product types or country."""
        clauses, params = "", []
        if search:
            clauses = ("WHERE name LIKE ? OR code LIKE ? OR product_types LIKE ? "
                       "OR country_of_origin LIKE ?")
            params = [f"%{search}%"] * 4
        with self._conn() as conn:
            rows = conn.execute(f"SELECT * FROM suppliers {clauses} ORDER BY name", params).fetchall()
        return [Supplier.model_validate(dict(r)) for r in rows]

    def get_supplier(self, supplier_id: int) -> Optional[Supplier]:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM suppliers WHERE id=?", (supplier_id,)).fetchone()
        return Supplier.model_validate(dict(row)) if row else None

    def create_supplier(self, supplier: Supplier, actor: str = "system") -> Supplier:
        record = supplier.model_copy(update={"created_at": supplier.created_at or _now()})
        with self._conn() as conn:
            cur = conn.execute(
                _insert_sql("suppliers", _SUPPLIER_COLUMNS), _params(record, _SUPPLIER_COLUMNS)
            )
            supplier_id = cur.lastrowid
            self._audit(conn, "supplier", str(supplier_id), "created", actor, {"name": supplier.name})
        logger.info("Supplier created: %s (id=%d)", supplier.name, supplier_id)
        return self.get_supplier(supplier_id)

    def update_supplier(
        self, supplier_id: int, fields: dict[str, Any], actor: str = "system"
    ) -> Supplier:
        bad = set(fields) & _SUPPLIER_IMMUTABLE | set(fields) - set(_SUPPLIER_COLUMNS)
        if bad:
            raise ValueError(f"Cannot update supplier field(s): {sorted(bad)}")

        current = self.get_supplier(supplier_id)
        if current is None:
            raise RecordNotFoundError(f"Supplier not found: {supplier_id}")
        merged = Supplier.model_validate({**current.model_dump(), **fields})

        with self._conn() as conn:
            self._update_row(conn, "suppliers", "id", supplier_id, merged, list(fields))
            self._audit(conn, "supplier", str(supplier_id), "updated", actor, {"fields": sorted(fields)})
        return self.get_supplier(supplier_id)

    def delete_supplier(self, supplier_id: int, actor: str = "system") -> bool:
        """Delete a supplier. POs keep their copied supplier name. Returns True if found."""
        with self._conn() as conn:
            conn.execute("DELETE FROM suppliers WHERE id=?", (supplier_id,))
            deleted = conn.execute("SELECT changes()").fetchone()[0] > 0
            if deleted:
                conn.execute(
                    "UPDATE purchase_orders SET supplier_id=NULL WHERE supplier_id=?",
                    (supplier_id,),
                )
                self._audit(conn, "supplier", str(supplier_id), "deleted", actor)
        return deleted

    # ------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------

    def list_products(
        self, warehouse: Optional[str] = None, search: Optional[str] = None
    ) -> list[Product]:
        clauses: list[str] = []
        params: list = []
        if warehouse:
            clauses.append("warehouse = ?")
            params.append(warehouse)
        if search:
            clauses.append("(name LIKE ? OR id LIKE ?)")
            params.extend([f"%{search}%", f"%{search}%"])
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._conn() as conn:
            rows = conn.execute(f"SELECT * FROM products {where} ORDER BY name", params).fetchall()
        return [_build_product(r) for r in rows]

    def upsert_product(self, product: Product) -> None:
        """Insert or replace an inventory snapshot row."""
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO products (id, name, category, warehouse, sizes, cost, currency)
                VALUES (:id, :name, :category, :warehouse, :sizes, :cost, :currency)
                ON CONFLICT(id) DO UPDATE SET
                    name      = excluded.name,
                    category  = excluded.category,
                    warehouse = excluded.warehouse,
                    sizes     = excluded.sizes,
                    cost      = excluded.cost,
                    currency  = excluded.currency
                """,
                {**product.model_dump(), "sizes": json.dumps(product.sizes)},
            )

    def update_product_sizes(self, product_id: str, sizes: dict[str, int], actor: str = "system") -> bool:
        """Replace the per-size stock of a product. Returns True if found."""
        with self._conn() as conn:
            conn.execute(
                "UPDATE products SET sizes=? WHERE id=?", (json.dumps(sizes), product_id)
            )
            changed = conn.execute("SELECT changes()").fetchone()[0] > 0
            if changed:
                self._audit(conn, "product", product_id, "sizes_updated", actor, {"sizes": sizes})
        return changed

    # ------------------------------------------------------------------
    # Audit log
    # ------------------------------------------------------------------

    def _audit(
        self,
        conn: sqlite3.Connection,
        entity: str,
        entity_id: str,
        action: str,
        actor: str = "system",
        detail: Optional[dict] = None,
    ) -> None:
        conn.execute(
            """INSERT INTO audit_log (entity, entity_id, timestamp, action, actor, detail)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                entity,
                entity_id,
                _now(),
                action,
                actor,
                json.dumps(detail) if detail is not None else None,
            ),
        )

    def get_audit_log(self, entity_id: str) -> list[dict]:
        """Return all audit entries for one record, oldest first."""
        with self._conn() as conn:
            rows = conn.execute(
                """SELECT id, entity, timestamp, action, actor, detail
                   FROM audit_log WHERE entity_id = ?
                   ORDER BY timestamp ASC, id ASC""",
                (entity_id,),
            ).fetchall()
        return [dict(r) for r in rows]

    def get_recent_audit_log(self, limit: int = 200, offset: int = 0) -> list[dict]:
        """Return recent audit entries across all records, newest first."""
        with self._conn() as conn:
            rows = conn.execute(
                """SELECT id, entity, entity_id, timestamp, action, actor, detail
                   FROM audit_log
                   ORDER BY timestamp DESC, id DESC
                   LIMIT ? OFFSET ?""",
                (limit, offset),
            ).fetchall()
        return [dict(r) for r in rows]


# ------------------------------------------------------------------
# Row mapping
# ------------------------------------------------------------------

def _build_po(row: sqlite3.Row, lines: list, shipments: list) -> PurchaseOrder:
    data = dict(row)
    data["lines"] = [{k: v for k, v in dict(r).items() if k != "po_id"} for r in lines]
    data["shipments"] = [dict(r) for r in shipments]
    return PurchaseOrder.model_validate(data)


def _build_product(row: sqlite3.Row) -> Product:
    data = dict(row)
    try:
        data["sizes"] = json.loads(data.get("sizes") or "{}")
    except json.JSONDecodeError:
        logger.warning("Product %s has unreadable sizes JSON", data.get("id"))
        data["sizes"] = {}
    return Product.model_validate(data)
