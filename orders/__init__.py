from .reference import parse_reference, build_reference, clean_reference
from .split_planner import SplitError, plan_split, confirm_split, plan_new_order, plan_additional_shipment
from .supplier_matcher import SupplierMatcher
from .checks import OrderChecker
from .import_reconciler import ImportReconciler
from .database import Database, StoreError, DuplicateRecordError, RecordNotFoundError

__all__ = [
    "parse_reference", "build_reference", "clean_reference",
    "SplitError", "plan_split", "confirm_split", "plan_new_order", "plan_additional_shipment",
    "SupplierMatcher", "OrderChecker", "ImportReconciler",
    "Database", "StoreError", "DuplicateRecordError", "RecordNotFoundError",
]
