"""
Supplier matching for imported Purchase Orders.

Spreadsheet rows only carry a loose supplier reference. It is resolved
against the supplier master list using these strategies in priority order:
  1. Code exact match (case-insensitive), e.g. "GWG"
  2. Name exact match (case-insensitive)
  3. Fuzzy name match (using rapidfuzz)
  4. Code prefix of the PO base id, e.g. GWG048 -> GWG
"""
import logging
from typing import Optional

from rapidfuzz import fuzz

from models.result import MatchedSupplier
from models.supplier import Supplier

logger = logging.getLogger(__name__)

# Minimum fuzzy score (0-100) to accept a name match
FUZZY_THRESHOLD = 75


class SupplierMatcher:
    """Matches free-text supplier references against known suppliers."""

    def __init__(self, suppliers: list[Supplier], fuzzy_threshold: int = FUZZY_THRESHOLD):
        self.suppliers = [s for s in suppliers if s.is_active]
        self.fuzzy_threshold = fuzzy_threshold

    def match(self, supplier_ref: str, po_base: Optional[str] = None) -> Optional[MatchedSupplier]:
        """
        Try all matching strategies and return the best MatchedSupplier,
        or None if no supplier could be identified.
        """
        if not self.suppliers:
            return None

        ref = (supplier_ref or "").strip().lower()

        if ref:
            # 1. Code exact match (most reliable)
            for s in self.suppliers:
                if s.code and s.code.lower() == ref:
                    logger.info("Supplier matched by code: %s -> %s", supplier_ref, s.name)
                    return _matched(s, "code_exact", 1.0)

            # 2. Name exact match (case-insensitive)
            for s in self.suppliers:
                if s.name.lower() == ref:
                    logger.info("Supplier matched by exact name: %s", s.name)
                    return _matched(s, "name_exact", 0.95)

            # 3. Fuzzy name match
            best = self._fuzzy_name_match(ref)
            if best:
                return best

        # 4. PO id prefix, longest code first so "GW" never shadows "GWG"
        base = (po_base or "").strip().upper()
        if base:
            by_length = sorted((s for s in self.suppliers if s.code), key=lambda s: -len(s.code))
            for s in by_length:
                if base.startswith(s.code.upper()):
                    logger.info("Supplier matched by PO prefix: %s -> %s", base, s.name)
                    return _matched(s, "code_prefix", 0.8)

        logger.info("No supplier match found for: %r (PO %s)", supplier_ref, po_base)
        return None

    def _fuzzy_name_match(self, ref: str) -> Optional[MatchedSupplier]:
        """Use rapidfuzz to find the best name match above the threshold."""
        best_score = 0.0
        best_supplier: Optional[Supplier] = None

        for s in self.suppliers:
            for candidate_name in s.all_names:
                score = fuzz.token_sort_ratio(ref, candidate_name.lower())
                if score > best_score:
                    best_score = score
                    best_supplier = s

        if best_supplier and best_score >= self.fuzzy_threshold:
            logger.info(
                "Supplier fuzzy matched: '%s' -> '%s' (score=%d)",
                ref, best_supplier.name, best_score,
            )
            return _matched(best_supplier, "name_fuzzy", round(best_score / 100.0, 3))

        logger.debug("Best fuzzy match score was %d (threshold=%d)", best_score, self.fuzzy_threshold)
        return None


def _matched(s: Supplier, method: str, confidence: float) -> MatchedSupplier:
    return MatchedSupplier(
        supplier_id=s.id,
        supplier_name=s.name,
        match_method=method,
        confidence=confidence,
    )
