"""
Shipment / PO reference parsing.

Spreadsheet references carry the destination and transport mode as a
trailing suffix on the base PO id:

    GWG048UKSEA   -> base GWG048, destination UK, mode SEA
    GWG048USAAIR  -> base GWG048, destination US, mode AIR
    GWG048        -> base GWG048, no suffix (PO not split yet)

Destination and base come from the end of the string only. Markers mid-string are
left alone, so a base id is never rewritten. The mode is read from marker
substrings anywhere in the reference, AIR first, then TRUCK, else SEA.
"""
import logging
import re

from models.purchase_order import Destination, ShipmentMode
from models.result import ParsedReference

logger = logging.getLogger(__name__)

# Trailing destination, optionally followed by a mode marker
_DESTINATION_RE = re.compile(r"(USA|US|UK)(SEA|AIR|TRUCK)?$")
# Full suffix that is stripped to obtain the base id (both parts required)
_SUFFIX_RE = re.compile(r"(USA|UK|US)(SEA|AIR|TRUCK)$")

_DESTINATION_CODES = {
    "UK": Destination.UK,
    "US": Destination.US,
    "USA": Destination.US,
}


def clean_reference(raw) -> str:
    """Trim whitespace and drop slash characters."""
    if raw is None:
        return ""
    return str(raw).strip().replace("/", "")


def parse_reference(raw) -> ParsedReference:
    """
    Split a raw reference into base id, destination and mode.

    Never raises: a reference without a recognisable suffix is returned with
    has_suffix=False and destination=None.
    """
    cleaned = clean_reference(raw)

    suffix = _SUFFIX_RE.search(cleaned)
    base = cleaned[: suffix.start()] if suffix else cleaned
    mode = _mode_from_markers(cleaned)

    dest_match = _DESTINATION_RE.search(cleaned)
    destination = _DESTINATION_CODES[dest_match.group(1)] if dest_match else None

    parsed = ParsedReference(
        raw=cleaned,
        base=base,
        destination=destination,
        mode=mode,
        has_suffix=base != cleaned,
    )
    logger.debug(
        "Parsed reference %r -> base=%s dest=%s mode=%s",
        cleaned, parsed.base, destination and destination.value, mode.value,
    )
    return parsed


def build_reference(base: str, destination: Destination, mode: ShipmentMode) -> str:
    """Compose a shipment reference; parse_reference() recovers the parts."""
    return f"{base}{destination.ref_code}{mode.value}"


def _mode_from_markers(cleaned: str) -> ShipmentMode:
    if "AIR" in cleaned:
        return ShipmentMode.AIR
    if "TRUCK" in cleaned:
        return ShipmentMode.TRUCK
    return ShipmentMode.SEA
