"""
Dashboard business logic services.
"""
from .export import (
    build_export_payload,
    render_export_xml,
    DEFAULT_EXPORT_XML_TEMPLATE,
)

__all__ = [
    "build_export_payload",
    "render_export_xml",
    "DEFAULT_EXPORT_XML_TEMPLATE",
]
