"""Request/response schemas."""

from .diagram import DiagramMeta, normalize_diagram_payload, utc_now_iso
from .version import VersionResponse

__all__ = ["DiagramMeta", "normalize_diagram_payload", "utc_now_iso", "VersionResponse"]
