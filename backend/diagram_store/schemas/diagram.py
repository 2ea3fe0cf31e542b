"""Diagram schemas and payload normalization."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import ValidationError

# Top-level keys that must be present and non-blank on every stored diagram.
REQUIRED_FIELDS = ("id", "name", "databaseType")


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DiagramMeta(BaseModel):
    """Summary fields of a diagram, as listed by ``GET /api/diagrams``."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    name: str
    database_type: str = Field(alias="databaseType")
    database_edition: Optional[str] = Field(default=None, alias="databaseEdition")
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")


def _required_string(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"diagram.{key} is required", field=key)
    return value


def normalize_diagram_payload(data: Any) -> Tuple[Dict[str, Any], DiagramMeta]:
    """Validate a raw diagram payload and fill in missing timestamps.

    Returns a new payload dict (the input is not modified) together with the
    extracted summary fields. Nested collections are left untouched.

    Raises:
        ValidationError: if the payload is not an object or a required
            field is missing or blank.
    """
    if not isinstance(data, dict):
        raise ValidationError("diagram payload must be a JSON object")

    normalized = dict(data)
    diagram_id, name, database_type = (_required_string(normalized, key) for key in REQUIRED_FIELDS)

    now = utc_now_iso()
    for key in ("createdAt", "updatedAt"):
        value = normalized.get(key)
        if not isinstance(value, str) or value == "":
            normalized[key] = now

    edition = normalized.get("databaseEdition")
    meta = DiagramMeta(
        id=diagram_id,
        name=name,
        database_type=database_type,
        database_edition=edition if isinstance(edition, str) else None,
        created_at=normalized["createdAt"],
        updated_at=normalized["updatedAt"],
    )
    return normalized, meta
