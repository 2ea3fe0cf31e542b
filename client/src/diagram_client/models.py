"""Client-side diagram model.

Server payloads are parsed leniently: a missing ``databaseType`` becomes
``generic``, unparseable timestamps become the current time, and nested
collections that are not lists are treated as absent. Top-level keys the
model does not know about are kept and sent back unchanged.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

# Attribute names of the six nested collections.
COLLECTION_FIELDS = ("tables", "relationships", "dependencies", "areas", "custom_types", "notes")

# Wire keys dropped from a payload when their value is absent.
_OPTIONAL_KEYS = ("databaseEdition", "tables", "relationships", "dependencies", "areas", "customTypes", "notes")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """Best-effort conversion to an aware datetime; falls back to now."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Numeric timestamps are epoch milliseconds.
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return utc_now()
    if isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return utc_now()
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return utc_now()


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Diagram(BaseModel):
    """A diagram document as seen by the client."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    name: str
    database_type: str = Field(default="generic", alias="databaseType")
    database_edition: Optional[str] = Field(default=None, alias="databaseEdition")
    tables: Optional[List[Dict[str, Any]]] = None
    relationships: Optional[List[Dict[str, Any]]] = None
    dependencies: Optional[List[Dict[str, Any]]] = None
    areas: Optional[List[Dict[str, Any]]] = None
    custom_types: Optional[List[Dict[str, Any]]] = Field(default=None, alias="customTypes")
    notes: Optional[List[Dict[str, Any]]] = None
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")

    @field_validator("database_type", mode="before")
    @classmethod
    def default_database_type(cls, v: Any) -> Any:
        return "generic" if v is None else v

    @field_validator("database_edition", mode="before")
    @classmethod
    def drop_non_string_edition(cls, v: Any) -> Any:
        return v if isinstance(v, str) else None

    @field_validator(*COLLECTION_FIELDS, mode="before")
    @classmethod
    def drop_non_list_collection(cls, v: Any) -> Any:
        return v if isinstance(v, list) else None

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def coerce_timestamp(cls, v: Any) -> datetime:
        return parse_timestamp(v)

    @field_serializer("created_at", "updated_at")
    def serialize_timestamp(self, value: datetime) -> str:
        return format_timestamp(value)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict with wire keys, omitting absent optional fields."""
        data = self.model_dump(by_alias=True, mode="json")
        for key in _OPTIONAL_KEYS:
            if data.get(key) is None:
                data.pop(key, None)
        return data

    def to_meta(self) -> "Diagram":
        """Copy carrying only the summary fields."""
        return Diagram(
            id=self.id,
            name=self.name,
            database_type=self.database_type,
            database_edition=self.database_edition,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


# snake_case attribute name -> wire key, for fields whose names differ.
_WIRE_KEYS = {name: field.alias for name, field in Diagram.model_fields.items() if field.alias}


def serialize_attributes(attributes: Dict[str, Any]) -> Dict[str, Any]:
    """Turn a partial update into a PATCH body.

    Attribute names may be given in either form (``database_type`` or
    ``databaseType``); datetimes are rendered as ISO strings.
    """
    serialized: Dict[str, Any] = {}
    for key, value in attributes.items():
        if isinstance(value, datetime):
            value = format_timestamp(value)
        serialized[_WIRE_KEYS.get(key, key)] = value
    return serialized
