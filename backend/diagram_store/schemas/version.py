"""Version schemas."""

from pydantic import BaseModel, ConfigDict, Field


class VersionResponse(BaseModel):
    """Version summary (payload excluded)."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    diagram_id: str = Field(alias="diagramId")
    name: str
    action: str
    created_at: str = Field(alias="createdAt")
