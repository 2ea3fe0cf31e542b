"""Diagram filter model."""

from sqlalchemy import Column, String, JSON
from ..database import Base


class DiagramFilter(Base):
    """At most one opaque filter payload per diagram."""

    __tablename__ = "diagram_filters"

    diagram_id = Column(String(255), primary_key=True)
    payload = Column(JSON, nullable=False)
