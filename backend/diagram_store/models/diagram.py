"""Diagram model."""

from sqlalchemy import Column, Index, String, Text, JSON
from ..database import Base


class Diagram(Base):
    """Main diagrams table.

    ``payload`` holds the full normalized document. The scalar columns
    duplicate its identity and summary fields so listings never have to
    decode payloads.
    """

    __tablename__ = "diagrams"
    __table_args__ = (
        Index("ix_diagrams_updated_at", "updated_at"),
    )

    # Primary key (caller-assigned)
    id = Column(String(255), primary_key=True)

    name = Column(Text, nullable=False)
    database_type = Column(String(100), nullable=False)
    database_edition = Column(String(100), nullable=True)

    payload = Column(JSON, nullable=False)

    # ISO-8601 strings exactly as supplied by the caller (or filled at normalization).
    created_at = Column(String(64), nullable=False)
    updated_at = Column(String(64), nullable=False)
