"""Diagram version model."""

from sqlalchemy import Column, Index, Integer, String, Text, JSON
from ..database import Base

VERSION_ACTIONS = ("create", "save", "patch", "restore")


class DiagramVersion(Base):
    """Append-only version history table.

    No foreign key to ``diagrams``: rows follow their diagram through id
    renames and deletes via explicit statements in the same transaction.
    """

    __tablename__ = "diagram_versions"
    __table_args__ = {"sqlite_autoincrement": True}

    # Monotonic, never reused
    id = Column(Integer, primary_key=True, autoincrement=True)

    diagram_id = Column(String(255), nullable=False)

    # Diagram name at snapshot time
    name = Column(Text, nullable=False)

    payload = Column(JSON, nullable=False)
    action = Column(String(20), nullable=False)  # one of VERSION_ACTIONS

    created_at = Column(String(64), nullable=False)


Index(
    "ix_diagram_versions_diagram_id_id",
    DiagramVersion.diagram_id,
    DiagramVersion.id.desc(),
)
