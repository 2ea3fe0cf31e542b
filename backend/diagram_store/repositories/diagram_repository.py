"""Diagram repository for database operations."""

from typing import Any, Dict, List, Optional

from ..models import Diagram
from ..schemas.diagram import DiagramMeta
from ..exceptions import DiagramNotFoundError
from .base import BaseRepository


def _row_values(payload: Dict[str, Any], meta: DiagramMeta) -> Dict[str, Any]:
    return {
        "name": meta.name,
        "database_type": meta.database_type,
        "database_edition": meta.database_edition,
        "payload": payload,
        "updated_at": meta.updated_at,
    }


class DiagramRepository(BaseRepository[Diagram]):
    """Row access for the ``diagrams`` table.

    Writes only flush; the service decides when to commit so several
    repositories can share one transaction.
    """

    model_class = Diagram
    not_found_error = DiagramNotFoundError

    def create(self, payload: Dict[str, Any], meta: DiagramMeta) -> Diagram:
        """Insert a new diagram row. Duplicate ids surface as IntegrityError on flush."""
        db_diagram = Diagram(id=meta.id, created_at=meta.created_at, **_row_values(payload, meta))
        self.db.add(db_diagram)
        self.db.flush()
        return db_diagram

    def update(
        self,
        diagram_id: str,
        payload: Dict[str, Any],
        meta: DiagramMeta,
        new_id: Optional[str] = None,
    ) -> int:
        """Overwrite the row for *diagram_id*, optionally moving it to *new_id*.

        Issued as a single UPDATE so the primary key and every other column
        change together. Returns the number of rows affected (0 or 1).
        """
        values = _row_values(payload, meta)
        if new_id is not None and new_id != diagram_id:
            values["id"] = new_id
        affected = self._base_query().filter(Diagram.id == diagram_id).update(
            values, synchronize_session=False
        )
        self.db.expire_all()
        return affected

    def list_all(self) -> List[Diagram]:
        """All diagrams, most recently updated first."""
        return self._base_query().order_by(Diagram.updated_at.desc()).all()

    def count(self) -> int:
        return self._base_query().count()
