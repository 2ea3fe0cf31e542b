"""Repository for per-diagram filters."""

from typing import Any, Dict

from ..models import DiagramFilter
from ..exceptions import FilterNotFoundError
from .base import BaseRepository


class FilterRepository(BaseRepository[DiagramFilter]):
    """Data access layer for the ``diagram_filters`` side-table."""

    model_class = DiagramFilter
    id_column = "diagram_id"
    not_found_error = FilterNotFoundError

    def upsert(self, diagram_id: str, payload: Dict[str, Any]) -> DiagramFilter:
        """Insert or wholesale-replace the filter for *diagram_id*."""
        existing = self.get_by_id_optional(diagram_id)
        if existing is None:
            existing = DiagramFilter(diagram_id=diagram_id, payload=payload)
            self.db.add(existing)
        else:
            existing.payload = payload
        self.db.flush()
        return existing

    def reassign(self, old_diagram_id: str, new_diagram_id: str) -> int:
        return self._base_query().filter(DiagramFilter.diagram_id == old_diagram_id).update(
            {"diagram_id": new_diagram_id}, synchronize_session=False
        )
