"""Version ledger: append-only diagram history with a retention cap."""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..models import DiagramVersion, VERSION_ACTIONS
from ..schemas.diagram import utc_now_iso


class VersionRepository:
    """Row access for ``diagram_versions``.

    Versions are never updated in place except for the diagram id they
    belong to (rename cascade). Pruning removes the oldest rows by id.
    """

    def __init__(self, db: Session):
        self.db = db

    def append(self, diagram_id: str, name: str, payload: Dict[str, Any], action: str) -> DiagramVersion:
        """Append a snapshot and return it with its assigned id."""
        if action not in VERSION_ACTIONS:
            raise ValueError(f"Unknown version action: {action}")
        version = DiagramVersion(
            diagram_id=diagram_id,
            name=name,
            payload=payload,
            action=action,
            created_at=utc_now_iso(),
        )
        self.db.add(version)
        self.db.flush()
        return version

    def prune(self, diagram_id: str, keep: int) -> int:
        """Delete all but the *keep* newest versions. ``keep <= 0`` keeps everything.

        Returns the number of versions removed.
        """
        if keep <= 0:
            return 0
        stale_ids = [
            row.id
            for row in self.db.query(DiagramVersion.id)
            .filter(DiagramVersion.diagram_id == diagram_id)
            .order_by(DiagramVersion.id.desc())
            .offset(keep)
            .all()
        ]
        if not stale_ids:
            return 0
        self.db.query(DiagramVersion).filter(DiagramVersion.id.in_(stale_ids)).delete(
            synchronize_session=False
        )
        return len(stale_ids)

    def list_for_diagram(self, diagram_id: str) -> List[DiagramVersion]:
        """Versions of a diagram, newest first."""
        return (
            self.db.query(DiagramVersion)
            .filter(DiagramVersion.diagram_id == diagram_id)
            .order_by(DiagramVersion.id.desc())
            .all()
        )

    def get_for_diagram(self, diagram_id: str, version_id: int) -> Optional[DiagramVersion]:
        """The version with *version_id*, only if it belongs to *diagram_id*."""
        return (
            self.db.query(DiagramVersion)
            .filter(DiagramVersion.diagram_id == diagram_id, DiagramVersion.id == version_id)
            .first()
        )

    def reassign(self, old_diagram_id: str, new_diagram_id: str) -> int:
        """Move every version of *old_diagram_id* under *new_diagram_id*."""
        return (
            self.db.query(DiagramVersion)
            .filter(DiagramVersion.diagram_id == old_diagram_id)
            .update({"diagram_id": new_diagram_id}, synchronize_session=False)
        )

    def delete_for_diagram(self, diagram_id: str) -> int:
        return (
            self.db.query(DiagramVersion)
            .filter(DiagramVersion.diagram_id == diagram_id)
            .delete(synchronize_session=False)
        )
