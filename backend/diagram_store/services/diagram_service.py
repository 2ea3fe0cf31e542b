"""Diagram service: the versioned document store.

Owns every write to diagrams, their version history and their filters.
Each public write runs in a single transaction: the diagram row, the
appended version and the retention pruning commit together or not at all.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from ..core.config import DEFAULT_MAX_VERSIONS_PER_DIAGRAM
from ..exceptions import ConflictError, DiagramNotFoundError, ValidationError, VersionNotFoundError
from ..models import Diagram
from ..repositories import DiagramRepository, FilterRepository, VersionRepository
from ..schemas.diagram import DiagramMeta, normalize_diagram_payload, utc_now_iso
from ..schemas.version import VersionResponse
from .transaction import atomic

logger = logging.getLogger(__name__)


def is_timestamp_touch(partial: Dict[str, Any]) -> bool:
    """True when a patch body is exactly ``{"updatedAt": ...}``.

    Such patches are keep-alive pings from editors and do not get a
    version of their own.
    """
    return len(partial) == 1 and "updatedAt" in partial


def _meta_from_row(row: Diagram) -> DiagramMeta:
    return DiagramMeta(
        id=row.id,
        name=row.name,
        database_type=row.database_type,
        database_edition=row.database_edition,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class DiagramService:
    """Deep module for diagram storage.

    Composes the diagram, version and filter repositories over one session.
    ``max_versions`` caps the history kept per diagram; zero or negative
    keeps everything.
    """

    def __init__(self, db: Session, max_versions: int = DEFAULT_MAX_VERSIONS_PER_DIAGRAM):
        self.db = db
        self.max_versions = max_versions
        self.diagram_repo = DiagramRepository(db)
        self.version_repo = VersionRepository(db)
        self.filter_repo = FilterRepository(db)

    def _record_version(self, diagram_id: str, name: str, payload: Dict[str, Any], action: str) -> None:
        """Append a version and enforce the retention cap (inside the caller's transaction)."""
        version = self.version_repo.append(diagram_id, name, payload, action)
        pruned = self.version_repo.prune(diagram_id, self.max_versions)
        logger.debug(
            "Recorded version %s (%s) for %s, pruned %d",
            version.id, action, diagram_id, pruned,
        )

    # ----- diagrams --------------------------------------------------------

    def create_diagram(self, payload: Any) -> Dict[str, Any]:
        """Insert a new diagram. Raises ConflictError if the id is taken."""
        normalized, meta = normalize_diagram_payload(payload)
        with atomic(self.db, meta.id, "Diagram already exists"):
            if self.diagram_repo.get_by_id_optional(meta.id) is not None:
                raise ConflictError(meta.id, "Diagram already exists")
            self.diagram_repo.create(normalized, meta)
            self._record_version(meta.id, meta.name, normalized, "create")
        logger.info("Diagram created", extra={"diagram_id": meta.id})
        return normalized

    def get_diagram(self, diagram_id: str) -> Dict[str, Any]:
        """Full payload of a diagram. Raises DiagramNotFoundError."""
        return dict(self.diagram_repo.get_by_id(diagram_id).payload)

    def replace_diagram(self, diagram_id: str, payload: Any) -> Dict[str, Any]:
        """Overwrite a diagram wholesale and record a ``save`` version.

        The payload id must equal *diagram_id*; renames go through patch.
        """
        normalized, meta = normalize_diagram_payload(payload)
        if meta.id != diagram_id:
            raise ValidationError("diagram id in payload must match route id", field="id")

        with atomic(self.db, diagram_id):
            if self.diagram_repo.update(diagram_id, normalized, meta) == 0:
                raise DiagramNotFoundError(diagram_id)
            self._record_version(diagram_id, meta.name, normalized, "save")
        logger.info("Diagram saved", extra={"diagram_id": diagram_id})
        return normalized

    def patch_diagram(self, diagram_id: str, partial: Any) -> Dict[str, Any]:
        """Shallow-merge *partial* into a diagram.

        Keys with a null value are ignored. If the merged id differs from
        *diagram_id* the row is renamed and its versions and filter follow
        it. Returns the normalized payload stored under the effective id.
        """
        if not isinstance(partial, dict):
            raise ValidationError("patch body must be a JSON object")

        current = self.diagram_repo.get_by_id(diagram_id)
        merged = dict(current.payload)
        merged.update({key: value for key, value in partial.items() if value is not None})
        merged.setdefault("updatedAt", utc_now_iso())

        normalized, meta = normalize_diagram_payload(merged)
        new_id = meta.id or diagram_id

        with atomic(self.db, new_id, "Diagram id already exists"):
            if self.diagram_repo.update(diagram_id, normalized, meta, new_id=new_id) == 0:
                raise DiagramNotFoundError(diagram_id)
            if new_id != diagram_id:
                moved = self.version_repo.reassign(diagram_id, new_id)
                self.filter_repo.reassign(diagram_id, new_id)
                logger.info(
                    "Diagram renamed",
                    extra={"diagram_id": new_id, "previous_id": diagram_id, "versions_moved": moved},
                )
            if not is_timestamp_touch(partial):
                self._record_version(new_id, meta.name, normalized, "patch")
        return normalized

    def delete_diagram(self, diagram_id: str) -> bool:
        """Delete a diagram with its versions and filter. Idempotent.

        Returns True if a diagram row was removed.
        """
        with atomic(self.db, diagram_id):
            self.filter_repo.delete_by_id(diagram_id)
            self.version_repo.delete_for_diagram(diagram_id)
            removed = self.diagram_repo.delete_by_id(diagram_id)
        if removed:
            logger.info("Diagram deleted", extra={"diagram_id": diagram_id})
        return bool(removed)

    def restore_version(self, diagram_id: str, version_id: int) -> Dict[str, Any]:
        """Make a stored version the current content and record a ``restore`` version."""
        version = self.version_repo.get_for_diagram(diagram_id, version_id)
        if version is None:
            raise VersionNotFoundError(diagram_id, version_id)

        snapshot, _ = normalize_diagram_payload(version.payload)
        snapshot["id"] = diagram_id
        snapshot["updatedAt"] = utc_now_iso()
        restored, meta = normalize_diagram_payload(snapshot)

        with atomic(self.db, diagram_id):
            if self.diagram_repo.update(diagram_id, restored, meta) == 0:
                raise DiagramNotFoundError(diagram_id)
            self._record_version(diagram_id, meta.name, restored, "restore")
        logger.info("Diagram restored", extra={"diagram_id": diagram_id, "version_id": version_id})
        return restored

    def list_diagram_metas(self) -> List[DiagramMeta]:
        """Summary fields for every diagram, most recently updated first."""
        return [_meta_from_row(row) for row in self.diagram_repo.list_all()]

    def list_diagram_payloads(self) -> List[Dict[str, Any]]:
        """Full payloads for every diagram, most recently updated first."""
        return [dict(row.payload) for row in self.diagram_repo.list_all()]

    def count_diagrams(self) -> int:
        return self.diagram_repo.count()

    # ----- versions --------------------------------------------------------

    def list_versions(self, diagram_id: str) -> List[VersionResponse]:
        """Version summaries, newest first. Unknown diagrams have no versions."""
        return [
            VersionResponse(
                id=version.id,
                diagram_id=version.diagram_id,
                name=version.name,
                action=version.action,
                created_at=version.created_at,
            )
            for version in self.version_repo.list_for_diagram(diagram_id)
        ]

    def get_version_payload(self, diagram_id: str, version_id: int) -> Dict[str, Any]:
        version = self.version_repo.get_for_diagram(diagram_id, version_id)
        if version is None:
            raise VersionNotFoundError(diagram_id, version_id)
        return dict(version.payload)

    # ----- filters ---------------------------------------------------------

    def get_filter(self, diagram_id: str) -> Dict[str, Any]:
        """Stored filter payload. Raises FilterNotFoundError."""
        return dict(self.filter_repo.get_by_id(diagram_id).payload)

    def set_filter(self, diagram_id: str, payload: Any) -> Dict[str, Any]:
        """Create or replace the filter for a diagram."""
        if not isinstance(payload, dict):
            raise ValidationError("filter body must be a JSON object")
        with atomic(self.db, diagram_id):
            self.filter_repo.upsert(diagram_id, payload)
        return payload

    def delete_filter(self, diagram_id: str) -> None:
        with atomic(self.db, diagram_id):
            self.filter_repo.delete_by_id(diagram_id)
