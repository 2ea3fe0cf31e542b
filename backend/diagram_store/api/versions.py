"""Version API endpoints."""

from typing import List

from fastapi import APIRouter, Depends

from ..schemas.version import VersionResponse
from ..services import DiagramService
from .deps import get_diagram_service

router = APIRouter(prefix="/api/diagrams/{diagram_id}/versions", tags=["versions"])


@router.get("", response_model=List[VersionResponse])
def list_versions(diagram_id: str, service: DiagramService = Depends(get_diagram_service)):
    """List version summaries for a diagram, newest first."""
    return service.list_versions(diagram_id)


@router.get("/{version_id}")
def get_version(
    diagram_id: str,
    version_id: int,
    service: DiagramService = Depends(get_diagram_service),
):
    """Get the raw payload stored in one version."""
    return service.get_version_payload(diagram_id, version_id)


@router.post("/{version_id}/restore")
def restore_version(
    diagram_id: str,
    version_id: int,
    service: DiagramService = Depends(get_diagram_service),
):
    """Restore a version as the current diagram content."""
    return service.restore_version(diagram_id, version_id)
