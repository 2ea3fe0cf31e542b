"""Diagram API endpoints.

Endpoints are thin; DiagramService handles normalization, versioning,
retention and rename cascades as one deep module.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from ..services import DiagramService
from .deps import get_diagram_service

router = APIRouter(prefix="/api/diagrams", tags=["diagrams"])

_TRUTHY = frozenset({"1", "true"})


@router.get("")
def list_diagrams(
    full: Optional[str] = Query(None, description="'1' or 'true' returns full payloads"),
    service: DiagramService = Depends(get_diagram_service),
):
    """List diagram summaries, or full payloads with ``?full=1``. Newest first."""
    if full in _TRUTHY:
        return service.list_diagram_payloads()
    return [
        meta.model_dump(by_alias=True, exclude_none=True)
        for meta in service.list_diagram_metas()
    ]


@router.post("", status_code=201)
def create_diagram(
    payload: Any = Body(...),
    service: DiagramService = Depends(get_diagram_service),
):
    """Create a diagram. 409 if the id already exists."""
    return service.create_diagram(payload)


@router.get("/{diagram_id}")
def get_diagram(diagram_id: str, service: DiagramService = Depends(get_diagram_service)):
    """Get the full diagram payload."""
    return service.get_diagram(diagram_id)


@router.put("/{diagram_id}")
def replace_diagram(
    diagram_id: str,
    payload: Any = Body(...),
    service: DiagramService = Depends(get_diagram_service),
):
    """Replace a diagram. The body id must equal the route id."""
    return service.replace_diagram(diagram_id, payload)


@router.patch("/{diagram_id}")
def patch_diagram(
    diagram_id: str,
    partial: Any = Body(...),
    service: DiagramService = Depends(get_diagram_service),
):
    """Merge top-level fields into a diagram. Changing ``id`` renames it."""
    return service.patch_diagram(diagram_id, partial)


@router.delete("/{diagram_id}", status_code=204)
def delete_diagram(diagram_id: str, service: DiagramService = Depends(get_diagram_service)):
    """Delete a diagram, its versions and its filter. Always 204."""
    service.delete_diagram(diagram_id)
    return Response(status_code=204)
