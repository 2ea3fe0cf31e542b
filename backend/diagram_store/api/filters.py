"""Diagram filter endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from ..services import DiagramService
from .deps import get_diagram_service

router = APIRouter(prefix="/api/diagrams/{diagram_id}/filter", tags=["filters"])


@router.get("")
def get_filter(diagram_id: str, service: DiagramService = Depends(get_diagram_service)):
    """Get the diagram's filter. 404 if none is stored."""
    return service.get_filter(diagram_id)


@router.put("")
def put_filter(
    diagram_id: str,
    payload: Any = Body(...),
    service: DiagramService = Depends(get_diagram_service),
):
    """Create or replace the diagram's filter."""
    return service.set_filter(diagram_id, payload)


@router.delete("", status_code=204)
def delete_filter(diagram_id: str, service: DiagramService = Depends(get_diagram_service)):
    service.delete_filter(diagram_id)
    return Response(status_code=204)
