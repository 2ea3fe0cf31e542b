"""Global config endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Depends

from ..services import ConfigService
from .deps import get_config_service

router = APIRouter(prefix="/api/config", tags=["config"])


@router.get("")
def get_config(service: ConfigService = Depends(get_config_service)):
    return service.get_config()


@router.put("")
def update_config(
    payload: Any = Body(...),
    service: ConfigService = Depends(get_config_service),
):
    """Merge the supplied keys into the stored config."""
    return service.update_config(payload)
