"""Shared route dependencies."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..services import ConfigService, DiagramService


def get_diagram_service(request: Request, db: Session = Depends(get_db)) -> DiagramService:
    """DiagramService bound to the request session and the app's retention cap."""
    return DiagramService(db, max_versions=request.app.state.settings.max_versions_per_diagram)


def get_config_service(db: Session = Depends(get_db)) -> ConfigService:
    return ConfigService(db)
