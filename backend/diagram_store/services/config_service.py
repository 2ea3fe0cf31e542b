"""Global config blob: partial updates merged over stored values."""

from typing import Any, Dict

from sqlalchemy.orm import Session

from ..exceptions import ValidationError
from ..repositories import SettingsRepository
from .transaction import atomic

DEFAULT_CONFIG: Dict[str, Any] = {"defaultDiagramId": ""}


class ConfigService:
    """Reads merge the stored map over DEFAULT_CONFIG; writes merge over the current map."""

    def __init__(self, db: Session):
        self.db = db
        self.settings_repo = SettingsRepository(db)

    def get_config(self) -> Dict[str, Any]:
        return {**DEFAULT_CONFIG, **(self.settings_repo.get_config() or {})}

    def update_config(self, updates: Any) -> Dict[str, Any]:
        """Merge *updates* into the stored config and return the result."""
        if not isinstance(updates, dict):
            raise ValidationError("config body must be a JSON object")
        with atomic(self.db):
            merged = {**self.get_config(), **updates}
            self.settings_repo.save_config(merged)
        return merged
