"""Repository for the global settings blob."""

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..models import Setting, CONFIG_KEY


class SettingsRepository:
    """Reads and writes the single config record."""

    def __init__(self, db: Session):
        self.db = db

    def get_config(self) -> Optional[Dict[str, Any]]:
        """Stored config map, or None if it was never written."""
        row = self.db.query(Setting).filter(Setting.key == CONFIG_KEY).first()
        return dict(row.value) if row is not None else None

    def save_config(self, config: Dict[str, Any]) -> None:
        row = self.db.query(Setting).filter(Setting.key == CONFIG_KEY).first()
        if row is None:
            self.db.add(Setting(key=CONFIG_KEY, value=config))
        else:
            row.value = config
        self.db.flush()
