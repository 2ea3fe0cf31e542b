"""Key/value settings model."""

from sqlalchemy import Column, String, JSON
from ..database import Base

# The only key in use: the global config blob.
CONFIG_KEY = "config"


class Setting(Base):
    """Global settings table."""

    __tablename__ = "settings"

    key = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=False)
