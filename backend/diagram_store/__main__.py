"""Run the diagram store with ``python -m diagram_store``."""

from .main import run

run()
