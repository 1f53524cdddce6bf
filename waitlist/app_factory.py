"""Entry point for uvicorn/gunicorn: ``uvicorn waitlist.app_factory:app``."""
from waitlist.app import create_app

app = create_app()

__all__ = ["app", "create_app"]
