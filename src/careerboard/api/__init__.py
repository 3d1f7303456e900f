"""HTTP API package for careerboard."""

from .main import app, create_app

__all__ = ["app", "create_app"]
