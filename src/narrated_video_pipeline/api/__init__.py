"""HTTP service for job submission."""

from .app import create_app

__all__ = ["create_app"]
