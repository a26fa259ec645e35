"""
Distributor portal API package.

Provides the FastAPI application for the distributor and admin portals.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
