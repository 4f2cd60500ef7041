"""
Scribe API package.

Provides the FastAPI application for the Scribe text transformation service.
"""

from .app import create_app

__all__ = ["create_app"]
