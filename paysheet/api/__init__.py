"""HTTP API package."""

from paysheet.api.app import create_app

__all__ = ["create_app"]
