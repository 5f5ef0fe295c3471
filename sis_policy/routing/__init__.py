"""
HTTP routing for policy requests.
"""

from .app import create_app, create_mongo_app

__all__ = ["create_app", "create_mongo_app"]
