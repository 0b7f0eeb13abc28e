"""
BlockQL HTTP API
"""

from .main import AppContext, build_service, create_app

__all__ = ["AppContext", "build_service", "create_app"]
