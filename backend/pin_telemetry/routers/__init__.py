"""
Routers Package
===============

Routers are like the reception desk - they direct incoming requests
to the right place.
"""

from .auth import router as auth_router
from .data import router as data_router

__all__ = [
    "auth_router",
    "data_router",
]
