"""REST API for libcard."""

from libcard.api.app import app, create_app
from libcard.api.models import (
    APIResponse,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
)

__all__ = [
    "APIResponse",
    "StudentCreate",
    "StudentResponse",
    "StudentUpdate",
    "app",
    "create_app",
]
