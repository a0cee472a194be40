"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends, Request

from libcard.lifecycle import LifecycleManager


def get_lifecycle_manager(request: Request) -> Generator[LifecycleManager, None, None]:
    """Dependency that provides the app's LifecycleManager.

    The manager (and the store it owns) is opened by the app lifespan and
    kept on ``app.state``.
    """
    manager = getattr(request.app.state, "manager", None)
    if manager is None:
        raise RuntimeError("LifecycleManager not initialized. Is the app lifespan running?")
    yield manager


# Type alias for dependency injection
LifecycleManagerDep = Annotated[LifecycleManager, Depends(get_lifecycle_manager)]
