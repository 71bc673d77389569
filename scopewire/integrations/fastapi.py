"""
FastAPI integration.

Stores a container on the application, opens one request scope per HTTP
request and resolves route dependencies from it.

Usage:
    from fastapi import Depends, FastAPI
    from scopewire.integrations.fastapi import inject, install_container

    app = FastAPI()
    install_container(app, container)

    @app.get("/users")
    async def get_users(user_svc: UserService = Depends(inject(UserService))):
        return await user_svc.list_all()
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from ..di.container import Container
from ..observability.logging import (clear_correlation_id, resolution_context,
                                     set_correlation_id)

logger = logging.getLogger(__name__)

T = TypeVar("T")

CORRELATION_ID_HEADER = "x-correlation-id"


def get_container(request: Request) -> Container:
    """Container stored on the app, falling back to the global container."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        container = Container.get_global()
    return container


def inject(token: Any) -> Callable[..., Any]:
    """
    Create a FastAPI dependency that resolves ``token`` from the app's container.

    Usage:
        @app.get("/users")
        async def get_users(user_svc: UserService = Depends(inject(UserService))):
            ...
    """

    async def _dependency(request: Request) -> Any:
        return await get_container(request).resolve_async(token)

    return _dependency


# Alias for cleaner syntax
Inject = inject


class RequestScopeMiddleware(BaseHTTPMiddleware):
    """
    Wraps every request in ``container.request_scope()``.

    Request-scoped instances are shared by all dependencies of one request
    and disposed when the response has been produced. The request's
    correlation ID (from the ``x-correlation-id`` header, or a new one) is
    attached to log records and echoed in the response.
    """

    def __init__(self, app: Callable, container: Container | None = None):
        super().__init__(app)
        self._container = container

    def get_container(self, request: Request) -> Container:
        if self._container is not None:
            return self._container
        return get_container(request)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        container = self.get_container(request)
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        try:
            with resolution_context(container.name, path=request.url.path):
                with container.request_scope():
                    response = await call_next(request)
        finally:
            clear_correlation_id()

        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response


def install_container(app: FastAPI, container: Container) -> None:
    """
    Store ``container`` on ``app.state`` and add the request scope middleware.

    Args:
        app: FastAPI application
        container: Container resolving route dependencies
    """
    app.state.container = container
    app.add_middleware(RequestScopeMiddleware, container=container)
    logger.info(f"Installed container {container!r} on {type(app).__name__}")
