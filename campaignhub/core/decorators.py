"""
Route markers read by the identity gate and route protection.

Apply below the router decorator so the marked function is the one FastAPI
registers:

    @router.post("/login")
    @public
    def login(...): ...
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

from starlette.requests import Request

F = TypeVar("F", bound=Callable[..., Any])

IS_PUBLIC_KEY = "__campaignhub_public__"
SKIP_ROUTE_PROTECTION_KEY = "__campaignhub_skip_route_protection__"


def public(func: F) -> F:
    """No token required and no permission check."""
    setattr(func, IS_PUBLIC_KEY, True)
    return func


def skip_route_protection(func: F) -> F:
    """Token still required, but route protection does not classify the call."""
    setattr(func, SKIP_ROUTE_PROTECTION_KEY, True)
    return func


def _endpoint(request: Request) -> Optional[Callable[..., Any]]:
    route = request.scope.get("route")
    endpoint = getattr(route, "endpoint", None)
    return endpoint or request.scope.get("endpoint")


def is_public_route(request: Request) -> bool:
    return bool(getattr(_endpoint(request), IS_PUBLIC_KEY, False))


def is_protection_skipped(request: Request) -> bool:
    return bool(getattr(_endpoint(request), SKIP_ROUTE_PROTECTION_KEY, False))
