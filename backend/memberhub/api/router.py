"""Router that serves every path with and without a trailing slash."""

from typing import Any, Callable

from fastapi import APIRouter
from fastapi.types import DecoratedCallable


class TrailingSlashRouter(APIRouter):
    """Registers each endpoint under both ``/path`` and ``/path/``.

    Only the form without the trailing slash appears in the OpenAPI schema. Used with
    ``redirect_slashes=False`` on the app, so neither form answers with a redirect.
    """

    def api_route(
        self, path: str, *, include_in_schema: bool = True, **kwargs: Any
    ) -> Callable[[DecoratedCallable], DecoratedCallable]:
        """Register the endpoint for the path and its trailing-slash twin."""
        path = path.rstrip("/")
        register_canonical = super().api_route(
            path, include_in_schema=include_in_schema, **kwargs
        )
        register_twin = super().api_route(f"{path}/", include_in_schema=False, **kwargs)

        def decorator(func: DecoratedCallable) -> DecoratedCallable:
            register_twin(func)
            return register_canonical(func)

        return decorator
