"""Router that accepts paths with or without a trailing slash."""

from typing import Any, Callable

from fastapi import APIRouter
from fastapi.types import DecoratedCallable


class TrailingSlashRouter(APIRouter):
    """APIRouter that registers every route under both path spellings.

    The variant without a trailing slash is hidden from the OpenAPI schema.
    """

    def api_route(
        self, path: str, *, include_in_schema: bool = True, **kwargs: Any
    ) -> Callable[[DecoratedCallable], DecoratedCallable]:
        """Register the route for `path` and its trailing-slash twin."""
        if path.endswith("/") and len(path) > 1:
            alternate_path = path[:-1]
        elif not path.endswith("/"):
            # The router prefix is the resource root when the path is empty
            alternate_path = path + "/"
        else:
            alternate_path = None

        add_path = super().api_route(path, include_in_schema=include_in_schema, **kwargs)

        def decorator(func: DecoratedCallable) -> DecoratedCallable:
            if alternate_path is not None:
                super(TrailingSlashRouter, self).api_route(
                    alternate_path, include_in_schema=False, **kwargs
                )(func)
            return add_path(func)

        return decorator
