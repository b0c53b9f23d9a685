"""Route registrations in route-definition files."""

from __future__ import annotations

import re
from typing import NamedTuple

_VERB_ROUTE_RE = re.compile(r"Route::((?i:get|post|put|patch|delete|any))\(['\"]([^'\"]+)['\"]")
_RESOURCE_ROUTE_RE = re.compile(r"Route::resource\(['\"]([^'\"]+)['\"]")


class Route(NamedTuple):
    """A single registered route: HTTP verb (or ``resource``) and URI."""

    method: str
    uri: str

    def as_dict(self) -> dict[str, str]:
        return {"method": self.method, "uri": self.uri}


def extract_routes(text: str) -> list[Route]:
    """Return registered routes in two passes.

    Verb registrations (``Route::get('/home', ...)``) are collected first, in
    text order, then resource registrations (``Route::resource('posts', ...)``).
    A resource declared above a verb route is still reported after it.
    """
    routes = [
        Route(match.group(1).upper(), match.group(2))
        for match in _VERB_ROUTE_RE.finditer(text)
    ]
    routes.extend(Route("resource", match.group(1)) for match in _RESOURCE_ROUTE_RE.finditer(text))
    return routes
