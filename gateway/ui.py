"""Static UI serving with a single-page-app fallback."""

from __future__ import annotations

from starlette.exceptions import HTTPException
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

INDEX_FILE = "index.html"


class SPAStaticFiles(StaticFiles):
    """Serves the built UI; unknown paths get ``index.html`` so client-side
    routes survive a page reload."""

    def __init__(self, directory: str):
        super().__init__(directory=directory, html=True)

    async def get_response(self, path: str, scope: Scope):
        try:
            return await super().get_response(path, scope)
        except HTTPException as e:
            if e.status_code != 404:
                raise
            return await super().get_response(INDEX_FILE, scope)
