"""Static checkout site served from the public directory."""

from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

INDEX_PAGE = "index.html"
NOT_FOUND_PAGE = "404.html"
SUCCESS_PAGE = "payment-success.html"


class CheckoutFiles(StaticFiles):
    """Public assets with a single-page-app fallback.

    GET/HEAD requests for unknown paths get `index.html`; any other method on
    an unmatched path is a 404 so the app-level handler can render the 404 page.
    """

    def __init__(self, directory) -> None:
        super().__init__(directory=directory, html=True)

    async def get_response(self, path: str, scope: Scope) -> Response:
        if scope["method"] not in ("GET", "HEAD"):
            raise StarletteHTTPException(status_code=404)
        try:
            response = await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != 404:
                raise
            response = None
        if response is None or response.status_code == 404:
            return await super().get_response(INDEX_PAGE, scope)
        return response
