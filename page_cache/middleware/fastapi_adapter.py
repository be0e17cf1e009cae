"""FastAPI adapter that runs a handler chain as a regular endpoint."""

from typing import Awaitable, Callable

from fastapi import Request as HTTPRequest
from fastapi import Response
import structlog

from page_cache.middleware.context import Handler, Request, RequestContext
from page_cache.middleware.writer import BufferedResponseWriter, HeaderMap

logger = structlog.get_logger(__name__)


def request_from_fastapi(request: HTTPRequest) -> Request:
    """Build a request descriptor keeping the path exactly as the client sent it."""
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else request.url.path
    query = request.scope.get("query_string", b"").decode("latin-1")
    uri = f"{path}?{query}" if query else path

    headers = HeaderMap(
        (name.decode("latin-1"), value.decode("latin-1"))
        for name, value in request.headers.raw
    )
    return Request(method=request.method, uri=uri, headers=headers)


def to_response(writer: BufferedResponseWriter) -> Response:
    """Convert what the chain wrote into a FastAPI response, keeping duplicate headers."""
    response = Response(content=writer.body, status_code=writer.status)
    for name, value in writer.headers.pairs():
        # Content-Length is recomputed from the recorded body
        if name == "Content-Length":
            continue
        response.headers.append(name, value)
    return response


def cache_endpoint(*handlers: Handler) -> Callable[[HTTPRequest], Awaitable[Response]]:
    """Wrap a handler chain into a FastAPI endpoint.

    Example::

        app.add_api_route(
            "/widgets",
            cache_endpoint(cache_middleware(store), cached(60), list_widgets),
        )
    """

    async def endpoint(request: HTTPRequest) -> Response:
        writer = BufferedResponseWriter()
        ctx = RequestContext(request_from_fastapi(request), writer, handlers)
        await ctx.run()
        logger.debug(
            "handler chain finished",
            uri=ctx.request.uri,
            status=writer.status,
            aborted=ctx.is_aborted,
        )
        return to_response(writer)

    return endpoint
