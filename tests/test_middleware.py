"""Tests for the request-scoped logging middleware."""
import pytest
import structlog
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from heart.main import REQUEST_ID_HEADER, StructuredLoggingMiddleware


def _request(request_id="req-123"):
    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "server": ("test", 80),
            "root_path": "",
            "path": "/matches",
            "query_string": b"",
            "headers": [(REQUEST_ID_HEADER.lower().encode(), request_id.encode())],
        }
    )


@pytest.fixture
def middleware():
    structlog.contextvars.clear_contextvars()
    yield StructuredLoggingMiddleware(app=None)
    structlog.contextvars.clear_contextvars()


class TestRequestIdBinding:

    @pytest.mark.asyncio
    async def test_request_id_visible_to_handler_and_echoed(self, middleware):
        seen = {}

        async def call_next(request):
            seen.update(structlog.contextvars.get_contextvars())
            return PlainTextResponse("ok")

        response = await middleware.dispatch(_request(), call_next)

        assert seen["request_id"] == "req-123"
        assert response.headers[REQUEST_ID_HEADER] == "req-123"
        assert "request_id" not in structlog.contextvars.get_contextvars()

    @pytest.mark.asyncio
    async def test_request_id_cleared_when_handler_raises(self, middleware):
        async def call_next(request):
            raise RuntimeError("handler crashed")

        with pytest.raises(RuntimeError):
            await middleware.dispatch(_request(), call_next)

        assert "request_id" not in structlog.contextvars.get_contextvars()
