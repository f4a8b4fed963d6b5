"""FastAPI dependency injection for the application context."""

from starlette.requests import HTTPConnection

from movie_match.context import AppContext


def get_context(conn: HTTPConnection) -> AppContext:
    """Return the context built at startup. Works for HTTP and WebSocket routes."""
    return conn.app.state.context
