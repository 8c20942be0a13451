"""
Per-client rate limits for the endpoints that start remote work.

Starting or re-rendering a run shares ``config.run_rate_limit``; document
extraction uses ``config.extract_rate_limit``. Clients are keyed by address.
"""

from collections.abc import Awaitable, Callable
from typing import cast

from fastapi import FastAPI, Request
from fastapi.responses import Response
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from slidesmith.configs.config import config

RUN_LIMIT = config.run_rate_limit
EXTRACT_LIMIT = config.extract_rate_limit

limiter = Limiter(key_func=get_remote_address, enabled=config.rate_limit_enabled)


def add_rate_limiting(app: FastAPI) -> None:
    """Expose the limiter to slowapi and answer 429 when a limit is hit."""
    app.state.limiter = limiter
    app.add_exception_handler(
        RateLimitExceeded,
        cast(
            Callable[[Request, Exception], Awaitable[Response]],
            _rate_limit_exceeded_handler,
        ),
    )
