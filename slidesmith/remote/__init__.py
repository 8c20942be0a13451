"""
Remote call layer: bounded single attempts and the retrying invoker.
"""

from .client import EdgeFunctionClient
from .retry import RetryingInvoker, backoff_delay, retry_with_backoff

__all__ = [
    "EdgeFunctionClient",
    "RetryingInvoker",
    "backoff_delay",
    "retry_with_backoff",
]
