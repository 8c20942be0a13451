"""
Shared collaborators injected into the API routes.

The edge function client is created lazily and reused by every request so
runs share one connection pool. Tests swap these out through
``app.dependency_overrides``.
"""

from __future__ import annotations

from collections.abc import Callable

from slidesmith.core.run_manager import RunManager, run_manager
from slidesmith.pipeline import PresentationPipeline
from slidesmith.remote.client import EdgeFunctionClient
from slidesmith.repository.presentation import PresentationStore, SqlPresentationStore

PipelineFactory = Callable[[], PresentationPipeline]

_edge_client: EdgeFunctionClient | None = None
_store: PresentationStore | None = None


def get_edge_client() -> EdgeFunctionClient:
    global _edge_client
    if _edge_client is None:
        _edge_client = EdgeFunctionClient()
    return _edge_client


def get_store() -> PresentationStore:
    global _store
    if _store is None:
        _store = SqlPresentationStore()
    return _store


def get_pipeline_factory() -> PipelineFactory:
    """Build pipelines over the shared client and store."""
    client = get_edge_client()
    store = get_store()
    return lambda: PresentationPipeline(client, store)


def get_run_manager() -> RunManager:
    return run_manager


async def close_edge_client() -> None:
    """Close the shared client; called on application shutdown."""
    global _edge_client
    if _edge_client is not None:
        await _edge_client.aclose()
        _edge_client = None
