"""
Single-attempt client for the remote edge functions.

Every call is one HTTP POST with a hard wall-clock deadline. Retrying is the
caller's business (see :mod:`slidesmith.remote.retry`).
"""

from __future__ import annotations

import asyncio
import json
from types import TracebackType
from typing import Any

import httpx
from loguru import logger

from slidesmith.configs.config import config
from slidesmith.core.exceptions import RemoteTimeoutError, TransportError

# Body excerpts kept on errors are truncated to keep the run log readable
_MAX_BODY_EXCERPT = 500


class EdgeFunctionClient:
    """Bounded remote call against ``{base_url}/{function_name}``."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or config.edge_functions_url).rstrip("/")
        self.api_key = api_key if api_key is not None else config.edge_functions_key
        self._owns_client = http_client is None
        # Deadlines are enforced per call with asyncio.wait_for, not by httpx
        self._http = http_client or httpx.AsyncClient(timeout=None)

    async def __aenter__(self) -> EdgeFunctionClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _url(self, function_name: str) -> str:
        return f"{self.base_url}/{function_name}"

    async def call(
        self, function_name: str, body: dict[str, Any], timeout: float
    ) -> dict[str, Any]:
        """POST a JSON body and return the decoded JSON response.

        Raises:
            RemoteTimeoutError: the endpoint did not answer within ``timeout``
            TransportError: connection failure, non-2xx status or undecodable body
        """
        return await self._send(
            function_name,
            timeout,
            json=body,
            headers={**self._headers(), "Content-Type": "application/json"},
        )

    async def upload(
        self,
        function_name: str,
        filename: str,
        data: bytes,
        content_type: str | None,
        timeout: float,
    ) -> dict[str, Any]:
        """POST a single multipart ``file`` field; same failure contract as call()."""
        files = {"file": (filename, data, content_type or "application/octet-stream")}
        return await self._send(
            function_name, timeout, files=files, headers=self._headers()
        )

    async def _send(
        self, function_name: str, timeout: float, **request: Any
    ) -> dict[str, Any]:
        url = self._url(function_name)
        try:
            response = await asyncio.wait_for(
                self._http.post(url, **request), timeout=timeout
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"{function_name} exceeded its {timeout}s deadline")
            raise RemoteTimeoutError(timeout) from e
        except httpx.HTTPError as e:
            logger.warning(f"{function_name} transport failure: {e!r}")
            raise TransportError(str(e) or "Error de conexión") from e

        if response.is_error:
            text = response.text[:_MAX_BODY_EXCERPT]
            raise TransportError(
                f"HTTP {response.status_code}: {text}",
                status_code=response.status_code,
                body=text,
            )

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            text = response.text[:_MAX_BODY_EXCERPT]
            raise TransportError(
                f"Respuesta no válida de {function_name}: {e}",
                status_code=response.status_code,
                body=text,
            ) from e

        if not isinstance(payload, dict):
            raise TransportError(
                f"Respuesta no válida de {function_name}: se esperaba un objeto JSON",
                status_code=response.status_code,
                body=response.text[:_MAX_BODY_EXCERPT],
            )
        return payload
