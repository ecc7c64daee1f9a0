# src/graphql_repository/transport/http.py
import logging
from typing import Any, Dict, Optional

import httpx

from graphql_repository.base.exceptions import ConfigurationError, TransportError
from graphql_repository.base.interfaces import Document, Transport
from graphql_repository.graphql.document import DocumentRenderer

base_logger = logging.getLogger(__name__)


class HttpTransport(Transport):
    """
    Posts rendered documents to a GraphQL HTTP end point with httpx.

    Every failure (unrenderable arguments, HTTP status, network, undecodable
    body, a non-empty GraphQL ``errors`` array) is raised as `TransportError`. Retries and
    timeouts beyond the per-request `timeout` are left to the caller.
    """

    def __init__(
        self,
        end_point: str,
        api_key: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        renderer: Optional[DocumentRenderer] = None,
    ):
        if not end_point:
            raise ConfigurationError("End point for GraphQL must be configured")
        if not api_key:
            raise ConfigurationError("API key for GraphQL must be configured")

        self.end_point = end_point
        self._api_key = api_key
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self._renderer = renderer or DocumentRenderer()
        self._logger = base_logger

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    async def execute(self, document: Document) -> Dict[str, Any]:
        try:
            query = self._renderer.render(document)
        except (TypeError, ValueError) as e:
            self._logger.error(f"Cannot render '{document.operation}': {e}")
            raise TransportError(f"Cannot render document: {e}") from e
        self._logger.info(
            f"Executing {document.kind.value} '{document.operation}' against {self.end_point}"
        )

        try:
            response = await self._get_client().post(
                self.end_point, json={"query": query}, headers=self.headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self._logger.error(
                f"GraphQL HTTP error: {e.response.status_code} - {e.response.text}"
            )
            raise TransportError(
                f"HTTP {e.response.status_code}: {e.response.reason_phrase}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            self._logger.error(f"Failed to reach {self.end_point}: {e}")
            raise TransportError(str(e) or type(e).__name__) from e

        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(
                "Response body is not valid JSON", status_code=response.status_code
            ) from e

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            messages = [
                err.get("message", str(err)) if isinstance(err, dict) else str(err)
                for err in errors
            ]
            raise TransportError(
                "; ".join(messages), errors=errors, status_code=response.status_code
            )

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise TransportError(
                "Response does not contain a data object",
                status_code=response.status_code,
            )
        return data

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
