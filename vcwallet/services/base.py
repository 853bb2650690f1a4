"""
Base HTTP client for the platform's remote APIs.

Each concrete service declares an operation table mapping an operation id to
an HTTP method and path template; ``execute`` performs the call and wraps any
transport or status failure in ``ExternalServiceError`` with the original
cause attached.
"""

import logging
from typing import Any, Dict, Optional, Tuple, Type
from urllib.parse import quote

import httpx

from ..errors import ExternalServiceError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class ApiService:
    """Async JSON-over-HTTP client with an operation table."""

    operations: Dict[str, Tuple[str, str]] = {}
    error_class: Type[ExternalServiceError] = ExternalServiceError

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    def _headers(self, access_token: Optional[str]) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Api-Key"] = self.api_key
        if access_token:
            headers["Authorization"] = access_token
        return headers

    async def execute(
        self,
        operation_id: str,
        params: Optional[Dict[str, Any]] = None,
        *,
        path_params: Optional[Dict[str, str]] = None,
        access_token: Optional[str] = None,
    ) -> Any:
        """Call ``operation_id`` and return the decoded JSON body (``None`` when empty)."""
        if operation_id not in self.operations:
            raise ValueError(f"Unknown operation: {operation_id}")
        method, template = self.operations[operation_id]
        path = template.format(**{k: quote(str(v), safe="") for k, v in (path_params or {}).items()})
        kwargs: Dict[str, Any] = {"headers": self._headers(access_token)}
        if params is not None:
            if method == "GET":
                kwargs["params"] = params
            else:
                kwargs["json"] = params

        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"{operation_id} failed with status {status}")
            raise self.error_class(
                f"{operation_id} failed with status {status}: {e.response.text}",
                status_code=status,
                context={"operation": operation_id},
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"{operation_id} transport failure: {e}")
            raise self.error_class(
                f"{operation_id} request failed: {e}",
                context={"operation": operation_id},
                cause=e,
            ) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise self.error_class(
                f"{operation_id} returned a non-JSON body",
                status_code=response.status_code,
                cause=e,
            ) from e

    def _require(self, body: Any, key: str, operation_id: str) -> Any:
        if not isinstance(body, dict) or key not in body:
            raise self.error_class(f"{operation_id} response is missing `{key}`", context={"operation": operation_id})
        return body[key]


__all__ = ["ApiService", "DEFAULT_TIMEOUT"]
