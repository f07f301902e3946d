from __future__ import annotations

from typing import Any, Dict, Optional, Type
from types import TracebackType

import httpx


class HttpRequestError(Exception):
    """The request never produced a response (connect/read failure, timeout)."""


class HttpResponseError(Exception):
    """The server answered with a non-2xx status."""

    def __init__(self, response: httpx.Response) -> None:
        self.response = response
        self.status_code = response.status_code
        self.detail = _extract_detail(response)
        # Escrow routes report {"error": <kind>, "message": ...}
        self.error_code: Optional[str] = (
            str(self.detail.get("error")) if isinstance(self.detail, dict) else None
        )
        super().__init__(f"HTTP {self.status_code}: {self.detail}")


def _extract_detail(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "detail" in body:
        return body["detail"]
    return body


def _check(resp: httpx.Response) -> httpx.Response:
    if resp.is_error:
        raise HttpResponseError(resp)
    return resp


class HttpClient:
    """Thin synchronous HTTP client wrapper around httpx.

    - Normalizes base URLs and paths.
    - Applies a default timeout.
    - Raises HttpResponseError for non-successful responses and
      HttpRequestError for transport failures.
    """

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(timeout=timeout)

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._client.get(self._url(path), **kwargs)
        except httpx.RequestError as e:
            raise HttpRequestError(str(e)) from e
        return _check(resp)

    def post(
        self,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            resp = self._client.post(self._url(path), json=json, **kwargs)
        except httpx.RequestError as e:
            raise HttpRequestError(str(e)) from e
        return _check(resp)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()


class AsyncHttpClient:
    """Asynchronous counterpart of HttpClient over httpx.AsyncClient."""

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout)

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.get(self._url(path), **kwargs)
        except httpx.RequestError as e:
            raise HttpRequestError(str(e)) from e
        return _check(resp)

    async def post(
        self,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            resp = await self._client.post(self._url(path), json=json, **kwargs)
        except httpx.RequestError as e:
            raise HttpRequestError(str(e)) from e
        return _check(resp)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()
