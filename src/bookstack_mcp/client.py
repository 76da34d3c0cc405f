import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generator, List, Optional

import httpx

from .cache import BookSlugCache, PageInfoCache
from .config import (
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_UPLOAD_TIMEOUT_SECONDS,
    BookStackConfig,
    load_env_config,
)
from .errors import (
    WRITE_DISABLED_MESSAGE,
    BookStackClientError,
    BookStackHTTPError,
    BookStackParseError,
    EmptyExportError,
    WriteDisabledError,
)

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = 3  # extra attempts after a 429
    default_retry_after_seconds: float = 10.0


class TokenAuth(httpx.Auth):
    """BookStack API token auth: ``Authorization: Token <id>:<secret>``."""

    def __init__(self, token_id: str, token_secret: str):
        self._header = f"Token {token_id}:{token_secret}"

    def auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = self._header
        yield request


def _retry_after_seconds(resp: httpx.Response, default: float) -> float:
    raw = (resp.headers.get("retry-after") or "").strip()
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def _flatten_validation(raw: Dict[str, Any]) -> Dict[str, List[str]]:
    """{"name": ["The name field is required."]} with scalar messages wrapped."""
    flat: Dict[str, List[str]] = {}
    for field, messages in raw.items():
        if isinstance(messages, list):
            flat[str(field)] = [str(m) for m in messages]
        else:
            flat[str(field)] = [str(messages)]
    return flat


class BookStackClient:
    """
    Shared HTTP client for the BookStack REST API.
    - Handles token auth, base URL, per-call timeouts and 429 retries
    - Normalizes failures into BookStackHTTPError / BookStackClientError
    - Owns the slug caches used when building navigable URLs
    - No enrichment logic; tools and the Enricher own that
    """

    def __init__(
        self,
        *,
        base_url: str,
        token_id: str,
        token_secret: str,
        enable_write: bool = False,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        upload_timeout_seconds: float = DEFAULT_UPLOAD_TIMEOUT_SECONDS,
        retry: Optional[RetryConfig] = None,
        sleep: Optional[Sleep] = None,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        base_url = (base_url or "").rstrip("/")

        if not base_url:
            raise ValueError("base_url must be provided.")
        if not token_id or not token_secret:
            raise ValueError("token_id and token_secret must be provided.")

        self.config = BookStackConfig(
            base_url=base_url,
            token_id=token_id,
            token_secret=token_secret,
            enable_write=enable_write,
            timeout_seconds=timeout_seconds,
            upload_timeout_seconds=upload_timeout_seconds,
        )
        self.retry = retry if retry is not None else RetryConfig()
        self._sleep: Sleep = sleep or asyncio.sleep
        self.log = logger or logging.getLogger("bookstack_mcp.client")

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            base_url=f"{base_url}/api",
            auth=TokenAuth(token_id, token_secret),
            headers={"Accept": "application/json"},
            timeout=upload_timeout_seconds,
        )

        self.book_slugs = BookSlugCache(self)
        self.page_info = PageInfoCache(self)

    @classmethod
    def from_config(cls, config: BookStackConfig, **kwargs) -> "BookStackClient":
        return cls(
            base_url=config.base_url,
            token_id=config.token_id,
            token_secret=config.token_secret,
            enable_write=config.enable_write,
            timeout_seconds=config.timeout_seconds,
            upload_timeout_seconds=config.upload_timeout_seconds,
            **kwargs,
        )

    @classmethod
    def from_env(cls, **kwargs) -> "BookStackClient":
        return cls.from_config(load_env_config(), **kwargs)

    @property
    def base_url(self) -> str:
        return self.config.base_url

    @property
    def enable_write(self) -> bool:
        return self.config.enable_write

    def ensure_write_enabled(self) -> None:
        """Local write gate; never touches the network."""
        if not self.config.enable_write:
            raise WriteDisabledError()

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "BookStackClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _send(
        self, method: str, path: str, *, timeout: float, **kwargs: Any
    ) -> httpx.Response:
        try:
            return await asyncio.wait_for(
                self.http.request(method, path, **kwargs), timeout=timeout
            )
        except asyncio.TimeoutError as exc:
            raise BookStackClientError(
                f"Timed out after {timeout:g}s calling {method} {path}"
            ) from exc
        except httpx.TimeoutException as exc:
            raise BookStackClientError(
                f"Network/timeout error calling {method} {path}: {exc}"
            ) from exc
        except httpx.HTTPError as exc:
            raise BookStackClientError(
                f"HTTPX error calling {method} {path}: {exc}"
            ) from exc

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        timeout: Optional[float] = None,
        return_text: bool = False,
        tool: Optional[str] = None,
    ) -> Any:
        """
        Core request method.
        - Retries on 429, honouring Retry-After, up to retry.max_retries extra attempts
        - Raises BookStackHTTPError on non-2xx HTTP responses
        - Raises BookStackClientError on network errors and timeouts
        - Raises BookStackParseError if a JSON response can't be decoded
        - Returns None for empty bodies, str for text bodies, parsed JSON otherwise
        """
        method = method.upper()
        timeout = timeout if timeout is not None else self.config.timeout_seconds
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        kwargs: Dict[str, Any] = {"params": params or None}
        if json is not None:
            kwargs["json"] = json

        attempt = 0

        while True:
            start = time.perf_counter()
            resp = await self._send(method, path, timeout=timeout, **kwargs)
            duration_ms = int((time.perf_counter() - start) * 1000)

            self.log.debug(
                "bookstack.request",
                extra={
                    "tool": tool,
                    "method": method,
                    "path": path,
                    "status": resp.status_code,
                    "duration_ms": duration_ms,
                    "attempt": attempt,
                },
            )

            if resp.status_code == 429 and attempt < self.retry.max_retries:
                delay = _retry_after_seconds(
                    resp, self.retry.default_retry_after_seconds
                )
                self.log.info(
                    "bookstack.rate_limited",
                    extra={
                        "tool": tool,
                        "method": method,
                        "path": path,
                        "status": 429,
                        "attempt": attempt,
                    },
                )
                await self._sleep(delay)
                attempt += 1
                continue

            if resp.status_code < 200 or resp.status_code >= 300:
                raise self._to_http_error(resp, method=method)

            return self._parse_body(resp, return_text=return_text)

    def _parse_body(self, resp: httpx.Response, *, return_text: bool = False) -> Any:
        if return_text:
            return resp.text
        if resp.status_code == 204 or not resp.text.strip():
            return None

        content_type = resp.headers.get("content-type", "")
        if content_type and "application/json" not in content_type:
            return resp.text

        try:
            return resp.json()
        except ValueError as exc:
            snippet = resp.text[:500]
            raise BookStackParseError(
                f"Expected JSON from {resp.request.method} "
                f"{resp.request.url}, got body snippet: {snippet!r}"
            ) from exc

    def _to_http_error(
        self, resp: httpx.Response, *, method: str
    ) -> BookStackHTTPError:
        body = resp.text or ""
        message = body or "request failed"
        validation: Dict[str, List[str]] = {}

        try:
            parsed = resp.json()
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            # BookStack wraps errors as {"error": {"message": ..., "code": ...}}
            nested = parsed.get("error")
            if parsed.get("message"):
                message = str(parsed["message"])
            elif isinstance(nested, dict) and nested.get("message"):
                message = str(nested["message"])
            details = nested.get("validation") if isinstance(nested, dict) else None
            if isinstance(details, dict):
                validation = _flatten_validation(details)

        return BookStackHTTPError(
            status_code=resp.status_code,
            method=method,
            url=str(resp.request.url),
            message=message,
            body=body,
            validation=validation,
        )

    async def get(
        self,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        return_text: bool = False,
        tool: Optional[str] = None,
    ) -> Any:
        return await self.request(
            "GET", path, params=params, return_text=return_text, tool=tool
        )

    async def post(self, path: str, *, json: Any, tool: Optional[str] = None) -> Any:
        return await self.request("POST", path, json=json, tool=tool)

    async def put(self, path: str, *, json: Any, tool: Optional[str] = None) -> Any:
        return await self.request("PUT", path, json=json, tool=tool)

    async def delete(self, path: str, *, tool: Optional[str] = None) -> Any:
        return await self.request("DELETE", path, tool=tool)

    async def post_form(
        self,
        path: str,
        *,
        data: Dict[str, Any],
        files: Dict[str, Any],
        timeout: Optional[float] = None,
        tool: Optional[str] = None,
    ) -> Any:
        """
        Submit multipart/form-data (file uploads).
        - Uses the longer upload timeout by default.
        - Retries are NOT applied to avoid duplicate uploads.
        """
        timeout = timeout if timeout is not None else self.config.upload_timeout_seconds

        start = time.perf_counter()
        resp = await self._send("POST", path, timeout=timeout, data=data, files=files)
        duration_ms = int((time.perf_counter() - start) * 1000)
        self.log.debug(
            "bookstack.upload",
            extra={
                "tool": tool,
                "method": "POST",
                "path": path,
                "status": resp.status_code,
                "duration_ms": duration_ms,
            },
        )

        if resp.status_code < 200 or resp.status_code >= 300:
            raise self._to_http_error(resp, method="POST")

        return self._parse_body(resp)


__all__ = [
    "BookStackClient",
    "BookStackClientError",
    "BookStackHTTPError",
    "BookStackParseError",
    "EmptyExportError",
    "RetryConfig",
    "TokenAuth",
    "WRITE_DISABLED_MESSAGE",
    "WriteDisabledError",
]
