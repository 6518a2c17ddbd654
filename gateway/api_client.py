#!/usr/bin/env python3

"""
Gateway API Client - thin REST client for API-level checks.

Request and response bodies are JSON treated as opaque data; tests assert on
status codes and field names only. Transport problems are raised as the
harness's retryable errors so the suite retry policy can act on them;
HTTP error statuses are returned as ordinary responses.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from requests.exceptions import RequestException
from urllib3.util.retry import Retry

from browser.driver_factory import BrowserSession
from config.config_schema import TargetConfig
from core.exceptions import GatewayApiError, OperationTimeoutError, describe_exception

logger = logging.getLogger(__name__)

USER_AGENT = "Gateway-E2E-Harness/1.0"
DEFAULT_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
    "User-Agent": USER_AGENT,
}

_MISSING = object()


@dataclass(frozen=True)
class ApiResponse:
    """Status, decoded body and headers of one API call."""

    status_code: int
    body: Any
    headers: dict[str, str] = field(default_factory=dict)
    elapsed_ms: int = 0
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def content_type(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value
        return ""

    @property
    def is_json(self) -> bool:
        return "application/json" in self.content_type.lower() and not isinstance(self.body, str)

    def json_field(self, path: str, default: Any = None) -> Any:
        """
        Look up a dotted path in the JSON body, e.g. ``"data.items.0.id"``.

        Numeric segments index into lists. Missing keys return ``default``.
        """
        current: Any = self.body
        for part in path.split("."):
            if isinstance(current, dict):
                current = current.get(part, _MISSING)
            elif isinstance(current, list) and part.lstrip("-").isdigit():
                index = int(part)
                current = current[index] if -len(current) <= index < len(current) else _MISSING
            else:
                current = _MISSING
            if current is _MISSING:
                return default
        return current

    def expect_status(self, *codes: int) -> "ApiResponse":
        """Assert the status is one of ``codes``; returns self for chaining."""
        if self.status_code not in codes:
            raise AssertionError(
                f"Expected status {' or '.join(str(c) for c in codes)} from {self.url}, got {self.status_code}"
            )
        return self


def _decode_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class GatewayApiClient:
    """REST client for the gateway API under test."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        auth_token: Optional[str] = None,
        verify_tls: bool = True,
        user_agent: str = USER_AGENT,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self.verify_tls = verify_tls
        self._requests_session = session or requests.Session()
        self._requests_session.headers.update({**DEFAULT_HEADERS, "User-Agent": user_agent})
        if session is None:
            self._setup_requests_session()
        if auth_token:
            self.set_auth_token(auth_token)
        logger.debug(f"GatewayApiClient initialized for {self.base_url}")

    @classmethod
    def from_config(cls, target: TargetConfig) -> "GatewayApiClient":
        return cls(
            target.api_base_url,
            timeout=target.api_timeout,
            auth_token=target.api_token,
            verify_tls=target.verify_tls,
        )

    def _setup_requests_session(self) -> None:
        """Retry connection failures only; status codes reach the tests untouched."""
        retry_strategy = Retry(total=2, connect=2, read=0, status=0, backoff_factor=0.5, raise_on_status=False)
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self._requests_session.mount("http://", adapter)
        self._requests_session.mount("https://", adapter)

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._requests_session.headers)

    def set_auth_token(self, token: Optional[str]) -> None:
        if token:
            self._requests_session.headers["Authorization"] = f"Bearer {token}"
        else:
            self._requests_session.headers.pop("Authorization", None)

    def url_for(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return urljoin(self.base_url, endpoint.lstrip("/"))

    def sync_cookies_from_session(self, session: BrowserSession) -> int:
        """Copy the browser's cookies into the API session. Returns how many were copied."""
        cookies = session.driver.get_cookies()
        for cookie in cookies:
            self._requests_session.cookies.set(
                cookie["name"],
                cookie["value"],
                domain=cookie.get("domain", ""),
                path=cookie.get("path", "/"),
                secure=cookie.get("secure", False),
            )
        logger.debug(f"Synced {len(cookies)} cookies from browser session to API client")
        return len(cookies)

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Optional[dict[str, Any]] = None,
        body: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> ApiResponse:
        """
        Send one request and return its response, whatever the status.

        Raises:
            OperationTimeoutError: the request exceeded ``timeout``.
            GatewayApiError: any other transport failure.
        """
        url = self.url_for(endpoint)
        data = body if body is None or isinstance(body, (str, bytes)) else json.dumps(body)
        start = time.time()
        try:
            response = self._requests_session.request(
                method.upper(),
                url,
                params=params,
                data=data,
                headers=headers,
                timeout=self.timeout,
                verify=self.verify_tls,
            )
        except requests.Timeout as e:
            raise OperationTimeoutError(
                f"{method.upper()} {url} timed out after {self.timeout}s", timeout_ms=int(self.timeout * 1000)
            ) from e
        except RequestException as e:
            raise GatewayApiError(
                f"{method.upper()} {url} failed: {describe_exception(e)}", url=url, method=method.upper()
            ) from e

        elapsed_ms = int((time.time() - start) * 1000)
        logger.debug(f"{method.upper()} {url} -> {response.status_code} in {elapsed_ms}ms")
        return ApiResponse(
            status_code=response.status_code,
            body=_decode_body(response),
            headers=dict(response.headers),
            elapsed_ms=elapsed_ms,
            url=url,
        )

    def get(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> ApiResponse:
        return self.request("GET", endpoint, params=params)

    def post(self, endpoint: str, body: Any = None) -> ApiResponse:
        return self.request("POST", endpoint, body=body)

    def put(self, endpoint: str, body: Any = None) -> ApiResponse:
        return self.request("PUT", endpoint, body=body)

    def delete(self, endpoint: str) -> ApiResponse:
        return self.request("DELETE", endpoint)

    def close(self) -> None:
        self._requests_session.close()

    def __enter__(self) -> "GatewayApiClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


__all__ = ["DEFAULT_HEADERS", "USER_AGENT", "ApiResponse", "GatewayApiClient"]
