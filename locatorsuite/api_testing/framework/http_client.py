"""
================================================================================
API Client with Allure Integration
================================================================================

Thin httpx wrapper for API test steps:
    - JSON default headers, configurable timeout
    - Never raises on HTTP status (tests assert on it)
    - Bearer-token requests and token storage
    - Fixed-delay retry on 5xx responses
    - Multipart file upload
    - Allure request/response attachments with redaction

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import allure
import httpx
from allure_commons.types import AttachmentType
from loguru import logger

from locatorsuite.common.config_loader import ConfigLoader
from locatorsuite.ui_testing.framework.exceptions import ClassifiedError, ErrorType


# Maximum response length to include in Allure reports
MAX_RESPONSE_LENGTH = 3000

DEFAULT_HEADERS: Dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

TOKEN_FIELDS = ("token", "accessToken", "access_token")


class ApiClient:
    """
    API client for test steps.

    Usage:
        >>> with ApiClient() as client:
        ...     response = client.get("/users", params={"page": 2})
        ...     validate_response(response, status=200, properties=["data"])
    """

    def __init__(
        self,
        config: Optional[ConfigLoader] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Args:
            config: Configuration loader; the singleton when omitted
            base_url: Overrides `api.base_url`
            timeout: Overrides `api.timeout` (seconds)
            transport: Custom httpx transport (mock transports in tests)
            sleep: Delay function used between retries
        """
        if config is None:
            config = ConfigLoader()

        self.config = config
        self.base_url = base_url or config.get("api.base_url", "http://localhost:8000")
        self.timeout = float(timeout if timeout is not None else config.get("api.timeout", 30))
        self._transport = transport
        self._sleep = sleep
        self._auth_token: Optional[str] = None
        self.session: Optional[httpx.Client] = None

    def __enter__(self) -> "ApiClient":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        if self.session is None:
            self.session = httpx.Client(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )

    def close(self) -> None:
        if self.session:
            self.session.close()
            self.session = None

    # =========================================================================
    # Requests
    # =========================================================================

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a request with default JSON headers merged under `headers`.

        Raises:
            ClassifiedError: NETWORK_ERROR / TIMEOUT on transport failures
        """
        if self.session is None:
            raise RuntimeError(
                "ApiClient must be used within a context manager. "
                "Use 'with ApiClient() as client:'"
            )

        merged_headers = {**DEFAULT_HEADERS, **(headers or {})}
        if "files" in kwargs and not any(k.lower() == "content-type" for k in (headers or {})):
            # httpx sets the multipart boundary itself
            merged_headers.pop("Content-Type")
        try:
            response = self.session.request(method, url, headers=merged_headers, **kwargs)
        except httpx.TimeoutException as e:
            raise ClassifiedError(
                f"{method} {url} timed out after {self.timeout}s",
                ErrorType.TIMEOUT,
                details={"method": method, "url": url},
            ) from e
        except httpx.TransportError as e:
            raise ClassifiedError(
                f"{method} {url} failed: {e}",
                ErrorType.NETWORK_ERROR,
                details={"method": method, "url": url},
            ) from e

        logger.info(f"API Request: {method} {url}")
        logger.info(f"Response Status: {response.status_code}")
        self._log_to_allure(method, url, merged_headers, kwargs, response)
        return response

    def request_with_token(
        self,
        method: str,
        url: str,
        token: str,
        headers: Optional[Dict[str, str]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        auth_headers = {**(headers or {}), "Authorization": f"Bearer {token}"}
        return self.request(method, url, headers=auth_headers, **kwargs)

    def authenticated_request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Request with the stored token; see `store_auth_token`."""
        if not self._auth_token:
            raise ClassifiedError(
                "No auth token stored. Please login first.",
                ErrorType.AUTHENTICATION_ERROR,
            )
        return self.request_with_token(method, url, self._auth_token, **kwargs)

    def get(self, url: str, params: Optional[Dict[str, Any]] = None, **kwargs: Any) -> httpx.Response:
        return self.request("GET", url, params=params, **kwargs)

    def post(self, url: str, json: Any = None, **kwargs: Any) -> httpx.Response:
        return self.request("POST", url, json=json if json is not None else {}, **kwargs)

    def put(self, url: str, json: Any = None, **kwargs: Any) -> httpx.Response:
        return self.request("PUT", url, json=json if json is not None else {}, **kwargs)

    def patch(self, url: str, json: Any = None, **kwargs: Any) -> httpx.Response:
        return self.request("PATCH", url, json=json if json is not None else {}, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return self.request("DELETE", url, **kwargs)

    def upload_file(
        self,
        url: str,
        file_path: Union[str, Path],
        field_name: str = "file",
        data: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        POST a file as multipart/form-data.

        Args:
            url: Upload endpoint
            file_path: Local file sent under `field_name`
            field_name: Form field name for the file part
            data: Extra form fields sent alongside the file
        """
        path = Path(file_path)
        if not path.is_file():
            raise ClassifiedError(
                f"Upload file not found: {path.resolve()}",
                ErrorType.VALIDATION_ERROR,
                details={"path": str(path.resolve())},
            )
        with open(path, "rb") as f:
            files = {field_name: (path.name, f.read())}
        logger.info(f"Uploading {path.name} as '{field_name}' to {url}")
        return self.request("POST", url, files=files, data=data, **kwargs)

    def retry_request(
        self,
        method: str,
        url: str,
        max_retries: int = 3,
        delay_ms: int = 1000,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Repeat the request while the server answers 5xx.

        At most `max_retries` requests are sent; the last response is
        returned whatever its status.
        """
        attempts = 0
        while True:
            attempts += 1
            response = self.request(method, url, **kwargs)
            if response.status_code < 500 or attempts >= max_retries:
                return response
            logger.warning(
                f"{method} {url} -> {response.status_code}. "
                f"Retrying in {delay_ms}ms (attempt {attempts}/{max_retries})"
            )
            self._sleep(delay_ms / 1000)

    # =========================================================================
    # Authentication
    # =========================================================================

    def get_auth_token(self, login_url: str, credentials: Dict[str, Any]) -> str:
        """
        Log in via API and return the token from the response body.

        Raises:
            ClassifiedError: AUTHENTICATION_ERROR on non-200 or missing token
        """
        response = self.post(login_url, json=credentials)
        if response.status_code != 200:
            raise ClassifiedError(
                f"Login failed with status {response.status_code}",
                ErrorType.AUTHENTICATION_ERROR,
                details={"status": response.status_code},
            )

        try:
            body = response.json()
        except ValueError:
            body = {}
        token = next((body.get(f) for f in TOKEN_FIELDS if isinstance(body, dict) and body.get(f)), None)
        if not token:
            raise ClassifiedError(
                "No token found in login response",
                ErrorType.AUTHENTICATION_ERROR,
            )
        return token

    def store_auth_token(self, token: str) -> None:
        self._auth_token = token

    @property
    def stored_auth_token(self) -> Optional[str]:
        return self._auth_token

    # =========================================================================
    # Reporting
    # =========================================================================

    def _log_to_allure(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        kwargs: Dict[str, Any],
        response: httpx.Response,
    ) -> None:
        """Attach redacted request, cURL command and response to Allure."""
        full_url = str(response.request.url) if response.request else url
        status_icon = "✅" if response.status_code < 400 else "❌"

        with allure.step(f"{status_icon} {method} {url} → {response.status_code}"):
            safe_headers = self._redact_headers(headers)
            safe_body = self._redact_body(kwargs.get("json"))

            allure.attach(
                json.dumps(safe_headers, ensure_ascii=False, indent=2),
                name="Request Headers",
                attachment_type=AttachmentType.JSON,
            )
            if safe_body:
                allure.attach(
                    json.dumps(safe_body, ensure_ascii=False, indent=2, default=str),
                    name="Request Body",
                    attachment_type=AttachmentType.JSON,
                )
            allure.attach(
                self._build_curl(method, full_url, safe_headers, safe_body, kwargs.get("files")),
                name="cURL Command",
                attachment_type=AttachmentType.TEXT,
            )

            response_content = response.text or "<empty>"
            if len(response_content) > MAX_RESPONSE_LENGTH:
                response_content = (
                    f"{response_content[:MAX_RESPONSE_LENGTH]}\n\n"
                    f"... [Truncated, full length: {len(response_content)} chars] ..."
                )
            allure.attach(
                response_content,
                name="Response Body",
                attachment_type=AttachmentType.TEXT,
            )

    def _redact_headers(self, headers: Dict[str, Any]) -> Dict[str, Any]:
        sensitive_keys = {"authorization", "x-api-key", "cookie", "set-cookie"}
        return {
            key: "***MASKED***" if key.lower() in sensitive_keys else value
            for key, value in headers.items()
        }

    def _redact_body(self, payload: Any) -> Any:
        if isinstance(payload, dict):
            redacted = {}
            for key, value in payload.items():
                if any(token in key.lower() for token in [
                    "password", "secret", "token", "api_key", "authorization"
                ]):
                    redacted[key] = "***MASKED***"
                else:
                    redacted[key] = self._redact_body(value)
            return redacted
        if isinstance(payload, list):
            return [self._redact_body(item) for item in payload]
        return payload

    def _build_curl(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Any,
        files: Optional[Dict[str, Any]] = None,
    ) -> str:
        parts = [f"curl -X {method}"]
        for key, value in headers.items():
            parts.append(f"-H '{key}: {value}'")
        for field_name, (filename, _content) in (files or {}).items():
            parts.append(f"-F '{field_name}=@{filename}'")
        if body:
            parts.append(f"-d '{json.dumps(body, ensure_ascii=False, default=str)}'")
        parts.append(f"'{url}'")
        return " \\\n  ".join(parts)


__all__ = [
    "ApiClient",
    "DEFAULT_HEADERS",
]
