"""
Endpoint tester for configured API integrations.

Sends one request to an integration's base URL, as described by a saved
endpoint or an ad-hoc method and path, and records the attempt in api_logs.
Requests are bounded: a total timeout, and the response body is read as a
stream and cut off at ENDPOINT_TEST_MAX_RESPONSE_BYTES.
"""

import base64
import json
import logging
import time
from typing import Any, Dict, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from upleer.core.config import get_settings
from upleer.core.enums import IntegrationAuthType
from upleer.core.exceptions import EndpointTestError, ValidationError
from upleer.models.api_integration import ApiIntegration, ApiLog
from upleer.schemas.integration import EndpointTestRequest
from upleer.services.integration_service import IntegrationService

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = {"authorization", "x-api-key", "cookie", "proxy-authorization"}
BODYLESS_METHODS = {"GET", "DELETE"}


def auth_headers(integration: ApiIntegration) -> Dict[str, str]:
    """Authentication headers for an integration, from its auth_type and auth_config."""
    config = integration.auth_config or {}
    auth_type = integration.auth_type

    if auth_type == IntegrationAuthType.API_KEY.value:
        key = config.get("apiKey") or config.get("api_key")
        if key:
            return {config.get("headerName", "X-API-Key"): str(key)}
    elif auth_type in (IntegrationAuthType.BEARER.value, IntegrationAuthType.OAUTH.value):
        token = config.get("token") or config.get("accessToken") or config.get("access_token")
        if token:
            return {"Authorization": f"Bearer {token}"}
    elif auth_type == IntegrationAuthType.BASIC.value:
        username = config.get("username")
        if username is not None:
            raw = f"{username}:{config.get('password', '')}".encode("utf-8")
            return {"Authorization": f"Basic {base64.b64encode(raw).decode('ascii')}"}
    return {}


def mask_headers(headers: Dict[str, str]) -> Dict[str, str]:
    return {k: ("[REDACTED]" if k.lower() in SENSITIVE_HEADERS else v) for k, v in headers.items()}


def build_url(base_url: str, path: Optional[str]) -> str:
    path = (path or "").strip()
    if "://" in path:
        raise ValidationError("Endpoint path must be relative to the integration base URL")
    if not path:
        return base_url.rstrip("/")
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def _decode_body(content: bytes, content_type: str, truncated: bool) -> Any:
    text = content.decode("utf-8", errors="replace")
    if not truncated and "json" in (content_type or "").lower() and text:
        try:
            return json.loads(text)
        except ValueError:
            pass
    return text


class EndpointTester:
    def __init__(
        self,
        db: AsyncSession,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
        max_response_bytes: Optional[int] = None,
    ):
        settings = get_settings()
        self.db = db
        self.transport = transport
        self.timeout = timeout if timeout is not None else settings.ENDPOINT_TEST_TIMEOUT_SECONDS
        self.max_response_bytes = (
            max_response_bytes if max_response_bytes is not None else settings.ENDPOINT_TEST_MAX_RESPONSE_BYTES
        )

    async def run(self, integration_id: int, request: EndpointTestRequest) -> Dict[str, Any]:
        """
        Execute the request and log it.

        Returns the response summary. Raises EndpointTestError when no response
        was received (timeout, connection failure); the attempt is logged first.
        """
        service = IntegrationService(self.db)
        integration = await service.get_integration(integration_id)

        endpoint = None
        if request.endpoint_id is not None:
            endpoint = await service.get_endpoint(integration_id, request.endpoint_id)

        method = request.method or (endpoint.method if endpoint else None)
        if not method:
            raise ValidationError("A method is required when no saved endpoint is given")
        path = request.path if request.path is not None else (endpoint.endpoint if endpoint else "")
        body = request.body if request.body is not None else (endpoint.request_body if endpoint else None)

        url = build_url(integration.base_url, path)
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        headers.update(integration.headers or {})
        headers.update(request.headers or {})
        headers.update(auth_headers(integration))

        send_body = body if method not in BODYLESS_METHODS else None

        log = ApiLog(
            integration_id=integration.id,
            endpoint_id=endpoint.id if endpoint else None,
            method=method,
            url=url,
            request_headers=mask_headers(headers),
            request_body=send_body,
        )

        logger.info("Testing %s %s for integration %s", method, url, integration.id)
        started = time.monotonic()
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
                follow_redirects=False,
            ) as client:
                async with client.stream(
                    method,
                    url,
                    headers=headers,
                    params=request.params or None,
                    json=send_body,
                ) as response:
                    content, truncated = await self._read_limited(response)
        except httpx.TimeoutException as e:
            message = f"Request timed out after {self.timeout}s"
            await self._record_failure(log, started, message)
            logger.warning("Endpoint test %s %s timed out: %s", method, url, e)
            raise EndpointTestError(message)
        except httpx.RequestError as e:
            message = f"Request failed: {e}"
            await self._record_failure(log, started, message)
            logger.warning("Endpoint test %s %s failed: %s", method, url, e)
            raise EndpointTestError(message)

        elapsed_ms = int((time.monotonic() - started) * 1000)
        parsed_body = _decode_body(content, response.headers.get("content-type", ""), truncated)

        log.response_status = response.status_code
        log.response_headers = dict(response.headers)
        log.response_body = parsed_body
        log.response_time = elapsed_ms
        if truncated:
            log.error_message = f"Response truncated at {self.max_response_bytes} bytes"
        self.db.add(log)
        await self.db.commit()

        return {
            "success": 200 <= response.status_code < 400,
            "status": response.status_code,
            "url": url,
            "method": method,
            "headers": dict(response.headers),
            "body": parsed_body,
            "truncated": truncated,
            "responseTime": elapsed_ms,
            "logId": log.id,
        }

    async def _read_limited(self, response: httpx.Response):
        chunks = []
        size = 0
        truncated = False
        async for chunk in response.aiter_bytes():
            remaining = self.max_response_bytes - size
            if len(chunk) > remaining:
                chunks.append(chunk[:remaining])
                truncated = True
                break
            chunks.append(chunk)
            size += len(chunk)
        return b"".join(chunks), truncated

    async def _record_failure(self, log: ApiLog, started: float, message: str) -> None:
        log.response_time = int((time.monotonic() - started) * 1000)
        log.error_message = message
        self.db.add(log)
        await self.db.commit()
