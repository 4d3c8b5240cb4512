"""
================================================================================
Render API Client with Allure Integration
================================================================================

Async client for the Render REST API used by the integration suites.

Features:
    - Resource namespaces (projects, services, postgres, ...) exposing
      create / retrieve / list / update / delete
    - Nested sub-resources scoped by parent id (deploys, env vars, secret files)
    - Unwrapping of Render's cursor-wrapped list responses into Page objects
    - Request/response logging to loguru and Allure with secrets redacted
    - cURL command generation for easy reproduction

Requests are never retried: a transient failure surfaces as a suite failure.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import allure
import httpx
from allure_commons.types import AttachmentType
from loguru import logger

from .config_loader import RunConfig


# Maximum response length to include in Allure reports
MAX_RESPONSE_LENGTH = 3000

SENSITIVE_HEADERS = {"authorization", "x-api-key", "cookie", "set-cookie"}
SENSITIVE_BODY_TOKENS = ("password", "secret", "token", "api_key", "apikey", "content", "value")
MASK = "***MASKED***"


class HttpClientError(Exception):
    """Base exception for API client errors."""
    pass


class ApiError(HttpClientError):
    """Raised when the API answers with a 4xx/5xx status."""

    def __init__(self, status_code: int, method: str, path: str, message: str) -> None:
        self.status_code = status_code
        self.method = method
        self.path = path
        self.message = message
        super().__init__(f"{method} {path} failed with {status_code}: {message}")

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


@dataclass
class Page:
    """One page of a list call: unwrapped records plus the cursor of the last one."""
    items: List[Dict[str, Any]] = field(default_factory=list)
    cursor: Optional[str] = None

    def __len__(self) -> int:
        return len(self.items)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _query(filters: Dict[str, Any]) -> Dict[str, Any]:
    """Convert snake_case keyword filters to the API's camelCase query params."""
    return {_camel(k): v for k, v in filters.items() if v is not None}


class HttpClient:
    """
    Thin async HTTP layer shared by every resource namespace.

    Usage:
        >>> async with HttpClient(config) as http:
        ...     data = await http.request("GET", "/users")
    """

    def __init__(
        self,
        config: RunConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = config.base_url.rstrip("/")
        self.timeout = config.timeout
        self._api_key = config.api_key
        self._transport = transport
        self.session: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HttpClient":
        self.session = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Accept": "application/json",
            },
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.session:
            await self.session.aclose()
            self.session = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
    ) -> Any:
        """
        Execute a request and return the decoded JSON body (None when empty).

        Raises:
            HttpClientError: Client used outside its context manager
            ApiError: The API answered with a status >= 400
            httpx.HTTPError: Network or timeout failure
        """
        if self.session is None:
            raise HttpClientError(
                "HttpClient must be used within an async context manager. "
                "Use 'async with RenderClient(config) as client:'"
            )

        kwargs: Dict[str, Any] = {}
        if params:
            kwargs["params"] = params
        if json_body is not None:
            kwargs["json"] = json_body

        response = await self.session.request(method, path, **kwargs)
        self._log_exchange(method, path, kwargs, response)

        if response.status_code >= 400:
            raise ApiError(response.status_code, method, path, self._error_message(response))

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise HttpClientError(f"{method} {path} returned non-JSON body") from e

    def _error_message(self, response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return response.text or response.reason_phrase or "unknown error"

    def _log_exchange(
        self,
        method: str,
        path: str,
        kwargs: Dict[str, Any],
        response: httpx.Response,
    ) -> None:
        """
        Log the exchange to loguru and attach it to the current Allure step.

        Outside an Allure-enabled pytest session the Allure calls are no-ops.
        """
        logger.debug(f"{method} {path} → {response.status_code}")

        full_url = str(response.request.url)
        status_emoji = "✅" if response.status_code < 400 else "❌"

        with allure.step(f"{status_emoji} {method} {path} → {response.status_code}"):
            allure.attach(full_url, name="Request URL", attachment_type=AttachmentType.TEXT)

            safe_headers = self._redact_headers(dict(response.request.headers))
            safe_body = self._redact_body(kwargs.get("json"))
            if safe_body:
                allure.attach(
                    json.dumps(safe_body, ensure_ascii=False, indent=2),
                    name="Request Body",
                    attachment_type=AttachmentType.JSON,
                )

            allure.attach(
                self._build_curl(method, full_url, safe_headers, safe_body),
                name="cURL Command",
                attachment_type=AttachmentType.TEXT,
            )

            content = response.text or "<empty>"
            if len(content) > MAX_RESPONSE_LENGTH:
                content = (
                    f"{content[:MAX_RESPONSE_LENGTH]}\n\n"
                    f"... [Truncated, full length: {len(content)} chars] ..."
                )
            allure.attach(content, name="Response Body", attachment_type=AttachmentType.JSON)

    def _redact_headers(self, headers: Dict[str, Any]) -> Dict[str, Any]:
        return {
            key: MASK if key.lower() in SENSITIVE_HEADERS else value
            for key, value in headers.items()
        }

    def _redact_body(self, payload: Any) -> Any:
        """Recursively mask secret-looking fields (env var values, file contents)."""
        if isinstance(payload, dict):
            redacted = {}
            for key, value in payload.items():
                if any(token in key.lower() for token in SENSITIVE_BODY_TOKENS):
                    redacted[key] = MASK
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
        body: Optional[Any],
    ) -> str:
        parts = [f"curl -X {method}"]
        for key, value in headers.items():
            parts.append(f"-H '{key}: {value}'")
        if body:
            parts.append(f"-d '{json.dumps(body, ensure_ascii=False)}'")
        parts.append(f"'{url}'")
        return " \\\n  ".join(parts)


# =============================================================================
# Resource Namespaces
# =============================================================================

def _unwrap_page(payload: Any, item_key: Optional[str]) -> Page:
    """
    Render lists are arrays of ``{"cursor": ..., "<item_key>": {...}}``.

    Plain arrays (and ``{"items": [...]}`` bodies) are accepted unchanged.
    """
    if isinstance(payload, dict):
        payload = payload.get("items", [])
    rows = payload or []
    items = []
    cursor = None
    for row in rows:
        if isinstance(row, dict) and item_key and item_key in row:
            items.append(row[item_key])
            cursor = row.get("cursor", cursor)
        else:
            items.append(row)
    return Page(items=items, cursor=cursor)


class Resource:
    """Top-level collection at ``/<path>`` with the standard CRUD verbs."""

    def __init__(self, http: HttpClient, path: str, item_key: Optional[str] = None) -> None:
        self._http = http
        self.path = path
        self.item_key = item_key

    def _url(self, resource_id: str) -> str:
        return f"{self.path}/{resource_id}"

    async def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._http.request("POST", self.path, json_body=payload)

    async def retrieve(self, resource_id: str) -> Dict[str, Any]:
        return await self._http.request("GET", self._url(resource_id))

    async def list(self, **filters: Any) -> Page:
        payload = await self._http.request("GET", self.path, params=_query(filters))
        return _unwrap_page(payload, self.item_key)

    async def update(self, resource_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        return await self._http.request("PATCH", self._url(resource_id), json_body=patch)

    async def delete(self, resource_id: str) -> None:
        await self._http.request("DELETE", self._url(resource_id))


class KeyedCollection:
    """
    Sub-resource addressed by ``<parent>/<parent_id>/<segment>/<key>``.

    ``set`` creates or replaces the entry, e.g. a service env var or a secret
    file. ``value_field`` names the body field carrying the new value.
    """

    def __init__(
        self,
        http: HttpClient,
        parent_path: str,
        segment: str,
        item_key: str,
        value_field: str,
    ) -> None:
        self._http = http
        self.parent_path = parent_path
        self.segment = segment
        self.item_key = item_key
        self.value_field = value_field

    def _base(self, parent_id: str) -> str:
        return f"{self.parent_path}/{parent_id}/{self.segment}"

    async def list(self, parent_id: str, **filters: Any) -> Page:
        payload = await self._http.request("GET", self._base(parent_id), params=_query(filters))
        return _unwrap_page(payload, self.item_key)

    async def retrieve(self, parent_id: str, key: str) -> Dict[str, Any]:
        return await self._http.request("GET", f"{self._base(parent_id)}/{key}")

    async def set(self, parent_id: str, key: str, value: str) -> Dict[str, Any]:
        return await self._http.request(
            "PUT", f"{self._base(parent_id)}/{key}", json_body={self.value_field: value}
        )

    async def delete(self, parent_id: str, key: str) -> None:
        await self._http.request("DELETE", f"{self._base(parent_id)}/{key}")


class Deploys:
    """Deploys of a service (read side only)."""

    def __init__(self, http: HttpClient) -> None:
        self._http = http

    async def list(self, service_id: str, **filters: Any) -> Page:
        payload = await self._http.request(
            "GET", f"/services/{service_id}/deploys", params=_query(filters)
        )
        return _unwrap_page(payload, "deploy")

    async def retrieve(self, service_id: str, deploy_id: str) -> Dict[str, Any]:
        return await self._http.request("GET", f"/services/{service_id}/deploys/{deploy_id}")


class Services(Resource):
    """
    Services plus their nested deploys, env vars and secret files.

    ``create`` returns the raw body, ``{"service": {...}, "deployId": "..."}``.
    """

    def __init__(self, http: HttpClient) -> None:
        super().__init__(http, "/services", "service")
        self.deploys = Deploys(http)
        self.env_vars = KeyedCollection(http, "/services", "env-vars", "envVar", "value")
        self.secret_files = KeyedCollection(http, "/services", "secret-files", "secretFile", "content")

    async def suspend(self, service_id: str) -> None:
        await self._http.request("POST", f"{self._url(service_id)}/suspend")

    async def resume(self, service_id: str) -> None:
        await self._http.request("POST", f"{self._url(service_id)}/resume")


class EnvGroups(Resource):
    def __init__(self, http: HttpClient) -> None:
        super().__init__(http, "/env-groups", "envGroup")
        self.env_vars = KeyedCollection(http, "/env-groups", "env-vars", "envVar", "value")
        self.secret_files = KeyedCollection(http, "/env-groups", "secret-files", "secretFile", "content")


class Datastore(Resource):
    """Postgres and Key-Value instances share the connection-info endpoint."""

    async def connection_info(self, resource_id: str) -> Dict[str, Any]:
        return await self._http.request("GET", f"{self._url(resource_id)}/connection-info")


class Users:
    def __init__(self, http: HttpClient) -> None:
        self._http = http

    async def me(self) -> Dict[str, Any]:
        return await self._http.request("GET", "/users")


class AuditLogs:
    def __init__(self, http: HttpClient) -> None:
        self._http = http

    async def list_for_owner(self, owner_id: str, **filters: Any) -> Page:
        payload = await self._http.request(
            "GET", f"/owners/{owner_id}/audit-logs", params=_query(filters)
        )
        return _unwrap_page(payload, "auditLog")


class Events:
    def __init__(self, http: HttpClient) -> None:
        self._http = http

    async def retrieve(self, event_id: str) -> Dict[str, Any]:
        return await self._http.request("GET", f"/events/{event_id}")


class RenderClient:
    """
    Entry point bundling every resource namespace over one HTTP session.

    Usage:
        >>> async with RenderClient(run_config) as client:
        ...     page = await client.projects.list(owner_id=run_config.owner_id)
        ...     print(len(page.items))
    """

    def __init__(
        self,
        config: RunConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.http = HttpClient(config, transport=transport)
        http = self.http

        self.projects = Resource(http, "/projects", "project")
        self.environments = Resource(http, "/environments", "environment")
        self.env_groups = EnvGroups(http)
        self.services = Services(http)
        self.postgres = Datastore(http, "/postgres", "postgres")
        self.key_value = Datastore(http, "/key-value", "keyValue")
        self.webhooks = Resource(http, "/webhooks", "webhook")
        self.workspaces = Resource(http, "/owners", "owner")
        self.blueprints = Resource(http, "/blueprints", "blueprint")
        self.users = Users(http)
        self.audit_logs = AuditLogs(http)
        self.events = Events(http)

    async def __aenter__(self) -> "RenderClient":
        await self.http.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.http.__aexit__(exc_type, exc_val, exc_tb)


__all__ = [
    "ApiError",
    "HttpClient",
    "HttpClientError",
    "Page",
    "RenderClient",
]
