"""
Workspace REST API client.

One authenticated GET per call, parsed into domain models. No retries and no
caching at this layer: callers decide (see pagewatch.workspace.cache).

Response envelope: {"data": {"results": [...]}} for lists, {"data": {...}} for singles.
"""

from __future__ import annotations

from typing import Any

import requests
from pydantic import BaseModel, ValidationError

from pagewatch.config import AUTH_HEADER, DEFAULT_HTTP_TIMEOUT_SECONDS
from pagewatch.infrastructure.errors import DecodeError, NotFoundError, TransportError
from pagewatch.observability.logging import get_logger
from pagewatch.observability.telemetry import counter, time_block
from pagewatch.workspace.models import Item, User, Workspace

logger = get_logger(__name__)


class WorkspaceClient:
    """
    Read-only client for the workspace API.

    Raises TransportError on network/HTTP failure (timeouts included),
    NotFoundError on 404, and DecodeError on a malformed response body.
    """

    def __init__(
        self,
        base_url: str,
        api_version: str,
        api_key: str,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url
        self.api_version = api_version
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {AUTH_HEADER: api_key, "Accept": "application/json"}

    @classmethod
    def from_settings(
        cls, settings: Any, session: requests.Session | None = None
    ) -> WorkspaceClient:
        return cls(
            base_url=settings.api_base_url,
            api_version=settings.api_version,
            api_key=settings.api_key,
            timeout=settings.http_timeout,
            session=session,
        )

    def build_url(self, endpoint: str) -> str:
        """<base>/<version>/<endpoint>, tolerant of stray slashes in config."""
        parts = [self.base_url.rstrip("/"), self.api_version.strip("/"), endpoint.lstrip("/")]
        return "/".join(part for part in parts if part)

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def fetch_workspace_list(self) -> list[Workspace]:
        return self._parse_list(Workspace, self._get("workspaces"), "workspaces")

    def fetch_user(self, user_id: str) -> User:
        return self._parse_one(User, self._get(f"users/{user_id}", resource_id=user_id), user_id)

    def fetch_items_page(self, workspace_id: str, after_id: str | None = None) -> list[Item]:
        """
        Fetch one page of items for a workspace.

        Args:
            workspace_id: Workspace to list
            after_id: Cursor; id of the last item on the previous page (None for the first page)
        """
        params = {"workspaceId": workspace_id}
        if after_id is not None:
            params["after"] = after_id
        return self._parse_list(Item, self._get("items", params=params), "items")

    def fetch_item(self, item_id: str) -> Item:
        return self._parse_one(Item, self._get(f"items/{item_id}", resource_id=item_id), item_id)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _get(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
        resource_id: str | None = None,
    ) -> Any:
        """
        Perform one GET and return the envelope's "data" member.

        Side Effects:
            Makes API calls
        """
        url = self.build_url(endpoint)
        counter("api.requests")
        try:
            with time_block("api.get.latency"):
                response = self.session.get(
                    url, params=params, headers=self.headers, timeout=self.timeout
                )
        except requests.exceptions.Timeout as e:
            counter("api.timeouts")
            raise TransportError(f"GET {endpoint} timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            counter("api.transport_errors")
            raise TransportError(f"GET {endpoint} failed: {e}") from e

        if response.status_code == 404:
            counter("api.not_found")
            raise NotFoundError(f"GET {endpoint} returned 404", resource_id=resource_id)
        if not 200 <= response.status_code < 300:
            counter("api.http_errors")
            logger.warning("GET %s returned %s", endpoint, response.status_code)
            raise TransportError(
                f"GET {endpoint} returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            raise DecodeError(f"GET {endpoint} returned a non-JSON body") from e

        if not isinstance(body, dict) or "data" not in body:
            raise DecodeError(f"GET {endpoint} response has no 'data' envelope")
        return body["data"]

    def _parse_list(self, model: type[BaseModel], data: Any, what: str) -> list[Any]:
        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise DecodeError(f"{what} response has no 'results' list")
        try:
            return [model.model_validate(entry) for entry in results]
        except ValidationError as e:
            raise DecodeError(f"{what} response failed validation: {e.error_count()} errors") from e

    def _parse_one(self, model: type[BaseModel], data: Any, resource_id: str) -> Any:
        if not isinstance(data, dict):
            raise DecodeError(f"{model.__name__} {resource_id} response is not an object")
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise DecodeError(
                f"{model.__name__} {resource_id} failed validation: {e.error_count()} errors"
            ) from e
