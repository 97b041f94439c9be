"""
HTTP record-store adapter for HostGuard.

HttpRecordStore talks to an OData-style Web API (for example a Dataverse
environment's ``/api/data/v9.2/`` endpoint) with httpx.

Only read operations are issued by the suites: the identity function
(``WhoAmI``) and a ``$top=1`` listing query. ``execute`` with
``operation_type="action"`` POSTs and is available to callers, not to suites.
"""

from typing import Any

import httpx

from hostguard.capabilities.base import Connection, RecordStoreCapability
from hostguard.errors import CapabilityFailure, CapabilityUnavailableError

ODATA_HEADERS = {
    "Accept": "application/json",
    "OData-MaxVersion": "4.0",
    "OData-Version": "4.0",
}


class OfflineRecordStore(RecordStoreCapability):
    """Record store used when no environment is configured; every call fails."""

    connection: Connection | None = None

    def execute(self, operation_name: str, operation_type: str = "function") -> Any:
        raise CapabilityUnavailableError(capability="records", operation="execute")

    def query_records(self, query: str) -> dict[str, Any]:
        raise CapabilityUnavailableError(capability="records", operation="query_records")

    def get_entity_metadata(self, entity: str) -> dict[str, Any]:
        raise CapabilityUnavailableError(capability="records", operation="get_entity_metadata")


class HttpRecordStore(RecordStoreCapability):
    """
    Record store reached over HTTP.

    Arguments:
        base_url: Web API root, e.g. "https://org.example.com/api/data/v9.2/"
        token: Optional bearer token
        name: Connection display name
        timeout_seconds: Request timeout
        transport: Optional httpx transport (tests pass httpx.MockTransport)

    Example:
        with HttpRecordStore("https://org.example.com/api/data/v9.2/", token=t) as store:
            me = store.execute("WhoAmI")
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        name: str = "default",
        timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = dict(ODATA_HEADERS)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self.connection = Connection(name=name, url=base_url)
        self._client = httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )

    def execute(self, operation_name: str, operation_type: str = "function") -> Any:
        if operation_type == "function":
            return self._request("GET", operation_name, operation="execute")
        if operation_type == "action":
            return self._request("POST", operation_name, operation="execute", json={})
        raise CapabilityFailure(
            capability="records",
            operation="execute",
            underlying_error=f"Unknown operation type: {operation_type}",
        )

    def query_records(self, query: str) -> dict[str, Any]:
        return self._request("GET", query, operation="query_records")

    def get_entity_metadata(self, entity: str) -> dict[str, Any]:
        return self._request(
            "GET",
            f"EntityDefinitions(LogicalName='{entity}')",
            operation="get_entity_metadata",
        )

    def _request(self, method: str, url: str, operation: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise self._failure(operation, f"Request timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            raise self._failure(operation, f"HTTP {e.response.status_code} for {url}") from e
        except httpx.RequestError as e:
            raise self._failure(operation, f"Request failed: {e}") from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise self._failure(operation, f"Response is not JSON: {e}") from e

    @staticmethod
    def _failure(operation: str, message: str) -> CapabilityFailure:
        return CapabilityFailure(
            capability="records",
            operation=operation,
            underlying_error=message,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpRecordStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
