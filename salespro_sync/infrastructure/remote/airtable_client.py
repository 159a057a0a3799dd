"""Airtable-compatible remote table client — implements the RemoteTableClient port.

Talks to ``{endpoint}/{base_id}/{table}`` using httpx. Every public call is a
single round trip with no retry, and every failure is absorbed here:

* missing credential/endpoint → empty result, DEBUG only (offline mode)
* transport error, 401/403/404/5xx, invalid JSON → empty result + WARNING
"""

import logging
from typing import Any

import httpx

from salespro_sync.application.interfaces import RemoteTableClient
from salespro_sync.domain.entities import RemoteRow
from salespro_sync.domain.exceptions import RemoteTableError
from salespro_sync.infrastructure.remote.credentials import CredentialProvider, RemoteCredentials

logger = logging.getLogger(__name__)


def build_filter_formula(field: str, value: str) -> str:
    """Exact-match filter expression on one field, with quotes escaped."""
    safe_value = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"{{{field}}} = '{safe_value}'"


class AirtableTableClient(RemoteTableClient):
    """Infrastructure adapter — connects to an Airtable-style REST API.

    Credentials are resolved through ``credentials`` on every call. An
    injected ``http_client`` is reused and left open; otherwise a short-lived
    client is created per call.
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self._credentials = credentials
        self._http_client = http_client
        self._timeout = timeout

    def is_configured(self) -> bool:
        return self._credentials().is_complete

    @staticmethod
    def _get_headers(creds: RemoteCredentials) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {creds.api_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _table_url(creds: RemoteCredentials, table: str, row_id: str | None = None) -> str:
        url = f"{creds.endpoint}/{creds.base_id}/{creds.table_name(table)}"
        if row_id:
            url += f"/{row_id}"
        return url

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a new one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=self._timeout)

    async def _request(
        self,
        creds: RemoteCredentials,
        method: str,
        table: str,
        *,
        row_id: str | None = None,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform one round trip and return the decoded JSON body."""
        url = self._table_url(creds, table, row_id)
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            response = await client.request(
                method,
                url,
                headers=self._get_headers(creds),
                params=params,
                json=payload,
            )
            if not response.is_success:
                self._raise_table_error(table, response)
            try:
                data = response.json()
            except ValueError as exc:
                raise RemoteTableError(table, response.status_code, f"invalid JSON: {exc}") from exc
            if not isinstance(data, dict):
                raise RemoteTableError(table, response.status_code, "unexpected response shape")
            return data
        except httpx.HTTPError as exc:
            raise RemoteTableError(table, None, f"{type(exc).__name__}: {exc}") from exc
        finally:
            if should_close:
                await client.aclose()

    @staticmethod
    def _raise_table_error(table: str, response: httpx.Response) -> None:
        """Raise RemoteTableError from a non-2xx httpx Response."""
        try:
            error = response.json().get("error", {})
            if isinstance(error, dict):
                message = error.get("message") or error.get("type") or response.text
            else:
                message = str(error)
        except Exception:
            message = response.text
        raise RemoteTableError(table, response.status_code, message)

    def _resolve(self, operation: str, table: str) -> RemoteCredentials | None:
        creds = self._credentials()
        if not creds.is_complete:
            logger.debug("Remote not configured; skipping %s on '%s'", operation, table)
            return None
        return creds

    # ── Public operations ───────────────────────────────────────────

    async def list_rows(self, table: str) -> list[RemoteRow]:
        creds = self._resolve("list", table)
        if creds is None:
            return []
        try:
            data = await self._request(creds, "GET", table)
        except RemoteTableError as exc:
            logger.warning("Remote list failed: %s", exc)
            return []
        records = data.get("records")
        if not isinstance(records, list):
            return []
        rows = [RemoteRow.from_payload(r) for r in records]
        return [r for r in rows if r is not None]

    async def find_by_field(self, table: str, field: str, value: str) -> RemoteRow | None:
        if not value:
            return None
        creds = self._resolve("find", table)
        if creds is None:
            return None
        params = {"filterByFormula": build_filter_formula(field, value)}
        try:
            data = await self._request(creds, "GET", table, params=params)
        except RemoteTableError as exc:
            logger.warning("Remote find %s=%r failed: %s", field, value, exc)
            return None
        records = data.get("records")
        if not isinstance(records, list):
            return None
        for record in records:
            row = RemoteRow.from_payload(record)
            if row is not None:
                return row
        return None

    async def create_row(self, table: str, fields: dict[str, Any]) -> RemoteRow | None:
        creds = self._resolve("create", table)
        if creds is None:
            return None
        try:
            data = await self._request(
                creds, "POST", table, payload={"fields": fields, "typecast": True}
            )
        except RemoteTableError as exc:
            logger.warning("Remote create failed: %s", exc)
            return None
        return RemoteRow.from_payload(data)

    async def update_row(self, table: str, row_id: str, fields: dict[str, Any]) -> RemoteRow | None:
        creds = self._resolve("update", table)
        if creds is None:
            return None
        try:
            data = await self._request(
                creds,
                "PATCH",
                table,
                row_id=row_id,
                payload={"fields": fields, "typecast": True},
            )
        except RemoteTableError as exc:
            logger.warning("Remote update of row %s failed: %s", row_id, exc)
            return None
        return RemoteRow.from_payload(data)
