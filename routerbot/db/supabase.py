"""Minimal async client for the Supabase PostgREST API.

Only the handful of calls the conversation store and the docs search need:
single-row select, ordered select, upsert, delete and RPC.
"""
import logging
from typing import Any, Optional

import httpx

from routerbot.errors import StoreError

logger = logging.getLogger(__name__)


class SupabaseClient:
    def __init__(
        self,
        url: str,
        key: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = f"{url.rstrip('/')}/rest/v1"
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
        prefer: str = "",
    ) -> Any:
        headers = dict(self._headers)
        if prefer:
            headers["Prefer"] = prefer
        try:
            resp = await self._client.request(
                method,
                f"{self._base_url}/{path}",
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise StoreError("STORE_UNREACHABLE", str(e)) from e

        if resp.status_code >= 400:
            raise StoreError(
                "STORE_REQUEST_FAILED",
                f"{method} {path} returned {resp.status_code}: {resp.text}",
                http_status=resp.status_code,
            )
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise StoreError("STORE_BAD_RESPONSE", f"Invalid JSON from {path}") from e

    async def select_one(self, table: str, column: str, value: str) -> Optional[dict]:
        rows = await self._request(
            "GET",
            table,
            params={"select": "*", column: f"eq.{value}", "limit": 1},
        )
        if not rows:
            return None
        return rows[0]

    async def select(
        self,
        table: str,
        order: str = "",
        limit: Optional[int] = None,
    ) -> list[dict]:
        params: dict[str, Any] = {"select": "*"}
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = limit
        return await self._request("GET", table, params=params) or []

    async def upsert(self, table: str, row: dict) -> None:
        await self._request(
            "POST",
            table,
            json=row,
            prefer="resolution=merge-duplicates,return=minimal",
        )

    async def delete(self, table: str, column: str, value: str) -> None:
        await self._request(
            "DELETE",
            table,
            params={column: f"eq.{value}"},
            prefer="return=minimal",
        )

    async def rpc(self, fn: str, params: dict[str, Any]) -> Any:
        return await self._request("POST", f"rpc/{fn}", json=params)
