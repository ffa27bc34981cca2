"""
Async client for the Oura v2 REST API.

Only the three read endpoints the reconciliation needs are wrapped. Dates
are "YYYY-MM-DD" strings; Oura filters on its own `day` bucket, which is
the morning a session ended (see analysis.fetch_window).

Any transport error or non-2xx response is raised as ConnectivityError.
"No data" is not an error: an empty list comes back.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from sleepsync.analysis.sessions import RawSleepSession
from sleepsync.errors import ConnectivityError
from sleepsync.oura.normalizer import normalize_sleep_session

logger = logging.getLogger(__name__)

OURA_BASE_URL = "https://api.ouraring.com"
PERSONAL_INFO_PATH = "/v2/usercollection/personal_info"
SLEEP_PATH = "/v2/usercollection/sleep"
DAILY_SLEEP_PATH = "/v2/usercollection/daily_sleep"


class OuraClient:
    """
    Thin async wrapper over the Oura usercollection endpoints.

    Usage:
        async with OuraClient(access_token) as oura:
            sessions = await oura.get_sleep_sessions("2025-06-17", "2025-06-24")
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = OURA_BASE_URL,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            access_token: Oura personal access token.
            base_url: API root, overridable for tests.
            timeout: Per-request timeout in seconds.
            http_client: Pre-built client (tests pass one with a MockTransport).
        """
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"Authorization": f"Bearer {access_token}"},
        )

    async def __aenter__(self) -> "OuraClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        try:
            response = await self._http.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ConnectivityError(
                "Oura", f"GET {path} failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ConnectivityError("Oura", f"GET {path} failed: {exc}") from exc
        return response.json()

    async def _get_collection(self, path: str, start_date: str, end_date: str) -> List[Dict[str, Any]]:
        """Fetch every page of a collection endpoint, following next_token."""
        params = {"start_date": start_date, "end_date": end_date}
        items: List[Dict[str, Any]] = []
        while True:
            body = await self._get(path, params=params)
            items.extend(body.get("data") or [])
            next_token = body.get("next_token")
            if not next_token:
                return items
            params = {**params, "next_token": next_token}

    async def check_connection(self) -> Dict[str, Any]:
        """Validate the token. Returns the personal_info document.

        Raises:
            ConnectivityError: if the token is rejected or Oura is unreachable.
        """
        info = await self._get(PERSONAL_INFO_PATH)
        logger.info("Oura connection OK (age=%s)", info.get("age"))
        return info

    async def get_raw_sleep_sessions(self, start_date: str, end_date: str) -> List[Dict[str, Any]]:
        items = await self._get_collection(SLEEP_PATH, start_date, end_date)
        logger.info("Found %d sleep sessions from %s to %s", len(items), start_date, end_date)
        return items

    async def get_sleep_sessions(self, start_date: str, end_date: str) -> List[RawSleepSession]:
        """Fetch sleep sessions whose Oura day is in [start_date, end_date]."""
        raw = await self.get_raw_sleep_sessions(start_date, end_date)
        return [normalize_sleep_session(item) for item in raw]

    async def get_daily_sleep(self, start_date: str, end_date: str) -> List[Dict[str, Any]]:
        """Fetch daily sleep score documents ({day, score, contributors, ...})."""
        items = await self._get_collection(DAILY_SLEEP_PATH, start_date, end_date)
        logger.info("Found %d days of sleep scores from %s to %s", len(items), start_date, end_date)
        return items
