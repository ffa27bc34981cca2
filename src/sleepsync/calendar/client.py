"""
Async wrapper around the Google Calendar v3 API.

google-api-python-client is synchronous; we run it in a thread pool executor
so it doesn't block the asyncio event loop.

Authentication uses a stored OAuth refresh token. The access token is
refreshed by google-auth on the first request.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from sleepsync.errors import ConnectivityError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


def build_credentials(client_id: str, client_secret: str, refresh_token: str) -> Credentials:
    return Credentials(
        token=None,
        refresh_token=refresh_token,
        client_id=client_id,
        client_secret=client_secret,
        token_uri=TOKEN_URI,
        scopes=SCOPES,
    )


class GoogleCalendarClient:
    """
    Thin async wrapper over a googleapiclient calendar Resource.

    Pass `service` in tests to avoid building a real discovery client.
    """

    def __init__(self, credentials: Optional[Credentials] = None, service=None):
        if service is None:
            service = build("calendar", "v3", credentials=credentials, cache_discovery=False)
        self._service = service

    async def _run(self, fn, *args, **kwargs):
        """Run a sync googleapiclient call in the thread pool."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, lambda: fn(*args, **kwargs))

    async def list_calendars(self) -> List[Dict[str, Any]]:
        response = await self._run(lambda: self._service.calendarList().list().execute())
        return response.get("items", [])

    async def check_connection(self, calendar_ids: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """List calendars, warning about configured ids that aren't visible.

        Raises:
            ConnectivityError: if the credentials are rejected or Google is unreachable.
        """
        try:
            calendars = await self.list_calendars()
        except (HttpError, GoogleAuthError, OSError) as exc:
            raise ConnectivityError("Google Calendar", str(exc)) from exc

        logger.info("Google Calendar connection OK (%d calendars)", len(calendars))
        visible = {c.get("id") for c in calendars}
        for cal_id in calendar_ids or []:
            if cal_id and cal_id not in visible:
                logger.warning("Calendar %s is not in this account's calendar list", cal_id)
        return calendars

    async def create_event(self, body: Dict[str, Any], calendar_id: str) -> str:
        """Insert an event. Returns the new event id."""
        event = await self._run(
            lambda: self._service.events().insert(calendarId=calendar_id, body=body).execute()
        )
        logger.info("Created calendar event %r on %s", body.get("summary"), calendar_id)
        return event["id"]
