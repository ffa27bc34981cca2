"""
Notion database as the downstream sleep table.

The database enforces no uniqueness on "Sleep ID"; the orchestrators avoid
duplicates by window filtering, the source-id check before insert, and the
"Calendar Created" checkbox.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx
from notion_client import APIResponseError, AsyncClient
from notion_client.errors import RequestTimeoutError

from sleepsync.analysis.weeks import NightRange
from sleepsync.errors import ConnectivityError
from sleepsync.models.night import NightRecord
from sleepsync.notion.properties import page_to_record, record_to_properties

logger = logging.getLogger(__name__)


class NotionSleepTable:
    """Reads and writes NightRecord pages in one Notion database."""

    def __init__(
        self,
        token: str,
        database_id: str,
        timezone_label: str = "ET",
        client: Optional[AsyncClient] = None,
    ):
        self._notion = client or AsyncClient(auth=token)
        self._database_id = database_id
        self._timezone_label = timezone_label

    async def check_connection(self) -> str:
        """Retrieve the database. Returns its title.

        Raises:
            ConnectivityError: if the token or database id is rejected.
        """
        try:
            db = await self._notion.databases.retrieve(database_id=self._database_id)
        except (APIResponseError, RequestTimeoutError, httpx.HTTPError) as exc:
            raise ConnectivityError("Notion", str(exc)) from exc
        title = "".join(t.get("plain_text", "") for t in db.get("title", [])) or "Sleep Database"
        logger.info("Notion connection OK (database: %s)", title)
        return title

    def _build_filter(
        self, night_range: NightRange, calendar_created: Optional[bool]
    ) -> Dict[str, Any]:
        conditions: List[Dict[str, Any]] = [
            {"property": "Date", "date": {"on_or_after": night_range.start.isoformat()}},
            {"property": "Date", "date": {"on_or_before": night_range.end.isoformat()}},
        ]
        if calendar_created is not None:
            conditions.append(
                {"property": "Calendar Created", "checkbox": {"equals": calendar_created}}
            )
        return {"and": conditions}

    async def query(
        self,
        night_range: NightRange,
        calendar_created: Optional[bool] = False,
    ) -> List[NightRecord]:
        """Records with Date inside night_range, oldest first.

        Pass calendar_created=None to ignore the checkbox.
        """
        kwargs: Dict[str, Any] = {
            "database_id": self._database_id,
            "filter": self._build_filter(night_range, calendar_created),
            "sorts": [{"property": "Date", "direction": "ascending"}],
        }
        pages: List[Dict[str, Any]] = []
        while True:
            try:
                response = await self._notion.databases.query(**kwargs)
            except (APIResponseError, RequestTimeoutError, httpx.HTTPError) as exc:
                raise ConnectivityError("Notion", f"database query failed: {exc}") from exc
            pages.extend(response.get("results", []))
            if not response.get("has_more"):
                break
            kwargs["start_cursor"] = response["next_cursor"]

        logger.info(
            "Read %d sleep records from %s to %s",
            len(pages), night_range.start, night_range.end,
        )
        return [page_to_record(p) for p in pages]

    async def insert(self, record: NightRecord) -> str:
        """Create a page for `record`. Returns the new page id."""
        page = await self._notion.pages.create(
            parent={"database_id": self._database_id},
            properties=record_to_properties(record, self._timezone_label),
        )
        logger.info("Created sleep record for %s", record.night_of)
        return page["id"]

    async def mark_calendar_created(self, table_id: str) -> None:
        try:
            await self._notion.pages.update(
                page_id=table_id,
                properties={"Calendar Created": {"checkbox": True}},
            )
        except (APIResponseError, RequestTimeoutError, httpx.HTTPError) as exc:
            raise ConnectivityError("Notion", f"could not mark page {table_id}: {exc}") from exc
