"""
Local SQLite implementation of the downstream sleep table.

Same contract as notion.table.NotionSleepTable, so the orchestrators can run
against either. Like the Notion database, the table itself enforces no
uniqueness on source_id; duplicate prevention belongs to the callers.
"""
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from sleepsync.analysis.weeks import NightRange
from sleepsync.errors import ConnectivityError
from sleepsync.models.night import NightRecord


class SqlSleepTable:
    """NightRecord rows stored through SQLModel."""

    def __init__(self, engine):
        """
        Args:
            engine: SQLAlchemy engine (SQLModel create_engine result).
        """
        self.engine = engine

    async def check_connection(self) -> bool:
        try:
            with Session(self.engine) as s:
                s.exec(select(NightRecord).limit(1)).first()
        except SQLAlchemyError as exc:
            raise ConnectivityError("SQLite", str(exc)) from exc
        return True

    async def query(
        self,
        night_range: NightRange,
        calendar_created: Optional[bool] = False,
    ) -> List[NightRecord]:
        """Records with night_of inside night_range, oldest first.

        Pass calendar_created=None to ignore the export flag.
        """
        stmt = select(NightRecord).where(
            NightRecord.night_of >= night_range.start,
            NightRecord.night_of <= night_range.end,
        )
        if calendar_created is not None:
            stmt = stmt.where(NightRecord.calendar_created == calendar_created)
        stmt = stmt.order_by(NightRecord.night_of)

        try:
            with Session(self.engine) as s:
                return list(s.exec(stmt).all())
        except SQLAlchemyError as exc:
            raise ConnectivityError("SQLite", str(exc)) from exc

    async def insert(self, record: NightRecord) -> str:
        """Persist a new row and return its table id."""
        row = NightRecord.model_validate(record.model_dump(exclude={"id", "table_id"}))
        with Session(self.engine) as s:
            s.add(row)
            s.commit()
            s.refresh(row)
            table_id = str(row.id)
            row.table_id = table_id
            s.add(row)
            s.commit()
        return table_id

    async def mark_calendar_created(self, table_id: str) -> None:
        with Session(self.engine) as s:
            row = s.get(NightRecord, int(table_id))
            if row is None:
                raise KeyError(f"No sleep record with id {table_id}")
            row.calendar_created = True
            s.add(row)
            s.commit()
