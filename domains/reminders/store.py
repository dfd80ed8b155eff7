"""Reminder persistence.

ReminderStore is the contract the rest of the domain talks to. Lifecycle
guards live here, in one place: backends only provide a conditional state
update, so markNotified/markCompleted behave the same whatever the storage.

Backends:
- SQLiteReminderStore: local file, WAL mode (default)
- SupabaseReminderStore: PostgREST table over httpx
"""

import sqlite3
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import httpx
from dateutil.parser import isoparse

from logger import logger
from . import config
from .lifecycle import InvalidTransition, ReminderState, transition
from .models import Frequency, Reminder, ReminderDraft

NON_DAILY = (Frequency.ONCE.value, Frequency.WEEKLY.value, Frequency.MONTHLY.value)


def new_reminder_id() -> str:
    """Opaque id short enough to type back in a command."""
    return f"remind_{uuid.uuid4().hex[:8]}"


def due_date_bounds(now: datetime) -> tuple[date, date]:
    """Calendar-date bounds of the [now, now + 24h] candidate window."""
    return now.date(), (now + timedelta(hours=24)).date()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReminderStore(ABC):
    """Storage contract for reminders."""

    @abstractmethod
    async def create(self, draft: ReminderDraft, owner: str) -> Reminder:
        """Persist a draft (date and time must be filled in)."""

    @abstractmethod
    async def get(self, reminder_id: str) -> Optional[Reminder]:
        """Fetch one reminder, None if it does not exist."""

    @abstractmethod
    async def list_by_owner(self, owner: str) -> list[Reminder]:
        """All reminders of one owner, oldest first."""

    @abstractmethod
    async def list_due(self, now: datetime) -> list[Reminder]:
        """Candidate set for a poll tick.

        Union of:
        - daily reminders not yet notified
        - once/weekly/monthly reminders not notified, not completed, with
          date between now.date() and (now + 24h).date()
        Ordered by creation.
        """

    @abstractmethod
    async def delete(self, reminder_id: str) -> bool:
        """Remove a reminder permanently. True if something was deleted."""

    @abstractmethod
    async def _update_state(
        self,
        reminder: Reminder,
        new_state: ReminderState,
        stamp_field: str,
        at: datetime,
    ) -> bool:
        """Move `reminder` to `new_state` only if its stored state is unchanged.

        Returns:
            True if the row was updated
        """

    @abstractmethod
    async def _record_delivery(self, reminder_id: str, field: str, day: date) -> Optional[Reminder]:
        """Store a delivery date in `field` (last_fired_on / advance_notice_on)."""

    async def mark_notified(self, reminder_id: str) -> Optional[Reminder]:
        """ACTIVE → NOTIFIED. None if the reminder does not exist.

        Raises:
            InvalidTransition: If the reminder is already notified or completed
        """
        return await self._transition(reminder_id, ReminderState.NOTIFIED, "notified_at")

    async def mark_completed(self, reminder_id: str) -> Optional[Reminder]:
        """ACTIVE/NOTIFIED → COMPLETED. None if the reminder does not exist.

        Raises:
            InvalidTransition: If the reminder is already completed
        """
        return await self._transition(reminder_id, ReminderState.COMPLETED, "completed_at")

    async def record_daily_fire(self, reminder_id: str, day: date) -> Optional[Reminder]:
        """Remember that a daily reminder fired on `day`."""
        return await self._record_delivery(reminder_id, "last_fired_on", day)

    async def record_advance_notice(self, reminder_id: str, day: date) -> Optional[Reminder]:
        """Remember that the day-before notice went out on `day`."""
        return await self._record_delivery(reminder_id, "advance_notice_on", day)

    async def _transition(
        self,
        reminder_id: str,
        requested: ReminderState,
        stamp_field: str,
    ) -> Optional[Reminder]:
        reminder = await self.get(reminder_id)
        if reminder is None:
            return None

        transition(reminder.id, reminder.state, requested)

        if not await self._update_state(reminder, requested, stamp_field, _utcnow()):
            # Changed or deleted between read and write
            current = await self.get(reminder_id)
            if current is None:
                return None
            raise InvalidTransition(reminder_id, current.state, requested)

        logger.info(f"Reminder {reminder_id}: {reminder.state.value} → {requested.value}")
        return await self.get(reminder_id)

    def close(self) -> None:
        """Release backend resources."""


def _check_draft(draft: ReminderDraft) -> None:
    if not draft.text:
        raise ValueError("Reminder text must not be empty")
    if draft.date is None or draft.time is None:
        raise ValueError("Draft must have date and time filled in before create")


# =============================================================================
# SQLITE
# =============================================================================

class SQLiteReminderStore(ReminderStore):
    """Reminders in a local SQLite file."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or config.REMINDER_DB_PATH
        self._connection: Optional[sqlite3.Connection] = None

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection with WAL mode."""
        if self._connection is not None:
            return self._connection

        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._connection = sqlite3.connect(self.db_path, timeout=10.0)
        self._connection.row_factory = sqlite3.Row
        self._connection.execute("PRAGMA journal_mode=WAL")
        self._connection.execute("PRAGMA busy_timeout=5000")
        self._init_schema(self._connection)

        logger.info(f"Reminder store initialized: {self.db_path}")
        return self._connection

    @staticmethod
    def _init_schema(conn: sqlite3.Connection) -> None:
        """Create tables if they don't exist."""
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS reminders (
                id TEXT PRIMARY KEY,
                owner TEXT NOT NULL,
                text TEXT NOT NULL,
                date TEXT NOT NULL,
                time TEXT NOT NULL,
                frequency TEXT NOT NULL DEFAULT 'once',
                state TEXT NOT NULL DEFAULT 'active',
                notified_at TEXT,
                completed_at TEXT,
                last_fired_on TEXT,
                advance_notice_on TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_reminders_owner ON reminders(owner);
            CREATE INDEX IF NOT EXISTS idx_reminders_due ON reminders(notified_at, frequency, date);
        """)
        conn.commit()

    @contextmanager
    def _transaction(self):
        """Context manager for database transactions."""
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Reminder:
        def _dt(value):
            return datetime.fromisoformat(value) if value else None

        def _d(value):
            return date.fromisoformat(value) if value else None

        return Reminder(
            id=row["id"],
            owner=row["owner"],
            text=row["text"],
            date=date.fromisoformat(row["date"]),
            time=row["time"],
            frequency=Frequency(row["frequency"]),
            state=ReminderState(row["state"]),
            notified_at=_dt(row["notified_at"]),
            completed_at=_dt(row["completed_at"]),
            last_fired_on=_d(row["last_fired_on"]),
            advance_notice_on=_d(row["advance_notice_on"]),
            created_at=_dt(row["created_at"]),
            updated_at=_dt(row["updated_at"]),
        )

    async def create(self, draft: ReminderDraft, owner: str) -> Reminder:
        _check_draft(draft)
        reminder_id = new_reminder_id()
        stamp = _utcnow().isoformat()

        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO reminders
                (id, owner, text, date, time, frequency, state, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, 'active', ?, ?)
                """,
                (
                    reminder_id,
                    owner,
                    draft.text,
                    draft.date.isoformat(),
                    draft.time,
                    draft.frequency.value,
                    stamp,
                    stamp,
                )
            )

        logger.info(f"Saved reminder {reminder_id} for {owner}: '{draft.text}'")
        return await self.get(reminder_id)

    async def get(self, reminder_id: str) -> Optional[Reminder]:
        row = self._get_connection().execute(
            "SELECT * FROM reminders WHERE id = ?",
            (reminder_id,)
        ).fetchone()
        return self._from_row(row) if row else None

    async def list_by_owner(self, owner: str) -> list[Reminder]:
        rows = self._get_connection().execute(
            "SELECT * FROM reminders WHERE owner = ? ORDER BY created_at, rowid",
            (owner,)
        ).fetchall()
        return [self._from_row(row) for row in rows]

    async def list_due(self, now: datetime) -> list[Reminder]:
        start, end = due_date_bounds(now)
        rows = self._get_connection().execute(
            """
            SELECT * FROM reminders
            WHERE notified_at IS NULL
              AND (
                frequency = 'daily'
                OR (
                  frequency IN (?, ?, ?)
                  AND state != 'completed'
                  AND date >= ? AND date <= ?
                )
              )
            ORDER BY created_at, rowid
            """,
            (*NON_DAILY, start.isoformat(), end.isoformat())
        ).fetchall()
        return [self._from_row(row) for row in rows]

    async def delete(self, reminder_id: str) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM reminders WHERE id = ?", (reminder_id,))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info(f"Deleted reminder {reminder_id}")
        return deleted

    async def _update_state(self, reminder, new_state, stamp_field, at) -> bool:
        if stamp_field not in ("notified_at", "completed_at"):
            raise ValueError(f"Unknown lifecycle stamp: {stamp_field}")

        with self._transaction() as conn:
            cursor = conn.execute(
                f"""
                UPDATE reminders
                SET state = ?, {stamp_field} = ?, updated_at = ?
                WHERE id = ? AND state = ?
                """,
                (new_state.value, at.isoformat(), at.isoformat(), reminder.id, reminder.state.value)
            )
            return cursor.rowcount > 0

    async def _record_delivery(self, reminder_id, field, day) -> Optional[Reminder]:
        if field not in ("last_fired_on", "advance_notice_on"):
            raise ValueError(f"Unknown delivery field: {field}")

        with self._transaction() as conn:
            conn.execute(
                f"UPDATE reminders SET {field} = ?, updated_at = ? WHERE id = ?",
                (day.isoformat(), _utcnow().isoformat(), reminder_id)
            )
        return await self.get(reminder_id)

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None


# =============================================================================
# SUPABASE
# =============================================================================

class SupabaseReminderStore(ReminderStore):
    """Reminders in a Supabase table via the PostgREST API."""

    def __init__(
        self,
        url: str,
        key: str,
        table: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = f"{url.rstrip('/')}/rest/v1/{table or config.SUPABASE_TABLE}"
        self.key = key
        self._transport = transport

    def _headers(self) -> dict:
        """Get headers for Supabase API calls."""
        return {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation"
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(headers=self._headers(), timeout=10, transport=self._transport)

    @staticmethod
    def _from_row(row: dict) -> Reminder:
        def _dt(value):
            return isoparse(value) if value else None

        def _d(value):
            return date.fromisoformat(value[:10]) if value else None

        return Reminder(
            id=row["id"],
            owner=row["owner"],
            text=row["text"],
            date=date.fromisoformat(row["date"][:10]),
            time=row["time"][:5],
            frequency=Frequency(row.get("frequency") or "once"),
            state=ReminderState(row.get("state") or "active"),
            notified_at=_dt(row.get("notified_at")),
            completed_at=_dt(row.get("completed_at")),
            last_fired_on=_d(row.get("last_fired_on")),
            advance_notice_on=_d(row.get("advance_notice_on")),
            created_at=_dt(row.get("created_at")),
            updated_at=_dt(row.get("updated_at")),
        )

    async def _select(self, params: dict) -> list[Reminder]:
        async with self._client() as client:
            response = await client.get(self.endpoint, params={"select": "*", **params})
            response.raise_for_status()
            return [self._from_row(row) for row in response.json()]

    async def _patch(self, params: dict, payload: dict) -> list[dict]:
        async with self._client() as client:
            response = await client.patch(self.endpoint, params=params, json=payload)
            response.raise_for_status()
            return response.json()

    async def create(self, draft: ReminderDraft, owner: str) -> Reminder:
        _check_draft(draft)
        stamp = _utcnow().isoformat()

        async with self._client() as client:
            response = await client.post(
                self.endpoint,
                json={
                    "id": new_reminder_id(),
                    "owner": owner,
                    "text": draft.text,
                    "date": draft.date.isoformat(),
                    "time": draft.time,
                    "frequency": draft.frequency.value,
                    "state": ReminderState.ACTIVE.value,
                    "created_at": stamp,
                    "updated_at": stamp,
                },
            )
            response.raise_for_status()
            reminder = self._from_row(response.json()[0])

        logger.info(f"Saved reminder {reminder.id} to Supabase for {owner}")
        return reminder

    async def get(self, reminder_id: str) -> Optional[Reminder]:
        rows = await self._select({"id": f"eq.{reminder_id}"})
        return rows[0] if rows else None

    async def list_by_owner(self, owner: str) -> list[Reminder]:
        return await self._select({"owner": f"eq.{owner}", "order": "created_at.asc"})

    async def list_due(self, now: datetime) -> list[Reminder]:
        start, end = due_date_bounds(now)
        non_daily = ",".join(NON_DAILY)
        return await self._select({
            "notified_at": "is.null",
            "or": (
                f"(frequency.eq.daily,"
                f"and(frequency.in.({non_daily}),state.neq.completed,"
                f"date.gte.{start.isoformat()},date.lte.{end.isoformat()}))"
            ),
            "order": "created_at.asc",
        })

    async def delete(self, reminder_id: str) -> bool:
        async with self._client() as client:
            response = await client.delete(self.endpoint, params={"id": f"eq.{reminder_id}"})
            response.raise_for_status()
            deleted = len(response.json()) > 0

        if deleted:
            logger.info(f"Deleted reminder {reminder_id}")
        return deleted

    async def _update_state(self, reminder, new_state, stamp_field, at) -> bool:
        rows = await self._patch(
            {"id": f"eq.{reminder.id}", "state": f"eq.{reminder.state.value}"},
            {"state": new_state.value, stamp_field: at.isoformat(), "updated_at": at.isoformat()},
        )
        return len(rows) > 0

    async def _record_delivery(self, reminder_id, field, day) -> Optional[Reminder]:
        rows = await self._patch(
            {"id": f"eq.{reminder_id}"},
            {field: day.isoformat(), "updated_at": _utcnow().isoformat()},
        )
        return self._from_row(rows[0]) if rows else None


def create_store() -> ReminderStore:
    """Build the store selected by REMINDER_STORE."""
    if config.REMINDER_STORE == "supabase":
        from config import SUPABASE_URL, SUPABASE_KEY

        if not SUPABASE_URL or not SUPABASE_KEY:
            raise ValueError("REMINDER_STORE=supabase needs SUPABASE_URL and SUPABASE_KEY")
        return SupabaseReminderStore(SUPABASE_URL, SUPABASE_KEY)

    if config.REMINDER_STORE == "sqlite":
        return SQLiteReminderStore()

    raise ValueError(f"Unknown REMINDER_STORE: {config.REMINDER_STORE}")
