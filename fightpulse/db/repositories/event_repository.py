"""Event repository used by the ingestion upsert flow."""

from __future__ import annotations

from datetime import date

from sqlalchemy import select

from fightpulse.db.models import Event
from fightpulse.db.repositories.base import BaseRepository


class EventRepository(BaseRepository):
    """Natural-key lookups and writes for :class:`Event` rows."""

    async def find_by_url(self, event_url: str) -> Event | None:
        """Return the event registered under ``event_url`` (exact match)."""
        query = select(Event).where(Event.event_url == event_url)
        async with self._gateway_call("event lookup by url"):
            result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def find_by_name_and_date(self, name: str, event_date: date) -> Event | None:
        """Fallback natural key for events scraped without a URL."""
        query = (
            select(Event)
            .where(Event.name == name, Event.date == event_date)
            .order_by(Event.created_at, Event.id)
            .limit(1)
        )
        async with self._gateway_call("event lookup by name and date"):
            result = await self._session.execute(query)
        return result.scalars().first()

    async def create_event(self, event: Event) -> Event:
        """Insert a new event and flush so the generated id is available."""
        self._session.add(event)
        async with self._gateway_call("event insert"):
            await self._session.flush()
        return event

    async def save_event(self, event: Event) -> Event:
        """Flush pending attribute changes on an already persistent event."""
        async with self._gateway_call("event update"):
            await self._session.flush()
        return event
