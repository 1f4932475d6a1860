"""
Date-keyed event store.

Events are kept in buckets keyed by the local calendar day ('YYYY-MM-DD'),
in the order they were added. The whole store of a user is saved as one
JSON document in the user's storage slot after every change.
"""

import json
import logging
import time
from dataclasses import dataclass, field

from colors import DEFAULT_EVENT_COLOR, contrast_color, normalize_hex
from datekeys import to_date_key
from storage import Storage, StorageError

logger = logging.getLogger(__name__)


class DuplicateEventError(ValueError):
    pass


def storage_key(user_id) -> str:
    return f"events_{user_id}"


@dataclass
class SessionContext:
    """Who is using the calendar right now and where their slot lives."""
    user_id: str
    storage: Storage

    @property
    def key(self) -> str:
        return storage_key(self.user_id)


@dataclass
class EventRecord:
    id: int
    title: str
    date: str
    time: str | None = None
    place: str | None = None
    description: str | None = None
    color: str = DEFAULT_EVENT_COLOR
    owner: str | None = None

    @property
    def text_color(self) -> str:
        # always follows color, never stored
        return contrast_color(self.color)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "time": self.time,
            "place": self.place,
            "description": self.description,
            "color": self.color,
            "textColor": self.text_color,
            "owner": self.owner,
        }

    @classmethod
    def from_dict(cls, data: dict, date_key: str | None = None) -> "EventRecord":
        """
        Build a record from its stored form. textColor in the data is ignored.
        Raises ValueError / TypeError / OverflowError when there is no usable
        id or date. Colors that are not hex fall back to the default.
        """
        key = to_date_key(data.get("date")) or date_key
        if key is None:
            raise ValueError("event without a valid date")
        return cls(
            id=int(data["id"]),
            title=str(data.get("title") or ""),
            date=key,
            time=data.get("time") or None,
            place=data.get("place") or None,
            description=data.get("description") or None,
            color=normalize_hex(data.get("color")),
            owner=data.get("owner"),
        )


@dataclass
class EventStore:
    buckets: dict[str, list[EventRecord]] = field(default_factory=dict)
    # set by load_store when the slot could not be read at all; saving such
    # a store would overwrite events we never saw
    read_failed: bool = field(default=False, compare=False)

    def __len__(self):
        return sum(len(bucket) for bucket in self.buckets.values())

    def __iter__(self):
        for bucket in self.buckets.values():
            yield from bucket

    def ids(self) -> set[int]:
        return {record.id for record in self}

    def next_id(self) -> int:
        # millisecond timestamp, bumped past anything already stored
        now_ms = int(time.time() * 1000)
        return max([now_ms] + [record.id + 1 for record in self])

    def add(self, record: EventRecord) -> EventRecord:
        """
        Append to the bucket of record.date. No validation here: the
        controller decides what is a valid event, the store keeps what it gets.
        """
        if record.id in self.ids():
            raise DuplicateEventError(f"event id {record.id} already stored")
        self.buckets.setdefault(record.date, []).append(record)
        return record

    def remove(self, event_id) -> EventRecord | None:
        """Remove the first event with this id. Unknown id -> None, nothing changes."""
        for key, bucket in self.buckets.items():
            for index, record in enumerate(bucket):
                if record.id == event_id:
                    del bucket[index]
                    if not bucket:
                        del self.buckets[key]
                    return record
        return None

    def get(self, event_id) -> EventRecord | None:
        for record in self:
            if record.id == event_id:
                return record
        return None

    def events_for(self, date_key) -> list[EventRecord]:
        return list(self.buckets.get(date_key, []))

    def dates_with_events(self, year: int, month: int) -> set[int]:
        prefix = f"{year:04d}-{month:02d}-"
        return {
            int(key[len(prefix):])
            for key, bucket in self.buckets.items()
            if bucket and key.startswith(prefix) and key[len(prefix):].isdigit()
        }

    def to_dict(self) -> dict:
        return {
            key: [
                {k: v for k, v in record.to_dict().items() if k != "textColor"}
                for record in bucket
            ]
            for key, bucket in self.buckets.items()
            if bucket
        }

    @classmethod
    def from_dict(cls, data) -> "EventStore":
        """
        Rebuild a store from its JSON form. Old data may hold plain strings
        instead of event objects; those become title-only events on that day.
        Entries that can't be used are skipped.
        """
        if not isinstance(data, dict):
            raise ValueError("stored events must be an object keyed by date")

        store = cls()
        taken = set()
        for items in data.values():
            for item in items if isinstance(items, list) else []:
                if isinstance(item, dict):
                    try:
                        taken.add(int(item.get("id")))
                    except (TypeError, ValueError, OverflowError):
                        pass
        legacy_id = max(taken, default=0) + 1

        for key, items in data.items():
            bucket_key = to_date_key(key)
            if not isinstance(items, list):
                logger.warning("skipping bucket %r: not a list", key)
                continue
            for item in items:
                if isinstance(item, str):
                    if bucket_key is None:
                        continue
                    item = {"id": legacy_id, "title": item, "date": bucket_key}
                    legacy_id += 1
                if not isinstance(item, dict):
                    continue
                try:
                    record = EventRecord.from_dict(item, bucket_key)
                    store.add(record)
                except (KeyError, ValueError, TypeError, OverflowError) as e:
                    logger.warning("skipping stored event in %r: %s", key, e)
        return store


def load_store(ctx: SessionContext) -> EventStore:
    """
    Read the user's events. Missing or broken data gives an empty store,
    this never raises. When the backend itself failed the store comes back
    with read_failed set.
    """
    try:
        raw = ctx.storage.get(ctx.key)
    except StorageError:
        logger.warning("could not read %s, starting empty", ctx.key, exc_info=True)
        return EventStore(read_failed=True)

    if not raw:
        return EventStore()

    try:
        return EventStore.from_dict(json.loads(raw))
    except (ValueError, TypeError, OverflowError, RecursionError) as e:
        logger.warning("stored events in %s are unreadable (%s), starting empty", ctx.key, e)
        return EventStore()


def save_store(store: EventStore, ctx: SessionContext) -> bool:
    """
    Overwrite the user's slot with the whole store. A failed write is logged
    and reported with False; the in-memory store stays as it is.
    """
    payload = json.dumps(store.to_dict(), ensure_ascii=False)
    try:
        ctx.storage.set(ctx.key, payload)
    except StorageError:
        logger.exception("could not save events to %s", ctx.key)
        return False
    return True
