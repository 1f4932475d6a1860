"""
Durable key/value slots used by the event store.

Anything with get(key) and set(key, value) works; the app uses the
database-backed one, tests use MemoryStorage.
"""

from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from models import StorageSlot


class StorageError(Exception):
    """The backend could not read or write a slot."""


class Storage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: dict[str, str] | None = None):
        self.slots: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.slots.get(key)

    def set(self, key: str, value: str) -> None:
        self.slots[key] = value


class DatabaseStorage:
    """Slots in the storage_slot table. Needs an app context."""

    def __init__(self, db):
        self.db = db

    def get(self, key: str) -> str | None:
        try:
            slot = self.db.session.get(StorageSlot, key)
        except SQLAlchemyError as e:
            raise StorageError(f"could not read slot {key!r}") from e
        return slot.value if slot else None

    def set(self, key: str, value: str) -> None:
        try:
            slot = self.db.session.get(StorageSlot, key)
            if slot is None:
                slot = StorageSlot(key=key, value=value)
                self.db.session.add(slot)
            else:
                slot.value = value
            self.db.session.commit()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise StorageError(f"could not write slot {key!r}") from e
