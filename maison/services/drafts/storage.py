"""Key/value storage backends for the draft slot."""
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from maison.db.models import DraftSlot


class KeyValueStorage(ABC):
    """Abstract base class for durable key/value storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get the value stored under a key, or None."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Removing a missing key is not an error."""
        pass


class InMemoryKeyValueStorage(KeyValueStorage):
    """Dict-backed storage, lost when the process exits."""

    def __init__(self):
        self._values: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class SqlKeyValueStorage(KeyValueStorage):
    """Storage backed by the `draft_slots` table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self.session_factory() as session:
            slot = session.execute(
                select(DraftSlot).where(DraftSlot.key == key)
            ).scalar_one_or_none()
            return slot.value if slot else None

    def set(self, key: str, value: str) -> None:
        with self.session_factory() as session:
            slot = session.get(DraftSlot, key)
            if slot is None:
                session.add(DraftSlot(key=key, value=value))
            else:
                slot.value = value
            session.commit()

    def delete(self, key: str) -> None:
        with self.session_factory() as session:
            slot = session.get(DraftSlot, key)
            if slot is not None:
                session.delete(slot)
                session.commit()
