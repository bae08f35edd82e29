import threading
from datetime import datetime, timezone
from uuid import uuid4

from .indexes import IndexSpec


class InMemoryStore:
    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict]] = {}
        self.indexes: set[IndexSpec] = set()
        self.lock = threading.RLock()

    def collection(self, name: str) -> dict[str, dict]:
        return self.collections.setdefault(name, {})

    @staticmethod
    def make_id() -> str:
        return uuid4().hex

    @staticmethod
    def now() -> datetime:
        return datetime.now(timezone.utc)
