"""Per-chat subscription storage."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Subscription:
    chat_id: int
    name: str = ""
    subscribed: bool = True
    created_at: str = field(default_factory=lambda: datetime.now(tz=timezone.utc).isoformat())


class SubscriptionRepository(ABC):
    """Stores subscriptions by chat id; reads return detached copies."""

    @abstractmethod
    def get(self, chat_id: int) -> Subscription | None:
        raise NotImplementedError

    @abstractmethod
    def put(self, subscription: Subscription) -> None:
        raise NotImplementedError

    @abstractmethod
    def list(self) -> List[Subscription]:
        raise NotImplementedError

    def subscribers(self) -> List[Subscription]:
        return [sub for sub in self.list() if sub.subscribed]


class InMemorySubscriptionRepository(SubscriptionRepository):
    def __init__(self) -> None:
        self._items: Dict[int, Subscription] = {}

    def get(self, chat_id: int) -> Subscription | None:
        sub = self._items.get(chat_id)
        return None if sub is None else replace(sub)

    def put(self, subscription: Subscription) -> None:
        self._items[subscription.chat_id] = replace(subscription)

    def list(self) -> List[Subscription]:
        return [replace(sub) for sub in self._items.values()]


class JsonSubscriptionRepository(SubscriptionRepository):
    """Subscriptions keyed by chat id in a JSON file, rewritten on every put.

    An unreadable file starts an empty store; a failed write keeps the
    in-memory state.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._items: Dict[int, Subscription] = self._load()

    def _load(self) -> Dict[int, Subscription]:
        if not self._path.exists():
            logger.info("No session file at %s, starting fresh", self._path)
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
            items: Dict[int, Subscription] = {}
            for key, raw in payload.items():
                chat_id = int(raw.get("id", key))
                items[chat_id] = Subscription(
                    chat_id=chat_id,
                    name=raw.get("name") or "",
                    subscribed=bool(raw.get("subscribed", True)),
                    created_at=raw.get("createdAt", ""),
                )
        except (OSError, ValueError, AttributeError) as exc:
            logger.warning("Unreadable session file %s, starting fresh: %s", self._path, exc)
            return {}
        return items

    def _save(self) -> None:
        payload = {
            str(sub.chat_id): {
                "id": sub.chat_id,
                "name": sub.name,
                "subscribed": sub.subscribed,
                "createdAt": sub.created_at,
            }
            for sub in self._items.values()
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
        except OSError as exc:
            logger.exception("Error saving sessions to %s: %s", self._path, exc)

    def get(self, chat_id: int) -> Subscription | None:
        sub = self._items.get(chat_id)
        return None if sub is None else replace(sub)

    def put(self, subscription: Subscription) -> None:
        self._items[subscription.chat_id] = replace(subscription)
        self._save()

    def list(self) -> List[Subscription]:
        return [replace(sub) for sub in self._items.values()]
