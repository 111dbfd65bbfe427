"""Local persistence: a file-backed key-value store and the library adapter on top of it."""
import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

from library_tracker.library import Library
from library_tracker.parse import books_to_json, parse_books_json

logger = logging.getLogger(__name__)


class KeyValueStore:
    """String keys mapped to string values, kept in one JSON file."""

    def __init__(self, path):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        return json.loads(self.path.read_text(encoding="utf-8"))

    def _dump(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(items, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._dump(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if items.pop(key, None) is not None:
            self._dump(items)


class LocalAdapter:
    """Saves and restores the whole library under a single key."""

    def __init__(self, store: KeyValueStore, key: str = "library"):
        self.store = store
        self.key = key

    def save(self, library: Library) -> None:
        """
        Overwrite the stored library.

        Raises:
            OSError: If the store cannot be written
        """
        self.store.set_item(self.key, books_to_json(library))
        logger.info(f"Saved {len(library)} books to local storage")

    def restore(self) -> Library:
        """
        Read the stored library.

        Returns:
            A new Library; empty when nothing has been stored

        Raises:
            json.JSONDecodeError: If the stored value is malformed
        """
        books = parse_books_json(self.store.get_item(self.key))
        logger.info(f"Restored {len(books)} books from local storage")
        library = Library()
        library.replace(books)
        return library
