"""Data models for books."""
from dataclasses import dataclass
from typing import Any, Dict, Mapping

UNKNOWN = "Unknown"


@dataclass
class Book:
    """A book in the reader's library. Identified by its title."""
    title: str = UNKNOWN
    author: str = UNKNOWN
    pages: str = "0"
    is_read: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Book":
        """
        Rebuild a book from a stored mapping.

        Args:
            data: Mapping with ``title``, ``author``, ``pages`` and ``isRead`` keys

        Returns:
            Book with defaults for any absent key
        """
        return cls(
            title=data.get("title", UNKNOWN),
            author=data.get("author", UNKNOWN),
            pages=data.get("pages", "0"),
            is_read=data.get("isRead", False)
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the stored field names."""
        return {
            "title": self.title,
            "author": self.author,
            "pages": self.pages,
            "isRead": self.is_read
        }

    @property
    def status_str(self) -> str:
        """Read status as shown on a card."""
        return "Read" if self.is_read else "Not read"
