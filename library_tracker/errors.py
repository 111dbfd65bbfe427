"""Exceptions raised by the library tracker."""
from typing import List


class LibraryTrackerError(Exception):
    """Base class for library tracker errors."""


class DuplicateBookError(LibraryTrackerError):
    """A book with the same title is already in the library."""

    def __init__(self, title: str):
        super().__init__("This book already exists in your library")
        self.title = title


class DocumentNotFoundError(LibraryTrackerError):
    """A remote document id does not exist."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"No document {doc_id!r} in '{collection}'")
        self.collection = collection
        self.doc_id = doc_id


class AmbiguousBookError(LibraryTrackerError):
    """More than one remote document matches an owner and title."""

    def __init__(self, title: str, doc_ids: List[str]):
        super().__init__(
            f"{len(doc_ids)} documents match title {title!r}: {', '.join(doc_ids)}"
        )
        self.title = title
        self.doc_ids = doc_ids
