"""Convert stored JSON and remote documents to and from books."""
import json
from typing import Any, Dict, Iterable, List, Optional
from library_tracker.models import Book
from library_tracker.document_store import Document, SERVER_TIMESTAMP


def parse_books_json(raw: Optional[str]) -> List[Book]:
    """
    Parse the JSON array kept in local storage.

    Args:
        raw: Stored string, or None when nothing was stored

    Returns:
        List of Book objects (empty for a missing or null value)

    Raises:
        json.JSONDecodeError: If the stored value is not valid JSON
    """
    if raw is None:
        return []
    items = json.loads(raw)
    if not items:
        return []
    return [Book.from_dict(item) for item in items]


def books_to_json(books: Iterable[Book]) -> str:
    """Serialize books as the JSON array kept in local storage."""
    return json.dumps([book.to_dict() for book in books])


def docs_to_books(docs: Iterable[Document]) -> List[Book]:
    """Convert remote documents to books, keeping their order."""
    return [Book.from_dict(doc.data) for doc in docs]


def book_to_doc(book: Book, owner_id: str) -> Dict[str, Any]:
    """
    Build the remote document for a new book.

    Args:
        book: Book to store
        owner_id: Identity of the signed-in user

    Returns:
        Document fields; ``createdAt`` is filled in by the store
    """
    return {
        "ownerId": owner_id,
        **book.to_dict(),
        "createdAt": SERVER_TIMESTAMP
    }


def deduplicate_books(books: Iterable[Book]) -> List[Book]:
    """
    Remove duplicate books by title.

    Args:
        books: Books in priority order

    Returns:
        Books with only the first occurrence of each title
    """
    seen_titles = set()
    unique_books = []

    for book in books:
        if book.title not in seen_titles:
            seen_titles.add(book.title)
            unique_books.append(book)

    return unique_books
