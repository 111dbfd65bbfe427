"""Render the library as book cards."""
import json
from typing import Iterable
from tabulate import tabulate
from library_tracker.models import Book

FORMATS = ("grid", "json", "compact")


def card_fields(book: Book) -> list:
    """Text lines of one card: quoted title, author, page count, read status."""
    return [
        f'"{book.title}"',
        book.author,
        f"{book.pages} pages",
        book.status_str
    ]


def render_books(books: Iterable[Book], format_type: str = "grid") -> str:
    """
    Render every book in the given format.

    Args:
        books: Books in display order
        format_type: One of ``grid``, ``json`` or ``compact``

    Returns:
        The rendered text
    """
    books = list(books)

    if format_type == "grid":
        if not books:
            return "No books yet"
        headers = ["Title", "Author", "Pages", "Status"]
        rows = [card_fields(book) for book in books]
        return tabulate(rows, headers=headers, tablefmt="grid")

    elif format_type == "json":
        return json.dumps([book.to_dict() for book in books], indent=2)

    elif format_type == "compact":
        return "\n".join(
            f"{i}. {card_fields(book)[0]} - {book.author} [{book.status_str}]"
            for i, book in enumerate(books, 1)
        )

    raise ValueError(f"Unknown format: {format_type}")
