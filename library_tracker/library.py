"""In-memory book collection, unique by title."""
from typing import Iterable, Iterator, List, Optional
from library_tracker.models import Book
from library_tracker.parse import deduplicate_books


class Library:
    """Ordered collection of books with at most one book per title."""

    def __init__(self, books: Optional[Iterable[Book]] = None):
        self.books: List[Book] = deduplicate_books(books or [])

    def add(self, book: Book) -> None:
        """Append a book unless its title is already present."""
        if not self.contains(book.title):
            self.books.append(book)

    def remove(self, title: str) -> None:
        """Remove the book with this exact title, if any."""
        self.books = [book for book in self.books if book.title != title]

    def find(self, title: str) -> Optional[Book]:
        """Return the book with this exact title, or None."""
        for book in self.books:
            if book.title == title:
                return book
        return None

    def contains(self, title: str) -> bool:
        return self.find(title) is not None

    def toggle_read(self, title: str) -> Optional[bool]:
        """
        Flip the read status of one book in place.

        Args:
            title: Title of the book to toggle

        Returns:
            The new read status, or None if no book has this title
        """
        book = self.find(title)
        if book is None:
            return None
        book.is_read = not book.is_read
        return book.is_read

    def replace(self, books: Iterable[Book]) -> None:
        """Swap the whole content for a new sequence of books."""
        self.books = list(books)

    def __iter__(self) -> Iterator[Book]:
        return iter(self.books)

    def __len__(self) -> int:
        return len(self.books)
