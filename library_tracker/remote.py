"""Remote persistence: maps library operations onto an owner's documents."""
import logging
from typing import Any, Callable, Dict, List, Optional

from library_tracker.document_store import Document, DocumentStore, Subscription
from library_tracker.errors import AmbiguousBookError
from library_tracker.models import Book
from library_tracker.parse import book_to_doc, docs_to_books

logger = logging.getLogger(__name__)


class RemoteAdapter:
    """Library persistence scoped to one signed-in owner."""

    def __init__(self, store: DocumentStore, owner_id: str, collection: str = "books"):
        """
        Initialize remote adapter.

        Args:
            store: Document store holding every owner's books
            owner_id: Identity of the signed-in user
            collection: Collection name in the store
        """
        self.store = store
        self.owner_id = owner_id
        self.collection = collection

    def subscribe(self, on_change: Callable[[List[Book]], None]) -> Subscription:
        """
        Watch the owner's books in creation order.

        Args:
            on_change: Called with the full list of books on every change

        Returns:
            Subscription handle; cancel() stops further calls
        """
        def handle_snapshot(docs: List[Document]):
            on_change(docs_to_books(docs))

        return self.store.watch(
            self.collection,
            {"ownerId": self.owner_id},
            order_by="createdAt",
            callback=handle_snapshot
        )

    def create(self, book: Book) -> str:
        """Store a new book. Duplicate titles are not checked here."""
        return self.store.add(self.collection, book_to_doc(book, self.owner_id))

    def delete(self, title: str) -> None:
        """Delete the owner's book with this title."""
        doc_id = self.get_book_id(title)
        if doc_id is None:
            return
        self.store.delete(self.collection, doc_id)

    def update(self, title: str, fields: Dict[str, Any]) -> None:
        """Patch the given fields of the owner's book with this title."""
        doc_id = self.get_book_id(title)
        if doc_id is None:
            return
        self.store.update(self.collection, doc_id, fields)

    def get_book_id(self, title: str) -> Optional[str]:
        """
        Look up the document id for a title.

        Args:
            title: Exact book title

        Returns:
            The document id, or None when no document matches

        Raises:
            AmbiguousBookError: If several documents match
        """
        docs = self.store.query(
            self.collection,
            {"ownerId": self.owner_id, "title": title}
        )
        if not docs:
            logger.warning(f"No remote book titled {title!r} for owner {self.owner_id}")
            return None
        if len(docs) > 1:
            raise AmbiguousBookError(title, [doc.id for doc in docs])
        return docs[0].id
