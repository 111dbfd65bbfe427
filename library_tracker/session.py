"""Session context: the one library, the active persistence mode, and user actions."""
import logging
from enum import Enum
from typing import Callable, List, Optional

from library_tracker.document_store import DocumentStore, Subscription
from library_tracker.errors import DuplicateBookError, LibraryTrackerError
from library_tracker.library import Library
from library_tracker.local_store import LocalAdapter
from library_tracker.models import Book
from library_tracker.remote import RemoteAdapter

logger = logging.getLogger(__name__)


class PersistenceMode(Enum):
    """Where library changes are persisted."""
    LOCAL = "local"
    REMOTE = "remote"


class Session:
    """
    State of one running tracker session.

    Holds the single Library the presentation renders from. In LOCAL mode the
    library mirrors local storage and is changed in place. In REMOTE mode it
    mirrors the signed-in owner's documents and is replaced by every snapshot.
    """

    def __init__(
        self,
        local: LocalAdapter,
        store: Optional[DocumentStore] = None,
        collection: str = "books",
        render: Optional[Callable[[Library], None]] = None
    ):
        """
        Initialize session.

        Args:
            local: Adapter for local storage
            store: Remote document store used once signed in
            collection: Remote collection name
            render: Called with the library after every change
        """
        self.library = Library()
        self.local = local
        self.store = store
        self.collection = collection
        self.render = render
        self.mode = PersistenceMode.LOCAL
        self.remote: Optional[RemoteAdapter] = None
        self.subscription: Optional[Subscription] = None

    def start(self) -> None:
        """Load the library from local storage and show it."""
        self.library.replace(self.local.restore())
        self._changed()

    # Authentication transitions

    def sign_in(self, owner_id: str) -> None:
        """Switch to REMOTE mode and follow the owner's books."""
        if self.store is None:
            raise LibraryTrackerError("No remote store configured")
        remote = RemoteAdapter(self.store, owner_id, self.collection)
        # The session keeps its previous mode if the live query cannot be opened
        subscription = remote.subscribe(self._on_snapshot)
        self._cancel_subscription()
        self.remote = remote
        self.subscription = subscription
        self.mode = PersistenceMode.REMOTE
        logger.info(f"Signed in as {owner_id}; using remote storage")

    def sign_out(self) -> None:
        """Switch back to LOCAL mode and show the locally stored library."""
        self._cancel_subscription()
        self.remote = None
        self.mode = PersistenceMode.LOCAL
        logger.info("Signed out; using local storage")
        self.start()

    # User actions

    def add_book(self, book: Book) -> None:
        """
        Add a book to the library.

        Raises:
            DuplicateBookError: If a book with this title is already shown
        """
        if self.library.contains(book.title):
            raise DuplicateBookError(book.title)

        if self.mode is PersistenceMode.REMOTE:
            self.remote.create(book)
        else:
            self.library.add(book)
            self.local.save(self.library)
            self._changed()

    def remove_book(self, title: str) -> None:
        """Remove a book by title. Unknown titles are ignored."""
        if self.mode is PersistenceMode.REMOTE:
            self.remote.delete(title)
        else:
            self.library.remove(title)
            self.local.save(self.library)
            self._changed()

    def toggle_read(self, title: str) -> None:
        """Flip a book's read status. Unknown titles are ignored."""
        book = self.library.find(title)
        if book is None:
            return

        if self.mode is PersistenceMode.REMOTE:
            self.remote.update(title, {"isRead": not book.is_read})
        else:
            self.library.toggle_read(title)
            self.local.save(self.library)
            self._changed()

    def close(self) -> None:
        """Release the live subscription."""
        self._cancel_subscription()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def _on_snapshot(self, books: List[Book]) -> None:
        self.library.replace(books)
        self._changed()

    def _cancel_subscription(self) -> None:
        if self.subscription is not None:
            self.subscription.cancel()
            self.subscription = None

    def _changed(self) -> None:
        if self.render is not None:
            self.render(self.library)
