"""Remote document store interface and an in-memory implementation."""
import copy
import logging
import time
import uuid
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional

from library_tracker.errors import DocumentNotFoundError

logger = logging.getLogger(__name__)


class _ServerTimestamp:
    """Placeholder replaced by the store's clock when a document is written."""

    def __repr__(self):
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass
class Document:
    """A stored document."""
    id: str
    data: Dict[str, Any]
    created_at: Optional[datetime] = None


SnapshotCallback = Callable[[List[Document]], None]


class Subscription:
    """
    Handle on a live query.

    Each change produces a full snapshot of the matching documents. Snapshots
    go to the callback when one is given, otherwise they queue in ``pending``
    until drained. Once cancelled, nothing more is delivered.
    """

    def __init__(
        self,
        collection: str,
        filters: Dict[str, Any],
        order_by: Optional[str] = None,
        callback: Optional[SnapshotCallback] = None,
        on_cancel: Optional[Callable[["Subscription"], None]] = None
    ):
        self.collection = collection
        self.filters = dict(filters)
        self.order_by = order_by
        self.callback = callback
        self.pending = deque()
        self.cancelled = False
        self._on_cancel = on_cancel

    def deliver(self, docs: List[Document]) -> None:
        """Hand one snapshot to the consumer."""
        if self.cancelled:
            return
        if self.callback is not None:
            self.callback(docs)
        else:
            self.pending.append(docs)

    def drain(self) -> Iterator[List[Document]]:
        """Yield queued snapshots, oldest first."""
        while self.pending and not self.cancelled:
            yield self.pending.popleft()

    def cancel(self) -> None:
        """Stop delivery and release the live query."""
        if self.cancelled:
            return
        self.cancelled = True
        self.pending.clear()
        if self._on_cancel is not None:
            self._on_cancel(self)
        logger.info(f"Subscription on '{self.collection}' cancelled")


class DocumentStore(ABC):
    """Named collections of JSON documents with live queries."""

    @abstractmethod
    def add(self, collection: str, data: Dict[str, Any]) -> str:
        """Store a new document and return its id."""

    @abstractmethod
    def query(
        self,
        collection: str,
        filters: Dict[str, Any],
        order_by: Optional[str] = None
    ) -> List[Document]:
        """
        Find documents whose fields equal every filter value.

        Documents without the ``order_by`` field are left out of ordered queries.
        """

    @abstractmethod
    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """Patch the given fields of one document."""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        """Delete one document. Missing ids are ignored."""

    @abstractmethod
    def watch(
        self,
        collection: str,
        filters: Dict[str, Any],
        order_by: Optional[str] = None,
        callback: Optional[SnapshotCallback] = None
    ) -> Subscription:
        """Open a live query. The current result is delivered right away."""

    def wait(self, timeout: float) -> int:
        """
        Wait up to ``timeout`` seconds for remote changes and deliver them.

        Returns:
            Number of change notifications handled
        """
        time.sleep(timeout)
        return 0

    def close(self):
        """Release store resources."""

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


class InMemoryDocumentStore(DocumentStore):
    """Document store held in process memory. Notifies watchers synchronously."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._collections: Dict[str, Dict[str, Document]] = {}
        self._subscriptions: List[Subscription] = []
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        now = self._clock()
        stored = {
            key: now.isoformat() if value is SERVER_TIMESTAMP else copy.deepcopy(value)
            for key, value in data.items()
        }
        self._collections.setdefault(collection, {})[doc_id] = Document(doc_id, stored, now)
        self._notify(collection)
        return doc_id

    def query(
        self,
        collection: str,
        filters: Dict[str, Any],
        order_by: Optional[str] = None
    ) -> List[Document]:
        docs = [
            doc for doc in self._collections.get(collection, {}).values()
            if all(key in doc.data and doc.data[key] == value for key, value in filters.items())
        ]
        if order_by:
            # Stable sort keeps insertion order between equal keys
            docs = sorted(
                (doc for doc in docs if order_by in doc.data),
                key=lambda doc: doc.data[order_by]
            )
        return [Document(doc.id, copy.deepcopy(doc.data), doc.created_at) for doc in docs]

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        doc = self._collections.get(collection, {}).get(doc_id)
        if doc is None:
            raise DocumentNotFoundError(collection, doc_id)
        now = self._clock()
        for key, value in fields.items():
            doc.data[key] = now.isoformat() if value is SERVER_TIMESTAMP else copy.deepcopy(value)
        self._notify(collection)

    def delete(self, collection: str, doc_id: str) -> None:
        if self._collections.get(collection, {}).pop(doc_id, None) is not None:
            self._notify(collection)

    def watch(
        self,
        collection: str,
        filters: Dict[str, Any],
        order_by: Optional[str] = None,
        callback: Optional[SnapshotCallback] = None
    ) -> Subscription:
        subscription = Subscription(
            collection, filters, order_by, callback,
            on_cancel=self._subscriptions.remove
        )
        self._subscriptions.append(subscription)
        logger.info(f"Watching '{collection}' where {filters}")
        subscription.deliver(self.query(collection, filters, order_by))
        return subscription

    def _notify(self, collection: str) -> None:
        for subscription in list(self._subscriptions):
            if subscription.collection == collection:
                subscription.deliver(
                    self.query(collection, subscription.filters, subscription.order_by)
                )
