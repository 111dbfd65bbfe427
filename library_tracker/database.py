"""PostgreSQL-backed document store with live queries over LISTEN/NOTIFY."""
import psycopg2
import psycopg2.extensions
from psycopg2 import pool
from psycopg2.extras import Json
from typing import Any, Dict, List, Optional
import json
import logging
import select
import uuid

from library_tracker.document_store import (
    Document,
    DocumentStore,
    SERVER_TIMESTAMP,
    SnapshotCallback,
    Subscription,
)
from library_tracker.errors import DocumentNotFoundError

logger = logging.getLogger(__name__)

NOTIFY_CHANNEL = "document_changes"


class PostgresDocumentStore(DocumentStore):
    """Documents stored as JSONB rows, with connection pooling."""

    def __init__(self, connection_string: str, min_conn: int = 1, max_conn: int = 10):
        """
        Initialize database connection pool.

        Args:
            connection_string: PostgreSQL connection string
            min_conn: Minimum connections in pool
            max_conn: Maximum connections in pool
        """
        self.connection_pool = psycopg2.pool.SimpleConnectionPool(
            min_conn,
            max_conn,
            connection_string
        )

        if self.connection_pool:
            logger.info("Database connection pool created successfully")
        else:
            raise Exception("Failed to create connection pool")

        self._listen_conn = None
        self._subscriptions: List[Subscription] = []

    def init_schema(self):
        """Create database tables if they don't exist."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    CREATE TABLE IF NOT EXISTS documents (
                        id VARCHAR(64) PRIMARY KEY,
                        collection VARCHAR(255) NOT NULL,
                        data JSONB NOT NULL,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)

                # Indexes for owner/title lookups and ordered listing
                cur.execute("""
                    CREATE INDEX IF NOT EXISTS idx_documents_data
                    ON documents USING gin(data jsonb_path_ops)
                """)

                cur.execute("""
                    CREATE INDEX IF NOT EXISTS idx_documents_collection_created
                    ON documents (collection, created_at)
                """)

                conn.commit()
                logger.info("Database schema initialized successfully")

        finally:
            self.connection_pool.putconn(conn)

    def _execute_write(self, collection: str, sql: str, params) -> int:
        """Run one write statement, announce the change, and return the row count."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                rowcount = cur.rowcount
                if rowcount:
                    cur.execute("SELECT pg_notify(%s, %s)", (NOTIFY_CHANNEL, collection))
                conn.commit()
                return rowcount
        except Exception:
            conn.rollback()
            raise
        finally:
            self.connection_pool.putconn(conn)

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        """
        Insert a new document.

        Args:
            collection: Collection name
            data: Document fields; SERVER_TIMESTAMP values take the insert time

        Returns:
            The new document id
        """
        doc_id = uuid.uuid4().hex[:20]
        plain = {key: value for key, value in data.items() if value is not SERVER_TIMESTAMP}
        expression = "%s::jsonb"
        params: List[Any] = [Json(plain)]
        for key in data:
            if data[key] is SERVER_TIMESTAMP:
                expression = f"({expression} || jsonb_build_object(%s, CURRENT_TIMESTAMP))"
                params.append(key)

        self._execute_write(
            collection,
            f"INSERT INTO documents (id, collection, data) VALUES (%s, %s, {expression})",
            [doc_id, collection, *params]
        )
        logger.info(f"Added document {doc_id} to '{collection}'")
        return doc_id

    def query(
        self,
        collection: str,
        filters: Dict[str, Any],
        order_by: Optional[str] = None
    ) -> List[Document]:
        """
        Find documents matching equality filters.

        Args:
            collection: Collection name
            filters: Field values every result must equal
            order_by: Field to sort by; documents lacking it are excluded

        Returns:
            List of Document objects
        """
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                sql = """
                    SELECT id, data, created_at
                    FROM documents
                    WHERE collection = %s AND data @> %s::jsonb
                """
                params: List[Any] = [collection, Json(filters)]
                if order_by:
                    sql += " AND data ? %s ORDER BY data -> %s, created_at"
                    params.extend([order_by, order_by])
                else:
                    sql += " ORDER BY created_at"
                cur.execute(sql, params)

                return [Document(row[0], row[1], row[2]) for row in cur.fetchall()]
        finally:
            self.connection_pool.putconn(conn)

    def update(self, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """Merge fields into one document."""
        plain = {key: value for key, value in fields.items() if value is not SERVER_TIMESTAMP}
        expression = "data || %s::jsonb"
        params: List[Any] = [Json(plain)]
        for key in fields:
            if fields[key] is SERVER_TIMESTAMP:
                expression = f"({expression} || jsonb_build_object(%s, CURRENT_TIMESTAMP))"
                params.append(key)

        updated = self._execute_write(
            collection,
            f"""
                UPDATE documents
                SET data = {expression}, updated_at = CURRENT_TIMESTAMP
                WHERE collection = %s AND id = %s
            """,
            [*params, collection, doc_id]
        )
        if not updated:
            raise DocumentNotFoundError(collection, doc_id)
        logger.info(f"Updated document {doc_id} in '{collection}': {json.dumps(plain)}")

    def delete(self, collection: str, doc_id: str) -> None:
        """Delete one document."""
        deleted = self._execute_write(
            collection,
            "DELETE FROM documents WHERE collection = %s AND id = %s",
            (collection, doc_id)
        )
        logger.info(f"Deleted {deleted} document(s) with id {doc_id} from '{collection}'")

    def watch(
        self,
        collection: str,
        filters: Dict[str, Any],
        order_by: Optional[str] = None,
        callback: Optional[SnapshotCallback] = None
    ) -> Subscription:
        """
        Open a live query.

        The current result is delivered immediately; later snapshots are
        delivered from poll().
        """
        self._ensure_listening()
        subscription = Subscription(
            collection, filters, order_by, callback,
            on_cancel=self._subscriptions.remove
        )
        self._subscriptions.append(subscription)
        logger.info(f"Watching '{collection}' where {filters}")
        subscription.deliver(self.query(collection, filters, order_by))
        return subscription

    def _ensure_listening(self):
        if self._listen_conn is not None:
            return
        conn = self.connection_pool.getconn()
        conn.set_isolation_level(psycopg2.extensions.ISOLATION_LEVEL_AUTOCOMMIT)
        with conn.cursor() as cur:
            cur.execute(f"LISTEN {NOTIFY_CHANNEL}")
        self._listen_conn = conn
        logger.info(f"Listening on channel {NOTIFY_CHANNEL}")

    def fileno(self) -> int:
        """File descriptor to wait on for change notifications."""
        self._ensure_listening()
        return self._listen_conn.fileno()

    def poll(self) -> int:
        """
        Deliver fresh snapshots for collections changed since the last poll.

        Returns:
            Number of notifications consumed
        """
        if self._listen_conn is None:
            return 0
        self._listen_conn.poll()
        changed = set()
        count = 0
        while self._listen_conn.notifies:
            notify = self._listen_conn.notifies.pop(0)
            changed.add(notify.payload)
            count += 1

        for subscription in list(self._subscriptions):
            if subscription.collection in changed:
                subscription.deliver(
                    self.query(subscription.collection, subscription.filters, subscription.order_by)
                )
        return count

    def wait(self, timeout: float) -> int:
        """Block up to ``timeout`` seconds for notifications, then poll."""
        ready, _, _ = select.select([self], [], [], timeout)
        return self.poll() if ready else 0

    def close(self):
        """Close all connections in the pool."""
        for subscription in list(self._subscriptions):
            subscription.cancel()
        if self._listen_conn is not None:
            self.connection_pool.putconn(self._listen_conn, close=True)
            self._listen_conn = None
        if self.connection_pool:
            self.connection_pool.closeall()
            logger.info("Database connection pool closed")
