#!/usr/bin/env python3
"""Library Tracker CLI - record books, toggle read status, sync locally or remotely."""
import argparse
import sys
from library_tracker.config import Config
from library_tracker.database import PostgresDocumentStore
from library_tracker.document_store import DocumentStore, InMemoryDocumentStore
from library_tracker.errors import LibraryTrackerError
from library_tracker.local_store import KeyValueStore, LocalAdapter
from library_tracker.models import Book
from library_tracker.render import FORMATS, render_books
from library_tracker.session import PersistenceMode, Session
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def setup_store(args, config: Config) -> DocumentStore:
    """Initialize the remote document store."""
    if args.memory:
        return InMemoryDocumentStore()
    store = PostgresDocumentStore(config.DATABASE_URL)
    store.init_schema()
    return store


def setup_session(args, config: Config, store=None, render=None) -> Session:
    """Build the session, restore local books, and sign in when a user is given."""
    local = LocalAdapter(
        KeyValueStore(config.LIBRARY_STORE_PATH),
        config.LIBRARY_STORAGE_KEY
    )
    session = Session(local, store, config.BOOKS_COLLECTION, render)
    session.start()
    if args.user:
        session.sign_in(args.user)
    return session


def run_action(args, config: Config):
    """Run one library action and print the resulting library."""
    store = setup_store(args, config) if args.user else None

    try:
        with setup_session(args, config, store) as session:
            # Only writes produce a change notification worth waiting for
            writes = args.command == "add" or (
                args.command != "list" and session.library.contains(args.title)
            )

            if args.command == "add":
                session.add_book(Book(args.title, args.author, args.pages, args.read))
                logger.info(f"✅ Added \"{args.title}\"")

            elif args.command == "remove":
                session.remove_book(args.title)

            elif args.command == "toggle":
                session.toggle_read(args.title)

            # Remote changes come back through the live subscription
            if session.mode is PersistenceMode.REMOTE and writes:
                store.wait(config.DEFAULT_WATCH_TIMEOUT)

            print("\n" + render_books(session.library, args.format))

    finally:
        if store is not None:
            store.close()


def watch_library(args, config: Config):
    """Re-render the library on every remote change until interrupted."""
    if not args.user:
        logger.error("❌ watch needs a signed-in user (--user or TRACKER_USER_ID)")
        sys.exit(1)

    store = setup_store(args, config)

    def render(library):
        print("\n" + render_books(library, args.format))

    try:
        with setup_session(args, config, store, render):
            logger.info("Watching for changes (Ctrl+C to stop)")
            while True:
                store.wait(config.DEFAULT_WATCH_TIMEOUT)
    finally:
        store.close()


def main():
    """Main CLI entry point."""
    config = Config()

    parser = argparse.ArgumentParser(
        description="Library Tracker - personal reading list",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Local library
  %(prog)s add "Dune" --author Herbert --pages 412
  %(prog)s toggle "Dune"

  # Remote library for a signed-in user
  %(prog)s --user alice list
  %(prog)s --user alice watch
        """
    )
    parser.add_argument("--user", default=config.TRACKER_USER_ID or None, help="Sign in as this user id")
    parser.add_argument("--format", choices=FORMATS, default="grid", help="Output format")
    parser.add_argument("--memory", action="store_true", help="Use an in-memory remote store")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("list", help="Show the library")

    add_parser = subparsers.add_parser("add", help="Add a book")
    add_parser.add_argument("title", help="Book title")
    add_parser.add_argument("--author", default="Unknown", help="Author (default: Unknown)")
    add_parser.add_argument("--pages", default="0", help="Page count (default: 0)")
    add_parser.add_argument("--read", action="store_true", help="Mark as read")

    remove_parser = subparsers.add_parser("remove", help="Remove a book")
    remove_parser.add_argument("title", help="Book title")

    toggle_parser = subparsers.add_parser("toggle", help="Toggle read status")
    toggle_parser.add_argument("title", help="Book title")

    subparsers.add_parser("watch", help="Follow remote changes")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "watch":
            watch_library(args, config)
        else:
            run_action(args, config)

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except LibraryTrackerError as e:
        logger.error(f"❌ {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
