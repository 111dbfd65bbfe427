"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Remote document store
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "librarydb")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")

    @property
    def DATABASE_URL(self):
        """Build PostgreSQL connection string."""
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    BOOKS_COLLECTION = os.getenv("BOOKS_COLLECTION", "books")

    # Local storage
    LIBRARY_STORE_PATH = os.path.expanduser(
        os.getenv("LIBRARY_STORE_PATH", "~/.library_tracker/storage.json")
    )
    LIBRARY_STORAGE_KEY = os.getenv("LIBRARY_STORAGE_KEY", "library")

    # Identity used when no --user is given; empty means signed out
    TRACKER_USER_ID = os.getenv("TRACKER_USER_ID", "")

    # Defaults
    DEFAULT_WATCH_TIMEOUT = float(os.getenv("DEFAULT_WATCH_TIMEOUT", "5"))
