"""Tests for the in-memory library."""
from library_tracker.library import Library
from library_tracker.models import Book


def test_book_defaults():
    """Test that omitted fields take their defaults."""
    book = Book()

    assert book.title == "Unknown"
    assert book.author == "Unknown"
    assert book.pages == "0"
    assert book.is_read is False


def test_add_keeps_first_of_duplicate_titles():
    """Test that adding an existing title is a silent no-op."""
    library = Library()

    library.add(Book("Dune", "Herbert", "412", False))
    library.add(Book("Dune", "X", "1"))

    assert len(library) == 1
    assert library.find("Dune").author == "Herbert"
    assert library.find("Dune").pages == "412"


def test_add_one_record_per_title():
    """Test that any add sequence leaves one record per distinct title."""
    library = Library()
    titles = ["A", "B", "A", "C", "B", "A"]

    for i, title in enumerate(titles):
        library.add(Book(title, author=str(i)))

    assert [book.title for book in library] == ["A", "B", "C"]
    assert [book.author for book in library] == ["0", "1", "3"]


def test_titles_are_case_sensitive():
    """Test that titles differing only in case are distinct."""
    library = Library([Book("dune"), Book("Dune")])

    assert len(library) == 2
    assert library.contains("dune")
    assert not library.contains("DUNE")


def test_remove_then_find():
    """Test that a removed title is never found, present or not."""
    library = Library([Book("A"), Book("B"), Book("C")])

    library.remove("B")
    library.remove("Nope")

    assert library.find("B") is None
    assert library.find("Nope") is None
    assert [book.title for book in library] == ["A", "C"]


def test_remove_from_empty_library():
    """Test removing from an empty library raises nothing."""
    library = Library()

    library.remove("Nope")

    assert len(library) == 0


def test_find_and_contains():
    """Test lookup by exact title."""
    library = Library([Book("A", "X")])

    assert library.find("A").author == "X"
    assert library.find("a") is None
    assert library.contains("A")
    assert not library.contains("B")


def test_toggle_read_only_changes_one_book():
    """Test toggling leaves other books and the order unchanged."""
    library = Library([Book("A"), Book("B")])

    assert library.toggle_read("A") is True

    assert library.find("A").is_read is True
    assert library.find("B").is_read is False
    assert [book.title for book in library] == ["A", "B"]


def test_toggle_read_missing_title():
    """Test toggling an absent title reports nothing."""
    library = Library([Book("A")])

    assert library.toggle_read("B") is None
    assert library.find("A").is_read is False


def test_replace_swaps_content():
    """Test that replace drops previous content entirely."""
    library = Library([Book("A")])

    library.replace([Book("C"), Book("B")])

    assert [book.title for book in library] == ["C", "B"]
