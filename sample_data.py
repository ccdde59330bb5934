from __future__ import annotations

from books import Book
from library_system import Library
from users import User


def seed_library(library: Library) -> Library:
    """
    Loads the fixed demo catalog: five books (B004 already out) and four users.
    """
    library.addBook(Book("B001", "To Kill a Mockingbird", "Harper Lee", "Fiction"))
    library.addBook(Book("B002", "1984", "George Orwell", "Dystopian Fiction"))
    library.addBook(Book("B003", "Pride and Prejudice", "Jane Austen", "Romance"))
    library.addBook(Book("B004", "The Great Gatsby", "F. Scott Fitzgerald", "Classic", isAvailable=False))
    library.addBook(Book("B005", "Java Programming", "John Smith", "Programming"))

    library.addUser(User.regular("U001", "Alice Johnson", "alice@email.com"))
    library.addUser(User.premium("U002", "Bob Smith", "bob@email.com"))
    library.addUser(User.regular("U003", "Carol Davis", "carol@email.com"))
    library.addUser(User.premium("U004", "David Wilson", "david@email.com"))
    return library


def build_sample_library() -> Library:
    return seed_library(Library())
