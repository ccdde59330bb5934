from __future__ import annotations

from dataclasses import dataclass

from exceptions import BookValidationError


@dataclass
class Book:
    """
    Represents a book in the catalog.

    Attributes:
        bookId (str): Unique identifier for the book (immutable after creation).
        title (str): Book title.
        author (str): Author name.
        category (str): Shelf category, e.g. "Fiction".
        isAvailable (bool): Whether the book can currently be issued.
    """
    bookId: str
    title: str
    author: str
    category: str = "General"
    isAvailable: bool = True

    _READ_ONLY = ("bookId",)

    def __post_init__(self) -> None:
        if not self.bookId or not self.bookId.strip():
            raise BookValidationError("bookId cannot be empty")
        if not self.title or not self.title.strip():
            raise BookValidationError("title cannot be empty")
        object.__setattr__(self, "bookId", self.bookId.strip())
        self.title = self.title.strip()

    def __setattr__(self, name: str, value: object) -> None:
        if name in self._READ_ONLY and name in self.__dict__:
            raise AttributeError(f"{name} is read-only")
        super().__setattr__(name, value)

    def setAvailable(self, available: bool) -> None:
        self.isAvailable = bool(available)
