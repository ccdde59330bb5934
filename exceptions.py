class LibraryError(Exception):
    """Base exception for library catalog errors."""


class BookNotFoundError(LibraryError):
    """Requested bookId does not exist in the catalog."""


class UserNotFoundError(LibraryError):
    """Requested userId does not exist in the catalog."""


class UserValidationError(LibraryError, ValueError):
    """User id, name or email failed validation."""


class BookValidationError(LibraryError, ValueError):
    """Book id or title failed validation."""


class DuplicateBookError(LibraryError):
    """Trying to add a book that already exists."""


class DuplicateUserError(LibraryError):
    """Trying to add a user that already exists."""
