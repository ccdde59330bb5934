from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from books import Book
from exceptions import (
    BookNotFoundError,
    UserNotFoundError,
    DuplicateBookError,
    DuplicateUserError,
)
from transactions import Ledger, Transaction
from users import User


# Logging configuration
logger = logging.getLogger("library")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


class LendingOutcome(Enum):
    SUCCESS = "success"
    BOOK_NOT_FOUND = "book_not_found"
    USER_NOT_FOUND = "user_not_found"
    UNAVAILABLE = "unavailable"
    INELIGIBLE = "ineligible"
    ALREADY_AVAILABLE = "already_available"
    NOT_BORROWED_BY_USER = "not_borrowed_by_user"
    RENEWAL_DENIED = "renewal_denied"


@dataclass(frozen=True)
class LendingResult:
    """
    Outcome of issueBook / returnBook / renewBook.

    Business-rule refusals are ordinary results, not exceptions; callers
    branch on ``ok`` (or truthiness) and show ``message``.

    Attributes:
        outcome (LendingOutcome): What happened.
        message (str): Human-readable explanation.
        transaction (Optional[Transaction]): Ledger record appended on success, if any.
    """
    outcome: LendingOutcome
    message: str
    transaction: Optional[Transaction] = None

    @property
    def ok(self) -> bool:
        return self.outcome is LendingOutcome.SUCCESS

    def __bool__(self) -> bool:
        return self.ok


# Library Core
class Library:
    """
    Coordinator that owns the books, users and transaction ledger.

    Rules enforced:
        (1) A book can only be issued while it is available
        (2) A user's borrowing limit comes from their lending policy
        (3) A book can only be returned by the user holding it
        (4) Only premium users may renew, at most twice per account

    Every lending operation either applies all of its effects (user,
    book, ledger) or none of them.
    """

    def __init__(self, ledger: Optional[Ledger] = None) -> None:
        """
        Initializes an empty catalog with no books, users or transactions.
        """
        self.books: Dict[str, Book] = {}
        self.users: Dict[str, User] = {}
        self.ledger: Ledger = ledger if ledger is not None else Ledger()

    # Registration
    def addBook(self, book: Book) -> None:
        """
        Adds a new book to the catalog.

        Raises:
            DuplicateBookError: If a book with the same id already exists.
        """
        logger.info("addBook called | bookId=%s title=%s", book.bookId, book.title)

        if book.bookId in self.books:
            raise DuplicateBookError(f"Book already exists: bookId={book.bookId}")

        self.books[book.bookId] = book
        logger.info("Book added successfully | bookId=%s", book.bookId)

    def addUser(self, user: User) -> None:
        """
        Registers a new user.

        Raises:
            DuplicateUserError: If a user with the same id already exists.
        """
        logger.info("addUser called | userId=%s type=%s", user.userId, user.userType.name)

        if user.userId in self.users:
            raise DuplicateUserError(f"User already exists: userId={user.userId}")

        self.users[user.userId] = user
        logger.info("User added successfully | userId=%s", user.userId)

    # Lookup
    def findBookById(self, bookId: str) -> Optional[Book]:
        if bookId is None:
            return None
        return self.books.get(bookId.strip())

    def findUserById(self, userId: str) -> Optional[User]:
        # Stored ids are normalized, so normalize the query the same way.
        if userId is None:
            return None
        return self.users.get(userId.strip().upper())

    def getBook(self, bookId: str) -> Book:
        """
        Retrieves a book by id or raises BookNotFoundError.
        """
        book = self.findBookById(bookId)
        if book is None:
            raise BookNotFoundError(f"Book not found: bookId={bookId}")
        return book

    def getUser(self, userId: str) -> User:
        """
        Retrieves a user by id or raises UserNotFoundError.
        """
        user = self.findUserById(userId)
        if user is None:
            raise UserNotFoundError(f"User not found: userId={userId}")
        return user

    # Lending
    def issueBook(self, bookId: str, userId: str) -> LendingResult:
        """
        Issues a book to a user.

        Refuses (with no mutation) when either id is unknown, the book is
        not available, or the user's policy rejects the borrow.
        """
        logger.info("issueBook called | bookId=%s userId=%s", bookId, userId)

        book = self.findBookById(bookId)
        if book is None:
            return self._refuse(LendingOutcome.BOOK_NOT_FOUND, f"Book not found: {bookId}")
        user = self.findUserById(userId)
        if user is None:
            return self._refuse(LendingOutcome.USER_NOT_FOUND, f"User not found: {userId}")

        if not book.isAvailable:
            return self._refuse(LendingOutcome.UNAVAILABLE, f"Book '{book.title}' is not available.")

        if user.hasBorrowedBook(book.bookId):
            reason = f"{user.name} already has '{book.title}'."
        else:
            reason = (
                f"{user.name} has reached the limit of "
                f"{user.getMaxBooksAllowed()} books ({user.getUserType()})."
            )
        if not user.borrowBook(book.bookId):
            return self._refuse(LendingOutcome.INELIGIBLE, reason)

        try:
            book.setAvailable(False)
            txn = self.ledger.recordBorrow(user, book)
        except Exception:
            logger.exception("issueBook failed, rolling back | bookId=%s userId=%s", book.bookId, user.userId)
            book.setAvailable(True)
            user.returnBook(book.bookId)
            raise

        logger.info("Issue successful | bookId=%s userId=%s txn=%s", book.bookId, user.userId, txn.transactionId)
        return LendingResult(
            LendingOutcome.SUCCESS,
            f"Book '{book.title}' issued to {user.name}. Due in {user.getLoanDuration()} days.",
            txn,
        )

    def returnBook(self, bookId: str, userId: str) -> LendingResult:
        """
        Returns a book held by a user.

        Refuses (with no mutation) when either id is unknown, the book is
        already available, or this user does not hold it.
        """
        logger.info("returnBook called | bookId=%s userId=%s", bookId, userId)

        book = self.findBookById(bookId)
        if book is None:
            return self._refuse(LendingOutcome.BOOK_NOT_FOUND, f"Book not found: {bookId}")
        user = self.findUserById(userId)
        if user is None:
            return self._refuse(LendingOutcome.USER_NOT_FOUND, f"User not found: {userId}")

        if book.isAvailable:
            return self._refuse(LendingOutcome.ALREADY_AVAILABLE, f"Book '{book.title}' is already available.")

        if not user.hasBorrowedBook(book.bookId):
            return self._refuse(
                LendingOutcome.NOT_BORROWED_BY_USER,
                f"{user.name} does not have '{book.title}' checked out.",
            )

        # Record first: the state changes after it cannot fail.
        txn = self.ledger.recordReturn(user, book)
        book.setAvailable(True)
        user.returnBook(book.bookId)

        logger.info("Return successful | bookId=%s userId=%s txn=%s", book.bookId, user.userId, txn.transactionId)
        return LendingResult(LendingOutcome.SUCCESS, f"Book '{book.title}' returned by {user.name}.", txn)

    def renewBook(self, bookId: str, userId: str) -> LendingResult:
        """
        Renews a loan for a premium user.

        Renewal extends the loan only; it does not touch book availability
        or the ledger.
        """
        logger.info("renewBook called | bookId=%s userId=%s", bookId, userId)

        book = self.findBookById(bookId)
        if book is None:
            return self._refuse(LendingOutcome.BOOK_NOT_FOUND, f"Book not found: {bookId}")
        user = self.findUserById(userId)
        if user is None:
            return self._refuse(LendingOutcome.USER_NOT_FOUND, f"User not found: {userId}")

        if not user.hasBorrowedBook(book.bookId):
            return self._refuse(
                LendingOutcome.NOT_BORROWED_BY_USER,
                f"{user.name} does not have '{book.title}' checked out.",
            )

        if not user.renewBook(book.bookId):
            if not user.policy.canRenew:
                reason = f"{user.getUserType()} accounts cannot renew books."
            else:
                reason = f"{user.name} has used all renewals ({user.getRenewalCount()})."
            return self._refuse(LendingOutcome.RENEWAL_DENIED, reason)

        logger.info("Renew successful | bookId=%s userId=%s renewals=%d",
                    book.bookId, user.userId, user.getRenewalCount())
        return LendingResult(LendingOutcome.SUCCESS, f"Book '{book.title}' renewed for {user.name}.")

    # Queries
    def getAllBooks(self) -> List[Book]:
        return list(self.books.values())

    def getAvailableBooks(self) -> List[Book]:
        """
        Returns all books currently available for issue.
        """
        return [b for b in self.books.values() if b.isAvailable]

    def getAllUsers(self) -> List[User]:
        return list(self.users.values())

    def getTransactions(self) -> List[Transaction]:
        return self.ledger.all()

    def getUserTransactions(self, userId: str) -> List[Transaction]:
        """
        Returns the ledger entries for one user, oldest first.

        Raises:
            UserNotFoundError
        """
        user = self.getUser(userId)
        return self.ledger.forUser(user.userId)

    def getBorrowedBooks(self, userId: str) -> List[Book]:
        user = self.getUser(userId)
        return [self.books[bid] for bid in user.getBorrowedBookIds() if bid in self.books]

    def getDueDate(self, bookId: str) -> Optional[date]:
        """
        Due date of the outstanding loan on a book, or None if it is not on loan.
        """
        book = self.getBook(bookId)
        open_borrow = self.ledger.findOpenBorrow(book.bookId)
        if open_borrow is None:
            return None
        borrower = self.findUserById(open_borrow.userId)
        if borrower is None:
            return None
        return borrower.dueDateFor(open_borrow.timestamp.date())

    # Internal Helpers
    @staticmethod
    def _refuse(outcome: LendingOutcome, message: str) -> LendingResult:
        logger.warning("Refused | outcome=%s | %s", outcome.value, message)
        return LendingResult(outcome, message)
