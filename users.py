from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Optional

from exceptions import UserValidationError


logger = logging.getLogger("library.users")

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
MAX_RENEWALS = 2


class UserType(Enum):
    """Closed set of user roles. The value is the display label."""
    REGULAR = "Regular User"
    PREMIUM = "Premium User"


@dataclass(frozen=True)
class LendingPolicy:
    """
    Fixed lending rules for one user role.

    Attributes:
        maxBooks (int): How many books may be held at once.
        loanDurationDays (int): Length of a loan in days.
        lateFeeRate (float): Late fee charged per overdue day.
        canRenew (bool): Whether loans may be renewed.
    """
    maxBooks: int
    loanDurationDays: int
    lateFeeRate: float
    canRenew: bool


LENDING_POLICIES: Dict[UserType, LendingPolicy] = {
    UserType.REGULAR: LendingPolicy(maxBooks=3, loanDurationDays=14, lateFeeRate=0.50, canRenew=False),
    UserType.PREMIUM: LendingPolicy(maxBooks=10, loanDurationDays=30, lateFeeRate=0.25, canRenew=True),
}


# Validation / Normalization
def normalize_user_id(userId: Optional[str]) -> str:
    if userId is None or not userId.strip():
        raise UserValidationError("User ID cannot be null or empty")
    return userId.strip().upper()


def normalize_name(name: Optional[str]) -> str:
    if name is None or not name.strip():
        raise UserValidationError("Name cannot be null or empty")
    return name.strip()


def normalize_email(email: Optional[str]) -> str:
    """
    Trims and lower-cases an email after checking it looks like local@domain.tld.

    Raises:
        UserValidationError: If the email is empty or malformed.
    """
    if email is None or not email.strip():
        raise UserValidationError("Email cannot be null or empty")
    email = email.strip()
    if not EMAIL_PATTERN.match(email):
        raise UserValidationError(f"Invalid email format: {email!r}")
    return email.lower()


# Domain Model
@dataclass(eq=False)
class User:
    """
    A library user whose lending rules come from its UserType.

    Behaviour that differs between roles is looked up in LENDING_POLICIES
    rather than overridden in subclasses.

    Attributes:
        userId (str): Unique id, trimmed and upper-cased.
        name (str): Display name, trimmed.
        email (str): Email address, trimmed and lower-cased.
        userType (UserType): Role selecting the lending policy.
        registrationDate (date): Day the user was registered.
        renewalCount (int): Renewals used so far (premium only, never decremented).

    userId and userType cannot be reassigned after construction.
    """
    userId: str
    name: str
    email: str
    userType: UserType = UserType.REGULAR
    registrationDate: date = field(default_factory=date.today)
    _renewalCount: int = field(default=0, init=False)
    _borrowedBookIds: Dict[str, None] = field(default_factory=dict, init=False, repr=False)

    _READ_ONLY = ("userId", "userType")

    def __post_init__(self) -> None:
        object.__setattr__(self, "userId", normalize_user_id(self.userId))
        self.name = normalize_name(self.name)
        self.email = normalize_email(self.email)
        if not isinstance(self.userType, UserType):
            raise UserValidationError(f"Unknown user type: {self.userType!r}")

    def __setattr__(self, name: str, value: object) -> None:
        if name in self._READ_ONLY and name in self.__dict__:
            raise AttributeError(f"{name} is read-only")
        super().__setattr__(name, value)

    @classmethod
    def create(cls, userType: UserType, userId: str, name: str, email: str) -> "User":
        return cls(userId=userId, name=name, email=email, userType=userType)

    @classmethod
    def regular(cls, userId: str, name: str, email: str) -> "User":
        return cls.create(UserType.REGULAR, userId, name, email)

    @classmethod
    def premium(cls, userId: str, name: str, email: str) -> "User":
        return cls.create(UserType.PREMIUM, userId, name, email)

    # Identity
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self.userId == other.userId

    def __hash__(self) -> int:
        return hash(self.userId)

    # Policy
    @property
    def policy(self) -> LendingPolicy:
        return LENDING_POLICIES[self.userType]

    def getMaxBooksAllowed(self) -> int:
        return self.policy.maxBooks

    def getLoanDuration(self) -> int:
        return self.policy.loanDurationDays

    def getUserType(self) -> str:
        return self.userType.value

    def getLateFeeRate(self) -> float:
        return self.policy.lateFeeRate

    def isPremium(self) -> bool:
        return self.userType is UserType.PREMIUM

    def dueDateFor(self, borrowedOn: date) -> date:
        return borrowedOn + timedelta(days=self.getLoanDuration())

    # Borrowed books
    def getBorrowedBookIds(self) -> List[str]:
        """
        Returns a copy of the held book ids in borrow order.
        """
        return list(self._borrowedBookIds)

    def getCurrentBooksCount(self) -> int:
        return len(self._borrowedBookIds)

    def canBorrowBook(self) -> bool:
        return self.getCurrentBooksCount() < self.getMaxBooksAllowed()

    def hasBorrowedBook(self, bookId: str) -> bool:
        return bookId in self._borrowedBookIds

    def borrowBook(self, bookId: str) -> bool:
        """
        Adds bookId to the held set.

        Returns False (and changes nothing) when the user is at capacity
        or already holds the book.
        """
        if not self.canBorrowBook():
            logger.debug("borrowBook refused at capacity | userId=%s bookId=%s", self.userId, bookId)
            return False
        if self.hasBorrowedBook(bookId):
            logger.debug("borrowBook refused already held | userId=%s bookId=%s", self.userId, bookId)
            return False
        self._borrowedBookIds[bookId] = None
        return True

    def returnBook(self, bookId: str) -> bool:
        if bookId not in self._borrowedBookIds:
            return False
        del self._borrowedBookIds[bookId]
        return True

    # Renewals
    def canRenewBooks(self) -> bool:
        return self.policy.canRenew and self._renewalCount < MAX_RENEWALS

    def renewBook(self, bookId: str) -> bool:
        """
        Uses one renewal on a held book.

        The counter is per user, not per book: two renewals in total, ever.
        """
        if not self.canRenewBooks() or not self.hasBorrowedBook(bookId):
            return False
        self._renewalCount += 1
        logger.debug("renewBook ok | userId=%s bookId=%s renewals=%d", self.userId, bookId, self._renewalCount)
        return True

    @property
    def renewalCount(self) -> int:
        return self._renewalCount

    def getRenewalCount(self) -> int:
        return self._renewalCount

    def __str__(self) -> str:
        base = (
            f"{self.userType.name.title()}User{{userId='{self.userId}', name='{self.name}', "
            f"email='{self.email}', borrowedBooks={self.getCurrentBooksCount()}"
        )
        if self.policy.canRenew:
            base += f", renewals={self.renewalCount}"
        return base + "}"


def make_user(userId: str, name: str, email: str, premium: bool = False) -> User:
    userType = UserType.PREMIUM if premium else UserType.REGULAR
    return User.create(userType, userId, name, email)
