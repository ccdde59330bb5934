from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Iterator, List, Optional, Set

from books import Book
from users import User


logger = logging.getLogger("library.ledger")


class TransactionType(Enum):
    BORROW = "BORROW"
    RETURN = "RETURN"


@dataclass(frozen=True)
class Transaction:
    """
    Immutable record of a single borrow or return.

    Entities are referenced by id only; the Library resolves them to the
    current Book/User when needed.

    Attributes:
        transactionId (str): Short token, unique within the ledger.
        userId (str): Id of the user who borrowed or returned.
        bookId (str): Id of the book involved.
        type (TransactionType): BORROW or RETURN.
        timestamp (datetime): When the record was created.
    """
    transactionId: str
    userId: str
    bookId: str
    type: TransactionType
    timestamp: datetime

    def is_borrow(self) -> bool:
        return self.type is TransactionType.BORROW


def _new_transaction_id() -> str:
    return uuid.uuid4().hex[:8]


class Ledger:
    """
    Append-only sequence of Transactions.

    Records are never mutated or removed. Ids come from ``id_factory`` and
    are retried until unused; ``clock`` supplies timestamps.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[], str] = _new_transaction_id,
    ) -> None:
        self._records: List[Transaction] = []
        self._ids: Set[str] = set()
        self._clock = clock
        self._id_factory = id_factory

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(list(self._records))

    def recordBorrow(self, user: User, book: Book) -> Transaction:
        return self._append(user, book, TransactionType.BORROW)

    def recordReturn(self, user: User, book: Book) -> Transaction:
        return self._append(user, book, TransactionType.RETURN)

    def findOpenBorrow(self, bookId: str) -> Optional[Transaction]:
        """
        Returns the most recent BORROW for bookId that has no later RETURN,
        or None when the book has no outstanding loan.
        """
        for txn in reversed(self._records):
            if txn.bookId != bookId:
                continue
            if txn.type is TransactionType.RETURN:
                return None
            return txn
        return None

    def all(self) -> List[Transaction]:
        return list(self._records)

    def forBook(self, bookId: str) -> List[Transaction]:
        return [t for t in self._records if t.bookId == bookId]

    def forUser(self, userId: str) -> List[Transaction]:
        return [t for t in self._records if t.userId == userId]

    def _append(self, user: User, book: Book, txn_type: TransactionType) -> Transaction:
        txn_id = self._id_factory()
        while txn_id in self._ids:
            txn_id = self._id_factory()

        txn = Transaction(
            transactionId=txn_id,
            userId=user.userId,
            bookId=book.bookId,
            type=txn_type,
            timestamp=self._clock(),
        )
        self._records.append(txn)
        self._ids.add(txn_id)
        logger.info("Transaction recorded | id=%s type=%s userId=%s bookId=%s",
                    txn_id, txn_type.value, user.userId, book.bookId)
        return txn
