from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Dict, List, Optional, TextIO, Tuple

from books import Book
from exceptions import LibraryError
from library_system import Library, LendingResult
from sample_data import seed_library
from transactions import Transaction
from users import MAX_RENEWALS, User, UserType, make_user


logger = logging.getLogger("library")

InputFn = Callable[[str], str]

MENU_OPTIONS: List[Tuple[str, str]] = [
    ("1", "Display All Books"),
    ("2", "Issue Book"),
    ("3", "Return Book"),
    ("4", "Display All Users"),
    ("5", "Add New Book"),
    ("6", "Add New User"),
    ("7", "Demonstrate Polymorphism"),
    ("8", "Renew Book"),
    ("9", "Display Transaction History"),
    ("10", "Exit"),
]
EXIT_CHOICE = "10"


# Table Formatting
def format_table(cols: List[Tuple[str, int]], rows: List[List[str]]) -> str:
    def line(values: List[Tuple[str, int]]) -> str:
        return "  ".join(str(v).ljust(w) for v, w in values).rstrip()

    widths = [w for _, w in cols]
    total_width = sum(widths) + 2 * (len(cols) - 1)
    out: List[str] = [line(cols), "-" * total_width]
    for row in rows:
        out.append(line(list(zip(row, widths))))
    return "\n".join(out) + "\n"


def format_books(books: List[Book]) -> str:
    cols = [("Book ID", 8), ("Title", 25), ("Author", 20), ("Category", 18), ("Available", 9)]
    rows = [
        [b.bookId, b.title, b.author, b.category, "Yes" if b.isAvailable else "No"]
        for b in books
    ]
    return format_table(cols, rows)


def format_users(users: List[User]) -> str:
    cols = [("User ID", 8), ("Name", 20), ("Email", 25), ("Type", 13), ("Books", 7)]
    rows = [
        [u.userId, u.name, u.email, u.getUserType(),
         f"{u.getCurrentBooksCount()}/{u.getMaxBooksAllowed()}"]
        for u in users
    ]
    return format_table(cols, rows)


def format_transactions(library: Library, transactions: List[Transaction]) -> str:
    cols = [("Transaction ID", 15), ("Type", 8), ("User", 20), ("Book", 25), ("Timestamp", 19)]
    rows = []
    for t in transactions:
        user = library.findUserById(t.userId)
        book = library.findBookById(t.bookId)
        rows.append([
            t.transactionId,
            t.type.value,
            user.name if user else t.userId,
            book.title if book else t.bookId,
            t.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
        ])
    return format_table(cols, rows)


# User Info (one builder of extra lines per user type)
def _base_info(user: User) -> List[str]:
    return [
        f"User ID: {user.userId}",
        f"Name: {user.name}",
        f"Email: {user.email}",
        f"User Type: {user.getUserType()}",
        f"Registration Date: {user.registrationDate.isoformat()}",
        f"Current Books: {user.getCurrentBooksCount()}/{user.getMaxBooksAllowed()}",
    ]


def _loan_terms(user: User) -> List[str]:
    return [
        f"Loan Duration: {user.getLoanDuration()} days",
        f"Late Fee Rate: ${user.getLateFeeRate():.2f} per day",
    ]


def _renewal_info(user: User) -> List[str]:
    return [
        f"Renewal Privilege: {'Yes' if user.policy.canRenew else 'No'}",
        f"Renewals Used: {user.getRenewalCount()}/{MAX_RENEWALS}",
    ]


EXTRA_INFO: Dict[UserType, List[Callable[[User], List[str]]]] = {
    UserType.REGULAR: [_loan_terms],
    UserType.PREMIUM: [_loan_terms, _renewal_info],
}


def describe_user(user: User) -> List[str]:
    lines = _base_info(user)
    for builder in EXTRA_INFO[user.userType]:
        lines.extend(builder(user))
    return lines


# Menu
class Menu:
    """
    Interactive command loop over a Library.

    Input and output are explicit: ``input_fn`` is called with a prompt and
    returns one line, ``out`` receives everything printed.
    """

    def __init__(self, library: Library, input_fn: Optional[InputFn] = None, out: Optional[TextIO] = None) -> None:
        self.library = library
        self.input_fn = input_fn if input_fn is not None else input
        self.out = out if out is not None else sys.stdout
        self.actions: Dict[str, Callable[[], None]] = {
            "1": self.display_books,
            "2": self.issue_book,
            "3": self.return_book,
            "4": self.display_users,
            "5": self.add_book,
            "6": self.add_user,
            "7": self.demonstrate_polymorphism,
            "8": self.renew_book,
            "9": self.display_transactions,
        }

    def say(self, text: str = "") -> None:
        print(text, file=self.out)

    def ask(self, prompt: str) -> str:
        return self.input_fn(prompt).strip()

    def show_menu(self) -> None:
        self.say("\n=== Library Management System Menu ===")
        for key, label in MENU_OPTIONS:
            self.say(f"{key}. {label}")

    def run(self) -> None:
        self.say("=== Welcome to Library Management System ===")
        while True:
            self.show_menu()
            try:
                choice = self.ask(f"Enter your choice (1-{EXIT_CHOICE}): ")
            except EOFError:
                self.say()
                break
            if choice == EXIT_CHOICE:
                break
            action = self.actions.get(choice)
            if action is None:
                self.say("Invalid choice. Please try again.")
                continue
            try:
                action()
            except EOFError:
                self.say()
                break
        self.say("Thank you for using the Library Management System!")

    def _report(self, result: LendingResult) -> None:
        self.say(result.message)
        if result.transaction is not None:
            self.say(f"Transaction ID: {result.transaction.transactionId}")

    # Actions
    def display_books(self) -> None:
        self.say("\n=== All Books ===")
        self.say(format_books(self.library.getAllBooks()))

    def display_users(self) -> None:
        self.say("\n=== All Users ===")
        self.say(format_users(self.library.getAllUsers()))

    def display_transactions(self) -> None:
        self.say("\n=== Transaction History ===")
        self.say(format_transactions(self.library, self.library.getTransactions()))

    def issue_book(self) -> None:
        self.say("\n=== Issue Book ===")
        book_id = self.ask("Enter Book ID: ")
        user_id = self.ask("Enter User ID: ")
        self._report(self.library.issueBook(book_id, user_id))

    def return_book(self) -> None:
        self.say("\n=== Return Book ===")
        book_id = self.ask("Enter Book ID: ")
        user_id = self.ask("Enter User ID: ")
        self._report(self.library.returnBook(book_id, user_id))

    def renew_book(self) -> None:
        self.say("\n=== Renew Book ===")
        book_id = self.ask("Enter Book ID: ")
        user_id = self.ask("Enter User ID: ")
        self._report(self.library.renewBook(book_id, user_id))

    def add_book(self) -> None:
        self.say("\n=== Add New Book ===")
        book_id = self.ask("Enter Book ID: ")
        title = self.ask("Enter Title: ")
        author = self.ask("Enter Author: ")
        category = self.ask("Enter Category: ") or "General"
        try:
            self.library.addBook(Book(book_id, title, author, category))
        except LibraryError as e:
            self.say(f"Could not add book: {e}")
            return
        self.say("Book added successfully!")

    def add_user(self) -> None:
        self.say("\n=== Add New User ===")
        user_id = self.ask("Enter User ID: ")
        name = self.ask("Enter Name: ")
        email = self.ask("Enter Email: ")
        premium = self.ask("Is this a premium user? (y/n): ").lower() in ("y", "yes")
        try:
            self.library.addUser(make_user(user_id, name, email, premium=premium))
        except LibraryError as e:
            self.say(f"Could not add user: {e}")
            return
        self.say("User added successfully!")

    def demonstrate_polymorphism(self) -> None:
        self.say("\n=== Demonstrating Polymorphism ===")
        regular = self.library.findUserById("U001")
        premium = self.library.findUserById("U002")
        if regular is None or premium is None:
            self.say("Sample users not found. Please ensure sample data is initialized.")
            return

        for idx, (label, user) in enumerate([("Regular", regular), ("Premium", premium)], start=1):
            self.say(f"\n{idx}. {label} User Info:")
            for text in describe_user(user):
                self.say(f"   {text}")
            self.say(f"   Max books allowed: {user.getMaxBooksAllowed()}")
            self.say(f"   Loan duration: {user.getLoanDuration()} days")

        self.say("\n3. Polymorphic behavior demonstration:")
        self.say("   Same method call, different behaviors based on user type!")


def run_menu(library: Library, input_fn: Optional[InputFn] = None, out: Optional[TextIO] = None) -> None:
    Menu(library, input_fn=input_fn, out=out).run()


# CLI / Main
def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="In-memory library catalog with user lending policies.")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level for the library logger")
    parser.add_argument("--no-sample-data", action="store_true",
                        help="Start with an empty catalog instead of the demo data")
    args = parser.parse_args(argv)

    logger.setLevel(args.log_level)

    library = Library()
    if not args.no_sample_data:
        seed_library(library)
        logger.info("Sample data initialized | books=%d users=%d",
                    len(library.books), len(library.users))

    run_menu(library)


if __name__ == "__main__":
    try:
        main()
    except LibraryError as e:
        logger.error("LibraryError bubbled to top-level | %s", e)
        raise
    except Exception as e:
        logger.exception("Unhandled fatal error | %s", e)
        raise
