import pytest
from datetime import date

from exceptions import UserValidationError
from users import (
    LENDING_POLICIES,
    User,
    UserType,
    make_user,
    normalize_email,
    normalize_user_id,
)


@pytest.fixture
def regular():
    return User.regular("U001", "Alice Johnson", "alice@email.com")


@pytest.fixture
def premium():
    return User.premium("U002", "Bob Smith", "bob@email.com")


def test_id_and_email_are_normalized():
    u = User.regular("  u010 ", "  Dana  ", "  Bob@Email.COM ")
    assert u.userId == "U010"
    assert u.name == "Dana"
    assert u.email == "bob@email.com"


@pytest.mark.parametrize("raw", ["u001", " U001 ", "u001  ", "\tU001"])
def test_user_id_normalization_is_idempotent(raw):
    once = normalize_user_id(raw)
    assert once == "U001"
    assert normalize_user_id(once) == once


@pytest.mark.parametrize(
    "raw",
    ["bob@email.com", " Bob@Email.COM ", "BOB@EMAIL.COM", "\tbOb@eMail.Com  "],
)
def test_email_normalization_is_idempotent(raw):
    once = normalize_email(raw)
    assert once == "bob@email.com"
    assert normalize_email(once) == once


@pytest.mark.parametrize(
    "user_id, name, email",
    [
        ("", "Alice", "alice@email.com"),          # empty id
        ("   ", "Alice", "alice@email.com"),       # whitespace id
        ("U001", "", "alice@email.com"),           # empty name
        ("U001", "  ", "alice@email.com"),         # whitespace name
        ("U001", "Alice", "not-an-email"),         # no @
        ("U001", "Alice", "alice@email"),          # no dot in domain
        ("U001", "Alice", "alice@email.c"),        # 1-letter tld
        ("U001", "Alice", ""),                     # empty email
    ],
)
def test_invalid_construction_raises(user_id, name, email):
    with pytest.raises(UserValidationError):
        User.regular(user_id, name, email)


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        User.regular("U001", "Alice", "not-an-email")


def test_regular_policy_values(regular):
    assert regular.getMaxBooksAllowed() == 3
    assert regular.getLoanDuration() == 14
    assert regular.getLateFeeRate() == 0.50
    assert regular.getUserType() == "Regular User"
    assert regular.canRenewBooks() is False


def test_premium_policy_values(premium):
    assert premium.getMaxBooksAllowed() == 10
    assert premium.getLoanDuration() == 30
    assert premium.getLateFeeRate() == 0.25
    assert premium.getUserType() == "Premium User"
    assert premium.canRenewBooks() is True


def test_policy_table_covers_every_user_type():
    assert set(LENDING_POLICIES) == set(UserType)


def test_make_user_selects_type():
    assert make_user("U9", "X", "x@y.io").userType is UserType.REGULAR
    assert make_user("U9", "X", "x@y.io", premium=True).userType is UserType.PREMIUM


def test_borrow_and_return(regular):
    assert regular.borrowBook("B001") is True
    assert regular.hasBorrowedBook("B001")
    assert regular.getCurrentBooksCount() == 1

    assert regular.returnBook("B001") is True
    assert not regular.hasBorrowedBook("B001")
    assert regular.returnBook("B001") is False


def test_borrow_same_book_twice_fails(regular):
    assert regular.borrowBook("B001") is True
    assert regular.borrowBook("B001") is False
    assert regular.getBorrowedBookIds() == ["B001"]


def test_regular_capacity_is_three(regular):
    for bid in ["B1", "B2", "B3"]:
        assert regular.borrowBook(bid) is True
    assert regular.canBorrowBook() is False
    assert regular.borrowBook("B4") is False
    assert regular.getCurrentBooksCount() == 3


def test_premium_capacity_is_ten(premium):
    for i in range(10):
        assert premium.borrowBook(f"B{i}") is True
    assert premium.borrowBook("B10") is False
    assert premium.getCurrentBooksCount() <= premium.getMaxBooksAllowed()


def test_borrowed_ids_returns_copy(regular):
    regular.borrowBook("B001")
    ids = regular.getBorrowedBookIds()
    ids.append("B999")
    assert regular.getBorrowedBookIds() == ["B001"]


def test_premium_renewal_capped_at_two(premium):
    premium.borrowBook("B001")
    assert premium.renewBook("B001") is True
    assert premium.renewBook("B001") is True
    assert premium.renewBook("B001") is False
    assert premium.getRenewalCount() == 2
    assert premium.hasBorrowedBook("B001")


def test_renewal_counter_is_per_user_not_per_book(premium):
    premium.borrowBook("B001")
    premium.borrowBook("B002")
    assert premium.renewBook("B001") is True
    assert premium.renewBook("B002") is True
    assert premium.renewBook("B002") is False


def test_renew_requires_book_held(premium):
    assert premium.renewBook("B001") is False
    assert premium.getRenewalCount() == 0


def test_regular_cannot_renew(regular):
    regular.borrowBook("B001")
    assert regular.renewBook("B001") is False
    assert regular.getRenewalCount() == 0


def test_equality_by_id_only():
    a = User.regular("u001", "Alice", "alice@email.com")
    b = User.premium("U001", "Someone Else", "other@email.com")
    assert a == b
    assert len({a, b}) == 1


def test_registration_date_defaults_to_today(regular):
    assert regular.registrationDate == date.today()


def test_due_date_uses_loan_duration(regular, premium):
    d0 = date(2025, 1, 1)
    assert regular.dueDateFor(d0) == date(2025, 1, 15)
    assert premium.dueDateFor(d0) == date(2025, 1, 31)


def test_borrowed_ids_and_renewals_are_not_constructor_arguments():
    with pytest.raises(TypeError):
        User("U009", "X", "x@y.io", _borrowedBookIds={f"B{i}": None for i in range(5)})
    with pytest.raises(TypeError):
        User("U009", "X", "x@y.io", renewalCount=-3)


def test_renewal_count_cannot_be_reset(premium):
    premium.borrowBook("B001")
    premium.renewBook("B001")
    premium.renewBook("B001")
    with pytest.raises(AttributeError):
        premium.renewalCount = 0
    assert premium.canRenewBooks() is False


def test_user_type_is_read_only(premium):
    for i in range(4):
        premium.borrowBook(f"B{i}")
    with pytest.raises(AttributeError):
        premium.userType = UserType.REGULAR
    assert premium.userType is UserType.PREMIUM
    assert premium.getCurrentBooksCount() <= premium.getMaxBooksAllowed()


def test_user_id_is_read_only(regular):
    with pytest.raises(AttributeError):
        regular.userId = "U999"
    assert regular.userId == "U001"
    assert hash(regular) == hash(User.regular("U001", "A", "a@b.io"))


def test_name_stays_editable(regular):
    regular.name = "Alice J."
    assert regular.name == "Alice J."
