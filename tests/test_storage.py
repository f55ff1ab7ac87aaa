"""
Tests for spreadsheet persistence.

Covers the in-memory range contract, KeyedTable positions and the
Users/Transactions storages built on it.
"""

import pytest
from decimal import Decimal

from paysheet.models import Transaction, User
from paysheet.services.storage import (
    BackendUnavailableError,
    InMemorySheetsClient,
    NotFoundError,
    SheetTransactionStorage,
    SheetUserStorage,
    ensure_tables,
)


def make_transaction(tx_id, date, tx_type, category, amount, created_by="Alice"):
    return Transaction(
        id=tx_id,
        date=date,
        type=tx_type,
        category=category,
        amount=Decimal(amount),
        created_by=created_by,
    )


@pytest.fixture
def t1():
    return make_transaction("TXN-1", "2024-01-05", "expense", "Rent", "100")


@pytest.fixture
def t2():
    return make_transaction("TXN-2", "2024-01-10", "income", "Fees", "500")


class TestInMemoryClient:
    """The in-memory client behaves like the Sheets values API."""

    def test_read_trims_trailing_empties(self):
        client = InMemorySheetsClient({"T": [["h1", "h2"], ["a", "", ""], ["", ""], ["", ""]]})
        assert client.read_range("T", "A:B") == [["h1", "h2"], ["a"]]

    def test_cleared_middle_row_reads_as_empty_list(self):
        client = InMemorySheetsClient({"T": [["h"], ["a"], ["b"]]})
        client.clear_range("T", "A2:A2")
        assert client.read_range("T", "A:A") == [["h"], [], ["b"]]

    def test_append_goes_after_last_non_empty_row(self):
        client = InMemorySheetsClient({"T": [["h"], ["a"]]})
        client.append_row("T", "A:B", ["b", "c"])
        assert client.rows("T") == [["h"], ["a"], ["b", "c"]]

    def test_write_single_row(self):
        client = InMemorySheetsClient({"T": [["h", "h"], ["a", "b"]]})
        client.write_range("T", "A2:B2", [["x", "y"]])
        assert client.rows("T")[1] == ["x", "y"]

    def test_unknown_table_is_unavailable(self):
        with pytest.raises(BackendUnavailableError):
            InMemorySheetsClient().read_range("Missing", "A:G")

    def test_outage(self):
        client = InMemorySheetsClient({"T": [["h"]]})
        client.available = False
        with pytest.raises(BackendUnavailableError):
            client.read_range("T", "A:A")

    def test_ensure_table_keeps_existing_data(self):
        client = InMemorySheetsClient({"T": [["h"], ["a"]]})
        client.ensure_table("T", ["other"])
        assert client.rows("T") == [["h"], ["a"]]

    def test_ensure_table_writes_header_when_empty(self):
        client = InMemorySheetsClient()
        client.ensure_table("T", ["id", "name"])
        assert client.read_range("T", "A:B") == [["id", "name"]]


class TestKeyedTable:
    """Row positions and the scan-then-write contract."""

    def test_first_record_is_position_two(self, transaction_storage, t1, t2):
        transaction_storage.create_transaction(t1)
        transaction_storage.create_transaction(t2)
        table = transaction_storage.table
        assert [position for position, _ in table.scan()] == [2, 3]
        assert table.find("TXN-2")[1] == 3

    def test_find_missing_is_none(self, transaction_storage):
        assert transaction_storage.table.find("nope") is None

    def test_header_row_cannot_be_written(self, transaction_storage, t1):
        with pytest.raises(ValueError):
            transaction_storage.table.update(1, t1)
        with pytest.raises(ValueError):
            transaction_storage.table.delete(1)

    def test_records_carry_fresh_positions(self, transaction_storage, t1, t2):
        transaction_storage.create_transaction(t1)
        transaction_storage.create_transaction(t2)
        positions = [t.row_position for t in transaction_storage.list_transactions()]
        assert positions == [2, 3]


class TestTransactionStorage:
    """Tests for SheetTransactionStorage."""

    def test_create_and_list(self, transaction_storage, t1, t2):
        transaction_storage.create_transaction(t1)
        transaction_storage.create_transaction(t2)
        assert transaction_storage.list_transactions() == [t1, t2]

    def test_empty_table_lists_nothing(self, transaction_storage):
        assert transaction_storage.list_transactions() == []

    def test_get_by_id(self, transaction_storage, t1):
        transaction_storage.create_transaction(t1)
        assert transaction_storage.get_transaction_by_id("TXN-1") == t1
        assert transaction_storage.get_transaction_by_id("TXN-9") is None

    def test_delete_leaves_gap(self, sheets_client, transaction_storage, t1, t2):
        """Deleting T1 clears its row; T2 stays where it was."""
        transaction_storage.create_transaction(t1)
        transaction_storage.create_transaction(t2)

        transaction_storage.delete_transaction("TXN-1")

        assert transaction_storage.list_transactions() == [t2]
        assert transaction_storage.table.find("TXN-2")[1] == 3
        assert len(sheets_client.rows("Transactions")) == 3

    def test_update_after_delete_is_not_found(self, transaction_storage, t1, t2):
        transaction_storage.create_transaction(t1)
        transaction_storage.create_transaction(t2)
        transaction_storage.delete_transaction("TXN-1")

        with pytest.raises(NotFoundError):
            transaction_storage.update_transaction("TXN-1", {"amount": Decimal("1")})
        with pytest.raises(NotFoundError):
            transaction_storage.delete_transaction("TXN-1")

    def test_append_after_middle_delete_goes_to_end(self, transaction_storage, t1, t2):
        transaction_storage.create_transaction(t1)
        transaction_storage.create_transaction(t2)
        transaction_storage.delete_transaction("TXN-1")

        t3 = make_transaction("TXN-3", "2024-01-11", "expense", "Food", "7")
        transaction_storage.create_transaction(t3)

        assert transaction_storage.table.find("TXN-3")[1] == 4
        assert [t.id for t in transaction_storage.list_transactions()] == ["TXN-2", "TXN-3"]

    def test_update_merges_and_overwrites_one_row(self, transaction_storage, t1, t2):
        transaction_storage.create_transaction(t1)
        transaction_storage.create_transaction(t2)

        updated = transaction_storage.update_transaction(
            "TXN-1",
            {"amount": Decimal("150"), "description": "late fee"},
        )

        assert updated.amount == Decimal("150")
        assert updated.category == "Rent"
        assert updated.row_position == 2
        assert transaction_storage.get_transaction_by_id("TXN-1") == updated
        assert transaction_storage.get_transaction_by_id("TXN-2") == t2

    def test_update_never_changes_id_or_creator(self, transaction_storage, t1):
        transaction_storage.create_transaction(t1)
        updated = transaction_storage.update_transaction(
            "TXN-1",
            {"id": "TXN-X", "created_by": "Mallory"},
        )
        assert updated.id == "TXN-1"
        assert updated.created_by == "Alice"

    def test_update_rejects_unknown_fields(self, transaction_storage, t1):
        transaction_storage.create_transaction(t1)
        with pytest.raises(ValueError):
            transaction_storage.update_transaction("TXN-1", {"colour": "red"})

    def test_cleared_row_never_reappears(self, sheets_client, transaction_storage, t1):
        transaction_storage.create_transaction(t1)
        transaction_storage.delete_transaction("TXN-1")
        assert transaction_storage.list_transactions() == []
        assert transaction_storage.get_transaction_by_id("TXN-1") is None

    def test_hand_edited_untyped_row_is_skipped(self, sheets_client, transaction_storage, t1):
        transaction_storage.create_transaction(t1)
        sheets_client.append_row("Transactions", "A:G", ["TXN-X", "2024-01-01", "", "", "", "5", ""])
        assert [t.id for t in transaction_storage.list_transactions()] == ["TXN-1"]

    def test_backend_failure_surfaces(self, sheets_client, transaction_storage):
        sheets_client.available = False
        with pytest.raises(BackendUnavailableError):
            transaction_storage.list_transactions()


class TestUserStorage:
    """Tests for SheetUserStorage."""

    def test_find_by_email_is_exact(self, user_storage):
        user_storage.create_user(User(id="USR-1", email="alice@example.com", name="Alice"))
        assert user_storage.find_user_by_email("alice@example.com").id == "USR-1"
        assert user_storage.find_user_by_email("Alice@example.com") is None

    def test_no_uniqueness_at_this_layer(self, user_storage):
        """Duplicate checks belong to the caller."""
        user_storage.create_user(User(id="USR-1", email="a@example.com"))
        user_storage.create_user(User(id="USR-2", email="a@example.com"))
        assert len(user_storage.list_users()) == 2

    def test_update_user(self, user_storage):
        user_storage.create_user(User(id="USR-1", email="a@example.com", name="A"))
        updated = user_storage.update_user("USR-1", {"name": "Ann", "role": "admin"})
        assert updated.name == "Ann"
        assert updated.is_admin
        assert user_storage.get_user_by_id("USR-1").is_admin

    def test_update_missing_user(self, user_storage):
        with pytest.raises(NotFoundError):
            user_storage.update_user("USR-404", {"name": "x"})

    def test_deleted_user_never_reappears(self, user_storage):
        user_storage.create_user(User(id="USR-1", email="a@example.com"))
        user_storage.create_user(User(id="USR-2", email="b@example.com"))
        user_storage.delete_user("USR-1")
        assert [u.id for u in user_storage.list_users()] == ["USR-2"]
        assert user_storage.find_user_by_email("a@example.com") is None


class TestEnsureTables:
    """Startup table bootstrap."""

    def test_creates_headers(self):
        client = InMemorySheetsClient()
        users = SheetUserStorage(client)
        transactions = SheetTransactionStorage(client)

        ensure_tables(users, transactions)

        assert client.rows("Users")[0] == ["id", "email", "password_hash", "name", "role"]
        assert client.rows("Transactions")[0][0] == "id"
        assert users.list_users() == []
