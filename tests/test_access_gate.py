"""Tests for filedrop.services.access_gate: exact-match ban lookup."""

import unittest
from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

from filedrop.services.access_gate import is_origin_banned
from filedrop.services.errors import StoreUnavailableError
from tests.db import ban, make_engine, make_session


class TestIsOriginBanned(unittest.TestCase):
    """Banned iff an identical address string is on the list."""

    def setUp(self) -> None:
        self.engine = make_engine()
        self.db = make_session(self.engine)
        ban(self.db, "10.0.0.5")
        ban(self.db, "2001:db8::ABCD")

    def tearDown(self) -> None:
        self.db.close()

    def test_listed_address_is_banned(self) -> None:
        self.assertTrue(is_origin_banned(self.db, "10.0.0.5"))

    def test_neighbour_address_is_not_banned(self) -> None:
        self.assertFalse(is_origin_banned(self.db, "10.0.0.6"))

    def test_prefix_does_not_match(self) -> None:
        self.assertFalse(is_origin_banned(self.db, "10.0.0"))
        self.assertFalse(is_origin_banned(self.db, "10.0.0.50"))

    def test_comparison_is_case_sensitive(self) -> None:
        self.assertTrue(is_origin_banned(self.db, "2001:db8::ABCD"))
        self.assertFalse(is_origin_banned(self.db, "2001:db8::abcd"))

    def test_no_normalization(self) -> None:
        self.assertFalse(is_origin_banned(self.db, " 10.0.0.5"))

    def test_empty_list_means_not_banned(self) -> None:
        db = make_session(make_engine())
        try:
            self.assertFalse(is_origin_banned(db, "10.0.0.5"))
        finally:
            db.close()


class TestIsOriginBannedStoreFailure(unittest.TestCase):
    """A broken store is an error, never 'not banned'."""

    def test_raises_store_unavailable(self) -> None:
        session = MagicMock()
        session.query.return_value.filter.return_value.all.side_effect = OperationalError(
            "SELECT", {}, Exception("server closed the connection")
        )
        with self.assertRaises(StoreUnavailableError):
            is_origin_banned(session, "10.0.0.5")
        session.rollback.assert_called_once()


if __name__ == "__main__":
    unittest.main()
