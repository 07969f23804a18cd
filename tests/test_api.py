"""HTTP tests for login, upload and health: gate → auth → dedup ordering and error mapping."""

import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

from filedrop.api.v1.upload import get_file_store
from filedrop.core.database import get_db
from filedrop.main import app
from filedrop.models import File, User
from filedrop.services.errors import SchemaError, StoreUnavailableError
from filedrop.services.hashing import content_hash
from filedrop.services.storage import LocalFileStore
from tests.db import add_user, ban, make_engine, make_session

# TestClient reports this as request.client.host.
CLIENT_HOST = "testclient"


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = make_engine()
        self.db = make_session(self.engine)
        self.alice = add_user(self.db, "alice", "secret", api_key="key-alice")
        self.bob = add_user(self.db, "bob", "secret", api_key="key-bob")
        self.upload_dir = Path(tempfile.mkdtemp())

        def override_get_db():
            db = make_session(self.engine)
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_file_store] = lambda: LocalFileStore(self.upload_dir)
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.db.close()
        shutil.rmtree(self.upload_dir, ignore_errors=True)

    def _upload(self, data: bytes, key: str = "key-alice", filename: str = "cat.png"):
        return self.client.post(
            "/api/v1/upload",
            files={"file": (filename, data, "image/png")},
            headers={"Authorization": f"Bearer {key}"},
        )


class TestLogin(ApiTestCase):
    """POST /auth returns the API key for valid credentials only."""

    def test_valid_credentials_return_api_key(self) -> None:
        resp = self.client.post("/api/v1/auth", json={"username": "alice", "password": "secret"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["api_key"], "key-alice")
        self.assertEqual(resp.json()["token_type"], "bearer")

    def test_wrong_password_and_unknown_user_look_the_same(self) -> None:
        wrong = self.client.post("/api/v1/auth", json={"username": "alice", "password": "nope"})
        unknown = self.client.post("/api/v1/auth", json={"username": "zed", "password": "nope"})
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong.json(), unknown.json())

    def test_account_without_key_gets_one_issued(self) -> None:
        add_user(self.db, "carol", "pw", api_key=None)
        resp = self.client.post("/api/v1/auth", json={"username": "carol", "password": "pw"})
        self.assertEqual(resp.status_code, 200)
        issued = resp.json()["api_key"]
        self.assertTrue(issued)
        self.db.expire_all()
        carol = self.db.query(User).filter(User.username == "carol").one()
        self.assertEqual(carol.api_key, issued)

    def test_banned_origin_is_rejected_before_credentials(self) -> None:
        ban(self.db, CLIENT_HOST)
        with patch("filedrop.api.v1.auth.verify_password") as verify:
            resp = self.client.post(
                "/api/v1/auth", json={"username": "alice", "password": "secret"}
            )
        self.assertEqual(resp.status_code, 403)
        verify.assert_not_called()

    def test_me_returns_current_user(self) -> None:
        resp = self.client.get("/api/v1/auth/me", headers={"Authorization": "Bearer key-bob"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"id": self.bob.id, "username": "bob", "is_admin": False})


class TestUpload(ApiTestCase):
    """POST /upload stores new content and dedups per owner."""

    def test_new_upload_is_stored(self) -> None:
        resp = self._upload(b"hello")
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertFalse(body["duplicate"])
        self.assertEqual(body["file_hash"], content_hash(b"hello"))
        self.assertEqual(body["original_name"], "cat.png")
        self.assertEqual(body["filetype"], "image/png")
        self.assertEqual(body["uploaded_by"], self.alice.id)
        self.assertTrue(body["name"].endswith(".png"))
        self.assertEqual((self.upload_dir / body["name"]).read_bytes(), b"hello")

    def test_repeat_upload_returns_existing(self) -> None:
        first = self._upload(b"hello").json()
        resp = self._upload(b"hello", filename="renamed.png")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertTrue(body["duplicate"])
        self.assertEqual(body["id"], first["id"])
        self.assertEqual(body["original_name"], "cat.png")
        self.assertEqual(self.db.query(File).count(), 1)
        self.assertEqual(len(list(self.upload_dir.iterdir())), 1)

    def test_same_content_other_user_is_stored_separately(self) -> None:
        first = self._upload(b"hello", key="key-alice").json()
        resp = self._upload(b"hello", key="key-bob")
        self.assertEqual(resp.status_code, 201)
        self.assertNotEqual(resp.json()["id"], first["id"])
        self.assertEqual(self.db.query(File).count(), 2)

    def test_records_client_origin(self) -> None:
        body = self._upload(b"hello").json()
        row = self.db.get(File, body["id"])
        self.assertEqual(row.uploaded_by_ip, CLIENT_HOST)

    def test_missing_token_is_401(self) -> None:
        resp = self.client.post("/api/v1/upload", files={"file": ("a.txt", b"x", "text/plain")})
        self.assertEqual(resp.status_code, 401)

    def test_invalid_token_is_401(self) -> None:
        resp = self._upload(b"hello", key="key-nobody")
        self.assertEqual(resp.status_code, 401)

    def test_banned_origin_is_403_even_with_valid_token(self) -> None:
        ban(self.db, CLIENT_HOST)
        resp = self._upload(b"hello")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(self.db.query(File).count(), 0)

    def test_oversized_upload_is_413(self) -> None:
        with patch("filedrop.api.v1.upload.get_settings") as get_settings:
            get_settings.return_value.MAX_UPLOAD_BYTES = 4
            resp = self._upload(b"hello")
        self.assertEqual(resp.status_code, 413)
        self.assertEqual(self.db.query(File).count(), 0)

    def test_store_failure_is_503_and_leaves_no_bytes(self) -> None:
        with patch(
            "filedrop.api.v1.upload.register_upload",
            side_effect=StoreUnavailableError("Could not record upload"),
        ):
            resp = self._upload(b"hello")
        self.assertEqual(resp.status_code, 503)
        self.assertIn("Retry-After", resp.headers)
        self.assertEqual(list(self.upload_dir.iterdir()), [])

    def test_ban_lookup_failure_is_503_not_allowed(self) -> None:
        with patch(
            "filedrop.api.v1.auth.is_origin_banned",
            side_effect=StoreUnavailableError("Ban list lookup failed"),
        ):
            resp = self._upload(b"hello")
        self.assertEqual(resp.status_code, 503)


class TestForwardedFor(ApiTestCase):
    """X-Forwarded-For is honoured only when configured."""

    def test_forwarded_header_ignored_by_default(self) -> None:
        ban(self.db, "203.0.113.9")
        resp = self.client.post(
            "/api/v1/auth",
            json={"username": "alice", "password": "secret"},
            headers={"X-Forwarded-For": "203.0.113.9"},
        )
        self.assertEqual(resp.status_code, 200)

    def test_forwarded_header_used_when_trusted(self) -> None:
        ban(self.db, "203.0.113.9")
        with patch("filedrop.api.v1.auth.get_settings") as get_settings:
            get_settings.return_value.TRUST_FORWARDED_FOR = True
            resp = self.client.post(
                "/api/v1/auth",
                json={"username": "alice", "password": "secret"},
                headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
            )
        self.assertEqual(resp.status_code, 403)


class TestHealthAndStartup(ApiTestCase):
    def test_health_reports_connected(self) -> None:
        resp = self.client.get("/api/v1/health/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["database"], "connected")

    def test_schema_failure_aborts_startup(self) -> None:
        with patch("filedrop.main.ensure_schema", side_effect=SchemaError("no database")):
            with self.assertRaises(SchemaError):
                with TestClient(app):
                    pass


if __name__ == "__main__":
    unittest.main()
