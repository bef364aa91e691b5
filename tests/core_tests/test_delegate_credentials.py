"""Tests for delegate_core/credentials.py (load, save, refresh)."""

from __future__ import annotations

import base64
import json
import os
import stat
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

from delegate_core.cli_errors import AuthError, ConfigError, NetworkError, NotFoundError
from delegate_core.credentials import Credential, CredentialStore, decode_token_claims

SCOPES = ["User.Read", "Mail.ReadWrite.Shared"]


def fake_msal(result=None, side_effect=None):
    msal = MagicMock()
    app = msal.ConfidentialClientApplication.return_value
    if side_effect is not None:
        app.acquire_token_by_refresh_token.side_effect = side_effect
    else:
        app.acquire_token_by_refresh_token.return_value = result
    return msal


class CredentialStoreTestBase(unittest.TestCase):
    def setUp(self):
        self._td = tempfile.TemporaryDirectory()
        self.path = Path(self._td.name) / "credentials.json"
        self.store = CredentialStore(str(self.path))

    def tearDown(self):
        self._td.cleanup()

    def write(self, data):
        self.path.write_text(json.dumps(data), encoding="utf-8")


class TestLoad(CredentialStoreTestBase):
    def test_load_returns_credential(self):
        self.write({"access_token": "A1", "refresh_token": "R1", "expires_in": 3599})
        cred = self.store.load()
        self.assertEqual(cred.access_token, "A1")
        self.assertEqual(cred.refresh_token, "R1")
        self.assertEqual(cred.expires_in, 3599)

    def test_missing_file_is_not_found(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.store.load()
        self.assertIn("No access token", ctx.exception.message)

    def test_null_access_token_is_not_found(self):
        self.write({"access_token": "null", "refresh_token": "R1"})
        with self.assertRaises(NotFoundError):
            self.store.load()

    def test_empty_access_token_is_not_found(self):
        self.write({"access_token": "", "refresh_token": "R1"})
        with self.assertRaises(NotFoundError):
            self.store.load()

    def test_corrupt_file_is_not_found_with_hint(self):
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(NotFoundError) as ctx:
            self.store.load()
        self.assertTrue(ctx.exception.hint)

    def test_load_refresh_token_requires_value(self):
        self.write({"access_token": "A1", "refresh_token": None})
        with self.assertRaises(NotFoundError) as ctx:
            self.store.load_refresh_token()
        self.assertIn("No refresh token", ctx.exception.message)


class TestSave(CredentialStoreTestBase):
    def test_save_writes_private_file(self):
        self.store.save(Credential(access_token="A2", refresh_token="R2", expires_in=10))
        data = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(data["access_token"], "A2")
        self.assertEqual(data["refresh_token"], "R2")
        if os.name == "posix":
            self.assertEqual(stat.S_IMODE(self.path.stat().st_mode), 0o600)

    def test_save_leaves_no_temp_files(self):
        self.store.save(Credential(access_token="A2"))
        self.assertEqual(sorted(p.name for p in self.path.parent.iterdir()), ["credentials.json"])


class TestRefresh(CredentialStoreTestBase):
    def setUp(self):
        super().setUp()
        self.write({"access_token": "A1", "refresh_token": "R1", "expires_in": 3599})
        self.original_bytes = self.path.read_bytes()

    def test_success_replaces_both_tokens(self):
        msal = fake_msal({"access_token": "A2", "refresh_token": "R2", "expires_in": 3600, "token_type": "Bearer"})
        with patch("delegate_core.credentials._msal", return_value=msal):
            cred = self.store.refresh("cid", "secret", "R1", SCOPES)
        self.assertEqual(cred.access_token, "A2")
        stored = self.store.load()
        self.assertEqual(stored.access_token, "A2")
        self.assertEqual(stored.refresh_token, "R2")
        self.assertEqual(stored.expires_in, 3600)
        self.assertIsNotNone(stored.obtained_at)

    def test_success_uses_refresh_grant_with_scopes(self):
        msal = fake_msal({"access_token": "A2", "refresh_token": "R2", "expires_in": 3600})
        with patch("delegate_core.credentials._msal", return_value=msal):
            self.store.refresh("cid", "secret", "R1", SCOPES, tenant="contoso")
        _, kwargs = msal.ConfidentialClientApplication.call_args
        self.assertEqual(kwargs["client_credential"], "secret")
        self.assertTrue(kwargs["authority"].endswith("/contoso"))
        app = msal.ConfidentialClientApplication.return_value
        app.acquire_token_by_refresh_token.assert_called_once_with("R1", scopes=SCOPES)

    def test_unrotated_refresh_token_is_kept(self):
        msal = fake_msal({"access_token": "A2", "expires_in": 3600})
        with patch("delegate_core.credentials._msal", return_value=msal):
            self.store.refresh("cid", "secret", "R1", SCOPES)
        self.assertEqual(self.store.load().refresh_token, "R1")

    def test_failure_surfaces_description_and_leaves_file(self):
        msal = fake_msal({"error": "invalid_grant", "error_description": "AADSTS70000: token revoked"})
        with patch("delegate_core.credentials._msal", return_value=msal):
            with self.assertRaises(AuthError) as ctx:
                self.store.refresh("cid", "secret", "R1", SCOPES)
        self.assertEqual(ctx.exception.message, "AADSTS70000: token revoked")
        self.assertEqual(self.path.read_bytes(), self.original_bytes)

    def test_failure_without_description_uses_error(self):
        msal = fake_msal({"error": "invalid_client"})
        with patch("delegate_core.credentials._msal", return_value=msal):
            with self.assertRaises(AuthError) as ctx:
                self.store.refresh("cid", "secret", "R1", SCOPES)
        self.assertEqual(ctx.exception.message, "invalid_client")
        self.assertEqual(self.path.read_bytes(), self.original_bytes)

    def test_network_failure_is_transport_error(self):
        msal = fake_msal(side_effect=requests.ConnectionError("unreachable"))
        with patch("delegate_core.credentials._msal", return_value=msal):
            with self.assertRaises(NetworkError):
                self.store.refresh("cid", "secret", "R1", SCOPES)
        self.assertEqual(self.path.read_bytes(), self.original_bytes)

    def test_rejected_scope_is_config_error(self):
        msal = fake_msal(side_effect=ValueError("reserved scope"))
        with patch("delegate_core.credentials._msal", return_value=msal):
            with self.assertRaises(ConfigError):
                self.store.refresh("cid", "secret", "R1", ["offline_access"])

    def test_empty_refresh_token_is_not_found(self):
        with patch("delegate_core.credentials._msal") as m:
            with self.assertRaises(NotFoundError):
                self.store.refresh("cid", "secret", "", SCOPES)
        m.assert_not_called()


class TestDecodeTokenClaims(unittest.TestCase):
    def _jwt(self, claims):
        body = base64.urlsafe_b64encode(json.dumps(claims).encode()).decode().rstrip("=")
        return f"header.{body}.sig"

    def test_decodes_payload(self):
        claims = decode_token_claims(self._jwt({"upn": "assistant@contoso.com", "name": "Assistant"}))
        self.assertEqual(claims["upn"], "assistant@contoso.com")

    def test_opaque_token_yields_empty(self):
        self.assertEqual(decode_token_claims("EwB4A8l6BAAU"), {})

    def test_garbage_payload_yields_empty(self):
        self.assertEqual(decode_token_claims("a.!!!.c"), {})


if __name__ == "__main__":
    unittest.main()
