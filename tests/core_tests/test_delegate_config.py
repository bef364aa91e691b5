"""Tests for delegate_core/config.py."""

from __future__ import annotations

import os
import tempfile
import unittest
from unittest.mock import patch

from delegate_core.cli_errors import ConfigError
from delegate_core.config import load_config, resolve_config_dir
from delegate_core.constants import DELEGATE_SCOPES
from tests.fixtures import DELEGATE, OWNER, config_dir


class TestResolveConfigDir(unittest.TestCase):
    def test_explicit_wins(self):
        with patch.dict(os.environ, {"OUTLOOK_DELEGATE_CONFIG_DIR": "/from/env"}):
            self.assertEqual(resolve_config_dir("/explicit"), "/explicit")

    def test_env_over_default(self):
        with patch.dict(os.environ, {"OUTLOOK_DELEGATE_CONFIG_DIR": "/from/env"}):
            self.assertEqual(resolve_config_dir(None), "/from/env")

    def test_default(self):
        with patch.dict(os.environ, {}, clear=True):
            self.assertTrue(resolve_config_dir(None).endswith(".outlook-mcp"))


class TestLoadConfig(unittest.TestCase):
    def setUp(self):
        patcher = patch.dict(os.environ, {}, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_loads_values_and_defaults(self):
        with config_dir({"timezone": None}) as td:
            cfg = load_config(td)
        self.assertEqual(cfg.owner_email, OWNER)
        self.assertEqual(cfg.delegate_email, DELEGATE)
        self.assertEqual(cfg.timezone, "UTC")
        self.assertEqual(cfg.client.tenant, "common")
        self.assertEqual(cfg.client.scopes, list(DELEGATE_SCOPES))
        self.assertEqual(cfg.message_page_size, 100)
        self.assertEqual(cfg.event_page_size, 50)
        self.assertEqual(cfg.credentials_path, os.path.join(td, "credentials.json"))

    def test_missing_file_is_empty_config(self):
        with tempfile.TemporaryDirectory() as td:
            cfg = load_config(td)
        self.assertIsNone(cfg.owner_email)

    def test_missing_owner_fails_context(self):
        with config_dir({"owner_email": "null"}) as td:
            cfg = load_config(td)
        with self.assertRaises(ConfigError) as ctx:
            cfg.delegate_context()
        self.assertIn("owner_email", ctx.exception.message)
        self.assertIn("OUTLOOK_DELEGATE_OWNER", ctx.exception.hint)

    def test_env_overrides_file(self):
        with config_dir() as td:
            with patch.dict(os.environ, {"OUTLOOK_DELEGATE_OWNER": "boss@contoso.com"}):
                cfg = load_config(td)
        self.assertEqual(cfg.delegate_context().owner_identity, "boss@contoso.com")

    def test_scopes_string_is_split(self):
        with config_dir({"scopes": "User.Read, Mail.ReadWrite.Shared"}) as td:
            cfg = load_config(td)
        self.assertEqual(cfg.client.scopes, ["User.Read", "Mail.ReadWrite.Shared"])

    def test_page_size_override(self):
        with config_dir({"message_page_size": 250, "event_page_size": "20"}) as td:
            cfg = load_config(td)
        self.assertEqual((cfg.message_page_size, cfg.event_page_size), (250, 20))

    def test_bad_page_size(self):
        with config_dir({"message_page_size": 0}) as td:
            with self.assertRaises(ConfigError):
                load_config(td)

    def test_invalid_json(self):
        with tempfile.TemporaryDirectory() as td:
            with open(os.path.join(td, "config.json"), "w") as fh:
                fh.write("{oops")
            with self.assertRaises(ConfigError):
                load_config(td)

    def test_require_client(self):
        with config_dir({"client_secret": None}) as td:
            cfg = load_config(td)
        with self.assertRaises(ConfigError) as ctx:
            cfg.require_client()
        self.assertIn("client_secret", ctx.exception.message)


if __name__ == "__main__":
    unittest.main()
