"""Unit tests for config settings."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

from src.config import EntryTotalPolicy, Environment, Settings, get_settings


class TestEnums:
    def test_environments(self):
        assert {e.value for e in Environment} == {"development", "staging", "production"}

    def test_entry_total_policies(self):
        assert {p.value for p in EntryTotalPolicy} == {"submitted", "stored"}


class TestDefaults:
    def test_default_port(self):
        assert Settings.model_fields["port"].default == 3009

    def test_default_policy_preserves_submitted_totals(self):
        assert Settings.model_fields["entry_total_policy"].default == EntryTotalPolicy.SUBMITTED

    def test_paths_derive_from_data_dir(self):
        s = Settings(_env_file=None, data_dir=Path("/srv/session"))
        assert s.members_path == Path("/srv/session/member.json")
        assert s.members_default_path == Path("/srv/session/member_default.json")
        assert s.criteria_path == Path("/srv/session/criteria.yaml")


class TestEnvironmentOverrides:
    def test_reads_env_vars(self):
        env = {"PORT": "4000", "ENTRY_TOTAL_POLICY": "stored", "DATA_DIR": "/tmp/x"}
        with patch.dict(os.environ, env, clear=True):
            s = Settings(_env_file=None)
        assert s.port == 4000
        assert s.entry_total_policy == EntryTotalPolicy.STORED
        assert s.data_dir == Path("/tmp/x")

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        with patch.dict(os.environ, {}, clear=True):
            assert get_settings() is get_settings()
        get_settings.cache_clear()
