"""Tests for api/settings module."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from api.settings import Settings


class TestDefaults:
    """Defaults suitable for local development."""

    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.store_backend == "memory"
        assert settings.lock_timeout_seconds == 5.0
        assert settings.max_commit_retries == 3
        assert settings.high_tier_threshold == 5.0
        assert settings.allowed_origins == ["http://localhost:3000", "http://localhost:5173"]


class TestEnvironmentOverrides:
    """Environment variables override defaults, case-insensitively."""

    def test_store_backend_is_normalized(self):
        with patch.dict("os.environ", {"STORE_BACKEND": "PocketBase"}, clear=True):
            assert Settings(_env_file=None).store_backend == "pocketbase"

    def test_invalid_store_backend_rejected(self):
        with patch.dict("os.environ", {"STORE_BACKEND": "redis"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_engine_tuning(self):
        env = {"LOCK_TIMEOUT_SECONDS": "0.5", "MAX_COMMIT_RETRIES": "7"}
        with patch.dict("os.environ", env, clear=True):
            settings = Settings(_env_file=None)
        assert settings.lock_timeout_seconds == 0.5
        assert settings.max_commit_retries == 7

    def test_non_positive_timeout_rejected(self):
        with patch.dict("os.environ", {"LOCK_TIMEOUT_SECONDS": "0"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_allowed_origins_parsing(self):
        with patch.dict("os.environ", {"ALLOWED_ORIGINS": " http://a.test , ,http://b.test"}, clear=True):
            assert Settings(_env_file=None).allowed_origins == ["http://a.test", "http://b.test"]
