"""
DayNotes Backend — Settings Tests
==================================

What we test:
    ✅ Port read from BACKEND_PORT or PORT
    ✅ Backend and log level names validated and normalized
    ✅ SQLite engines built without pool sizing options
"""

import pytest
from pydantic import ValidationError as SettingsValidationError

from daynotes.config import Settings
from daynotes.database import build_engine


class TestServerSettings:

    def test_default_port(self, monkeypatch):
        """Without either variable the server listens on 3000."""
        monkeypatch.delenv("BACKEND_PORT", raising=False)
        monkeypatch.delenv("PORT", raising=False)
        assert Settings(_env_file=None).backend_port == 3000

    def test_port_variable_honored(self, monkeypatch):
        """PORT alone configures the listening port."""
        monkeypatch.delenv("BACKEND_PORT", raising=False)
        monkeypatch.setenv("PORT", "8080")
        assert Settings(_env_file=None).backend_port == 8080

    def test_backend_port_takes_precedence(self, monkeypatch):
        """BACKEND_PORT wins when both are set."""
        monkeypatch.setenv("BACKEND_PORT", "4000")
        monkeypatch.setenv("PORT", "8080")
        assert Settings(_env_file=None).backend_port == 4000


class TestValidatedFields:

    def test_store_backend_lowercased(self, monkeypatch):
        """Backend names are case-insensitive."""
        monkeypatch.setenv("STORE_BACKEND", "Memory")
        assert Settings(_env_file=None).store_backend == "memory"

    def test_unknown_store_backend_rejected(self, monkeypatch):
        """Only sql and memory backends exist."""
        monkeypatch.setenv("STORE_BACKEND", "redis")
        with pytest.raises(SettingsValidationError):
            Settings(_env_file=None)

    def test_invalid_log_level_rejected(self, monkeypatch):
        """Log level must name a logging level."""
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        with pytest.raises(SettingsValidationError):
            Settings(_env_file=None)


class TestBuildEngine:

    @pytest.mark.asyncio
    async def test_sqlite_engine_skips_pool_options(self, tmp_path):
        """SQLite URLs get an engine without pool_size/max_overflow."""
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'engine.db'}")
        try:
            assert engine.dialect.name == "sqlite"
            assert not hasattr(engine.pool, "size") or engine.pool.size() != 20
        finally:
            await engine.dispose()
