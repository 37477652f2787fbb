from hextags.common.settings import get_settings


def test_settings_env_overrides(monkeypatch):
    # ensure a clean cache per test
    get_settings.cache_clear()
    monkeypatch.setenv("TAGS__CASE_SENSITIVE", "no")
    monkeypatch.setenv("TAGS__MAX_TEXT_LENGTH", "64")
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///tags.db")
    try:
        cfg = get_settings()
        assert cfg.tags.case_sensitive is False
        assert cfg.tags.max_text_length == 64
        assert cfg.database_url == "sqlite+pysqlite:///tags.db"
    finally:
        get_settings.cache_clear()


def test_settings_defaults(monkeypatch):
    get_settings.cache_clear()
    monkeypatch.delenv("DATABASE_URL", raising=False)
    try:
        cfg = get_settings()
        # spot-check a couple defaults
        assert cfg.tags.resolve_retries >= 1
        assert cfg.tags.max_group_length == 100
        assert cfg.db_schema is None or cfg.db_schema != "public"
    finally:
        get_settings.cache_clear()
