import json
import logging

import pytest

from zenstore.common.cache_strategies import (
    CACHE_STRATEGIES,
    CacheStrategy,
    environment_aware,
    get_strategy,
)
from zenstore.common.config import (
    AppConfig,
    load_env,
    read_settings,
    refresh_non_sensitive,
    requires_restart,
    settings_path,
    validate_currency,
    write_settings,
)
from zenstore.common.errors import StaleOrder, ValidationFailed
from zenstore.common.services.logging import log_event
from zenstore.common.utils.formatting import commafy, first_sentence
from zenstore.common.utils.media import youtube_embed_url, youtube_id
from zenstore.common.utils.pagination import normalize_paging, page_meta
from zenstore.common.utils.validators import ensure_positive_int, is_valid_email, is_valid_url
from zenstore.config import StoreConfig


class TestCacheStrategies:
    def test_named_strategies(self):
        assert get_strategy("admin") == CacheStrategy(swr=30, ttl=60)
        assert get_strategy("realtime").to_dict() == {"swr": 10, "ttl": 30}
        assert set(CACHE_STRATEGIES) == {"admin", "admin_listing", "public", "individual_item", "static", "realtime"}

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            get_strategy("forever")

    @pytest.mark.parametrize(
        "env, expected",
        [
            ("development", None),
            ("staging", CacheStrategy(swr=150, ttl=300)),
            ("preview", CacheStrategy(swr=150, ttl=300)),
            ("production", CacheStrategy(swr=300, ttl=600)),
        ],
    )
    def test_environment_aware(self, env, expected):
        assert environment_aware(get_strategy("public"), env) == expected


class TestPagination:
    def test_normalize(self):
        assert normalize_paging(0, 0) == (1, 12)
        assert normalize_paging(3, 500) == (3, 100)

    def test_meta(self):
        assert page_meta(2, 10, 25) == {
            "page": 2,
            "page_size": 10,
            "total": 25,
            "total_pages": 3,
            "has_next": True,
            "has_prev": True,
        }
        assert page_meta(1, 10, 0)["total_pages"] == 0


class TestValidators:
    def test_urls(self):
        assert is_valid_url("https://zen.mn/p/1")
        assert not is_valid_url("ftp://zen.mn")
        assert not is_valid_url("zen.mn")
        assert not is_valid_url(None)

    def test_emails(self):
        assert is_valid_email("a@b.mn")
        assert not is_valid_email("a@b")
        assert not is_valid_email("")

    def test_positive_int(self):
        assert ensure_positive_int("3", "position") == 3
        with pytest.raises(ValueError):
            ensure_positive_int(-1, "position")


class TestFormatting:
    def test_commafy(self):
        assert commafy(4381100) == "4,381,100"
        assert commafy(1234) == "1234"
        assert commafy("4381100.0") == "4,381,100"

    def test_first_sentence(self):
        assert first_sentence("Fast. Light.") == "Fast."
        assert first_sentence("No period") == "No period"


class TestMedia:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
            "https://www.youtube.com/shorts/dQw4w9WgXcQ",
        ],
    )
    def test_embed_url(self, url):
        assert youtube_embed_url(url) == "https://www.youtube.com/embed/dQw4w9WgXcQ"

    def test_non_youtube(self):
        assert youtube_embed_url("https://vimeo.com/1") is None
        assert youtube_embed_url(None) is None

    def test_ids(self):
        assert youtube_id("https://www.youtube.com/shorts/dQw4w9WgXcQ?feature=share") == "dQw4w9WgXcQ"
        assert youtube_id("https://youtu.be/dQw4w9WgXcQ") == "dQw4w9WgXcQ"


class TestErrors:
    def test_validation_failed_carries_fields(self):
        exc = ValidationFailed({"title": ["too short"]})
        assert isinstance(exc, ValueError)
        assert exc.errors == {"title": ["too short"]}
        assert str(exc) == exc.message

    def test_stale_order(self):
        exc = StaleOrder([1, 2], [2, 1])
        assert exc.actual == [2, 1]
        assert "[2, 1]" in str(exc)


class TestLogEvent:
    def test_emits_json_line(self, caplog):
        with caplog.at_level(logging.INFO, logger="zenstore.events"):
            log_event("info", "image.reordered", laptop_id=3, image_id=9)

        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["event"] == "image.reordered"
        assert payload["laptop_id"] == 3
        assert payload["level"] == "info"
        assert payload["ts"].endswith("Z")

    def test_level_mapping(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="zenstore.events"):
            log_event("warning", "image.delete_missing", image_id=1)
        assert caplog.records[-1].levelno == logging.WARNING


class TestAppConfig:
    def test_load_env_defaults(self, monkeypatch, tmp_path):
        for key in ("CURRENCY", "STORE_BASE_URL", "APP_ENV", "LOG_LEVEL"):
            monkeypatch.delenv(key, raising=False)
        monkeypatch.setenv("ZENSTORE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("DATABASE_URL", "sqlite://")

        cfg = load_env()

        assert cfg.currency == "MNT"
        assert cfg.app_env == "production"
        assert cfg.database_url == "sqlite://"
        assert cfg.get_product_url(4) == "http://127.0.0.1:5000/products/4"

    def test_settings_file_overrides_env(self, monkeypatch, tmp_path):
        (tmp_path / "settings.json").write_text(json.dumps({"CURRENCY": "usd"}), encoding="utf-8")
        monkeypatch.setenv("ZENSTORE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("CURRENCY", "EUR")

        assert load_env().currency == "USD"

    def test_currency_validation(self):
        with pytest.raises(ValueError):
            validate_currency("TUGRIK")

    def test_hot_reload_ignores_sensitive_keys(self):
        current = AppConfig("sqlite://", "INFO", "http://a.test", "MNT", "production")
        updated = refresh_non_sensitive({"CURRENCY": "usd", "DATABASE_URL": "postgresql://x"}, current)

        assert updated.currency == "USD"
        assert updated.database_url == "sqlite://"
        assert requires_restart(["DATABASE_URL"])
        assert not requires_restart(["CURRENCY"])


class TestStoreConfig:
    def test_admin_json_overrides_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ADMIN_USERNAME", "boss")
        monkeypatch.setenv("ADMIN_PASSWORD", "env-pass")
        (tmp_path / "admin.json").write_text(json.dumps({"username": "boss", "password": "file-pass"}), encoding="utf-8")

        cfg = StoreConfig.load(tmp_path)

        assert cfg.admin_username == "boss"
        assert cfg.admin_password == "file-pass"

    def test_save_admin_password(self, store_config):
        store_config.data_dir.mkdir(parents=True)
        store_config.save_admin_password("n3w-pass")

        saved = json.loads(store_config.admin_credentials_file.read_text(encoding="utf-8"))
        assert saved == {"username": "admin", "password": "n3w-pass"}
        assert store_config.admin_password == "n3w-pass"


class TestSettingsFile:
    def test_write_merges_existing_keys(self, tmp_path):
        path = tmp_path / "settings.json"
        write_settings({"CURRENCY": "USD"}, path)
        merged = write_settings({"STORE_BASE_URL": "https://zen.mn"}, path)

        assert merged == {"CURRENCY": "USD", "STORE_BASE_URL": "https://zen.mn"}
        assert read_settings(path) == merged

    def test_unreadable_file_is_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json", encoding="utf-8")
        assert read_settings(path) == {}
        assert settings_path(tmp_path) == path
