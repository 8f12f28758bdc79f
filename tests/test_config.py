"""Tests for environment-driven settings."""

import importlib

import pytest

import perfstats.config as config


@pytest.fixture
def reload_config(monkeypatch):
    def _reload(**env):
        for name, value in env.items():
            monkeypatch.setenv(name, value)
        return importlib.reload(config)

    yield _reload
    monkeypatch.undo()
    importlib.reload(config)


class TestSettings:
    def test_defaults(self, reload_config, monkeypatch):
        for name in ("PERFSTATS_TOP_SLOW_SIZE", "PERFSTATS_SCOPE_ROWS_BY_KIND"):
            monkeypatch.delenv(name, raising=False)
        module = reload_config()

        assert module.settings.top_slow_size == 30
        assert module.settings.scope_rows_by_kind is False
        assert module.settings.write_parquet is True

    def test_environment_overrides(self, reload_config):
        module = reload_config(
            PERFSTATS_TOP_SLOW_SIZE="5",
            PERFSTATS_SCOPE_ROWS_BY_KIND="yes",
            PERFSTATS_WRITE_PARQUET="off",
        )

        assert module.settings.top_slow_size == 5
        assert module.settings.scope_rows_by_kind is True
        assert module.settings.write_parquet is False

    def test_garbage_values_fall_back(self, reload_config):
        module = reload_config(PERFSTATS_TOP_SLOW_SIZE="many", PERFSTATS_SCOPE_ROWS_BY_KIND="maybe")

        assert module.settings.top_slow_size == 30
        assert module.settings.scope_rows_by_kind is False

    @pytest.mark.parametrize("raw", ["0", "-3"])
    def test_non_positive_top_slow_size_falls_back(self, reload_config, raw):
        module = reload_config(PERFSTATS_TOP_SLOW_SIZE=raw)

        assert module.settings.top_slow_size == 30

    @pytest.mark.parametrize("size", [0, -3])
    def test_explicit_non_positive_top_slow_size_is_rejected(self, size):
        with pytest.raises(ValueError):
            config.Settings(top_slow_size=size)

    def test_handler_ingests_with_fallback_size(self, reload_config):
        from perfstats.handlers import QueryHandler
        from perfstats.ingest import QueryKind

        module = reload_config(PERFSTATS_TOP_SLOW_SIZE="0")
        handler = QueryHandler(module.settings)

        handler.query("n1", QueryKind.SQL_FIELDS, "q", 1, 0, 1, True)

        assert len(handler.results()["topSlowSql"]) == 1

    def test_as_dict_is_json_friendly(self):
        settings = config.Settings(top_slow_size=5)

        assert settings.as_dict()["top_slow_size"] == 5
        assert isinstance(settings.as_dict()["output_root"], str)
