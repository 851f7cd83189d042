"""Unit tests for envedit.config."""

import logging

import pytest

from envedit.config import EnvEditConfig, LoggingConfig, init_config, load_config


@pytest.fixture(autouse=True)
def _no_path_override(monkeypatch):
    monkeypatch.delenv("ENVEDIT_PATH", raising=False)


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path):
        cfg = load_config(tmp_path)
        assert cfg.root == tmp_path
        assert cfg.env_path == tmp_path / ".env"
        assert cfg.create_missing is False
        assert cfg.log.level == "WARNING"
        assert cfg.log.level_no == logging.WARNING

    def test_reads_toml(self, tmp_path):
        (tmp_path / "envedit.toml").write_text(
            '[envedit]\npath = "config/app.env"\ncreate_missing = true\n\n'
            '[logging]\nlevel = "debug"\n'
        )
        cfg = load_config(tmp_path)
        assert cfg.env_path == tmp_path / "config" / "app.env"
        assert cfg.create_missing is True
        assert cfg.log.level_no == logging.DEBUG

    def test_searches_upward(self, tmp_path):
        (tmp_path / "envedit.toml").write_text('[envedit]\npath = "prod.env"\n')
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        cfg = load_config(nested)
        assert cfg.root == tmp_path
        assert cfg.env_path == tmp_path / "prod.env"

    def test_env_var_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / "envedit.toml").write_text('[envedit]\npath = "prod.env"\n')
        monkeypatch.setenv("ENVEDIT_PATH", "/somewhere/else.env")
        cfg = load_config(tmp_path)
        assert str(cfg.env_path) == "/somewhere/else.env"

    def test_with_path(self, tmp_path):
        cfg = load_config(tmp_path)
        assert cfg.with_path(None) is cfg
        other = cfg.with_path("x.env")
        assert str(other.env_path) == "x.env"
        assert other.root == cfg.root

    def test_unknown_level_falls_back_to_warning(self):
        assert LoggingConfig(level="loud").level_no == logging.WARNING


class TestInitConfig:
    def test_writes_default(self, tmp_path):
        path = init_config(tmp_path)
        assert path == tmp_path / "envedit.toml"
        cfg = load_config(tmp_path)
        assert cfg.env_path == tmp_path / ".env"
        assert cfg.config_path == path

    def test_custom_env_file(self, tmp_path):
        init_config(tmp_path, env_file="local.env")
        assert load_config(tmp_path).env_path == tmp_path / "local.env"

    def test_refuses_to_overwrite(self, tmp_path):
        init_config(tmp_path)
        with pytest.raises(FileExistsError):
            init_config(tmp_path)

    def test_config_dataclass_defaults(self, tmp_path):
        cfg = EnvEditConfig(root=tmp_path)
        assert str(cfg.env_path) == ".env"
        assert cfg.log.level == "WARNING"
