import os

import pytest

from rings import conf

BASE_CONFIG = """
name: Base
short: BASE
debug: false
web:
  main:
    port: 8080
    middleware:
      cors:
        origin: "*"
model:
  backends:
    cache:
      kind: redis
      readonly: false
      connect: redis://localhost:6379
extends:
  theme: dark
items: [1, 2, 3]
ratio: 0.5
"""


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    for name in list(os.environ):
        if name.startswith("REBT_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("REBT_CONFIG_PATH", str(tmp_path))
    (tmp_path / "config.yml").write_text(BASE_CONFIG)
    (tmp_path / "development.yml").write_text("short: DEV\n")
    (tmp_path / "local.yml").write_text("debug: true\n")
    conf.reset()
    yield tmp_path
    conf.reset()


def test_load_settings_merges_layers(config_dir):
    data = conf.load_settings(str(config_dir), "development", {})
    assert data["name"] == "Base"
    assert data["short"] == "DEV"
    assert data["debug"] is True
    assert data["web"]["main"]["port"] == 8080


def test_load_settings_missing_mode_file_is_ignored(config_dir):
    data = conf.load_settings(str(config_dir), "production", {})
    assert data["short"] == "BASE"


def test_load_settings_environment_overrides(config_dir):
    data = conf.load_settings(str(config_dir), "development", {"REBT_NAME": "FromEnv"})
    assert data["name"] == "FromEnv"


def test_load_settings_empty_directory(tmp_path):
    assert conf.load_settings(str(tmp_path), "development", {}) == {}


def test_getters(config_dir):
    assert conf.get_int("web.main.port") == 8080
    assert conf.get_string("web.main.port") == "8080"
    assert conf.get_array("items") == [1, 2, 3]
    assert conf.get_int("items[1]") == 2
    assert conf.get_float("ratio") == 0.5
    assert conf.get_bool("debug") is True
    assert conf.get_table("extends") == {"theme": "dark"}


def test_getters_fall_back_to_default(config_dir):
    assert conf.get_string("missing", "fallback") == "fallback"
    assert conf.get_int("name", 7) == 7
    assert conf.get_table("name") is None
    assert conf.get_array("items[9]") is None


def test_has(config_dir):
    assert conf.has("extends.theme") is True
    assert conf.has("nope") is False


def test_environment_variable_reaches_settings(config_dir, monkeypatch):
    monkeypatch.setenv("REBT_DEBUG", "false")
    conf.reset()
    assert conf.get_bool("debug") is False
    assert conf.rebit().debug is False


def test_rebit_from_files(config_dir):
    cfg = conf.rebit()
    assert cfg.name == "Base"
    assert cfg.short == "DEV"
    assert cfg.has_web()
    assert cfg.get_web("main").port == 8080
    assert cfg.get_web("other") is None
    assert cfg.web_middleware("main", "cors") == {"origin": "*"}
    assert cfg.web_middleware("main", "gzip") is None
    assert cfg.has_backend()
    backend = cfg.get_backend("cache")
    assert backend.kind is conf.BackendKind.REDIS
    assert backend.connect == "redis://localhost:6379"
    assert cfg.get_extend("theme") == "dark"
    assert cfg.get_extend("absent") is None


def test_rebit_is_cached_until_reset(config_dir):
    first = conf.rebit()
    assert first.name == "Base"
    (config_dir / "config.yml").write_text(BASE_CONFIG.replace("name: Base", "name: Changed"))
    assert conf.rebit().name == "Base"
    conf.reset()
    assert conf.rebit().name == "Changed"


def test_rebit_missing_fields_raises(tmp_path, monkeypatch):
    monkeypatch.setenv("REBT_CONFIG_PATH", str(tmp_path))
    conf.reset()
    try:
        with pytest.raises(ValueError):
            conf.rebit()
    finally:
        conf.reset()


def test_rebit_defaults():
    cfg = conf.Rebit()
    assert cfg.name == "Rings"
    assert cfg.short == "RING"
    assert cfg.debug is False
    assert not cfg.has_web()
    assert not cfg.has_backend()
    assert cfg.get_extend("x") is None
    assert cfg.log is None


def test_log_and_web_defaults():
    log = conf.Log()
    assert (log.level, log.console, log.dirs) == ("trace", True, "./logs")
    assert conf.Web().port == 80
    assert conf.Web().bind is None


def test_from_dict_rejects_bad_port():
    data = {"name": "a", "short": "b", "debug": False, "web": {"w": {"port": 70000}}, "model": {}}
    with pytest.raises(ValueError):
        conf.Rebit.from_dict(data)


def test_from_dict_rejects_bad_backend_kind():
    data = {
        "name": "a",
        "short": "b",
        "debug": False,
        "web": {},
        "model": {"backends": {"x": {"kind": "mongo", "readonly": True, "connect": "c"}}},
    }
    with pytest.raises(ValueError):
        conf.Rebit.from_dict(data)


def test_from_dict_with_log():
    data = {
        "name": "a",
        "short": "b",
        "debug": "yes",
        "web": {},
        "model": {},
        "log": {"level": "info", "console": False, "dirs": ""},
    }
    cfg = conf.Rebit.from_dict(data)
    assert cfg.debug is True
    assert cfg.log == conf.Log(level="info", console=False, dirs="")
    assert cfg.model.backends is None


def test_backend_kind_parse_and_display():
    assert conf.BackendKind.parse("REDIS") is conf.BackendKind.REDIS
    assert conf.BackendKind.parse("postgres") is conf.BackendKind.POSTGRES
    assert str(conf.BackendKind.POSTGRES) == "Postgre"
    assert str(conf.BackendKind.REDIS) == "Redis"
    with pytest.raises(ValueError, match="unknown backend kind"):
        conf.BackendKind.parse("mongo")


def test_model_backend_without_backends():
    assert conf.Model().backend("x") is None