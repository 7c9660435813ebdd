import config


def test_defaults(monkeypatch):
    for var in ("CRAWLER_SEED", "CRAWLER_DIFFICULTY", "CRAWLER_STRICT_GEOMETRY", "CRAWLER_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    assert config.get_seed() == config.DEFAULT_SEED
    assert config.get_difficulty() == config.DEFAULT_DIFFICULTY
    assert config.get_strict_geometry() is False
    assert config.get_log_level() == "WARNING"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CRAWLER_SEED", "7")
    monkeypatch.setenv("CRAWLER_DIFFICULTY", "2.5")
    monkeypatch.setenv("CRAWLER_STRICT_GEOMETRY", "yes")
    monkeypatch.setenv("CRAWLER_LOG_LEVEL", "debug")
    assert config.get_seed() == 7
    assert config.get_difficulty() == 2.5
    assert config.get_strict_geometry() is True
    assert config.get_log_level() == "DEBUG"


def test_invalid_values_fall_back(monkeypatch):
    monkeypatch.setenv("CRAWLER_SEED", "not-a-number")
    monkeypatch.setenv("CRAWLER_DIFFICULTY", "-1")
    assert config.get_seed() == config.DEFAULT_SEED
    assert config.get_difficulty() == config.DEFAULT_DIFFICULTY
