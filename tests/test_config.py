from pathlib import Path

import pytest
import yaml

from rate_path.algebra import MIN_SUM
from rate_path.config_loader import ServiceConfig, build_config, load_yaml, validate_config
from rate_path.errors import ConfigError


def test_defaults():
    cfg = build_config(environ={})
    assert cfg == ServiceConfig()
    assert cfg.path_algebra().name == "max_product"


def test_sample_config_validates():
    root = Path(__file__).parent.parent
    cfg = build_config(root / "config_samples" / "rate_path.yaml", environ={})
    assert cfg.algebra == "max_product"
    assert cfg.link_venues is True
    assert cfg.vectorize is None


def test_file_env_and_overrides_precedence(tmp_path):
    cfg_file = tmp_path / "cfg.yaml"
    cfg_file.write_text(
        yaml.safe_dump({"algebra": "min_sum", "log_level": "DEBUG", "strict": True}),
        encoding="utf-8",
    )
    env = {"RATE_PATH_CONFIG": str(cfg_file), "RATE_PATH_LOG_LEVEL": "warning"}
    cfg = build_config(environ=env)
    assert cfg.path_algebra() is MIN_SUM
    assert cfg.log_level == "WARNING"
    assert cfg.strict is True

    cfg = build_config(environ=env, overrides={"strict": False, "link_venues": None})
    assert cfg.strict is False
    assert cfg.link_venues is True


def test_empty_yaml_is_empty_mapping(tmp_path):
    p = tmp_path / "empty.yaml"
    p.write_text("", encoding="utf-8")
    assert load_yaml(p) == {}
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_yaml(p)


@pytest.mark.parametrize(
    "data",
    [
        {"algebra": "max_sum"},
        {"link_venues": "yes"},
        {"unknown_key": 1},
        {"log_level": "LOUD"},
        {"rate_format": "{0} {1}"},
    ],
)
def test_invalid_config_is_rejected(data):
    with pytest.raises(ConfigError):
        validate_config(data)


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigError):
        build_config(tmp_path / "nope.yaml", environ={})
