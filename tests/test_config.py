import json

import pytest

from packotter.exceptions import ConfigParseError, ConfigValidationError
from packotter.models import LayoutKind, PackOtterConfig, load_config, parse_selector
from packotter.models.config import DEFAULT_API_BASE


def test_defaults():
    config = load_config()

    assert config.api.base_url == DEFAULT_API_BASE
    assert config.download.batch_size == 10
    assert config.download.max_retries == 0
    assert config.output.compression_level == 9
    assert not config.extract.strict
    assert not config.strict_loader


def test_load_toml(tmp_path):
    path = tmp_path / "packotter.toml"
    path.write_text(
        '[api]\nbase_url = "http://localhost:8080/v1/"\ntimeout = 5\n'
        "[download]\nbatch_size = 4\n"
        "[output]\nhash_suffix = true\n"
    )

    config = load_config(str(path))

    assert config.api.base_url == "http://localhost:8080/v1"
    assert config.api.timeout == 5
    assert config.download.batch_size == 4
    assert config.output.hash_suffix


def test_load_yaml_and_json(tmp_path):
    yaml_path = tmp_path / "c.yaml"
    yaml_path.write_text("download:\n  include_optional: false\nstrict_loader: true\n")
    json_path = tmp_path / "c.json"
    json_path.write_text(json.dumps({"extract": {"strict": True}}))

    assert load_config(str(yaml_path)).download.include_optional is False
    assert load_config(str(yaml_path)).strict_loader is True
    assert load_config(str(json_path)).extract.strict is True


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("PACKOTTER_API_BASE", "http://mirror.local/api/")
    monkeypatch.setenv("PACKOTTER_BATCH_SIZE", "3")
    monkeypatch.setenv("PACKOTTER_TIMEOUT", "2.5")

    config = PackOtterConfig.from_dict({})

    assert config.api.base_url == "http://mirror.local/api"
    assert config.download.batch_size == 3
    assert config.api.timeout == 2.5


@pytest.mark.parametrize(
    "data",
    [
        {"download": {"batch_size": 0}},
        {"download": {"max_retries": -1}},
        {"api": {"timeout": -5}},
        {"output": {"compression_level": 12}},
    ],
)
def test_invalid_values(data):
    with pytest.raises(ConfigValidationError):
        PackOtterConfig.from_dict(data)


def test_bad_files(tmp_path):
    with pytest.raises(ConfigParseError):
        load_config(str(tmp_path / "missing.toml"))

    bad = tmp_path / "bad.ini"
    bad.write_text("x")
    with pytest.raises(ConfigParseError):
        load_config(str(bad))

    broken = tmp_path / "broken.json"
    broken.write_text("{")
    with pytest.raises(ConfigParseError):
        load_config(str(broken))


def test_parse_selector():
    assert parse_selector("ALL") == [LayoutKind.MULTIMC, LayoutKind.MODRINTH]
    with pytest.raises(ConfigValidationError):
        parse_selector("3")


@pytest.mark.parametrize("data", [{"api": "x"}, {"download": [1, 2]}])
def test_section_must_be_table(data):
    with pytest.raises(ConfigParseError):
        PackOtterConfig.from_dict(data)
