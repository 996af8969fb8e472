"""Tests for TOML configuration loading."""

import pytest

from shared.config import (
    ENCODING_NAMES,
    FILE_TYPE_NAMES,
    GlobalConfig,
    LoaderConfig,
    RvelfConfig,
    get_config,
)

from rvelf.core.models import DataEncoding, FileType


def test_defaults():
    config = RvelfConfig()
    assert config.loader.accepted_file_types == ["EXEC"]
    assert config.loader.accepted_encodings == ["LSB"]
    assert config.loader.resolve_section_names is True
    assert config.global_settings.log_level == "INFO"
    assert config.global_settings.log_file is None


def test_default_lists_are_not_shared():
    a, b = LoaderConfig(), LoaderConfig()
    a.accepted_file_types.append("DYN")
    assert b.accepted_file_types == ["EXEC"]


def test_load_from_file(tmp_path):
    path = tmp_path / "rvelf.toml"
    path.write_text(
        '[global]\nlog_level = "DEBUG"\nlog_json = true\n'
        '[loader]\naccepted_file_types = ["EXEC", "DYN"]\n'
        "resolve_section_names = false\nunknown_key = 1\n"
    )
    config = RvelfConfig.load(path)
    assert config.global_settings.log_level == "DEBUG"
    assert config.global_settings.log_json is True
    assert config.loader.accepted_file_types == ["EXEC", "DYN"]
    assert config.loader.resolve_section_names is False
    # omitted keys keep their defaults
    assert config.loader.accepted_encodings == ["LSB"]
    assert config.loader.max_file_size == LoaderConfig().max_file_size


def test_missing_sections_use_defaults(tmp_path):
    path = tmp_path / "empty.toml"
    path.write_text("")
    config = RvelfConfig.load(path)
    assert config.to_dict() == RvelfConfig().to_dict()


def test_explicit_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        RvelfConfig.load(tmp_path / "nope.toml")


def test_invalid_toml(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text("[loader\n")
    with pytest.raises(ValueError):
        RvelfConfig.load(path)


def test_to_dict():
    data = RvelfConfig(global_settings=GlobalConfig(debug=True)).to_dict()
    assert data["global_settings"]["debug"] is True
    assert data["loader"]["accepted_encodings"] == ["LSB"]


def test_get_config_caches(tmp_path):
    path = tmp_path / "rvelf.toml"
    path.write_text('[global]\nlog_level = "WARNING"\n')
    first = get_config(path)
    assert first.global_settings.log_level == "WARNING"
    assert get_config() is first


def test_names_are_normalised():
    loader = LoaderConfig(accepted_file_types=["exec", "Dyn", "EXEC"])
    assert loader.accepted_file_types == ["EXEC", "DYN"]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"accepted_file_types": ["SHARED"]},
        {"accepted_encodings": ["PDP"]},
        {"accepted_encodings": []},
        {"max_file_size": 0},
        {"max_segment_size": -1},
        {"max_file_size": "big"},
        {"max_segment_size": 1.5},
        {"max_file_size": True},
        {"accepted_encodings": "LSB"},
        {"resolve_section_names": "yes"},
    ],
)
def test_invalid_loader_values(kwargs):
    with pytest.raises(ValueError):
        LoaderConfig(**kwargs)


def test_invalid_value_in_file(tmp_path):
    path = tmp_path / "rvelf.toml"
    path.write_text('[loader]\naccepted_encodings = ["middle"]\n')
    with pytest.raises(ValueError, match="accepted_encodings"):
        RvelfConfig.load(path)


def test_non_integer_size_in_file(tmp_path):
    path = tmp_path / "rvelf.toml"
    path.write_text('[loader]\nmax_file_size = "1MB"\n')
    with pytest.raises(ValueError, match="max_file_size must be an integer"):
        RvelfConfig.load(path)


def test_name_sets_match_models():
    assert FILE_TYPE_NAMES == {t.name for t in FileType}
    assert ENCODING_NAMES == {e.name for e in DataEncoding}


def test_environment_variable(tmp_path, monkeypatch):
    path = tmp_path / "env.toml"
    path.write_text("[loader]\nresolve_section_names = false\n")
    monkeypatch.setenv("RVELF_CONFIG", str(path))
    assert RvelfConfig.load().loader.resolve_section_names is False

    monkeypatch.setenv("RVELF_CONFIG", str(tmp_path / "gone.toml"))
    with pytest.raises(FileNotFoundError):
        RvelfConfig.load()


def test_with_overrides_copies():
    base = RvelfConfig()
    changed = base.with_overrides(
        extra_file_types=["dyn"],
        extra_encodings=["MSB"],
        resolve_section_names=False,
        log_level="DEBUG",
    )
    assert changed.loader.accepted_file_types == ["EXEC", "DYN"]
    assert changed.loader.accepted_encodings == ["LSB", "MSB"]
    assert changed.loader.resolve_section_names is False
    assert changed.global_settings.log_level == "DEBUG"
    assert base.to_dict() == RvelfConfig().to_dict()
