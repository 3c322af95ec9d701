from __future__ import annotations

from pathlib import Path

import pytest

from ratios.config import (
    DEFAULT_DATA_ROOT,
    DEFAULT_MAX_ISSUES_PER_REGION,
    DEFAULT_SEARCH_INDEX_PATH,
    VerifyConfig,
    load_verify_config,
    resolve_runtime_path,
)


def test_default_verify_config() -> None:
    config = VerifyConfig()

    assert config.data_root == DEFAULT_DATA_ROOT
    assert config.search_index_path == DEFAULT_SEARCH_INDEX_PATH
    assert config.max_issues_per_region == DEFAULT_MAX_ISSUES_PER_REGION == 5
    assert config.verbose is False
    assert config.json_output is False


def test_load_verify_config_ignores_unrelated_environment() -> None:
    assert load_verify_config(environ={"HOME": "/root"}) == VerifyConfig()


def test_load_verify_config_from_env_overrides_defaults() -> None:
    config = load_verify_config(
        environ={
            "RATIOS_DATA_ROOT": "fixtures/data",
            "RATIOS_SEARCH_INDEX_PATH": "build/search-index.json",
            "RATIOS_MAX_ISSUES_PER_REGION": "10",
            "RATIOS_VERBOSE": "yes",
            "RATIOS_JSON": "1",
        }
    )

    assert config.data_root == "fixtures/data"
    assert config.search_index_path == "build/search-index.json"
    assert config.max_issues_per_region == 10
    assert config.verbose is True
    assert config.json_output is True


def test_yaml_file_is_overridden_by_env(tmp_path: Path) -> None:
    config_path = tmp_path / "ratios.yaml"
    config_path.write_text(
        "data_root: curated/data\nverbose: true\nmax_issues_per_region: 3\n",
        encoding="utf-8",
    )

    config = load_verify_config(config_path, environ={"RATIOS_VERBOSE": "off"})

    assert config.data_root == "curated/data"
    assert config.max_issues_per_region == 3
    assert config.verbose is False


def test_empty_yaml_file_keeps_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "ratios.yaml"
    config_path.write_text("", encoding="utf-8")

    assert load_verify_config(config_path, environ={}) == VerifyConfig()


def test_yaml_file_must_be_a_mapping(tmp_path: Path) -> None:
    config_path = tmp_path / "ratios.yaml"
    config_path.write_text("- data\n- web\n", encoding="utf-8")

    with pytest.raises(ValueError, match="config file must contain a mapping"):
        load_verify_config(config_path, environ={})


def test_missing_yaml_file_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="config file not found"):
        load_verify_config(tmp_path / "missing.yaml", environ={})


def test_unknown_config_keys_are_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "ratios.yaml"
    config_path.write_text("data_dir: data\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Extra inputs are not permitted"):
        load_verify_config(config_path, environ={})


def test_invalid_env_values_are_rejected() -> None:
    with pytest.raises(ValueError, match="RATIOS_VERBOSE must be a boolean value"):
        load_verify_config(environ={"RATIOS_VERBOSE": "loud"})

    with pytest.raises(ValueError, match="RATIOS_MAX_ISSUES_PER_REGION must be an integer"):
        load_verify_config(environ={"RATIOS_MAX_ISSUES_PER_REGION": "five"})

    with pytest.raises(ValueError, match="max_issues_per_region must be at least 1"):
        load_verify_config(environ={"RATIOS_MAX_ISSUES_PER_REGION": "0"})

    with pytest.raises(ValueError, match="path must be non-empty"):
        load_verify_config(environ={"RATIOS_DATA_ROOT": "  "})


def test_resolve_runtime_path_keeps_absolute_paths(tmp_path: Path) -> None:
    assert resolve_runtime_path(tmp_path, "data") == (tmp_path / "data").resolve()
    assert resolve_runtime_path(tmp_path, tmp_path / "elsewhere") == tmp_path / "elsewhere"
