from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import field_validator

from ratios.schemas import RatiosBaseModel

DEFAULT_DATA_ROOT = "data"
DEFAULT_SEARCH_INDEX_PATH = "web/public/search-index.json"
DEFAULT_MAX_ISSUES_PER_REGION = 5
INDEX_FILENAME = "index.json"


def _validate_path_token(value: str) -> str:
    path = value.strip()
    if not path:
        raise ValueError("path must be non-empty")
    return path


def _parse_bool(raw: str, *, env_var: str) -> bool:
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"{env_var} must be a boolean value")


def _parse_int(raw: str, *, env_var: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{env_var} must be an integer") from exc


class VerifyConfig(RatiosBaseModel):
    data_root: str = DEFAULT_DATA_ROOT
    search_index_path: str = DEFAULT_SEARCH_INDEX_PATH
    max_issues_per_region: int = DEFAULT_MAX_ISSUES_PER_REGION
    verbose: bool = False
    json_output: bool = False

    @field_validator("data_root", "search_index_path")
    @classmethod
    def validate_paths(cls, value: str) -> str:
        return _validate_path_token(value)

    @field_validator("max_issues_per_region")
    @classmethod
    def validate_max_issues(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_issues_per_region must be at least 1")
        return value


def resolve_runtime_path(project_root: Path, raw_path: str | Path) -> Path:
    path = Path(raw_path)
    if path.is_absolute():
        return path
    return (project_root / path).resolve()


def read_config_file(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise ValueError(f"config file not found: {config_path.as_posix()}")
    try:
        payload = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"config file is not valid YAML: {config_path.as_posix()}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValueError("config file must contain a mapping")
    return payload


def load_verify_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> VerifyConfig:
    env = dict(os.environ if environ is None else environ)
    payload = VerifyConfig().model_dump(mode="python")
    if config_path is not None:
        payload.update(read_config_file(config_path))

    if "RATIOS_DATA_ROOT" in env:
        payload["data_root"] = env["RATIOS_DATA_ROOT"]
    if "RATIOS_SEARCH_INDEX_PATH" in env:
        payload["search_index_path"] = env["RATIOS_SEARCH_INDEX_PATH"]
    if "RATIOS_MAX_ISSUES_PER_REGION" in env:
        payload["max_issues_per_region"] = _parse_int(
            env["RATIOS_MAX_ISSUES_PER_REGION"],
            env_var="RATIOS_MAX_ISSUES_PER_REGION",
        )
    if "RATIOS_VERBOSE" in env:
        payload["verbose"] = _parse_bool(env["RATIOS_VERBOSE"], env_var="RATIOS_VERBOSE")
    if "RATIOS_JSON" in env:
        payload["json_output"] = _parse_bool(env["RATIOS_JSON"], env_var="RATIOS_JSON")

    return VerifyConfig.model_validate(payload)
