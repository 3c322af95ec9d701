from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ratios.config import INDEX_FILENAME
from ratios.schemas import RegionRecord, SearchIndexEntry, region_display_name


class SearchIndexBuildError(RuntimeError):
    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{path.as_posix()}: {message}")
        self.path = path


def relpath(path: Path, project_root: Path) -> str:
    try:
        return path.relative_to(project_root).as_posix()
    except ValueError:
        return path.as_posix()


def region_files(data_root: Path) -> list[Path]:
    return sorted(path for path in data_root.glob("*.json") if path.name != INDEX_FILENAME)


def load_region_record(path: Path) -> RegionRecord:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SearchIndexBuildError(path, f"JSON parse error: {exc.msg}") from exc
    except UnicodeDecodeError as exc:
        raise SearchIndexBuildError(path, f"not valid UTF-8: {exc.reason}") from exc
    except OSError as exc:
        raise SearchIndexBuildError(path, f"unreadable file: {exc.strerror or exc}") from exc
    try:
        return RegionRecord.model_validate(payload)
    except ValidationError as exc:
        raise SearchIndexBuildError(path, f"unreadable region record: {exc.error_count()} field error(s)") from exc


def build_entry(region_code: str, record: RegionRecord) -> SearchIndexEntry:
    display_name = region_display_name(region_code)
    ratio_value = record.requirement.ratio_value if record.requirement is not None else None
    return SearchIndexEntry(
        text=f"{display_name} ({region_code})",
        state=region_code,
        state_name=display_name,
        has_requirement=record.has_public_works_requirement,
        agency_type=record.agency_type,
        ratio_value=ratio_value,
        url=f"/state/{region_code.lower()}",
    )


def collect_entries(data_root: Path) -> list[SearchIndexEntry]:
    entries = [build_entry(path.stem, load_region_record(path)) for path in region_files(data_root)]
    entries.sort(key=lambda entry: (entry.text.casefold(), entry.text))
    return entries


def build_search_index(
    *,
    project_root: Path,
    data_root: Path,
    output_path: Path,
) -> dict[str, Any]:
    if not data_root.is_dir():
        raise SearchIndexBuildError(data_root, "data directory not found")

    entries = collect_entries(data_root)
    payload = [entry.model_dump(mode="json", by_alias=True) for entry in entries]

    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = output_path.with_suffix(f"{output_path.suffix}.tmp")
    temp_path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    temp_path.replace(output_path)

    return {
        "ok": True,
        "output_path": relpath(output_path, project_root),
        "entry_count": len(entries),
        "with_requirement": sum(1 for entry in entries if entry.has_requirement),
    }
