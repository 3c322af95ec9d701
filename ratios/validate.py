from __future__ import annotations

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from ratios.config import INDEX_FILENAME, VerifyConfig, resolve_runtime_path
from ratios.reporting import RULE, CoverageSummary, RegionSummary, Reporter
from ratios.schemas import (
    AGENCY_TYPES,
    EXPECTED_REGION_CODES,
    REQUIRED_REQUIREMENT_FIELDS,
    IndexDocument,
)

SEARCH_INDEX_FILENAME = "search-index.json"
FATAL_INDEX_MESSAGE = f"Cannot continue without valid {INDEX_FILENAME}"


def read_json_file(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def is_valid_timestamp(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        datetime.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def is_http_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def is_absent_requirement(value: Any) -> bool:
    # null, false, 0 and "" stand for no requirement; objects, even empty, are checked.
    if value is None:
        return True
    return isinstance(value, (str, int, float)) and not value


def check_requirement(requirement: Any) -> list[str]:
    fields = requirement if isinstance(requirement, dict) else {}
    issues: list[str] = []
    for field_name in REQUIRED_REQUIREMENT_FIELDS:
        if is_blank(fields.get(field_name)):
            issues.append(f"Missing requirement.{field_name}")

    statute_url = fields.get("statuteUrl")
    if not is_blank(statute_url) and not is_http_url(statute_url):
        issues.append(f"Invalid statute URL: {statute_url}")
    return issues


def check_region_record(region_code: str, payload: Any) -> list[str]:
    """Return every content issue found in a parsed region record, in check order."""
    record = payload if isinstance(payload, dict) else {}
    issues: list[str] = []

    if record.get("state") != region_code:
        issues.append(f"State code mismatch: {record.get('state')} vs {region_code}")

    if is_blank(record.get("stateName")):
        issues.append("Missing stateName")

    agency_type = record.get("agencyType")
    if not isinstance(agency_type, str) or agency_type not in AGENCY_TYPES:
        issues.append(f"Invalid agencyType: {agency_type}")

    has_requirement = record.get("hasPublicWorksRequirement")
    if not isinstance(has_requirement, bool):
        issues.append("Missing or invalid hasPublicWorksRequirement")

    if has_requirement is True:
        requirement = record.get("requirement")
        if is_absent_requirement(requirement):
            issues.append("hasPublicWorksRequirement is true but no requirement object")
        else:
            issues.extend(check_requirement(requirement))

    if is_blank(record.get("lastVerified")):
        issues.append("Missing lastVerified date")

    return issues


def validate_index_file(index_path: Path, reporter: Reporter) -> IndexDocument | None:
    reporter.log(f"\n--- Validating {INDEX_FILENAME} ---")

    if not index_path.exists():
        reporter.fail(f"{INDEX_FILENAME} exists", "File not found")
        return None
    reporter.record_pass(f"{INDEX_FILENAME} exists")

    try:
        payload = read_json_file(index_path)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        reporter.fail(f"{INDEX_FILENAME} is valid JSON", str(exc))
        return None
    except OSError as exc:
        reporter.fail(f"{INDEX_FILENAME} is readable", str(exc))
        return None
    reporter.record_pass(f"{INDEX_FILENAME} is valid JSON")

    fields = payload if isinstance(payload, dict) else {}

    last_updated = fields.get("lastUpdated")
    if is_blank(last_updated):
        reporter.fail(f"{INDEX_FILENAME} has lastUpdated field")
    elif is_valid_timestamp(last_updated):
        reporter.record_pass("lastUpdated is valid date")
    else:
        reporter.fail("lastUpdated is valid date", str(last_updated))

    states = fields.get("states")
    if not isinstance(states, dict):
        reporter.fail(f"{INDEX_FILENAME} has states object")
        return None
    reporter.record_pass(f"{INDEX_FILENAME} has states object")

    missing = [code for code in EXPECTED_REGION_CODES if code not in states]
    if missing:
        reporter.warn("All expected states present", f"Missing: {', '.join(missing)}")
    else:
        reporter.record_pass(f"All {len(EXPECTED_REGION_CODES)} expected states present")

    return IndexDocument(
        last_updated=last_updated if isinstance(last_updated, str) else None,
        states=states,
    )


def validate_region_file(
    region_code: str,
    region_path: Path,
    reporter: Reporter,
    *,
    max_issues: int = 5,
) -> RegionSummary | None:
    filename = f"{region_code}.json"
    if not region_path.exists():
        reporter.fail(f"{filename} exists")
        return None

    try:
        payload = read_json_file(region_path)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        reporter.fail(f"{filename} is valid JSON", str(exc))
        return None
    except OSError as exc:
        reporter.fail(f"{filename} is readable", str(exc))
        return None

    issues = check_region_record(region_code, payload)
    if issues:
        for issue in issues[:max_issues]:
            reporter.warn(region_code, issue)
        if len(issues) > max_issues:
            reporter.warn(region_code, f"...and {len(issues) - max_issues} more issues")
    else:
        reporter.record_pass(f"{filename} structure is valid")

    record = payload if isinstance(payload, dict) else {}
    return RegionSummary(
        issue_count=len(issues),
        has_requirement=record.get("hasPublicWorksRequirement") is True,
    )


def validate_search_index(search_index_path: Path, reporter: Reporter) -> None:
    reporter.log("\n--- Validating Search Index ---")

    if not search_index_path.exists():
        reporter.warn(f"{SEARCH_INDEX_FILENAME} exists", "Run build-search-index to generate")
        return
    reporter.record_pass(f"{SEARCH_INDEX_FILENAME} exists")

    try:
        entries = read_json_file(search_index_path)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        reporter.fail(f"{SEARCH_INDEX_FILENAME} is valid JSON", str(exc))
        return
    except OSError as exc:
        reporter.fail(f"{SEARCH_INDEX_FILENAME} is readable", str(exc))
        return

    if not isinstance(entries, list):
        reporter.fail(f"{SEARCH_INDEX_FILENAME} is an array")
        return
    reporter.record_pass(f"{SEARCH_INDEX_FILENAME} has {len(entries)} entries")


def run_verification(
    *,
    data_root: Path,
    search_index_path: Path,
    reporter: Reporter,
    max_issues_per_region: int = 5,
) -> CoverageSummary | None:
    """Run every check against ``data_root``.

    Returns ``None`` when the index file is unusable and nothing else could run.
    Region files are checked in the order the index lists them.
    """
    reporter.log(RULE)
    reporter.log("  Apprenticeship Ratios Verification")
    reporter.log(RULE)
    reporter.log(f"Data directory: {data_root}")

    index = validate_index_file(data_root / INDEX_FILENAME, reporter)
    if index is None:
        return None

    reporter.log("\n--- Validating State Files ---")
    region_stats: dict[str, RegionSummary | None] = {}
    for region_code in index.states:
        region_stats[region_code] = validate_region_file(
            region_code,
            data_root / f"{region_code}.json",
            reporter,
            max_issues=max_issues_per_region,
        )

    validate_search_index(search_index_path, reporter)
    return CoverageSummary.from_regions(region_stats)


def verify(config: VerifyConfig, *, project_root: Path, reporter: Reporter | None = None) -> int:
    reporter = reporter or Reporter(verbose=config.verbose, json_output=config.json_output)
    coverage = run_verification(
        data_root=resolve_runtime_path(project_root, config.data_root),
        search_index_path=resolve_runtime_path(project_root, config.search_index_path),
        reporter=reporter,
        max_issues_per_region=config.max_issues_per_region,
    )
    if coverage is None:
        if reporter.json_output:
            print(FATAL_INDEX_MESSAGE, file=sys.stderr)
            reporter.render(CoverageSummary(regions=0, regions_with_requirements=0, regions_with_issues=0))
        else:
            reporter.log(f"\n{FATAL_INDEX_MESSAGE}")
        return 1
    return reporter.render(coverage)
