from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TextIO

from pydantic import Field

from ratios.schemas import RatiosBaseModel

PASS_MARK = "✓"
WARN_MARK = "⚠"
FAIL_MARK = "✗"
RULE = "========================================"
DIVIDER = "----------------------------------------"


class Severity(str, Enum):
    warning = "warning"
    error = "error"


class VerificationStatus(str, Enum):
    passed = "passed"
    passed_with_warnings = "passed_with_warnings"
    failed = "failed"


@dataclass(frozen=True)
class Finding:
    severity: Severity
    check: str
    details: str = ""


@dataclass(frozen=True)
class RegionSummary:
    issue_count: int
    has_requirement: bool


@dataclass(frozen=True)
class CoverageSummary:
    regions: int
    regions_with_requirements: int
    regions_with_issues: int

    @classmethod
    def from_regions(cls, region_stats: dict[str, RegionSummary | None]) -> "CoverageSummary":
        summaries = [stats for stats in region_stats.values() if stats is not None]
        return cls(
            regions=len(region_stats),
            regions_with_requirements=sum(1 for stats in summaries if stats.has_requirement),
            regions_with_issues=sum(1 for stats in summaries if stats.issue_count > 0),
        )


class ReportDetail(RatiosBaseModel):
    type: Severity
    check: str
    details: str


class ReportSummary(RatiosBaseModel):
    states: int
    states_with_requirements: int = Field(serialization_alias="statesWithRequirements")
    states_with_issues: int = Field(serialization_alias="statesWithIssues")


class ReportResults(RatiosBaseModel):
    passed: int
    warnings: int
    errors: int


class VerificationReport(RatiosBaseModel):
    timestamp: str
    status: VerificationStatus
    summary: ReportSummary
    results: ReportResults
    details: list[ReportDetail]


@dataclass
class Reporter:
    """Accumulates check outcomes for a single verification run.

    In JSON mode nothing is echoed while checks run; the caller renders one
    report at the end. Passing checks are only echoed when ``verbose`` is set.
    """

    verbose: bool = False
    json_output: bool = False
    stream: TextIO | None = None
    passed: int = 0
    warnings: int = 0
    errors: int = 0
    findings: list[Finding] = field(default_factory=list)

    def log(self, message: str) -> None:
        if self.json_output:
            return
        print(message, file=self.stream or sys.stdout)

    def record_pass(self, check: str) -> None:
        self.passed += 1
        if self.verbose:
            self.log(f"  {PASS_MARK} {check}")

    def warn(self, check: str, details: str = "") -> None:
        self.record(Finding(severity=Severity.warning, check=check, details=details))

    def fail(self, check: str, details: str = "") -> None:
        self.record(Finding(severity=Severity.error, check=check, details=details))

    def record(self, finding: Finding) -> None:
        if finding.severity == Severity.error:
            self.errors += 1
            label = f"{FAIL_MARK} ERROR"
        else:
            self.warnings += 1
            label = f"{WARN_MARK} WARNING"
        self.findings.append(finding)
        suffix = f" - {finding.details}" if finding.details else ""
        self.log(f"  {label}: {finding.check}{suffix}")

    @property
    def status(self) -> VerificationStatus:
        if self.errors > 0:
            return VerificationStatus.failed
        if self.warnings > 0:
            return VerificationStatus.passed_with_warnings
        return VerificationStatus.passed

    @property
    def exit_code(self) -> int:
        return 1 if self.errors > 0 else 0

    def build_report(self, coverage: CoverageSummary, *, timestamp: datetime | None = None) -> VerificationReport:
        moment = timestamp or datetime.now(UTC)
        return VerificationReport(
            timestamp=moment.isoformat().replace("+00:00", "Z"),
            status=self.status,
            summary=ReportSummary(
                states=coverage.regions,
                states_with_requirements=coverage.regions_with_requirements,
                states_with_issues=coverage.regions_with_issues,
            ),
            results=ReportResults(passed=self.passed, warnings=self.warnings, errors=self.errors),
            details=[
                ReportDetail(type=finding.severity, check=finding.check, details=finding.details)
                for finding in self.findings
            ],
        )

    def render_json(self, coverage: CoverageSummary, *, timestamp: datetime | None = None) -> str:
        report = self.build_report(coverage, timestamp=timestamp)
        return json.dumps(report.model_dump(mode="json", by_alias=True), indent=2, ensure_ascii=False)

    def summary_lines(self, coverage: CoverageSummary) -> list[str]:
        lines = [
            "",
            RULE,
            "         VERIFICATION SUMMARY",
            RULE,
            "",
            "Data Coverage:",
            f"  States: {coverage.regions}",
            f"  States with Requirements: {coverage.regions_with_requirements}",
            f"  States with Issues: {coverage.regions_with_issues}",
            "",
            "Verification Results:",
            f"  {PASS_MARK} Passed: {self.passed}",
            f"  {WARN_MARK} Warnings: {self.warnings}",
            f"  {FAIL_MARK} Errors: {self.errors}",
            "",
            DIVIDER,
        ]
        status = self.status
        if status == VerificationStatus.failed:
            lines.append(f"{FAIL_MARK} VERIFICATION FAILED")
        elif status == VerificationStatus.passed_with_warnings:
            lines.append(f"{WARN_MARK} VERIFICATION PASSED WITH WARNINGS")
        else:
            lines.append(f"{PASS_MARK} VERIFICATION PASSED")
        lines.append(DIVIDER)
        lines.append("")
        return lines

    def render(self, coverage: CoverageSummary) -> int:
        if self.json_output:
            print(self.render_json(coverage), file=self.stream or sys.stdout)
        else:
            for line in self.summary_lines(coverage):
                self.log(line)
        return self.exit_code
