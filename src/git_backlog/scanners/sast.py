"""Static application security testing (SAST) scanner.

Applies a fixed set of line-level regex rules to source files and reports
findings bucketed by severity. A HIGH finding fails the scan, which is how
the pre-commit hook blocks a commit.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional, Sequence

from ..models import Finding, Severity
from .common import walk_source_files
from .rules import SAST_RULES, Rule

logger = logging.getLogger(__name__)


DEFAULT_EXTENSIONS: tuple[str, ...] = (".js", ".ts", ".jsx", ".tsx")

# Project subdirectories scanned by run_sast_scan
DEFAULT_SCAN_DIRS: tuple[str, ...] = ("src", "tests", "scripts")

SEVERITY_ORDER: tuple[Severity, ...] = (
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
    Severity.INFO,
)

SEVERITY_LABELS = {
    Severity.HIGH: "High",
    Severity.MEDIUM: "Medium",
    Severity.LOW: "Low",
    Severity.INFO: "Info",
}


class SastScanner:
    """Accumulates findings over any number of file and directory scans."""

    def __init__(
        self,
        rules: Sequence[Rule] = SAST_RULES,
        base_path: str | Path | None = None,
    ):
        self.rules = tuple(rules)
        self.base_path = Path(base_path) if base_path is not None else Path.cwd()
        self.findings: list[Finding] = []

    def _display_path(self, file_path: Path) -> str:
        try:
            return str(file_path.resolve().relative_to(self.base_path.resolve()))
        except ValueError:
            return str(file_path)

    def scan_file(self, file_path: str | Path) -> list[Finding]:
        """
        Scan a single file and record its findings.

        A line matched by several rules yields one finding per rule. Files
        that cannot be read are logged and contribute nothing.

        Returns:
            Findings produced by this file
        """
        file_path = Path(file_path)
        display_path = self._display_path(file_path)
        logger.info(f"Scanning file: {display_path}")

        try:
            content = file_path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            logger.error(f"Error scanning file {file_path}: {e}")
            return []

        findings = []
        for line_num, line in enumerate(content.split("\n"), start=1):
            for rule in self.rules:
                if rule.regex.search(line):
                    findings.append(
                        Finding(
                            file=display_path,
                            line=line_num,
                            severity=rule.severity,
                            message=rule.message,
                            recommendation=rule.recommendation,
                            code=line.strip(),
                        )
                    )

        self.findings.extend(findings)
        return findings

    def scan_directory(
        self,
        dir_path: str | Path,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ) -> list[Finding]:
        """Recursively scan files under ``dir_path`` with an allowed extension."""
        logger.info(f"Scanning directory: {dir_path}")

        findings = []
        for file_path in walk_source_files(dir_path, extensions):
            findings.extend(self.scan_file(file_path))
        return findings

    @property
    def has_high_severity(self) -> bool:
        return any(f.severity == Severity.HIGH for f in self.findings)

    def severity_counts(self) -> dict[Severity, int]:
        counts = {severity: 0 for severity in SEVERITY_ORDER}
        for finding in self.findings:
            counts[finding.severity] += 1
        return counts

    def findings_by_file(self) -> dict[str, list[Finding]]:
        grouped: dict[str, list[Finding]] = {}
        for finding in self.findings:
            grouped.setdefault(finding.file, []).append(finding)
        return grouped

    def render_report(self) -> str:
        """Format the accumulated findings as a plain-text report."""
        lines = ["SAST Security Scan Report", "=" * 32]

        if not self.findings:
            lines.append("No security issues found!")
            return "\n".join(lines)

        lines.append("Summary:")
        for severity, count in self.severity_counts().items():
            lines.append(f"   {SEVERITY_LABELS[severity]}: {count}")
        lines.append("")

        for file, findings in self.findings_by_file().items():
            lines.append(f"{file}:")
            for finding in findings:
                lines.append(f"   [{finding.severity.value}] Line {finding.line}: {finding.message}")
                lines.append(f"      Code: {finding.code}")
                lines.append(f"      Recommendation: {finding.recommendation}")
                lines.append("")

        if self.has_high_severity:
            lines.append("SAST scan failed due to high severity security issues!")
        else:
            lines.append("SAST scan completed successfully!")
        return "\n".join(lines)

    def report(self) -> bool:
        """Print the report. Returns True when no HIGH finding exists."""
        print(self.render_report())
        return not self.has_high_severity


def run_sast_scan(
    project_root: str | Path,
    directories: Iterable[str] = DEFAULT_SCAN_DIRS,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> SastScanner:
    """Scan the existing ``directories`` under ``project_root``."""
    project_root = Path(project_root)
    extensions = tuple(extensions)
    scanner = SastScanner(base_path=project_root)

    for name in directories:
        target = project_root / name
        if target.is_dir():
            scanner.scan_directory(target, extensions)
        else:
            logger.info(f"Skipping missing directory: {target}")

    return scanner


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Command line entry point.

    Exit codes: 0 when the scan passes, 1 when a HIGH finding exists, 2 when
    the project root is not a directory.
    """
    parser = argparse.ArgumentParser(
        prog="git-backlog-sast",
        description="Scan project sources for insecure patterns",
    )
    parser.add_argument("root", nargs="?", default=".", help="Project root (default: current directory)")
    parser.add_argument(
        "--ext",
        action="append",
        dest="extensions",
        help="File extension to scan, repeatable (default: .js .ts .jsx .tsx)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)

    root = Path(args.root)
    if not root.is_dir():
        logger.error(f"Project root is not a directory: {root}")
        return 2

    logger.info("Starting Static Application Security Testing (SAST)...")
    scanner = run_sast_scan(root, extensions=args.extensions or DEFAULT_EXTENSIONS)
    passed = scanner.report()
    logger.info("SAST scan execution completed")
    return 0 if passed else 1


if __name__ == "__main__":
    sys.exit(main())
