"""Pattern scanners used by the pre-commit pipeline."""

from .rules import SAST_RULES, Rule
from .sast import SastScanner, run_sast_scan

__all__ = ["SAST_RULES", "Rule", "SastScanner", "run_sast_scan"]
