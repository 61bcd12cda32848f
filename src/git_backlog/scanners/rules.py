"""Rule set applied by the SAST scanner."""

import re
from typing import NamedTuple

from ..models import Severity


class Rule(NamedTuple):
    """A line-level pattern with its metadata."""

    name: str
    severity: Severity
    message: str
    recommendation: str
    regex: re.Pattern


# Every rule is applied to every line
SAST_RULES: tuple[Rule, ...] = (
    Rule(
        name="console_log",
        severity=Severity.LOW,
        message="Console.log statements should be removed in production",
        recommendation="Use proper logging framework",
        regex=re.compile(r"console\.log\(", re.IGNORECASE),
    ),
    Rule(
        name="eval_usage",
        severity=Severity.HIGH,
        message="Use of eval() is dangerous and should be avoided",
        recommendation="Use safer alternatives like JSON.parse() or Function constructor",
        regex=re.compile(r"eval\(", re.IGNORECASE),
    ),
    Rule(
        name="inner_html_assignment",
        severity=Severity.MEDIUM,
        message="Direct innerHTML assignment can lead to XSS vulnerabilities",
        recommendation="Use textContent or sanitize HTML input",
        regex=re.compile(r"innerHTML\s*=", re.IGNORECASE),
    ),
    Rule(
        name="document_write",
        severity=Severity.HIGH,
        message="document.write() can be dangerous and is deprecated",
        recommendation="Use modern DOM manipulation methods",
        regex=re.compile(r"document\.write\(", re.IGNORECASE),
    ),
    Rule(
        name="hardcoded_password",
        severity=Severity.HIGH,
        message="Hardcoded password detected",
        recommendation="Use environment variables or secure configuration",
        regex=re.compile(r"password.*=.*['\"]", re.IGNORECASE),
    ),
    Rule(
        name="hardcoded_api_key",
        severity=Severity.HIGH,
        message="Hardcoded API key detected",
        recommendation="Use environment variables or secure configuration",
        regex=re.compile(r"api[_-]?key.*=.*['\"]", re.IGNORECASE),
    ),
    Rule(
        name="env_access",
        severity=Severity.INFO,
        message="Environment variable usage detected",
        recommendation="Ensure environment variables are properly validated",
        regex=re.compile(r"process\.env\.", re.IGNORECASE),
    ),
)
