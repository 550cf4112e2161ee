"""tidydir Compliance Checking.

- ComplianceScanner: walks DirRule directories and collects misplaced entries
- RuleReport / ComplianceEntry: per-rule scan results
"""

from .scanner import ComplianceEntry, ComplianceScanner, RuleReport

__all__ = [
    "ComplianceEntry",
    "ComplianceScanner",
    "RuleReport",
]
