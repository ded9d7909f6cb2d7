from digimill.validation.diagnostics import Diagnostic, Severity, ValidationResult
from digimill.validation.engine import merge_parse_errors, parse_error_diagnostics, validate
from digimill.validation.rules import ALL_RULES, RULES, RuleKind

__all__ = [
    "ALL_RULES",
    "Diagnostic",
    "RULES",
    "RuleKind",
    "Severity",
    "ValidationResult",
    "merge_parse_errors",
    "parse_error_diagnostics",
    "validate",
]
