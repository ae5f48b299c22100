"""Core models and helpers exposed at the package level."""
from .comparator import ComparisonResult, compare_values, deep_equal
from .extractor import extract_function_names
from .models import CandidateFunction, RunReport, TestCase, TestResult
from .resolver import resolve
from .safety import SafetyReport, analyze_code_safety, has_browser_apis, sanitize_error_message
from .values import UNDEFINED, JsFunction

__all__ = [
    "CandidateFunction",
    "ComparisonResult",
    "JsFunction",
    "RunReport",
    "SafetyReport",
    "TestCase",
    "TestResult",
    "UNDEFINED",
    "analyze_code_safety",
    "compare_values",
    "deep_equal",
    "extract_function_names",
    "has_browser_apis",
    "resolve",
    "sanitize_error_message",
]
