"""JSON schemas for exercise catalog and test-case files."""
from __future__ import annotations

from .models import DIFFICULTIES

IDENTIFIER_PATTERN = r"^[A-Za-z_$][A-Za-z0-9_$]*$"

TEST_CASE_SCHEMA = {
    "type": "object",
    "required": ["input"],
    "anyOf": [
        {"required": ["expected_output"]},
        {"required": ["expectedOutput"]},
    ],
    "properties": {
        "input": {},
        "expected_output": {},
        "expectedOutput": {},
        "description": {"type": "string"},
    },
    "additionalProperties": False,
}

EXERCISE_SCHEMA = {
    "type": "object",
    "required": ["id", "title", "test_cases"],
    "properties": {
        "id": {"type": "string", "pattern": r"^[A-Za-z0-9][A-Za-z0-9_.-]*$"},
        "title": {"type": "string", "minLength": 1},
        "category": {"type": "string", "minLength": 1},
        "difficulty": {"enum": list(DIFFICULTIES)},
        "description": {"type": "string"},
        "starter_code": {"type": "string"},
        "solution": {"type": "string"},
        "function": {"type": "string", "pattern": IDENTIFIER_PATTERN},
        "test_cases": {"type": "array", "minItems": 1, "items": TEST_CASE_SCHEMA},
        "hints": {"type": "array", "items": {"type": "string"}},
        "tags": {"type": "array", "items": {"type": "string"}},
        "host_apis": {"type": "boolean"},
    },
    "additionalProperties": False,
}

EXERCISE_FILE_SCHEMA = {
    **EXERCISE_SCHEMA,
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "exercheck exercise",
}

COLLECTION_FILE_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "exercheck exercise collection",
    "type": "object",
    "required": ["exercises"],
    "properties": {
        "exercises": {"type": "array", "minItems": 1, "items": EXERCISE_SCHEMA},
    },
    "additionalProperties": False,
}

TEST_CASES_FILE_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "exercheck test cases",
    "type": "object",
    "required": ["test_cases"],
    "properties": {
        "test_cases": {"type": "array", "items": TEST_CASE_SCHEMA},
        "function": {"type": "string", "pattern": IDENTIFIER_PATTERN},
    },
    "additionalProperties": False,
}
