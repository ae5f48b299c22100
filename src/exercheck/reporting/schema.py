"""JSON schema definitions for reporter output."""
from __future__ import annotations

SCHEMA_VERSION = "1.0.0"

TEST_RESULT_SCHEMA = {
    "type": "object",
    "required": ["input", "expected_output", "passed"],
    "properties": {
        "input": {},
        "expected_output": {},
        "actual_output": {},
        "passed": {"type": "boolean"},
        "error": {"type": "string"},
        "description": {"type": "string"},
        "mismatch": {"type": "string"},
    },
}

RUN_REPORT_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "exercheck run report",
    "type": "object",
    "required": ["all_passed", "results"],
    "properties": {
        "all_passed": {"type": "boolean"},
        "results": {"type": "array", "items": TEST_RESULT_SCHEMA},
        "error": {"type": "string"},
        "warnings": {"type": "array", "items": {"type": "string"}},
        "logs": {"type": "array", "items": {"type": "string"}},
    },
}

REPORT_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "exercheck validation report",
    "type": "object",
    "required": ["schema_version", "generated_at", "summary", "exercises"],
    "properties": {
        "schema_version": {"type": "string"},
        "generated_at": {"type": "string", "format": "date-time"},
        "summary": {
            "type": "object",
            "required": ["total", "passed", "failed", "errors", "tolerated", "skipped", "duration_s"],
            "properties": {
                "total": {"type": "integer"},
                "passed": {"type": "integer"},
                "failed": {"type": "integer"},
                "errors": {"type": "integer"},
                "tolerated": {"type": "integer"},
                "skipped": {"type": "integer"},
                "duration_s": {"type": "number"},
            },
        },
        "exercises": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "title", "category", "status", "duration_ms"],
                "properties": {
                    "id": {"type": "string"},
                    "title": {"type": "string"},
                    "category": {"type": "string"},
                    "difficulty": {"type": "string"},
                    "status": {"enum": ["passed", "failed", "error", "tolerated", "skipped"]},
                    "duration_ms": {"type": "number"},
                    "details": {"type": "string"},
                    "report": RUN_REPORT_SCHEMA,
                },
            },
        },
    },
}
