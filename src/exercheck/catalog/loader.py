"""YAML loader and validation for exercise catalogs and test-case files."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence, Tuple, Union

import structlog
import yaml
from jsonschema import Draft7Validator

from ..core.models import TestCase
from ..core.values import UNDEFINED, JsFunction
from ..errors import CatalogError
from .models import Catalog, Exercise
from .schema import COLLECTION_FILE_SCHEMA, EXERCISE_FILE_SCHEMA, TEST_CASES_FILE_SCHEMA

logger = structlog.get_logger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")

PathLike = Union[str, Path]


class CatalogLoader(yaml.SafeLoader):
    """SafeLoader that understands ``!undefined`` and ``!js``."""


def _construct_undefined(loader: CatalogLoader, node: yaml.Node) -> Any:
    return UNDEFINED


def _construct_js(loader: CatalogLoader, node: yaml.Node) -> JsFunction:
    if not isinstance(node, yaml.ScalarNode):
        raise yaml.constructor.ConstructorError(
            None, None, "!js expects a scalar with the function source", node.start_mark
        )
    return JsFunction(source=str(loader.construct_scalar(node)).strip())


CatalogLoader.add_constructor("!undefined", _construct_undefined)
CatalogLoader.add_constructor("!js", _construct_js)

_exercise_validator = Draft7Validator(EXERCISE_FILE_SCHEMA)
_collection_validator = Draft7Validator(COLLECTION_FILE_SCHEMA)
_cases_validator = Draft7Validator(TEST_CASES_FILE_SCHEMA)


def load_catalog(path: PathLike) -> Catalog:
    """Load every exercise under ``path`` (a YAML file or a directory of them)."""

    root = Path(path).expanduser().resolve()
    if root.is_dir():
        files = sorted(p for p in root.rglob("*") if p.is_file() and p.suffix in YAML_SUFFIXES)
        if not files:
            raise CatalogError(f"No catalog files (*.yaml, *.yml) found under {root}")
    elif root.is_file():
        files = [root]
    else:
        raise CatalogError(f"Catalog path does not exist: {root}")

    exercises: List[Exercise] = []
    seen: Dict[str, Path] = {}
    for file in files:
        for exercise in _load_exercise_file(file):
            if exercise.id in seen:
                raise CatalogError(
                    f"Duplicate exercise id '{exercise.id}' in {file} (first defined in {seen[exercise.id]})"
                )
            seen[exercise.id] = file
            exercises.append(exercise)
    logger.debug("catalog.loaded", root=str(root), files=len(files), exercises=len(exercises))
    return Catalog(exercises=tuple(exercises), root=root if root.is_dir() else root.parent)


def load_test_cases(path: PathLike) -> Tuple[List[TestCase], str | None]:
    """Load a standalone list of test cases for ``exercheck run``.

    Returns the cases plus the optional ``function`` hint declared next to
    them. A bare YAML/JSON list is accepted as well as a mapping with a
    ``test_cases`` key.
    """

    file = Path(path).expanduser().resolve()
    raw = _read_yaml(file)
    if isinstance(raw, list):
        raw = {"test_cases": raw}
    if not isinstance(raw, Mapping):
        raise CatalogError(f"{file}: test case file must contain a list or a mapping with 'test_cases'")
    _validate(_cases_validator, raw, file, "Test case")
    cases = [TestCase.from_mapping(item) for item in raw["test_cases"]]
    function = raw.get("function")
    return cases, str(function) if function is not None else None


def _read_yaml(file: Path) -> Any:
    try:
        text = file.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"Cannot read {file}: {exc}") from exc
    try:
        return yaml.load(text, Loader=CatalogLoader)
    except yaml.YAMLError as exc:
        raise CatalogError(f"{file}: invalid YAML: {exc}") from exc


def _validate(validator: Draft7Validator, raw: Any, file: Path, label: str) -> None:
    errors = sorted(validator.iter_errors(raw), key=lambda e: list(map(str, e.path)))
    if errors:
        messages = "; ".join(f"{'/'.join(map(str, err.path)) or 'root'}: {err.message}" for err in errors)
        raise CatalogError(f"{label} schema validation failed in {file}: {messages}")


def _load_exercise_file(file: Path) -> List[Exercise]:
    raw = _read_yaml(file)
    if raw is None:
        return []
    if not isinstance(raw, Mapping):
        raise CatalogError(f"{file}: catalog file must contain a mapping at the top level")
    if "exercises" in raw:
        _validate(_collection_validator, raw, file, "Catalog")
        entries: Sequence[Mapping[str, Any]] = raw["exercises"]
    else:
        _validate(_exercise_validator, raw, file, "Exercise")
        entries = [raw]
    return [_parse_exercise(entry, file) for entry in entries]


def _parse_exercise(raw: Mapping[str, Any], file: Path) -> Exercise:
    identifier = str(raw["id"])
    try:
        cases = tuple(TestCase.from_mapping(item) for item in raw["test_cases"])
    except ValueError as exc:
        raise CatalogError(f"{file}: exercise '{identifier}': {exc}") from exc
    solution = raw.get("solution")
    function = raw.get("function")
    return Exercise(
        id=identifier,
        title=str(raw["title"]).strip(),
        category=str(raw.get("category", "general")),
        difficulty=str(raw.get("difficulty", "easy")),
        description=str(raw.get("description", "")),
        test_cases=cases,
        starter_code=str(raw.get("starter_code", "")),
        solution=solution if solution and solution.strip() else None,
        function=str(function) if function else None,
        hints=tuple(str(hint) for hint in raw.get("hints", []) or []),
        tags=tuple(str(tag) for tag in raw.get("tags", []) or []),
        host_apis=bool(raw.get("host_apis", False)),
        source=file,
    )
