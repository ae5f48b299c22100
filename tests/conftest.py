from __future__ import annotations

import inspect
import shutil
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import pytest

from exercheck import bootstrap
from exercheck.sandbox.base import SandboxSession

NODE_AVAILABLE = shutil.which("node") is not None


@pytest.fixture(scope="session", autouse=True)
def setup_exercheck() -> None:
    """Configure logging once for the entire test session."""

    bootstrap()


class FakeSession(SandboxSession):
    """In-process session whose bindings are plain Python callables."""

    def __init__(
        self,
        functions: Mapping[str, Callable[..., Any]],
        *,
        logs: Sequence[str] = (),
        load_error: Optional[Exception] = None,
    ) -> None:
        self.functions: Dict[str, Callable[..., Any]] = dict(functions)
        self.load_error = load_error
        self.loaded: Optional[tuple] = None
        self.calls: List[tuple] = []
        self.closed = False
        self._logs = list(logs)

    def load(self, source: str, names: Sequence[str]) -> Mapping[str, Optional[int]]:
        if self.load_error is not None:
            raise self.load_error
        self.loaded = (source, list(names))
        return {name: _arity(self.functions[name]) if name in self.functions else None for name in names}

    def invoke(self, name: str, args: Sequence[Any]) -> Any:
        self.calls.append((name, list(args)))
        return self.functions[name](*args)

    def drain_logs(self) -> List[str]:
        logs, self._logs = self._logs, []
        return logs

    def close(self) -> None:
        self.closed = True


def _arity(fn: Callable[..., Any]) -> int:
    params = inspect.signature(fn).parameters.values()
    return sum(
        1
        for param in params
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD) and param.default is param.empty
    )


@pytest.fixture
def fake_session_factory():
    """Build ``(session, factory)`` pairs for ``run_tests(session_factory=...)``."""

    def make(functions: Mapping[str, Callable[..., Any]], **kwargs: Any):
        session = FakeSession(functions, **kwargs)
        return session, lambda settings: session

    return make
