"""Sandbox session interface and the callables it hands to the runner."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence


class SandboxSession(ABC):
    """One isolated evaluation of a snippet.

    ``load`` evaluates the script once and reports, per requested name,
    the arity of the callable binding or ``None``. ``invoke`` calls a
    loaded binding and returns the decoded result, raising
    :class:`~exercheck.errors.SnippetError` when the snippet throws,
    rejects or runs out of time.
    """

    @abstractmethod
    def load(self, source: str, names: Sequence[str]) -> Mapping[str, Optional[int]]:
        raise NotImplementedError

    @abstractmethod
    def invoke(self, name: str, args: Sequence[Any]) -> Any:
        raise NotImplementedError

    def drain_logs(self) -> List[str]:
        return []

    def close(self) -> None:  # pragma: no cover - default no-op
        return None

    def __enter__(self) -> "SandboxSession":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class SandboxFunction:
    """Python callable proxying a binding that lives inside a session."""

    def __init__(self, session: SandboxSession, name: str, arity: int) -> None:
        self.session = session
        self.name = name
        self.arity = arity

    def __call__(self, *args: Any) -> Any:
        return self.session.invoke(self.name, list(args))

    def __repr__(self) -> str:
        return f"<SandboxFunction {self.name}/{self.arity}>"


def evaluate(
    session: SandboxSession, source: str, names: Sequence[str]
) -> Dict[str, Optional[SandboxFunction]]:
    arities = session.load(source, list(names))
    harvested: Dict[str, Optional[SandboxFunction]] = {}
    for name in names:
        arity = arities.get(name)
        harvested[name] = SandboxFunction(session, name, int(arity)) if arity is not None else None
    return harvested
