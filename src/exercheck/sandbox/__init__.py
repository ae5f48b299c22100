"""Isolated execution of snippets."""
from .base import SandboxFunction, SandboxSession, evaluate
from .node import HARNESS_PATH, NodeSession

__all__ = [
    "HARNESS_PATH",
    "NodeSession",
    "SandboxFunction",
    "SandboxSession",
    "evaluate",
]
