"""Sandbox session backed by a Node.js worker process.

The worker (``harness.js``) evaluates the snippet in a fresh ``vm`` context
with string code generation disabled and talks line-delimited JSON over its
standard streams. The Python side enforces a hard deadline on every request:
a worker that does not answer in time is killed and transparently restarted
for the next call.
"""
from __future__ import annotations

import json
import os
import queue
import shutil
import subprocess
import tempfile
import threading
import time
from collections import deque
from pathlib import Path
from typing import IO, Any, Deque, Dict, List, Mapping, Optional, Sequence, Tuple

import structlog

from ..config import HarnessSettings
from ..core.values import from_wire, to_wire
from ..errors import CompileError, RuntimeUnavailableError, SandboxError, SnippetError, SnippetTimeout
from .base import SandboxSession

logger = structlog.get_logger(__name__)

HARNESS_PATH = Path(__file__).with_name("harness.js")

_ENV_PASSTHROUGH = ("PATH", "LANG", "LC_ALL", "TZ", "SYSTEMROOT")


class _Deadline(Exception):
    """The worker did not answer before the request deadline."""


class NodeSession(SandboxSession):
    """Runs snippets in a dedicated ``node`` process."""

    def __init__(self, settings: Optional[HarnessSettings] = None) -> None:
        self.settings = settings or HarnessSettings()
        self._process: Optional[subprocess.Popen] = None
        self._replies: "queue.Queue[Optional[str]]" = queue.Queue()
        self._stderr: Deque[str] = deque(maxlen=20)
        self._workdir: Optional[str] = None
        self._next_id = 0
        self._logs: List[str] = []
        self._loaded: Optional[Tuple[str, List[str]]] = None

    # -- lifecycle ---------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def start(self) -> None:
        if self.running:
            return
        node = self.settings.resolve_node()
        if not node:
            raise RuntimeUnavailableError(
                "Node.js runtime not found. Install node or set EXERCHECK_NODE."
            )
        if self._workdir is None:
            self._workdir = tempfile.mkdtemp(prefix="exercheck-")
        command = [node, f"--max-old-space-size={self.settings.memory_limit_mb}", str(HARNESS_PATH)]
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=self._workdir,
                env=self._worker_env(),
                text=True,
                encoding="utf-8",
                bufsize=1,
                preexec_fn=self._resource_limits(),
            )
        except OSError as exc:
            raise RuntimeUnavailableError(f"Could not start Node.js runtime '{node}': {exc}") from exc

        self._process = process
        self._replies = queue.Queue()
        self._stderr.clear()
        threading.Thread(target=self._pump_stdout, args=(process.stdout, self._replies), daemon=True).start()
        threading.Thread(target=self._pump_stderr, args=(process.stderr,), daemon=True).start()
        logger.debug("sandbox.started", pid=process.pid, node=node)

    def close(self) -> None:
        if self._process is not None:
            if self.running:
                try:
                    self._request({"op": "close"}, self.settings.grace_s)
                except (_Deadline, SandboxError) as exc:
                    logger.debug("sandbox.close_failed", error=str(exc))
            self._stop("closed")
        if self._workdir is not None:
            shutil.rmtree(self._workdir, ignore_errors=True)
            self._workdir = None

    def _stop(self, reason: str) -> None:
        process = self._process
        self._process = None
        if process is None:
            return
        if process.poll() is None:
            process.kill()
            logger.info("sandbox.killed", pid=process.pid, reason=reason)
        try:
            process.wait(timeout=self.settings.grace_s)
        except subprocess.TimeoutExpired:
            logger.warning("sandbox.unreaped", pid=process.pid)
        for stream in (process.stdin, process.stdout, process.stderr):
            if stream is not None:
                try:
                    stream.close()
                except OSError:
                    pass

    def _worker_env(self) -> Dict[str, str]:
        env = {key: os.environ[key] for key in _ENV_PASSTHROUGH if os.environ.get(key)}
        env["HOME"] = self._workdir or tempfile.gettempdir()
        env["EXERCHECK_MAX_LOG_ENTRIES"] = str(self.settings.max_log_entries)
        return env

    def _resource_limits(self):
        if os.name != "posix":
            return None
        import resource

        cpu = int(self.settings.cpu_limit_s)

        def _apply() -> None:
            resource.setrlimit(resource.RLIMIT_CPU, (cpu, cpu + 1))
            try:
                resource.setrlimit(resource.RLIMIT_FSIZE, (1024 * 1024, 1024 * 1024))
            except (ValueError, OSError):
                pass

        return _apply

    # -- streams -----------------------------------------------------------

    @staticmethod
    def _pump_stdout(stream: IO[str], replies: "queue.Queue[Optional[str]]") -> None:
        try:
            for line in stream:
                replies.put(line)
        except (OSError, ValueError):
            pass
        finally:
            replies.put(None)

    def _pump_stderr(self, stream: IO[str]) -> None:
        try:
            for line in stream:
                self._stderr.append(line.rstrip())
        except (OSError, ValueError):
            pass

    def _stderr_tail(self) -> str:
        lines = [line for line in self._stderr if line]
        return (": " + lines[-1]) if lines else ""

    # -- protocol ----------------------------------------------------------

    def _request(self, payload: Mapping[str, Any], timeout_s: float) -> Dict[str, Any]:
        self.start()
        process = self._process
        assert process is not None and process.stdin is not None
        self._next_id += 1
        request_id = self._next_id
        message = dict(payload, id=request_id)
        try:
            process.stdin.write(json.dumps(message) + "\n")
            process.stdin.flush()
        except (BrokenPipeError, OSError) as exc:
            self._stop("broken pipe")
            raise SandboxError(f"Sandbox worker stopped accepting requests ({exc}){self._stderr_tail()}") from exc

        deadline = time.monotonic() + timeout_s + self.settings.grace_s
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self._stop("deadline")
                raise _Deadline()
            try:
                line = self._replies.get(timeout=remaining)
            except queue.Empty:
                continue
            if line is None:
                self._stop("exited")
                code = process.returncode
                raise SandboxError(f"Sandbox worker exited unexpectedly (exit code {code}){self._stderr_tail()}")
            try:
                reply = json.loads(line)
            except ValueError:
                logger.warning("sandbox.bad_reply", line=line[:200])
                continue
            self._logs.extend(str(entry) for entry in reply.get("logs") or [])
            if reply.get("id") == request_id:
                return reply

    # -- session API -------------------------------------------------------

    def load(self, source: str, names: Sequence[str]) -> Mapping[str, Optional[int]]:
        self._loaded = (source, list(names))
        return self._load(source, list(names))

    def _load(self, source: str, names: List[str]) -> Dict[str, Optional[int]]:
        timeout_s = self.settings.load_timeout_ms / 1000.0
        try:
            reply = self._request(
                {"op": "load", "source": source, "names": names, "timeoutMs": self.settings.load_timeout_ms},
                timeout_s,
            )
        except _Deadline:
            raise SandboxError(f"Snippet did not finish loading within {timeout_s:g} seconds") from None
        if not reply.get("ok"):
            error = str(reply.get("error") or "Unknown error")
            if reply.get("kind") == "syntax":
                raise CompileError(error, line=reply.get("line"))
            raise SandboxError(error)
        functions = reply.get("functions") or {}
        return {name: functions.get(name) for name in names}

    def invoke(self, name: str, args: Sequence[Any]) -> Any:
        if self._process is None and self._loaded is not None:
            self._load(*self._loaded)
            logger.info("sandbox.restarted", function=name)
        try:
            reply = self._request(
                {"op": "invoke", "name": name, "args": to_wire(list(args)), "timeoutMs": self.settings.timeout_ms},
                self.settings.timeout_s,
            )
        except _Deadline:
            raise SnippetTimeout(f"Function '{name}' did not return within {self.settings.timeout_s:g} seconds") from None
        if reply.get("ok"):
            return from_wire(reply.get("value"))
        kind = str(reply.get("kind") or "throw")
        error = str(reply.get("error") or "Unknown error")
        if kind == "timeout":
            raise SnippetTimeout(error)
        if kind in ("throw", "reject"):
            raise SnippetError(error, kind=kind)
        raise SandboxError(error)

    def drain_logs(self) -> List[str]:
        logs, self._logs = self._logs, []
        return logs
