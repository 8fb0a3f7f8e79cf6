"""
Sandboxed evaluation of submitted code.

Evaluation has two phases. The source is first compiled in the grader
process, which executes nothing. If it compiles, it runs in a separate,
freshly spawned interpreter (see sandbox_child.py) under a hard wall-clock
timeout enforced by killing the process. Every outcome, including a crashed
or unlaunchable interpreter, comes back as a SandboxOutcome value.

This is best-effort isolation for classroom submissions, not a security
boundary against a determined attacker.
"""

import json
import math
import os
import re
import subprocess
import sys
import tempfile
import time
from pathlib import Path

from loguru import logger

from .config import (
    EMPTY_CODE_MIN_CHARS,
    SANDBOX_ALLOWED_MODULES,
    SANDBOX_FILENAME,
    SANDBOX_MEMORY_LIMIT_MB,
    SANDBOX_RESULT_MARKER,
    SANDBOX_TIMEOUT_MS,
)
from .models import CompileError, RuntimeFailure, SandboxOutcome, Success, Timeout


CHILD_SCRIPT: Path = Path(__file__).with_name("sandbox_child.py")

# (pattern, replacement) pairs; line comments keep the whitespace before them
COMMENT_PATTERNS: dict[str, list[tuple[str, str]]] = {
    "python": [(r"(^|\s)#.*$", r"\1")],
    "javascript": [(r"/\*[\s\S]*?\*/", ""), (r"(^|\s)//.*$", r"\1")],
}


def strip_comments(code: str, language: str = "python") -> str:
    """
    Remove comments from source text.

    Args:
        code: Source text.
        language: Key into COMMENT_PATTERNS.

    Raises:
        KeyError: If the language is not known.
    """
    for pattern, replacement in COMMENT_PATTERNS[language]:
        code = re.sub(pattern, replacement, code, flags=re.MULTILINE)
    return code


def compact_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def is_empty_code(code: str, language: str = "python", min_chars: int = EMPTY_CODE_MIN_CHARS) -> bool:
    """True if fewer than min_chars remain after removing comments and collapsing whitespace."""
    return len(compact_whitespace(strip_comments(code, language))) < min_chars


def compile_check(source: str) -> CompileError | None:
    """
    Compile without executing.

    Returns:
        CompileError describing the failure, or None if the source compiles.
    """
    try:
        compile(source, SANDBOX_FILENAME, "exec", dont_inherit=True)
    except SyntaxError as e:
        return CompileError(message=_format_syntax_error(e))
    except (ValueError, RecursionError, MemoryError) as e:
        # ValueError: NUL bytes; the others: pathological nesting
        return CompileError(message=f"{type(e).__name__}: {e}")
    return None


class SandboxEvaluator:
    """
    Runs submitted source in a throwaway interpreter.

    Each call gets its own process, temporary working directory and empty
    environment; nothing is reused between evaluations.
    """

    def __init__(
        self,
        timeout_ms: int = SANDBOX_TIMEOUT_MS,
        memory_limit_mb: int | None = SANDBOX_MEMORY_LIMIT_MB,
        allowed_modules: list[str] | None = None,
        python_executable: str | None = None,
    ) -> None:
        """
        Initialize the evaluator.

        Args:
            timeout_ms: Wall-clock budget for the execution phase.
            memory_limit_mb: Address-space cap for the child, None to disable.
            allowed_modules: Top-level modules submitted code may import.
            python_executable: Interpreter for the child; defaults to sys.executable.
        """
        self.timeout_ms = timeout_ms
        self.memory_limit_mb = memory_limit_mb
        self.allowed_modules = list(SANDBOX_ALLOWED_MODULES if allowed_modules is None else allowed_modules)
        self.python_executable = python_executable or sys.executable

    def evaluate(self, source: str) -> SandboxOutcome:
        """
        Compile-check, then execute, the submitted source.

        Returns:
            Exactly one of CompileError, Timeout, RuntimeFailure or Success.
        """
        compile_error = compile_check(source)
        if compile_error is not None:
            logger.info("Submission does not compile")
            return compile_error

        return self._execute(source)

    def _execute(self, source: str) -> SandboxOutcome:
        request = json.dumps(
            {
                "source": source,
                "memory_limit_mb": self.memory_limit_mb,
                "cpu_seconds": math.ceil(self.timeout_ms / 1000) + 1,
                "allowed_modules": self.allowed_modules,
            }
        )
        cmd = [self.python_executable, "-I", "-S", str(CHILD_SCRIPT)]

        started = time.monotonic()
        try:
            with tempfile.TemporaryDirectory(prefix="labgrader-sandbox-") as workdir:
                process = subprocess.run(
                    cmd,
                    input=request,
                    cwd=workdir,
                    env=_child_env(),
                    capture_output=True,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                    timeout=self.timeout_ms / 1000,
                )
        except subprocess.TimeoutExpired:
            logger.info(f"Sandbox timed out after {self.timeout_ms} ms")
            return Timeout()
        except (OSError, ValueError) as e:
            logger.warning(f"Sandbox could not start: {e}")
            return RuntimeFailure(message=f"sandbox could not start: {e}")

        elapsed_ms = (time.monotonic() - started) * 1000
        logger.debug(f"Sandbox exited with {process.returncode} after {elapsed_ms:.0f} ms")
        return _parse_result(process)


def evaluate_submission(source: str, timeout_ms: int = SANDBOX_TIMEOUT_MS) -> SandboxOutcome:
    """Evaluate source with a default-configured SandboxEvaluator."""
    return SandboxEvaluator(timeout_ms=timeout_ms).evaluate(source)


def _child_env() -> dict[str, str]:
    env = {"PYTHONIOENCODING": "utf-8"}
    # Windows needs SYSTEMROOT to initialise the interpreter
    if "SYSTEMROOT" in os.environ:
        env["SYSTEMROOT"] = os.environ["SYSTEMROOT"]
    return env


def _parse_result(process: subprocess.CompletedProcess) -> SandboxOutcome:
    """Turn the child's marker line into an outcome."""
    for line in reversed(process.stdout.splitlines()):
        if line.startswith(SANDBOX_RESULT_MARKER):
            try:
                data = json.loads(line[len(SANDBOX_RESULT_MARKER):])
            except json.JSONDecodeError as e:
                return RuntimeFailure(message=f"unreadable sandbox result: {e}")
            if data.get("error"):
                return RuntimeFailure(message=str(data["error"]))
            return Success(logs=tuple(str(entry) for entry in data.get("logs", [])))

    stderr_tail = process.stderr.strip().splitlines()[-1:] or [f"exit code {process.returncode}"]
    return RuntimeFailure(message=f"sandbox terminated abnormally: {stderr_tail[0]}")


def _format_syntax_error(error: SyntaxError) -> str:
    location = f"line {error.lineno}" if error.lineno else "unknown line"
    return f"{type(error).__name__}: {error.msg} ({location})"
