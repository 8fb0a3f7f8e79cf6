"""
Sandbox entry point, executed in a fresh interpreter:

    python -I -S sandbox_child.py < request.json

Reads {"source", "memory_limit_mb", "cpu_seconds", "allowed_modules"} from
stdin, runs the source against a restricted set of builtins and writes one
result line, {"logs": [...], "error": str | null}, behind RESULT_MARKER.

Only the standard library is available here (-S skips site-packages).
"""

import builtins
import json
import sys
import traceback

# Duplicated from labgrader.config; this file runs without the package on sys.path.
RESULT_MARKER = "__LABGRADER_RESULT__"
FILENAME = "<submission>"

SAFE_BUILTINS = (
    "abs", "all", "any", "ascii", "bin", "bool", "bytearray", "bytes", "callable",
    "chr", "classmethod", "complex", "dict", "divmod", "enumerate", "filter", "float",
    "format", "frozenset", "getattr", "hasattr", "hash", "hex", "id", "int",
    "isinstance", "issubclass", "iter", "len", "list", "map", "max", "min", "next",
    "object", "oct", "ord", "pow", "property", "range", "repr", "reversed", "round",
    "set", "setattr", "slice", "sorted", "staticmethod", "str", "sum", "super",
    "tuple", "type", "zip", "__build_class__",
)


def apply_resource_limits(memory_limit_mb, cpu_seconds):
    """Best-effort POSIX limits; silently unavailable elsewhere."""
    try:
        import resource
    except ImportError:
        return
    mb = 1024 * 1024
    limits = [
        (resource.RLIMIT_FSIZE, 1 * mb),
        (resource.RLIMIT_CPU, cpu_seconds),
    ]
    if memory_limit_mb:
        limits.append((resource.RLIMIT_AS, memory_limit_mb * mb))
    for which, value in limits:
        try:
            resource.setrlimit(which, (value, value))
        except (ValueError, OSError):
            pass


def make_print(logs):
    def captured_print(*args, sep=" ", end="\n", file=None, flush=False):
        logs.append((" " if sep is None else str(sep)).join(str(a) for a in args))

    return captured_print


def make_import(allowed):
    real_import = builtins.__import__

    def guarded_import(name, globals=None, locals=None, fromlist=(), level=0):
        if level != 0 or name.split(".")[0] not in allowed:
            raise ImportError(f"import of '{name}' is not allowed in the grading sandbox")
        return real_import(name, globals, locals, fromlist, level)

    return guarded_import


def build_globals(logs, allowed_modules):
    """Fresh execution namespace exposing only pure builtins and print capture."""
    safe = {name: getattr(builtins, name) for name in SAFE_BUILTINS if hasattr(builtins, name)}
    for name, value in vars(builtins).items():
        if isinstance(value, type) and issubclass(value, BaseException):
            safe[name] = value
    safe["print"] = make_print(logs)
    safe["__import__"] = make_import(frozenset(allowed_modules))
    return {"__builtins__": safe, "__name__": "__main__"}


def describe_error(exc):
    """One-line description, with the submission line number when known."""
    message = "".join(traceback.format_exception_only(type(exc), exc)).strip()
    frames = [f for f in traceback.extract_tb(exc.__traceback__) if f.filename == FILENAME]
    if frames:
        message = f"{message} (line {frames[-1].lineno})"
    return message


def run_source(source, allowed_modules=()):
    """
    Execute source and return (logs, error). error is None on success.

    Every exception, SystemExit included, is captured.
    """
    logs = []
    namespace = build_globals(logs, allowed_modules)
    try:
        code = compile(source, FILENAME, "exec", dont_inherit=True)
        exec(code, namespace)
    except BaseException as exc:
        return logs, describe_error(exc)
    return logs, None


def main():
    request = json.loads(sys.stdin.read())
    apply_resource_limits(request.get("memory_limit_mb"), int(request.get("cpu_seconds", 2)))

    stdout = sys.stdout
    logs, error = run_source(request["source"], request.get("allowed_modules", ()))

    try:
        payload = json.dumps({"logs": logs, "error": error})
    except (TypeError, ValueError, MemoryError) as exc:
        payload = json.dumps({"logs": [], "error": f"could not report result: {exc}"})
    stdout.write(f"\n{RESULT_MARKER}{payload}\n")
    stdout.flush()


if __name__ == "__main__":
    main()
