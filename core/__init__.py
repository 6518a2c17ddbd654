"""
Core Package - harness infrastructure.

Components:
- exceptions: error hierarchy and failure classification
- error_handling: safe_execute decorator for best-effort helpers
- operation_result: typed outcome of safe browser calls
- browser_manager: per-worker browser context owning one session
- retry: test retry policy
- process_cleanup: psutil-based cleanup of leaked browser processes
"""

__version__ = "1.0.0"

_SUBMODULES = frozenset(
    ["browser_manager", "error_handling", "exceptions", "operation_result", "process_cleanup", "retry"]
)


def __getattr__(name: str):
    """Lazy import submodules on attribute access."""
    if name in _SUBMODULES:
        import importlib

        return importlib.import_module(f".{name}", __name__)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return [*_SUBMODULES, "__version__"]
