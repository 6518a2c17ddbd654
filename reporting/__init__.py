"""Reporting Package.

Provides test result recording and the run report:
- test_result: immutable TestResult records
- result_sink: append-only, thread-safe result store
- screenshots: best-effort PNG capture named by test and outcome
- report_generator: pure HTML report rendering plus file writers
"""

_SUBMODULES = frozenset(["report_generator", "result_sink", "screenshots", "test_result"])


def __getattr__(name: str):
    """Lazy import submodules on attribute access."""
    if name in _SUBMODULES:
        import importlib

        return importlib.import_module(f".{name}", __name__)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return list(_SUBMODULES)
