"""Testing Infrastructure Package.

Provides testing utilities including:
- test_framework: TestSuite runner, colors, icons, group selection
- test_utilities: standard runner factory, temp paths, browser doubles
- fake_driver: scriptable WebDriver double
"""

from typing import Any

_SUBMODULES = frozenset(["fake_driver", "test_framework", "test_utilities"])


def __getattr__(name: str) -> Any:
    """Lazy import submodules on attribute access."""
    if name in _SUBMODULES:
        import importlib

        return importlib.import_module(f".{name}", __name__)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    """List available submodules."""
    return list(_SUBMODULES)
