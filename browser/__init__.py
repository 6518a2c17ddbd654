"""Browser Automation Package.

Provides the browser session layer:
- driver_factory: starts browser sessions from configuration
- session_health: liveness probe, best-effort close, recreate-on-failure
- safe_operations: classified, non-raising navigation/read/element operations
- selenium_utils: fallback locators and small element helpers
"""

_SUBMODULES = frozenset(["driver_factory", "safe_operations", "selenium_utils", "session_health"])


def __getattr__(name: str):
    """Lazy import submodules on attribute access."""
    if name in _SUBMODULES:
        import importlib

        return importlib.import_module(f".{name}", __name__)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    """List available submodules."""
    return list(_SUBMODULES)
