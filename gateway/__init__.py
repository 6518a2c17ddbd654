"""Gateway Fixtures Package.

Test-side knowledge of the payment gateway under test:
- accessibility: alt text, input label and lang checks for a loaded page
- api_client: REST client returning ApiResponse values
- locators: fallback locators for the login and payment pages
- pages: page objects built on SafeOperations
- performance: page-load and API response-time measurement
- test_data: public test cards, amounts, installments and table rows
- webhooks: webhook event bodies and HMAC-SHA256 signatures
"""

_SUBMODULES = frozenset(["accessibility", "api_client", "locators", "pages", "performance", "test_data", "webhooks"])


def __getattr__(name: str):
    """Lazy import submodules on attribute access."""
    if name in _SUBMODULES:
        import importlib

        return importlib.import_module(f".{name}", __name__)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return list(_SUBMODULES)
