"""Monogram - rotating-curator journaling circles, core library."""

__all__ = ["AuthSession", "ClientConfig", "MonogramClient", "has_permission"]
__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy imports so the permission table loads without httpx."""
    if name == "ClientConfig":
        from monogram.config import ClientConfig

        return ClientConfig
    if name == "AuthSession":
        from monogram.session import AuthSession

        return AuthSession
    if name == "MonogramClient":
        from monogram.client import MonogramClient

        return MonogramClient
    if name == "has_permission":
        from monogram.permissions import has_permission

        return has_permission
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
