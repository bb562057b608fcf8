"""watchgit - persistent registry of tracked repositories."""

__all__ = ["Registration", "Registry", "RegistrySettings"]
__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy imports so ``import watchgit`` stays cheap for CLI startup."""
    if name == "Registry":
        from watchgit.registry import Registry

        return Registry
    if name == "RegistrySettings":
        from watchgit.config import RegistrySettings

        return RegistrySettings
    if name == "Registration":
        from watchgit.models import Registration

        return Registration
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
