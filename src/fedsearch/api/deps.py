"""API dependencies — Dependency injection for FastAPI endpoints."""

from __future__ import annotations

from fedsearch.config.settings import Settings

# Global settings instance (set during application lifespan)
_settings: Settings | None = None


def set_settings(settings: Settings | None) -> None:
    """Set the global settings instance (called during app lifespan)."""
    global _settings
    _settings = settings


def get_settings() -> Settings:
    """Get the settings the server was started with.

    Raises:
        RuntimeError: If the application has not been started.
    """
    if _settings is None:
        raise RuntimeError("fedsearch settings not initialized. Is the server running?")
    return _settings
