"""Configuration for binding resolution.

Settings can be configured via environment variables with the ``BINDERY_`` prefix,
e.g. ``BINDERY_IMPLICIT_BINDINGS=false``.
"""

import logging
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["ResolverSettings"]


class ResolverSettings(BaseSettings):
    """Options for a :class:`~bindery.processor.BindingsProcessor` run."""

    model_config = SettingsConfigDict(env_prefix="BINDERY_", case_sensitive=False, extra="ignore")

    implicit_bindings: bool = True
    """Create just-in-time bindings for unbound concrete classes."""

    validate_graph: bool = True
    """Run the graph validator once resolution succeeds."""

    log_level: Optional[str] = None
    """Level applied to the ``bindery`` logger by :func:`~bindery.builders.resolve_injector`."""

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: Optional[str]) -> Optional[str]:
        """Ensure the level is a standard logging level name."""
        if v is None:
            return v
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid log level: {v}")
        return level
