"""Errors raised while reading catalogsync settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Settings are unusable; the CLI maps this to its usage exit code."""


class MissingConfigurationError(ConfigurationError):
    """Required environment variables are absent or blank."""


class InvalidConfigurationError(ConfigurationError):
    """An environment variable is set but cannot be used."""

    def __init__(self, variable: str, message: str) -> None:
        super().__init__(f"{variable} {message}")
        self.variable = variable
