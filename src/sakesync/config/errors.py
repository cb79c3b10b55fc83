"""Errors raised while reading SakeSync settings from the environment."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting such as ``DRY_RUN`` or ``SAKENOWA_TIMEOUT_SECONDS`` has an unusable value.

    The CLI maps it to exit code 2.
    """


class MissingConfigurationError(ConfigurationError):
    """A required variable is unset or blank."""

    def __init__(self, names: list[str]) -> None:
        self.names = names
        super().__init__(f"Missing required environment variable(s): {', '.join(names)}")
