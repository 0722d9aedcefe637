# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Levelog contributors

"""Runtime environments and the defaults each one implies."""

import sys
from dataclasses import dataclass
from enum import Enum

from .levels import ColorMode, Level
from .template import DEVELOPMENT_TEMPLATE, PRODUCTION_TEMPLATE, Template, default_template


class Environment(Enum):
    """Deployment environment a logger runs in."""

    AUTO = 0
    TESTING = 1
    DEVELOPMENT = 2
    QUALITY = 3
    PRODUCTION = 4

    @classmethod
    def parse(cls, value: "str | Environment | None") -> "Environment":
        """Resolve an environment name or short alias.

        Unknown values resolve to AUTO.
        """
        if isinstance(value, Environment):
            return value
        if not value:
            return cls.AUTO
        key = str(value).strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        try:
            return cls[key.upper()]
        except KeyError:
            return cls.AUTO


_ALIASES = {
    "dev": Environment.DEVELOPMENT,
    "qa": Environment.QUALITY,
    "prod": Environment.PRODUCTION,
    "test": Environment.TESTING,
}


@dataclass(frozen=True)
class EnvironmentDefaults:
    """Settings an environment applies to a worker."""

    threshold: Level
    color_mode: ColorMode
    template: Template


def defaults_for(environment: Environment) -> EnvironmentDefaults:
    """Return the threshold, color mode and template for ``environment``.

    AUTO and unknown values fail closed to the production defaults.
    """
    if environment is Environment.DEVELOPMENT:
        return EnvironmentDefaults(Level.DEBUG, ColorMode.AUTO, DEVELOPMENT_TEMPLATE)
    if environment in (Environment.TESTING, Environment.QUALITY):
        return EnvironmentDefaults(Level.INFO, ColorMode.AUTO, default_template())
    return EnvironmentDefaults(Level.ERROR, ColorMode.DISABLED, PRODUCTION_TEMPLATE)


def resolve_color(mode: ColorMode, environment: Environment) -> bool:
    """Decide whether output is colorized.

    Explicit ENABLED/DISABLED win; otherwise development and quality output
    is colored, testing and production output is plain.
    """
    if mode is ColorMode.ENABLED:
        return True
    if mode is ColorMode.DISABLED:
        return False
    return environment in (Environment.DEVELOPMENT, Environment.QUALITY)


def detect_environment(build_env: str | None) -> Environment:
    """Map a BUILD_ENV value to an environment.

    ``dev`` selects development, ``qa`` selects quality, anything else
    (including an unset value) selects production.
    """
    value = (build_env or "").strip().lower()
    if value == "dev":
        return Environment.DEVELOPMENT
    if value == "qa":
        return Environment.QUALITY
    return Environment.PRODUCTION


def running_under_pytest() -> bool:
    """Return True when the current process is a pytest run."""
    return "pytest" in sys.modules


def resolve_environment(requested: Environment, build_env: str | None) -> Environment:
    """Turn AUTO into a concrete environment.

    Under pytest AUTO resolves to TESTING, otherwise to the environment named
    by ``build_env``.
    """
    if requested is not Environment.AUTO:
        return requested
    if running_under_pytest():
        return Environment.TESTING
    return detect_environment(build_env)
