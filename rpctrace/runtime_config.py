"""Runtime configuration state management."""

import os
from typing import Optional

from rpctrace.errors import ConfigError

ENV_SERVICE_NAME = "RPCTRACE_SERVICE_NAME"
ENV_DEBUG = "RPCTRACE_DEBUG"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

_DEFAULTS = {
    "service_name": "rpctrace",
    "debug": False,
}

# Global runtime configuration state
_config = dict(_DEFAULTS)


def set_service_name(value: str) -> None:
    _config["service_name"] = value


def get_service_name() -> str:
    return _config["service_name"]


def set_debug(value: bool) -> None:
    _config["debug"] = value


def get_debug() -> bool:
    return _config["debug"]


def reset() -> None:
    """Restore every setting to its default."""
    _config.clear()
    _config.update(_DEFAULTS)


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean for {name}", {"value": raw})


def load_from_env(environ: Optional[dict] = None) -> None:
    """
    Apply settings found in the environment.

    Unset variables leave the current value untouched.
    """
    environ = os.environ if environ is None else environ

    service_name = environ.get(ENV_SERVICE_NAME)
    if service_name is not None:
        service_name = service_name.strip()
        if not service_name:
            raise ConfigError(f"{ENV_SERVICE_NAME} must not be empty")
        set_service_name(service_name)

    debug = environ.get(ENV_DEBUG)
    if debug is not None:
        set_debug(_parse_bool(ENV_DEBUG, debug))
