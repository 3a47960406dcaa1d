from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from user_records.app.runtime.config.config_data import ConfigData
from user_records.app.runtime.config.config_template import load_templated_yaml


@dataclass
class AppContext:
    """Application context containing configuration and other app-wide state."""

    config: ConfigData


# Loaded once from the working directory at import
_default_config = load_templated_yaml(Path("config.yaml"))
_default_context = AppContext(config=_default_config)


# Context variable for application context
_app_context: ContextVar[AppContext] = ContextVar(
    "app_context", default=_default_context
)


def get_context() -> AppContext:
    """Get the current application context.

    Returns:
        AppContext: The current application context containing configuration.
    """
    return _app_context.get()


def set_context(context: AppContext) -> Token[AppContext]:
    """Set the current application context.

    Args:
        context: AppContext instance to set as current.
    """
    return _app_context.set(context)


def _dump_explicit_fields(model: BaseModel) -> dict[str, Any]:
    """Dump only the fields that were explicitly set, at every nesting level.

    A nested model is included when it was assigned directly or when any of
    its own fields were set.
    """
    result: dict[str, Any] = {}

    for field_name in type(model).model_fields:
        value = getattr(model, field_name)

        if isinstance(value, BaseModel):
            # Recurse so deeply nested assignments are kept
            nested = _dump_explicit_fields(value)
            if field_name in model.model_fields_set:
                result[field_name] = value.model_dump()
            elif nested:
                result[field_name] = nested
        elif field_name in model.model_fields_set:
            # Regular field that was explicitly set
            result[field_name] = value

    return result


def _recursive_dict_merge(base_dict: dict, override_dict: dict) -> dict:
    """Recursively merge ``override_dict`` into a copy of ``base_dict``."""
    result = base_dict.copy()

    for key, value in override_dict.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            # Both sides are mappings: merge rather than replace
            result[key] = _recursive_dict_merge(result[key], value)
        else:
            result[key] = value

    return result


def _merge_configs(base_config: ConfigData, override_config: ConfigData) -> ConfigData:
    """Merge the explicitly-set parts of ``override_config`` over ``base_config``."""
    merged = _recursive_dict_merge(
        base_config.model_dump(), _dump_explicit_fields(override_config)
    )
    return ConfigData.model_validate(merged)


@contextmanager
def with_context(config_override: ConfigData | None = None):
    """Temporarily override the application configuration.

    Only fields that were explicitly set on ``config_override`` replace the
    current values; everything else is inherited from the enclosing context.

    Example:
        override = ConfigData()
        override.storage.backend = "database"
        with with_context(override):
            assert get_config().storage.backend == "database"
            # get_config().app.port is inherited
    """
    if config_override is None:
        # No overrides, just yield current context
        yield
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData, or None, got {type(config_override)}"
        )

    merged_config = _merge_configs(get_context().config, config_override)
    token = set_context(replace(get_context(), config=merged_config))
    try:
        yield
    finally:
        _app_context.reset(token)


def set_config(config: ConfigData) -> None:
    """Replace the entire current configuration.

    Args:
        config: ConfigData instance to set as current.
    """
    set_context(replace(get_context(), config=config))


def get_config() -> ConfigData:
    """Convenience function to get the current configuration.

    Returns:
        ConfigData: The current configuration from the app context.
    """
    return get_context().config
