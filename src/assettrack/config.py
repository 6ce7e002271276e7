"""Reconciler configuration for assettrack."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from assettrack._constants import DEFAULT_HISTORY_LIMIT, DEFAULT_STORE_PATH, DEFAULT_WRAPPER_KEYS
from assettrack.exceptions import ConfigError


def _env_int(name: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from exc


def _env_keys(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclasses.dataclass(frozen=True)
class TrackerConfig:
    """Reconciler configuration.

    Parameters
    ----------
    history_limit : int
        Maximum number of position history entries kept per tracker.
        Oldest entries are dropped first.
    wrapper_keys : tuple of str
        Envelope keys the payload may be wrapped in (e.g. ``"Output"``).
        The first one present whose value is an object is unwrapped.
    store_path : str
        Path of the JSON document used by :class:`~assettrack.state.store.JsonFileStore`
        when the CLI opens a store.
    """

    history_limit: int = DEFAULT_HISTORY_LIMIT
    wrapper_keys: tuple[str, ...] = DEFAULT_WRAPPER_KEYS
    store_path: str = DEFAULT_STORE_PATH

    def __post_init__(self) -> None:
        if self.history_limit < 1:
            raise ConfigError(f"history_limit must be >= 1, got {self.history_limit}")

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackerConfig:
        """Create configuration from environment variables.

        Reads ``ASSETTRACK_HISTORY_LIMIT``, ``ASSETTRACK_WRAPPER_KEYS``
        (comma separated) and ``ASSETTRACK_STORE_PATH``. Explicit keyword
        arguments override environment values.

        Raises
        ------
        ConfigError
            If a numeric variable cannot be parsed or the resulting
            configuration is invalid.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        limit_env = env.get("ASSETTRACK_HISTORY_LIMIT")
        if limit_env is not None and "history_limit" not in overrides:
            config_kwargs["history_limit"] = _env_int("ASSETTRACK_HISTORY_LIMIT", limit_env)

        wrappers_env = env.get("ASSETTRACK_WRAPPER_KEYS")
        if wrappers_env is not None and "wrapper_keys" not in overrides:
            config_kwargs["wrapper_keys"] = _env_keys(wrappers_env)

        path_env = env.get("ASSETTRACK_STORE_PATH")
        if path_env is not None and "store_path" not in overrides:
            config_kwargs["store_path"] = path_env

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
