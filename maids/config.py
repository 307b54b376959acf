"""Configuration for maids.

Two layers:

* :class:`Config`: the flat, typed settings a deployment provides.
  :func:`load_config` reads them from a TOML file and lets environment
  variables override.  Default file location:
  ``~/.config/maids/config.toml``, override with ``MAIDS_CONFIG``.
* :func:`parse_config`: turns the canonical config dict (see
  :meth:`Config.to_dict`) into a :class:`Store` and an
  :class:`AppIdsConfig`, resolving the store provider by name.

Nothing reads the environment after loading; the resulting objects are
passed explicitly to the facade and allocator.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Generic, TypeVar

from maids.errors import ConfigError
from maids.store.base import Store

_DEFAULT_CONFIG_DIR = Path("~/.config/maids").expanduser()


@dataclass(frozen=True)
class AppIdsConfig:
    """Limits and trusted-mode switches for app ID requests.

    The two ``can_set_*`` flags exist for deterministic testing only and
    default to off.
    """

    max_ids_in_register: int = 50
    max_ids_in_create: int = 50
    max_gen_retry: int = 3
    can_set_ids_in_create: bool = False
    can_set_retries_in_create: bool = False
    concurrency: int = 1

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppIdsConfig:
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown app_ids settings: {sorted(unknown)}")
        cfg = cls(**data)
        if cfg.max_ids_in_register < 1 or cfg.max_ids_in_create < 1:
            raise ConfigError("Batch size limits must be at least 1")
        if cfg.max_gen_retry < 0:
            raise ConfigError("max_gen_retry must not be negative")
        if cfg.concurrency < 1:
            raise ConfigError("concurrency must be at least 1")
        return cfg


# ── Store registry ──────────────────────────────────────────────────


T = TypeVar("T")


class _Registry(Generic[T]):
    """Lazily-populated factory registry.

    :meth:`build` resolves a provider name to a factory, calling
    ``factory.from_config(config)`` if available, otherwise
    ``factory(**config)``.
    """

    def __init__(self, label: str) -> None:
        self._label = label
        self._factories: dict[str, type[T]] = {}
        self._defaults_loaded = False

    def register(self, name: str, cls: type[T]) -> None:
        self._factories[name] = cls

    def build(self, provider: str, config: dict[str, Any]) -> T:
        if not self._defaults_loaded:
            self._load_defaults()
            self._defaults_loaded = True

        factory = self._factories.get(provider)
        if factory is None:
            raise ConfigError(
                f"Unknown {self._label} provider '{provider}'. "
                f"Available: {list(self._factories)}"
            )
        if hasattr(factory, "from_config"):
            return factory.from_config(config)  # type: ignore[return-value]
        return factory(**config)  # type: ignore[return-value]

    def _load_defaults(self) -> None:
        """Override point; subclasses populate built-in factories here."""


class _StoreRegistry(_Registry[Store]):
    def _load_defaults(self) -> None:
        from maids.store.memory import InMemoryStore
        from maids.store.postgres import PostgresStore

        self.register("memory", InMemoryStore)
        self.register("postgres", PostgresStore)


store_registry = _StoreRegistry("store")


def parse_config(config: dict[str, Any]) -> tuple[Store, AppIdsConfig]:
    """Parse a config dict and return ``(store, app_ids_config)``.

    Expected shape::

        {
            "store": {"provider": "memory", "config": {}},
            "app_ids": {"max_ids_in_register": 50, "max_gen_retry": 3},
        }

    Both sections are optional; the store defaults to in-memory.
    """
    store_cfg = config.get("store") or {}
    store = store_registry.build(
        store_cfg.get("provider", "memory"),
        store_cfg.get("config", {}),
    )
    app_ids = AppIdsConfig.from_dict(config.get("app_ids") or {})
    return store, app_ids


# ── Deployment settings ─────────────────────────────────────────────


def _config_path() -> Path:
    env = os.environ.get("MAIDS_CONFIG")
    if env:
        return Path(env).expanduser()
    return _DEFAULT_CONFIG_DIR / "config.toml"


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() == "true"


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


@dataclass
class Config:
    app_ids: AppIdsConfig = field(default_factory=AppIdsConfig)

    # Store backend: "memory" (default, no external deps) or "postgres"
    store_provider: str = "memory"

    # Postgres settings (only used when store_provider == "postgres")
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "maids"
    db_user: str = "postgres"
    db_password: str = "postgres"
    operation_timeout: float = 10.0
    connect_attempts: int = 5

    # Token accepted by the HTTP adapter and the identity it maps to
    api_token: str = "development-only-token"
    api_owner: str = "maids"

    @property
    def uses_postgres(self) -> bool:
        return self.store_provider == "postgres"

    def to_dict(self) -> dict[str, Any]:
        """Return the canonical config dict understood by :func:`parse_config`."""
        store_config: dict[str, Any] = {}
        if self.uses_postgres:
            store_config = {
                "host": self.db_host,
                "port": self.db_port,
                "database": self.db_name,
                "user": self.db_user,
                "password": self.db_password,
                "operation_timeout": self.operation_timeout,
                "connect_attempts": self.connect_attempts,
            }
        return {
            "store": {"provider": self.store_provider, "config": store_config},
            "app_ids": asdict(self.app_ids),
        }


def load_config(path: Path | None = None) -> Config:
    """Load config from disk, falling back to defaults + env overrides."""
    path = path or _config_path()
    cfg = Config()
    app_ids = asdict(cfg.app_ids)

    if path.exists():
        with open(path, "rb") as f:
            data = tomllib.load(f)
        app_ids.update(data.get("app_ids", {}))
        store_section = data.get("store", {})
        db_section = data.get("database", {})
        api_section = data.get("api", {})

        cfg.store_provider = store_section.get("provider", cfg.store_provider)

        cfg.db_host = db_section.get("host", cfg.db_host)
        cfg.db_port = int(db_section.get("port", cfg.db_port))
        cfg.db_name = db_section.get("name", cfg.db_name)
        cfg.db_user = db_section.get("user", cfg.db_user)
        cfg.db_password = db_section.get("password", cfg.db_password)
        cfg.operation_timeout = float(
            db_section.get("operation_timeout", cfg.operation_timeout)
        )
        cfg.connect_attempts = int(
            db_section.get("connect_attempts", cfg.connect_attempts)
        )

        cfg.api_token = api_section.get("token", cfg.api_token)
        cfg.api_owner = api_section.get("owner", cfg.api_owner)

    # Environment variables always take precedence
    env = os.environ
    app_ids["max_ids_in_register"] = _env_int(
        "MAX_REGISTER_IDS", app_ids["max_ids_in_register"]
    )
    app_ids["max_ids_in_create"] = _env_int(
        "MAX_CREATE_IDS", app_ids["max_ids_in_create"]
    )
    app_ids["max_gen_retry"] = _env_int("MAX_GEN_RETRY", app_ids["max_gen_retry"])
    app_ids["can_set_ids_in_create"] = _env_flag(
        "CAN_SET_IDS_IN_CREATE", app_ids["can_set_ids_in_create"]
    )
    app_ids["can_set_retries_in_create"] = _env_flag(
        "CAN_SET_RETRIES_IN_CREATE", app_ids["can_set_retries_in_create"]
    )
    cfg.app_ids = AppIdsConfig.from_dict(app_ids)

    cfg.store_provider = env.get("MAIDS_STORE", cfg.store_provider)
    cfg.db_host = env.get("POSTGRES_HOST", cfg.db_host)
    cfg.db_port = _env_int("POSTGRES_PORT", cfg.db_port)
    cfg.db_name = env.get("POSTGRES_DB", cfg.db_name)
    cfg.db_user = env.get("POSTGRES_USER", cfg.db_user)
    cfg.db_password = env.get("POSTGRES_PASSWORD", cfg.db_password)
    cfg.api_token = env.get("API_TOKEN_MAIDS", cfg.api_token)

    return cfg


def config_path_display() -> str:
    return str(_config_path())
