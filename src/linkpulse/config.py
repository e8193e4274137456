"""Global configuration: XDG paths, env vars, and persisted user settings."""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from linkpulse.network.policy import MonitoringPolicy
from linkpulse.probe.http import is_valid_host

logger = logging.getLogger(__name__)

MIN_PROBE_INTERVAL = 0.5


class InvalidSettingError(ValueError):
    """A settings value was rejected before reaching the monitor."""


def _default_data_dir() -> Path:
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "linkpulse"
    return Path.home() / ".local" / "share" / "linkpulse"


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "linkpulse"
    return Path.home() / ".config" / "linkpulse"


@dataclass
class LinkPulseConfig:
    """Application-wide configuration."""

    data_dir: Path = field(default_factory=_default_data_dir)
    config_dir: Path = field(default_factory=_default_config_dir)
    web_host: str = "127.0.0.1"  # Loopback only, never 0.0.0.0
    web_port: int = 8471
    verbose: bool = False

    @property
    def db_path(self) -> Path:
        return self.data_dir / "linkpulse.db"

    @property
    def settings_path(self) -> Path:
        return self.config_dir / "settings.yaml"

    @classmethod
    def load(cls) -> LinkPulseConfig:
        """Load config from environment variables with XDG defaults."""
        config = cls()

        env_data = os.environ.get("LINKPULSE_DATA_DIR")
        if env_data:
            config.data_dir = Path(env_data)

        env_config = os.environ.get("LINKPULSE_CONFIG_DIR")
        if env_config:
            config.config_dir = Path(env_config)

        env_port = os.environ.get("LINKPULSE_WEB_PORT")
        if env_port:
            config.web_port = int(env_port)

        return config


@dataclass(frozen=True)
class Settings:
    """User-facing monitoring settings."""

    target_host: str = "8.8.8.8"
    probe_interval: float = 1.0
    monitoring_policy: MonitoringPolicy = MonitoringPolicy.AUTO
    data_retention_days: int = 30
    alerts_enabled: bool = False
    latency_threshold_ms: float = 150.0
    packet_loss_threshold_pct: float = 5.0
    alert_on_network_change: bool = True
    background_enabled: bool = False
    background_interval_minutes: float = 15.0
    background_wifi_only: bool = True

    def validate(self, min_interval: float = MIN_PROBE_INTERVAL) -> None:
        """Raise InvalidSettingError if any value is out of range."""
        if not is_valid_host(self.target_host):
            raise InvalidSettingError(f"Invalid target host: {self.target_host!r}")
        if self.probe_interval < min_interval:
            raise InvalidSettingError(
                f"Probe interval must be at least {min_interval}s"
            )
        if self.data_retention_days < 1:
            raise InvalidSettingError("Data retention must be at least 1 day")
        if self.latency_threshold_ms <= 0:
            raise InvalidSettingError("Latency threshold must be positive")
        if self.packet_loss_threshold_pct <= 0:
            raise InvalidSettingError("Packet loss threshold must be positive")
        if self.background_interval_minutes <= 0:
            raise InvalidSettingError("Background interval must be positive")

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["monitoring_policy"] = self.monitoring_policy.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Build settings from a mapping, ignoring unknown keys."""
        known = {f.name: f for f in dataclasses.fields(cls)}
        values: dict[str, Any] = {}
        for key, raw in data.items():
            if key not in known:
                logger.debug("Ignoring unknown setting %r", key)
                continue
            values[key] = _coerce(key, raw)
        return cls(**values)


_FIELD_TYPES: dict[str, type] = {
    "target_host": str,
    "probe_interval": float,
    "data_retention_days": int,
    "alerts_enabled": bool,
    "latency_threshold_ms": float,
    "packet_loss_threshold_pct": float,
    "alert_on_network_change": bool,
    "background_enabled": bool,
    "background_interval_minutes": float,
    "background_wifi_only": bool,
}

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _coerce(key: str, raw: Any) -> Any:
    if key == "monitoring_policy":
        if isinstance(raw, MonitoringPolicy):
            return raw
        try:
            return MonitoringPolicy(str(raw).lower())
        except ValueError:
            raise InvalidSettingError(f"Unknown monitoring policy: {raw!r}") from None

    kind = _FIELD_TYPES[key]
    if kind is bool:
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in _TRUTHY:
            return True
        if text in _FALSY:
            return False
        raise InvalidSettingError(f"{key} must be a boolean, got {raw!r}")

    try:
        return kind(raw)
    except (TypeError, ValueError):
        raise InvalidSettingError(
            f"{key} must be of type {kind.__name__}, got {raw!r}"
        ) from None


class SettingsStore:
    """Reads and writes Settings as a YAML file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Settings:
        """Read and validate the stored settings; a missing file gives defaults."""
        settings = self._read()
        settings.validate()
        return settings

    def _read(self) -> Settings:
        if not self._path.is_file():
            return Settings()
        data = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if data is None:
            return Settings()
        if not isinstance(data, dict):
            raise ValueError("Settings YAML must be a mapping")
        return Settings.from_dict(data)

    def save(self, settings: Settings) -> None:
        settings.validate()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            yaml.safe_dump(settings.to_dict(), sort_keys=False),
            encoding="utf-8",
        )

    def update(self, **changes: Any) -> Settings:
        """Apply changes on top of the stored settings, validate, and persist."""
        unknown = set(changes) - {f.name for f in dataclasses.fields(Settings)}
        if unknown:
            raise InvalidSettingError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

        current = self._read()
        coerced = {key: _coerce(key, value) for key, value in changes.items()}
        updated = dataclasses.replace(current, **coerced)
        self.save(updated)
        return updated
