"""Typed, layered configuration loader with precedence handling.

Layers, lowest to highest precedence:

0. embedded defaults (this module)
1. ``core/config/defaults.ini``
2. user config file (explicit path, or ``$XDG_CONFIG_HOME/prodconsole/config.ini``)
3. environment variables ``PRODCONSOLE_<SECTION>__<KEY>``
"""
from __future__ import annotations

import configparser
import os
from dataclasses import dataclass, fields
from pathlib import Path
from threading import RLock
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, get_type_hints

# --------------------------------------------------------------------------- #
#  Paths & default definitions
# --------------------------------------------------------------------------- #

CONFIG_DIR = Path(__file__).resolve().parent
DEFAULTS_INI = CONFIG_DIR / "defaults.ini"
ENV_PREFIX = "PRODCONSOLE_"


_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "Backend": {
        "base_url": "",
        "timeout_seconds": "10",
    },
    "Listing": {
        "default_page_size": "10",
        "page_size_options": "10,25,50",
        "search_debounce_ms": "400",
        "page_window": "5",
    },
    "Urgency": {
        "warning_days": "5",
    },
    "Lifecycle": {
        "transitions_file": "",
    },
    "Logging": {
        "level": "INFO",
        "audit_db": ":memory:",
    },
}


# --------------------------------------------------------------------------- #
#  Datamodels
# --------------------------------------------------------------------------- #

@dataclass
class BackendConfig:
    base_url: str = ""
    timeout_seconds: float = 10.0


@dataclass
class ListingConfig:
    default_page_size: int = 10
    page_size_options: Tuple[int, ...] = (10, 25, 50)
    search_debounce_ms: int = 400
    page_window: int = 5


@dataclass
class UrgencyConfig:
    warning_days: int = 5


@dataclass
class LifecycleConfig:
    transitions_file: str = ""


@dataclass
class LoggingConfig:
    level: str = "INFO"
    audit_db: str = ":memory:"


# --------------------------------------------------------------------------- #
#  Helpers
# --------------------------------------------------------------------------- #

def _cp_to_dict(cp: configparser.ConfigParser) -> Dict[str, Dict[str, Any]]:
    data: Dict[str, Dict[str, Any]] = {}
    for section in cp.sections():
        data[section] = {k: v for k, v in cp.items(section)}
    return data


def _read_ini(path: Path) -> Dict[str, Dict[str, Any]]:
    cp = configparser.ConfigParser()
    cp.read(path, encoding="utf-8")
    return _cp_to_dict(cp)


def _apply(target: Dict[str, Dict[str, Any]], source: Mapping[str, Mapping[str, Any]],
           layer: str, origin: str,
           sources: Dict[Tuple[str, str], Dict[str, str]]) -> None:
    for section, items in source.items():
        sec = target.setdefault(section, {})
        for key, value in items.items():
            sec[key] = value
            sources[(section, key)] = {"layer": layer, "source": origin}


def _cast(value: Any, typ: Any) -> Any:
    if typ is Path:
        return Path(str(value)).expanduser()
    if typ is bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in {"1", "true", "yes", "on"}
    if typ is int:
        return int(value)
    if typ is float:
        return float(value)
    if typ == Tuple[int, ...]:
        if isinstance(value, (tuple, list)):
            return tuple(int(v) for v in value)
        return tuple(int(p) for p in str(value).split(",") if p.strip())
    return typ(value)


def _build_dataclass(cls: type, data: Dict[str, Any]) -> Any:
    hints = get_type_hints(cls)
    kwargs = {}
    for field in fields(cls):
        val = data.get(field.name, field.default)
        kwargs[field.name] = _cast(val, hints[field.name])
    return cls(**kwargs)


def _env_overlays(environ: Mapping[str, str]) -> Dict[str, Dict[str, Any]]:
    result: Dict[str, Dict[str, Any]] = {}
    for env_key, value in environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue
        remainder = env_key[len(ENV_PREFIX):]
        parts = remainder.split("__", 1)
        if len(parts) != 2:
            continue
        section, key = parts
        section = section.title()
        key = key.lower()
        result.setdefault(section, {})[key] = value
    return result


def _user_config_path(environ: Mapping[str, str]) -> Path:
    if os.name == "nt":
        appdata = environ.get("APPDATA") or (Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "ProdConsole" / "config.ini"
    return Path(environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "prodconsole" / "config.ini"


# --------------------------------------------------------------------------- #
#  ConfigService
# --------------------------------------------------------------------------- #


class ConfigService:
    """Facade merging layered configuration with type safety."""

    def __init__(
        self,
        *,
        user_config: Optional[str | Path] = None,
        environ: Optional[Mapping[str, str]] = None,
        defaults_ini: Path = DEFAULTS_INI,
    ) -> None:
        self._lock = RLock()
        self._environ = environ if environ is not None else os.environ
        self._user_config = Path(user_config) if user_config else _user_config_path(self._environ)
        self._defaults_ini = defaults_ini
        self.reload()

    # ------------------------------------------------------------------ #
    def reload(self) -> None:
        with self._lock:
            merged: Dict[str, Dict[str, Any]] = {}
            sources: Dict[Tuple[str, str], Dict[str, str]] = {}

            # Layer 0: embedded defaults
            _apply(merged, _DEFAULTS, "code", "embedded", sources)

            # Layer 1: defaults.ini
            if self._defaults_ini.exists():
                _apply(merged, _read_ini(self._defaults_ini), "defaults.ini", str(self._defaults_ini), sources)

            # Layer 2: user overrides
            if self._user_config.exists():
                _apply(merged, _read_ini(self._user_config), "user", str(self._user_config), sources)

            # Layer 3: environment variables
            _apply(merged, _env_overlays(self._environ), "env", "os.environ", sources)

            self._merged = merged
            self._sources = sources

            self.backend = _build_dataclass(BackendConfig, merged.get("Backend", {}))
            self.listing = _build_dataclass(ListingConfig, merged.get("Listing", {}))
            self.urgency = _build_dataclass(UrgencyConfig, merged.get("Urgency", {}))
            self.lifecycle = _build_dataclass(LifecycleConfig, merged.get("Lifecycle", {}))
            self.logging = _build_dataclass(LoggingConfig, merged.get("Logging", {}))

            if self.listing.default_page_size not in self.listing.page_size_options:
                raise ValueError(
                    f"Listing.default_page_size {self.listing.default_page_size} "
                    f"is not one of {self.listing.page_size_options}"
                )

    # ------------------------------------------------------------------ #
    def get(self, section: str, key: str, *, cast: Callable[[Any], Any] | type = str) -> Any:
        val = self._merged.get(section, {}).get(key)
        if val is None:
            return None
        if isinstance(cast, type):
            return _cast(val, cast)
        return cast(val)

    def source_of(self, section: str, key: str) -> Dict[str, str] | None:
        """Layer and origin that supplied the effective value."""
        return self._sources.get((section, key))
