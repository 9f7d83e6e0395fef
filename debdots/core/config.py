# debdots/core/config.py

import copy
import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import Draft7Validator

SCHEMA: dict[str, Any] = json.loads(
    (resources.files("debdots") / "schema" / "config.v1.schema.json").read_text(encoding="utf-8")
)

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "debdots" / "config.json"

# grab the un-hooked "properties" validator
_default_properties = Draft7Validator.VALIDATORS["properties"]


def _set_defaults(validator, properties, instance, schema):
    """
    jsonschema hook: whenever a property has a 'default', insert it,
    then delegate to the original Draft7 `properties` validator.
    """
    if not isinstance(instance, dict):
        return
    for prop, subschema in properties.items():
        if "default" in subschema:
            instance.setdefault(prop, copy.deepcopy(subschema["default"]))

    yield from _default_properties(validator, properties, instance, schema)


_DefaultingValidator = jsonschema.validators.extend(Draft7Validator, {"properties": _set_defaults})


def _deep_update(base: dict, updates: dict) -> None:
    """Recursively update base with updates (mutates base)."""
    for k, v in updates.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_update(base[k], v)
        else:
            base[k] = v


def default_config() -> dict[str, Any]:
    """Schema defaults only. Nested defaults need a second pass once parents exist."""
    config: dict[str, Any] = {}
    validator = _DefaultingValidator(SCHEMA)
    for _ in range(2):
        for _error in validator.iter_errors(config):
            pass
    return config


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> dict[str, Any]:
    """
    Load the user config, validate it against the schema and overlay it on
    the schema defaults. Unreadable or invalid files fall back to defaults.
    """
    log.info(f"Attempting to load configuration from: {config_path}")
    config = default_config()

    if not config_path.is_file():
        log.warning(f"No config at {config_path}; using schema defaults.")
        return config

    try:
        user_config = json.loads(config_path.read_text(encoding="utf-8"))
        Draft7Validator(SCHEMA).validate(user_config)
    except (OSError, json.JSONDecodeError) as e:
        log.error(f"Error reading config: {e}")
        log.warning("Using schema defaults only.")
        return config
    except jsonschema.ValidationError as e:
        log.error(f"Configuration validation error: {e.message}")
        log.warning("Falling back to schema defaults.")
        return config

    _deep_update(config, user_config)
    log.info("Configuration loaded and validated.")
    return config


def generate_default_config(config_path: Path = DEFAULT_CONFIG_PATH) -> bool:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        config_path.write_text(json.dumps(default_config(), indent=4) + "\n", encoding="utf-8")
    except OSError as e:
        log.error(f"Failed to write default config: {e}")
        return False
    log.info("Default configuration file created.")
    return True


@dataclass(frozen=True)
class Settings:
    """Paths and switches the provisioning plan is built from."""

    home: Path
    local_bin: Path
    xdg_config_home: Path
    zsh_custom: Path
    opt_dir: Path
    go_parent: Path
    use_sudo: bool
    http_timeout: float | None
    github_api: str
    apt_packages: tuple[str, ...]
    user: str
    login_shell: str

    @classmethod
    def from_config(
        cls, config: Mapping[str, Any], environ: Mapping[str, str] | None = None
    ) -> "Settings":
        env = os.environ if environ is None else environ
        home = Path(env.get("HOME") or Path.home())

        def expand(value: str) -> Path:
            if value == "~" or value.startswith("~/"):
                return home / value[2:]
            return Path(value)

        paths = config.get("paths", {})
        network = config.get("network", {})
        xdg = env.get("XDG_CONFIG_HOME") or str(home / ".config")
        zsh_custom = env.get("ZSH_CUSTOM") or str(home / ".oh-my-zsh" / "custom")

        return cls(
            home=home,
            local_bin=expand(paths.get("local_bin", "~/.local/bin")),
            xdg_config_home=Path(xdg),
            zsh_custom=Path(zsh_custom),
            opt_dir=expand(paths.get("opt_dir", "/opt")),
            go_parent=expand(paths.get("go_parent", "/usr/local")),
            use_sudo=config.get("privilege", {}).get("use_sudo", True),
            http_timeout=network.get("http_timeout_seconds"),
            github_api=network.get("github_api", "https://api.github.com"),
            apt_packages=tuple(config.get("apt", {}).get("packages", [])),
            user=env.get("USER", ""),
            login_shell=env.get("SHELL", ""),
        )
