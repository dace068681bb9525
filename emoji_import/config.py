from __future__ import annotations

import getpass
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import urlparse

from .errors import ConfigError

ENV_PREFIX = "SLACK_EMOJI_IMPORT_"

ON_ERROR_CHOICES = ("abort", "continue")

_TRUE = ("1", "true", "yes", "y", "on")


@dataclass(frozen=True)
class UserInput:
    yaml: str
    host: str
    email: str
    password: str
    show: bool = False
    on_error: str = "abort"
    throttle_ms: int = 100
    wait_timeout_ms: int = 30000
    add_button_timeout_ms: int = 120000
    poll_interval_ms: int = 500
    storage_state: Optional[str] = None
    save_storage_state: bool = False
    browser_channel: str = ""
    debug_dir: str = ""
    history: bool = True

    def __repr__(self) -> str:
        return f"UserInput(yaml={self.yaml!r}, host={self.host!r}, email={self.email!r}, show={self.show})"


# option name -> environment variable suffix
ENV_NAMES = {
    "yaml": "YAML",
    "host": "HOST",
    "email": "USER",
    "password": "PASS",
    "show": "SHOW",
    "on_error": "ON_ERROR",
    "throttle_ms": "THROTTLE_MS",
    "wait_timeout_ms": "WAIT_TIMEOUT_MS",
    "add_button_timeout_ms": "ADD_BUTTON_TIMEOUT_MS",
    "poll_interval_ms": "POLL_INTERVAL_MS",
    "storage_state": "STATE",
    "save_storage_state": "SAVE_STATE",
    "browser_channel": "BROWSER_CHANNEL",
    "debug_dir": "DEBUG_DIR",
    "history": "HISTORY",
}

_BOOL_FIELDS = ("show", "save_storage_state", "history")
_INT_FIELDS = ("throttle_ms", "wait_timeout_ms", "add_button_timeout_ms", "poll_interval_ms")

PROMPTS = {
    "yaml": "Emojipacks YAML Path? (you can get some from https://github.com/lambtron/emojipacks)",
    "host": "Slack Host?",
    "email": "Slack Login Email?",
    "password": "Slack Password? (with Google/SSO login, reset your password to get a real one)",
}


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in _TRUE


def normalize_host(value: str) -> str:
    """'acme', 'acme.slack.com' and 'https://acme.slack.com/x' all become 'acme'."""
    host = (value or "").strip()
    if "://" in host:
        host = urlparse(host).hostname or ""
    host = host.strip("/").lower()
    if host.endswith(".slack.com"):
        host = host[: -len(".slack.com")]
    return host


def env_overrides(env: Mapping[str, str]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for field_name, suffix in ENV_NAMES.items():
        raw = env.get(ENV_PREFIX + suffix)
        if raw is not None and raw.strip() != "":
            out[field_name] = raw
    return out


def _stored_session(values: Mapping[str, Any]) -> bool:
    state = str(values.get("storage_state") or "").strip()
    return bool(state) and Path(state).expanduser().is_file()


def _coerce(values: Dict[str, Any]) -> Dict[str, Any]:
    for name in _BOOL_FIELDS:
        if name in values:
            values[name] = parse_bool(values[name])
    for name in _INT_FIELDS:
        if name in values:
            try:
                values[name] = max(0, int(values[name]))
            except (TypeError, ValueError):
                raise ConfigError(f"{name} must be an integer, got {values[name]!r}")
    if "on_error" in values:
        values["on_error"] = str(values["on_error"]).strip().lower()
        if values["on_error"] not in ON_ERROR_CHOICES:
            raise ConfigError(f"on_error must be one of {', '.join(ON_ERROR_CHOICES)}, got {values['on_error']!r}")
    if "host" in values:
        values["host"] = normalize_host(values["host"])
    return values


def collect_user_input(
    cli: Optional[Mapping[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
    *,
    interactive: bool = True,
    prompt: Callable[[str], str] = input,
    secret_prompt: Callable[[str], str] = getpass.getpass,
) -> UserInput:
    """
    Merge CLI flags over environment variables, then prompt for the core values still missing.
    Built once at startup and passed down explicitly.
    """
    values: Dict[str, Any] = env_overrides(os.environ if env is None else env)
    for key, value in (cli or {}).items():
        if key in ENV_NAMES and value is not None:
            values[key] = value

    for key, question in PROMPTS.items():
        if str(values.get(key) or "").strip():
            continue
        if key in ("email", "password") and _stored_session(values):
            # a stored session skips the password login entirely
            values[key] = ""
            continue
        if not interactive:
            raise ConfigError(f"missing {key} (set {ENV_PREFIX}{ENV_NAMES[key]} or pass --{key.replace('_', '-')})")
        ask = secret_prompt if key == "password" else prompt
        values[key] = ask(f"{question} ").strip()
        if not values[key]:
            raise ConfigError(f"{key} is required")

    if "show" not in values and interactive:
        values["show"] = parse_bool(prompt("Show browser? [y/N] "))

    values = _coerce(values)
    if not values["host"]:
        raise ConfigError("host is required")
    return UserInput(**values)
