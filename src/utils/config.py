"""Runtime settings read from the environment.

Values come from process environment variables, optionally pre-loaded
from a ``.env`` file by the entry point (python-dotenv).
"""

import os
from dataclasses import dataclass, field
from typing import Mapping

from domain.model.dictionary import ALL_DATABASES, DEFAULT_HOST, DEFAULT_PORT, DEFAULT_STRATEGY
from domain.model.errors import ValidationError

VERSION = "0.1.0"

OUTPUT_MODES = ("single", "array", "lines")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class OutputSchema:
    """Field names and layout of the launcher's bulk text result list."""
    mode: str = "single"
    title_key: str = "title"
    content_key: str = "content"
    next_content_key: str = "next_content"
    icon_key: str = "icon"

    def field_names(self) -> dict[str, str]:
        return {
            "title": self.title_key,
            "content": self.content_key,
            "next_content": self.next_content_key,
            "icon": self.icon_key,
        }


@dataclass(frozen=True)
class Settings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout: float = 8.0
    database: str = ALL_DATABASES
    strategy: str = DEFAULT_STRATEGY
    suggest: bool = False
    client_name: str = f"sherlock-dict {VERSION}"
    markup: bool = True
    icon: str = "accessories-dictionary"
    log_level: str = "WARNING"
    output: OutputSchema = field(default_factory=OutputSchema)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Raises:
            ValidationError: a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        output = OutputSchema(
            mode=_choice(env, "DICT_OUTPUT_MODE", defaults.output.mode, OUTPUT_MODES),
            title_key=env.get("DICT_FIELD_TITLE", defaults.output.title_key),
            content_key=env.get("DICT_FIELD_CONTENT", defaults.output.content_key),
            next_content_key=env.get("DICT_FIELD_NEXT_CONTENT", defaults.output.next_content_key),
            icon_key=env.get("DICT_FIELD_ICON", defaults.output.icon_key),
        )

        return cls(
            host=env.get("DICT_HOST", defaults.host).strip() or defaults.host,
            port=_port(env.get("DICT_PORT"), defaults.port),
            timeout=_timeout(env.get("DICT_TIMEOUT"), defaults.timeout),
            database=env.get("DICT_DATABASE", defaults.database).strip() or defaults.database,
            strategy=env.get("DICT_MATCH_STRATEGY", defaults.strategy).strip() or defaults.strategy,
            suggest=_flag(env, "DICT_SUGGEST", defaults.suggest),
            client_name=env.get("DICT_CLIENT_NAME", defaults.client_name),
            markup=_flag(env, "DICT_OUTPUT_MARKUP", defaults.markup),
            icon=env.get("DICT_ICON", defaults.icon),
            log_level=_choice(env, "LOG_LEVEL", defaults.log_level, LOG_LEVELS, upper=True),
            output=output,
        )


def validate_port(value: int) -> int:
    if not 0 < value < 65536:
        raise ValidationError(f"Port must be between 1 and 65535, got {value}")
    return value


def validate_timeout(value: float) -> float:
    if value <= 0:
        raise ValidationError(f"Timeout must be positive, got {value}")
    return value


def _port(raw: str | None, default: int) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(f"DICT_PORT is not a number: {raw!r}") from None
    return validate_port(value)


def _timeout(raw: str | None, default: float) -> float:
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValidationError(f"DICT_TIMEOUT is not a number: {raw!r}") from None
    return validate_timeout(value)


def _flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValidationError(f"{name} must be a boolean, got {raw!r}")


def _choice(
    env: Mapping[str, str],
    name: str,
    default: str,
    choices: tuple[str, ...],
    upper: bool = False,
) -> str:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().upper() if upper else raw.strip().lower()
    if value not in choices:
        raise ValidationError(f"{name} must be one of {', '.join(choices)}, got {raw!r}")
    return value
