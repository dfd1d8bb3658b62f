# docuflow/config.py
"""
Run settings.

Precedence: explicit overrides (CLI options) > YAML config file > environment > defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from docuflow.errors import ConfigError
from docuflow.sanitize.patterns import SecretPattern, build_patterns
from docuflow.utils.io import read_yaml

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_CONTEXT_CHARS = 10000


@dataclass
class Settings:
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    organization: Optional[str] = None
    model: str = DEFAULT_MODEL
    temperature: float = 0.2
    max_tokens: int = 1500
    max_context_chars: int = DEFAULT_MAX_CONTEXT_CHARS
    stage_timeout: Optional[float] = None
    extra_patterns: List[Dict[str, str]] = field(default_factory=list)
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def patterns(self) -> Tuple[SecretPattern, ...]:
        return build_patterns(self.extra_patterns)

    def validate(self) -> "Settings":
        if not isinstance(self.max_context_chars, int) or self.max_context_chars <= 0:
            raise ConfigError(f"max_context_chars must be a positive integer, got {self.max_context_chars!r}")
        if not isinstance(self.max_tokens, int) or self.max_tokens <= 0:
            raise ConfigError(f"max_tokens must be a positive integer, got {self.max_tokens!r}")
        if self.stage_timeout is not None and (
            not isinstance(self.stage_timeout, (int, float)) or self.stage_timeout <= 0
        ):
            raise ConfigError(f"stage_timeout must be a positive number, got {self.stage_timeout!r}")
        if not isinstance(self.extra_patterns, list):
            raise ConfigError("extra_patterns must be a list of {name, regex} mappings")
        # compile once so a bad regex fails before any file is touched
        self.patterns()
        return self


def settings_from_env(env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env
    s = Settings(
        api_key=env.get("OPENAI_API_KEY") or None,
        base_url=env.get("OPENAI_BASE_URL") or None,
        organization=env.get("OPENAI_ORG") or None,
        model=env.get("DOCUFLOW_MODEL") or DEFAULT_MODEL,
        log_level=env.get("LOG_LEVEL") or "INFO",
    )
    timeout = env.get("DOCUFLOW_STAGE_TIMEOUT")
    if timeout:
        try:
            s.stage_timeout = float(timeout)
        except ValueError as e:
            raise ConfigError(f"DOCUFLOW_STAGE_TIMEOUT is not a number: {timeout!r}") from e
    return s


def _settings_from_file(base: Settings, path: Path) -> Settings:
    try:
        data = read_yaml(path)
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    if data is None:
        return base
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"{path}: unknown setting(s): {', '.join(unknown)}")
    return base.with_overrides(**data)


def load_settings(
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> Settings:
    """Build validated settings from env, an optional YAML file and overrides."""
    s = settings_from_env(env)
    if config_path is not None:
        s = _settings_from_file(s, Path(config_path))
    return s.with_overrides(**overrides).validate()
