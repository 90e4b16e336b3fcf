"""Engine configuration.

Settings come from an optional YAML file with environment overrides::

    profile: server            # "admin" (default) or "server"
    log_dir: /var/lib/reportguard/logs
    moderation:
      text_attribute: 0.7
      check_links: true
    risk:
      local_timezone: Asia/Manila
    credentials:
      perspective_api_key: ...
      huggingface_token: ...

Credentials in the environment win over the file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from reportguard.classifiers import HuggingFaceNsfwClient, PerspectiveClient
from reportguard.errors import ConfigError
from reportguard.thresholds import PROFILE_ADMIN, ModerationThresholds, RiskThresholds

logger = logging.getLogger(__name__)

CONFIG_ENV = "REPORTGUARD_CONFIG"
PROFILE_ENV = "REPORTGUARD_PROFILE"
LOG_DIR_ENV = "REPORTGUARD_LOG_DIR"

_PERSPECTIVE_ENV = ("PERSPECTIVE_API_KEY", "REACT_APP_PERSPECTIVE_API_KEY")
_HUGGINGFACE_ENV = ("HUGGINGFACE_TOKEN", "REACT_APP_HUGGINGFACE_TOKEN")


@dataclass
class Settings:
    """Resolved configuration for both engines and their adapters."""

    moderation: ModerationThresholds = field(default_factory=ModerationThresholds)
    risk: RiskThresholds = field(default_factory=RiskThresholds)
    perspective_api_key: str = ""
    huggingface_token: str = ""
    log_dir: str = ""

    def text_classifier(self) -> PerspectiveClient:
        return PerspectiveClient(self.perspective_api_key, timeout=self.moderation.text_timeout)

    def image_classifier(self) -> HuggingFaceNsfwClient:
        return HuggingFaceNsfwClient(self.huggingface_token, timeout=self.moderation.image_timeout)


def load_settings(
    path: Optional[str | Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load settings from *path* (or ``$REPORTGUARD_CONFIG``) and the environment."""
    env = os.environ if env is None else env
    path = path or env.get(CONFIG_ENV)
    data = _read_yaml(path) if path else {}

    moderation_cfg = dict(data.get("moderation") or {})
    profile = env.get(PROFILE_ENV) or data.get("profile") or moderation_cfg.get("profile")
    moderation_cfg["profile"] = profile or PROFILE_ADMIN

    credentials = data.get("credentials") or {}
    try:
        settings = Settings(
            moderation=ModerationThresholds.from_mapping(moderation_cfg),
            risk=RiskThresholds.from_mapping(data.get("risk") or {}),
            perspective_api_key=_env_first(env, _PERSPECTIVE_ENV)
            or str(credentials.get("perspective_api_key") or ""),
            huggingface_token=_env_first(env, _HUGGINGFACE_ENV)
            or str(credentials.get("huggingface_token") or ""),
            log_dir=env.get(LOG_DIR_ENV) or str(data.get("log_dir") or ""),
        )
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
    return settings


def _read_yaml(path: str | Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning("config file missing at %s; using defaults", path)
        return {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _env_first(env: Mapping[str, str], names: tuple[str, ...]) -> str:
    for name in names:
        if env.get(name):
            return env[name]
    return ""
