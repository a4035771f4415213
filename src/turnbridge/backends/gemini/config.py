"""Gemini configuration — API key, model, sampling, endpoint."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator

from turnbridge.core.error_mapper import ErrorMapper
from turnbridge.core.errors import BackendError, ErrorKind

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TURNBRIDGE_GEMINI_CONFIG"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.0-flash"


class GeminiConfig(BaseModel):
    """Validated settings for the Gemini backend.

    ``api_key`` is a :class:`~pydantic.SecretStr`, so it never shows up in
    ``repr()`` or logs.
    """

    api_key: SecretStr
    model: str = DEFAULT_MODEL
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    max_output_tokens: int = Field(default=4096, gt=0)
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=30.0, gt=0)

    @field_validator("api_key")
    @classmethod
    def _key_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            msg = "Gemini API key is missing"
            raise ValueError(msg)
        return value

    @field_validator("model")
    @classmethod
    def _model_not_empty(cls, value: str) -> str:
        if not value.strip():
            msg = "Gemini model is missing"
            raise ValueError(msg)
        return value


def default_config_path() -> Path:
    """Return ``$TURNBRIDGE_GEMINI_CONFIG`` or ``~/.turnbridge/gemini_config.json``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".turnbridge" / "gemini_config.json"


def config_exists(path: Path | None = None) -> bool:
    return (path or default_config_path()).is_file()


def load_config(path: Path | None = None) -> GeminiConfig:
    """Read, interpolate and validate a Gemini configuration file.

    The file may be JSON or YAML. ``${VAR}`` references are expanded from the
    environment before parsing.

    Raises:
        BackendError: ``CONFIGURATION`` on any failure; the message never
            contains the key.
    """
    config_path = path or default_config_path()
    if not config_path.is_file():
        raise BackendError(
            ErrorKind.CONFIGURATION,
            f"Gemini configuration file not found at {config_path}",
        )

    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise BackendError(
            ErrorKind.CONFIGURATION,
            f"Failed to read Gemini configuration file: {exc}",
        ) from exc

    expanded = os.path.expandvars(raw)
    try:
        data: Any = yaml.safe_load(expanded)
    except yaml.YAMLError as exc:
        # The parser's snippet may quote the key; report position only.
        mark = getattr(exc, "problem_mark", None)
        where = f" at line {mark.line + 1}" if mark is not None else ""
        problem = getattr(exc, "problem", None) or "parse error"
        raise BackendError(
            ErrorKind.CONFIGURATION,
            f"Invalid Gemini configuration format{where}: {problem}",
        ) from exc

    if not isinstance(data, dict):
        raise BackendError(ErrorKind.CONFIGURATION, "Gemini configuration must be a mapping")

    mapper = ErrorMapper([str(data.get("api_key") or "").strip()])
    try:
        config = GeminiConfig.model_validate(data)
    except ValidationError as exc:
        detail = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise mapper.error(
            ErrorKind.CONFIGURATION,
            f"Invalid Gemini configuration: {detail}",
        ) from exc

    logger.info("Gemini configuration loaded from %s; using model %s", config_path, config.model)
    logger.debug("Gemini configuration: model=%s, temperature=%s", config.model, config.temperature)
    return config
