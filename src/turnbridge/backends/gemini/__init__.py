"""Gemini backend: wire models, translators, transport and configuration."""

from turnbridge.backends.gemini.backend import GeminiBackend
from turnbridge.backends.gemini.client import GeminiClient
from turnbridge.backends.gemini.config import (
    GeminiConfig,
    config_exists,
    default_config_path,
    load_config,
)
from turnbridge.backends.gemini.request import RequestTranslator
from turnbridge.backends.gemini.response import ResponseTranslator
from turnbridge.backends.gemini.schema import clean_parameters, tool_specification_from_declaration

__all__ = [
    "GeminiBackend",
    "GeminiClient",
    "GeminiConfig",
    "RequestTranslator",
    "ResponseTranslator",
    "clean_parameters",
    "config_exists",
    "default_config_path",
    "load_config",
    "tool_specification_from_declaration",
]
