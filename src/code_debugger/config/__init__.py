"""Configuration loading and validation."""

from .loader import load_config
from .schema import (
    AnthropicConfig,
    CFamilyConfig,
    DebuggerConfig,
    GeminiConfig,
    JavaScriptConfig,
    LLMConfig,
    LoggingConfig,
    OCRConfig,
    PythonLintConfig,
    ServerConfig,
    ToolsConfig,
)

__all__ = [
    # Loader
    "load_config",
    # Root config
    "DebuggerConfig",
    # Sections
    "ServerConfig",
    "LLMConfig",
    "JavaScriptConfig",
    "PythonLintConfig",
    "CFamilyConfig",
    "ToolsConfig",
    "OCRConfig",
    "LoggingConfig",
    # Provider-specific configs
    "AnthropicConfig",
    "GeminiConfig",
]
