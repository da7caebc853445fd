"""Pydantic models for configuration schema."""

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PYLINTRC = Path(__file__).resolve().parent.parent / "resources" / "pylintrc"

# Mirrors the rule set the service has always linted JavaScript with
DEFAULT_JAVASCRIPT_RULES: dict[str, Any] = {
    "no-unused-vars": "warn",
    "no-undef": "error",
    "no-console": "warn",
    "semi": ["error", "always"],
    "indent": ["error", 4, {"SwitchCase": 1}],
    "quotes": ["error", "single"],
}


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = "127.0.0.1"
    port: int = Field(5000, ge=1, le=65535)
    cors_origins: list[str] = ["*"]
    max_upload_bytes: int = Field(2 * 1024 * 1024, ge=1024)


class AnthropicConfig(BaseModel):
    """Anthropic-specific configuration."""

    api_key: str | None = None
    model: str = "claude-3-5-sonnet-20241022"
    max_tokens: int = 4096
    temperature: float = 0.3


class GeminiConfig(BaseModel):
    """Google Gemini configuration."""

    api_key: str | None = None
    model: str = "gemini-2.5-flash"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    max_output_tokens: int = 4096
    temperature: float = 0.3


class LLMConfig(BaseModel):
    """Explanation service configuration."""

    provider: Literal["anthropic", "gemini", "none"] = "anthropic"
    anthropic: AnthropicConfig | None = None
    gemini: GeminiConfig | None = None
    timeout: float | None = Field(60.0, gt=0)
    redact_secrets: bool = True

    @model_validator(mode="after")
    def fill_api_keys_from_environment(self) -> "LLMConfig":
        """Fall back to the conventional provider environment variables."""
        if self.provider == "anthropic":
            if self.anthropic is None:
                self.anthropic = AnthropicConfig()
            if not self.anthropic.api_key:
                self.anthropic.api_key = os.environ.get("ANTHROPIC_API_KEY") or None
        elif self.provider == "gemini":
            if self.gemini is None:
                self.gemini = GeminiConfig()
            if not self.gemini.api_key:
                self.gemini.api_key = os.environ.get("GOOGLE_API_KEY") or None
        return self


class JavaScriptConfig(BaseModel):
    """In-process JavaScript linter configuration."""

    rules: dict[str, Any] = Field(default_factory=lambda: dict(DEFAULT_JAVASCRIPT_RULES))


class PythonLintConfig(BaseModel):
    """Pylint configuration."""

    pylint_path: str = "pylint"
    rcfile: Path = DEFAULT_PYLINTRC

    @field_validator("rcfile")
    @classmethod
    def validate_rcfile(cls, v: Path) -> Path:
        """Reject rcfiles that do not exist."""
        if not v.is_file():
            raise ValueError(f"Pylint rcfile not found: {v}")
        return v


class CFamilyConfig(BaseModel):
    """C++ compiler configuration."""

    compiler_path: str = "g++"
    standard: str = "c++11"
    extra_flags: list[str] = ["-Wall", "-Wextra"]

    @field_validator("standard")
    @classmethod
    def validate_standard(cls, v: str) -> str:
        """Validate the language standard name."""
        if not v.startswith(("c++", "gnu++")):
            raise ValueError(f"Unsupported C++ standard: {v}")
        return v


class ToolsConfig(BaseModel):
    """Settings shared by all subprocess-based tools."""

    timeout: float | None = Field(60.0, gt=0, description="Per-run timeout in seconds")


class OCRConfig(BaseModel):
    """Image text extraction configuration."""

    language: str = "eng"
    tesseract_cmd: str | None = None


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("/var/log/code-debugger/service.log")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"
    file: FileLoggingConfig = FileLoggingConfig()


class DebuggerConfig(BaseSettings):
    """Root configuration for the code debugger service."""

    server: ServerConfig = ServerConfig()
    llm: LLMConfig = LLMConfig()
    javascript: JavaScriptConfig = JavaScriptConfig()
    python: PythonLintConfig = PythonLintConfig()
    cfamily: CFamilyConfig = CFamilyConfig()
    tools: ToolsConfig = ToolsConfig()
    ocr: OCRConfig = OCRConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_prefix="CODE_DEBUGGER_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )
