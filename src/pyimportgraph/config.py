"""Configuration management for pyimportgraph using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILE_NAME = ".pyimportgraph.json"


class ImageFormat(str, Enum):
    """Image formats the browser can display directly."""
    SVG = "svg"
    PNG = "png"
    GIF = "gif"
    JPEG = "jpg"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class GraphConfig(BaseModel):
    """Import graph discovery section."""
    roots: list[str] = Field(default_factory=list)
    vendor_dirs: list[str] = Field(alias="vendorDirs", default_factory=lambda: [
        "vendor",
        "_vendor",
        "_vendored",
    ])
    exclude_dirs: list[str] = Field(alias="excludeDirs", default_factory=lambda: [
        "__pycache__",
        "build",
        "dist",
        "node_modules",
        "site-packages",
    ])
    include_tests: bool = Field(alias="includeTests", default=False)

    model_config = ConfigDict(populate_by_name=True)


class RenderConfig(BaseModel):
    """Graphviz rendering section."""
    command: str = "dot"
    format: ImageFormat = ImageFormat.SVG

    @field_validator("command")
    @classmethod
    def validate_command(cls, v):
        if not v.strip():
            raise ValueError("render command must not be empty")
        return v

    model_config = ConfigDict(use_enum_values=True)


class DisplayConfig(BaseModel):
    """One-shot display server section."""
    bind: str = "127.0.0.1"  # Never public - the image is served to the local browser only
    port: int = 0  # 0 picks an ephemeral port
    grace_delay: float = Field(alias="graceDelay", default=1.0)
    timeout: float | None = None
    open_browser: bool = Field(alias="openBrowser", default=True)

    @field_validator("bind")
    @classmethod
    def validate_bind_address(cls, v):
        """Validate bind address - only localhost addresses allowed."""
        allowed_localhost = ["127.0.0.1", "localhost", "::1"]
        if v not in allowed_localhost:
            raise ValueError(f"bind address must be localhost only, got: {v}")
        return v

    @field_validator("port")
    @classmethod
    def validate_port_range(cls, v):
        """Validate port is ephemeral (0) or in the unprivileged range."""
        if v != 0 and not (1024 <= v <= 65535):
            raise ValueError(f"port must be 0 or between 1024-65535, got: {v}")
        return v

    @field_validator("grace_delay")
    @classmethod
    def validate_grace_delay(cls, v):
        if v <= 0:
            raise ValueError("grace_delay must be > 0")
        return v

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("timeout must be > 0")
        return v

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN

    model_config = ConfigDict(use_enum_values=True)


class ImportGraphConfig(BaseModel):
    """Complete pyimportgraph configuration model."""
    graph: GraphConfig = Field(default_factory=GraphConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")


def load_config(config_path: str | Path | None = None) -> ImportGraphConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .pyimportgraph.json

    Relative ``graph.roots`` in the file are resolved against the file's
    directory, so the same file works from any subdirectory.

    Returns:
        ImportGraphConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid, or an explicit path does not exist
    """
    if config_path is None:
        config_path = find_config_file()
        if config_path is None:
            return create_default_config()
    else:
        config_path = Path(config_path)
        if not config_path.is_file():
            raise ValueError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            config_data = json.load(f)
        config = ImportGraphConfig(**config_data)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e
    except Exception as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}") from e

    base_dir = config_path.resolve().parent
    config.graph.roots = [str(base_dir / root) for root in config.graph.roots]
    return config


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .pyimportgraph.json configuration file by searching up directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None


def create_default_config() -> ImportGraphConfig:
    """Create default configuration."""
    return ImportGraphConfig()
