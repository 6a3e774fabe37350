"""Configuration loading from environment variables and funnel-design.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

DATA_DIR_ENV = "FUNNEL_DESIGN_DATA_DIR"
_DEFAULT_DATA_DIRNAME = ".funnel-design"
_CONFIG_FILENAME = "funnel-design.toml"


def resolve_root(env: dict[str, str] | None = None) -> Path:
    """Storage root: $FUNNEL_DESIGN_DATA_DIR, else ./.funnel-design."""
    env = os.environ if env is None else env
    override = env.get(DATA_DIR_ENV)
    if override:
        return Path(override)
    return Path.cwd() / _DEFAULT_DATA_DIRNAME


@dataclass
class ServerConfig:
    """MCP server identity."""

    name: str = "funnel-design"
    version: str = "1.0.0"
    protocol_version: str = "2024-11-05"


@dataclass
class FunnelConfig:
    """Top-level configuration."""

    data_dir: Path = field(default_factory=resolve_root)
    log_level: str = "INFO"
    server: ServerConfig = field(default_factory=ServerConfig)


def load_config(config_path: Path | None = None) -> FunnelConfig:
    """Load configuration from environment variables and optional funnel-design.toml.

    Priority: environment variables > funnel-design.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.funnel-design/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / _DEFAULT_DATA_DIRNAME / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    server_data = file_data.get("server", {})

    data_dir = resolve_root()
    if not os.getenv(DATA_DIR_ENV) and file_data.get("data_dir"):
        data_dir = Path(file_data["data_dir"]).expanduser()

    return FunnelConfig(
        data_dir=data_dir,
        log_level=os.getenv("FUNNEL_DESIGN_LOG_LEVEL", file_data.get("log_level", "INFO")),
        server=ServerConfig(
            name=server_data.get("name", "funnel-design"),
            version=server_data.get("version", "1.0.0"),
            protocol_version=server_data.get("protocol_version", "2024-11-05"),
        ),
    )
