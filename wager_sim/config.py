"""
Configuration management for wager-sim.
Supports config.json with environment variable overrides.
All paths are resolved relative to the project root.
"""

import json
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

# Project root directory (parent of 'wager_sim' folder)
PROJECT_ROOT = Path(__file__).parent.parent


def get_env(key: str, default: str = None) -> Optional[str]:
    """Get environment variable with optional default."""
    return os.environ.get(key, default)


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    val = os.environ.get(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes", "on")


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer environment variable."""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        return default


# ==================== Configuration Models ====================

class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = True
    name: str = "Wager Sim"


class LedgerConfig(BaseModel):
    starting_balance: int = 10000
    min_bet: int = 10
    history_limit: int = 50


class CrashConfig(BaseModel):
    """Crash round pacing and crash point range."""
    tick_interval_ms: int = 100
    crash_min: float = 1.0
    crash_max: float = 11.0
    recent_limit: int = 10  # Crash multipliers kept for the history strip


class LoggingConfig(BaseModel):
    level: str = "INFO"
    log_to_file: bool = False
    formatter: str = "color"


class PathsConfig(BaseModel):
    """All paths are relative to PROJECT_ROOT."""
    config_file: str = "config.json"
    state_dir: str = "data/state"
    log_file: str = "data/app.log"

    def get_config_path(self) -> Path:
        return PROJECT_ROOT / self.config_file

    def get_state_path(self) -> Path:
        return PROJECT_ROOT / self.state_dir

    def get_log_path(self) -> Path:
        return PROJECT_ROOT / self.log_file


class AppConfig(BaseModel):
    """Main application configuration."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    crash: CrashConfig = Field(default_factory=CrashConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)


# ==================== Configuration Loading ====================

def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load configuration from config.json with environment variable overrides.
    Environment variables take precedence over config.json values.
    """
    if config_path is None:
        config_path = PROJECT_ROOT / "config.json"

    data = {}

    if config_path.exists():
        with open(config_path, "r") as f:
            data = json.load(f)

    if get_env("SERVER_HOST"):
        data.setdefault("server", {})["host"] = get_env("SERVER_HOST")
    if get_env("SERVER_PORT"):
        data.setdefault("server", {})["port"] = get_env_int("SERVER_PORT", 8000)
    if get_env("DEBUG"):
        data.setdefault("server", {})["debug"] = get_env_bool("DEBUG")

    if get_env("STARTING_BALANCE"):
        data.setdefault("ledger", {})["starting_balance"] = get_env_int("STARTING_BALANCE", 10000)
    if get_env("MIN_BET"):
        data.setdefault("ledger", {})["min_bet"] = get_env_int("MIN_BET", 10)

    if get_env("CRASH_TICK_MS"):
        data.setdefault("crash", {})["tick_interval_ms"] = get_env_int("CRASH_TICK_MS", 100)

    if get_env("STATE_DIR"):
        data.setdefault("paths", {})["state_dir"] = get_env("STATE_DIR")

    if get_env("LOG_LEVEL"):
        data.setdefault("logging", {})["level"] = get_env("LOG_LEVEL")
    if get_env("LOG_TO_FILE"):
        data.setdefault("logging", {})["log_to_file"] = get_env_bool("LOG_TO_FILE")
    if get_env("LOG_FORMATTER"):
        data.setdefault("logging", {})["formatter"] = get_env("LOG_FORMATTER")

    return AppConfig(**data)


def save_config(config: AppConfig):
    """Save configuration to config.json."""
    config_path = config.paths.get_config_path()

    # Paths are computed from the project root, not persisted
    data = config.model_dump(exclude={"paths"})

    with open(config_path, "w") as f:
        json.dump(data, f, indent=4)


# Global config instance
settings = load_config()
