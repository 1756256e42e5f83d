"""
Configuration for the auction ledger.

Protocol constants are fixed here; host parameters (storage location,
logging, deterministic seed) come from a HostConfig model that can be
loaded from JSON or TOML and overridden by AUCTIONLEDGER_* environment
variables.
"""

import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# =============================================================================
# Protocol constants
# =============================================================================

MAX_ANTI_SNIPE_TIME = 60  # seconds
MAX_COMMISSION_RATE = 100  # percent
NATIVE_ASSET = "native"  # default payment asset
PROPERTY_UNIT = 1  # unique property rights move one unit at a time

# Account holding escrowed property and leading bids
CONTRACT_ADDRESS = "0x" + "00" * 19 + "01"

ENV_PREFIX = "AUCTIONLEDGER_"


class HostConfig(BaseModel):
    """Simulated host parameters"""

    data_dir: Path = Path("data")
    db_name: str = "ledger.db"
    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    log_to_file: bool = False

    # Seeds the ledger PRNG used for auction identifiers
    host_seed: int = 0
    # Ledger time of a freshly created host
    genesis_timestamp: int = Field(default=1_700_000_000, ge=0)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value}")
        return value

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name

    @property
    def level(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level]


def _read_file(config_path: Path) -> dict:
    if config_path.suffix == ".toml":
        with open(config_path, "rb") as fh:
            return tomllib.load(fh)
    return json.loads(config_path.read_text())


def _env_overrides() -> dict:
    overrides = {}
    for name in HostConfig.model_fields:
        value = os.environ.get(ENV_PREFIX + name.upper())
        if value is not None:
            overrides[name] = value
    return overrides


def load_config(config_path: Optional[str] = None, use_env: bool = True) -> HostConfig:
    """
    Load configuration from file, then apply environment overrides.

    Args:
        config_path: Optional path to a .json or .toml file
        use_env: Read a .env file and AUCTIONLEDGER_* variables

    Returns:
        HostConfig instance
    """
    values = {}
    if config_path:
        values.update(_read_file(Path(config_path)))

    if use_env:
        load_dotenv()
        values.update(_env_overrides())

    return HostConfig(**values)
