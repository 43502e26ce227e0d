"""Runtime configuration."""

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, model_validator

DEFAULT_ITERATIONS = 100_000
ENV_PREFIX = "PWKV_"


def default_store_path() -> Path:
    """Default location of the store blob."""
    return Path.home() / ".local" / "share" / "pwkv" / "default.pwkv"


class HashParameters(BaseModel):
    """Argon2id parameters for the memory-hard password hash."""

    salt_length: int = Field(default=12, ge=8)
    hash_length: int = Field(default=42, ge=4)
    time_cost: int = Field(default=12, ge=1)
    memory_cost: int = Field(default=125_000, ge=8)  # KiB
    parallelism: int = Field(default=2, ge=1)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_memory(self) -> "HashParameters":
        if self.memory_cost < 8 * self.parallelism:
            raise ValueError("memory_cost must be at least 8 KiB per lane")
        return self


class Settings(BaseModel):
    """Settings for the command-line front end and storage collaborators."""

    iterations: int = Field(default=DEFAULT_ITERATIONS, ge=1, lt=2**32)
    hashing: HashParameters = Field(default_factory=HashParameters)
    store_path: Path = Field(default_factory=default_store_path)
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``PWKV_*`` environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> Optional[str]:
            return env.get(ENV_PREFIX + name)

        values: dict = {}
        if get("ITERATIONS"):
            values["iterations"] = int(get("ITERATIONS"))
        if get("STORE"):
            values["store_path"] = Path(get("STORE")).expanduser()
        if get("LOG_LEVEL"):
            values["log_level"] = get("LOG_LEVEL").upper()
        if get("LOG_FILE"):
            values["log_file"] = Path(get("LOG_FILE")).expanduser()

        hash_values: dict = {}
        for field in ("memory_cost", "time_cost", "parallelism"):
            raw = get(f"HASH_{field.upper()}")
            if raw:
                hash_values[field] = int(raw)
        if hash_values:
            values["hashing"] = HashParameters(**hash_values)

        return cls(**values)
