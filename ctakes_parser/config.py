"""Load batch configuration from TOML (e.g. ctakes_parser.toml).

Config file is looked up in order:
  1. Path in CTAKES_PARSER_CONFIG env var (if set)
  2. ctakes_parser.toml in the ctakes_parser package directory
  3. ctakes_parser.toml in the current working directory

If no file is found, built-in defaults are used (workers=1, logfile.log, NULL).

Example:
    [batch]
    workers = 4
    log_filename = "logfile.log"
    missing_string = "NULL"
    progress_interval = 30.0
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

CONFIG_ENV_VAR = "CTAKES_PARSER_CONFIG"
CONFIG_FILENAME = "ctakes_parser.toml"


class ParserConfig(BaseModel):
    """Settings for a batch run over a directory of notes."""

    model_config = ConfigDict(frozen=True)

    workers: int = Field(default=1, ge=1, description="Maximum number of notes parsed concurrently.")
    log_filename: str = Field(default="logfile.log", description="Name of the batch log inside the output directory.")
    missing_string: str = Field(default="NULL", description="Token written for missing values in CSV output.")
    progress_interval: float = Field(default=30.0, gt=0, description="Seconds between progress reports.")


def _default_config_paths() -> list[Path]:
    """Return paths to check for ctakes_parser.toml (first existing wins)."""
    paths: list[Path] = []
    if os.environ.get(CONFIG_ENV_VAR):
        paths.append(Path(os.environ[CONFIG_ENV_VAR]))
    paths.append(Path(__file__).resolve().parent / CONFIG_FILENAME)
    paths.append(Path.cwd() / CONFIG_FILENAME)
    return paths


def load_config(path: Path | None = None) -> ParserConfig:
    """Load the batch config from TOML.

    Args:
        path: Explicit config file. When omitted the default locations are searched.

    Returns:
        A `ParserConfig`. Keys missing from the `[batch]` table, or with the
        wrong type, keep their defaults.
    """
    paths = [path] if path is not None else _default_config_paths()
    for candidate in paths:
        if candidate.is_file():
            try:
                with open(candidate, "rb") as f:
                    data = tomllib.load(f)
            except (OSError, ValueError):
                continue
            return ParserConfig(**_batch_settings(data))
    return ParserConfig()


def _batch_settings(data: dict[str, Any]) -> dict[str, Any]:
    batch = data.get("batch")
    if not isinstance(batch, dict):
        return {}
    settings: dict[str, Any] = {}
    if isinstance(batch.get("workers"), int) and batch["workers"] >= 1:
        settings["workers"] = batch["workers"]
    if isinstance(batch.get("log_filename"), str) and batch["log_filename"]:
        settings["log_filename"] = batch["log_filename"]
    if isinstance(batch.get("missing_string"), str):
        settings["missing_string"] = batch["missing_string"]
    if isinstance(batch.get("progress_interval"), (int, float)) and batch["progress_interval"] > 0:
        settings["progress_interval"] = float(batch["progress_interval"])
    return settings
