import logging
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..pipeline.charts import DEFAULT_INTERVAL, DEFAULT_PALETTE, INTERVALS
from ..control.pagination import DEFAULT_LIMIT, LIMIT_OPTIONS
from .errors import ConfigError
from .utils import get_zone

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "config.yaml"


class BackendConfig(BaseModel):
    base_url: str = "http://localhost:3000"
    timeout_seconds: float = Field(10.0, gt=0)


class DisplayConfig(BaseModel):
    timezone: str = "Asia/Tokyo"
    source_timezone: str = "UTC"
    palette: List[str] = Field(default_factory=lambda: list(DEFAULT_PALETTE), min_length=1)

    @field_validator("timezone", "source_timezone")
    @classmethod
    def _known_zone(cls, v: str) -> str:
        get_zone(v)
        return v


class LiveViewConfig(BaseModel):
    poll_seconds: float = Field(5.0, gt=0)


class GraphViewConfig(BaseModel):
    interval: str = DEFAULT_INTERVAL
    bootstrap_limit: int = Field(500, ge=1)

    @field_validator("interval")
    @classmethod
    def _known_interval(cls, v: str) -> str:
        if v not in INTERVALS:
            raise ValueError(f"interval must be one of {sorted(INTERVALS)}")
        return v


class ReadingsViewConfig(BaseModel):
    limit: int = DEFAULT_LIMIT
    limit_options: List[int] = Field(default_factory=lambda: list(LIMIT_OPTIONS), min_length=1)

    @model_validator(mode="after")
    def _limit_is_an_option(self):
        if self.limit not in self.limit_options:
            raise ValueError(f"limit {self.limit} is not one of {self.limit_options}")
        return self


class ViewsConfig(BaseModel):
    live: LiveViewConfig = Field(default_factory=LiveViewConfig)
    graph: GraphViewConfig = Field(default_factory=GraphViewConfig)
    readings: ReadingsViewConfig = Field(default_factory=ReadingsViewConfig)


class AppConfig(BaseModel):
    backend: BackendConfig = Field(default_factory=BackendConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    views: ViewsConfig = Field(default_factory=ViewsConfig)


def config_path_from_env() -> Path:
    return Path(os.getenv("BIOBIN_CONFIG", str(DEFAULT_CONFIG_PATH)))


def load_config(cfg_path: Optional[Path] = None) -> AppConfig:
    cfg_path = Path(cfg_path) if cfg_path is not None else config_path_from_env()
    if not cfg_path.exists():
        logger.warning("Config %s not found, using defaults", cfg_path)
        return AppConfig()
    try:
        raw = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"{cfg_path}: not valid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{cfg_path}: top level must be a mapping")
    try:
        cfg = AppConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"{cfg_path}: {e}") from e
    logger.info("Loaded config from %s (backend %s)", cfg_path, cfg.backend.base_url)
    return cfg
