"""
functions/utils/settings.py

WHAT THIS FILE IS FOR
---------------------
This module defines the *single source of truth* for runtime configuration
of the anomaly detection API helper layer.

It is responsible for:
- Defining all supported configuration fields (via Pydantic BaseSettings)
- Loading default values from parameters/parameters.yaml
- Overriding defaults with environment variables (AD_HELPERS_*)
- Validating values (e.g. score precision must be non-negative)
- Exposing a cached, fully-validated Settings object to the helpers

LOAD & PRECEDENCE MODEL
-----------------------
Configuration is loaded in the following order (last wins):

1) Field defaults declared on Settings
2) YAML defaults from:
       parameters/parameters.yaml
3) Environment variables:
       AD_HELPERS_*

A missing or malformed YAML file is logged and ignored; the built-in
defaults still apply.

WHAT THIS FILE IS NOT FOR
-------------------------
This module is NOT responsible for:
- Payload transformation
- Detector state rules
- Error classification

It should only define *configuration structure and loading rules*.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import structlog
import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

PARAMETERS_PATH = Path(__file__).resolve().parents[2] / "parameters" / "parameters.yaml"


class Settings(BaseSettings):
    """
    Runtime settings for the anomaly detection API helper layer.

    Load order / precedence:
        1) YAML defaults (parameters/parameters.yaml)
        2) Environment variables (AD_HELPERS_*), overriding YAML
    """

    model_config = SettingsConfigDict(
        env_prefix="AD_HELPERS_",
        extra="ignore",
    )

    # Service metadata
    service_name: str = "anomaly_detection_api_helpers"
    environment: str = "local"

    # Results aggregation
    anomaly_lookback_window: str = Field(
        default="now-24h",
        min_length=1,
        description="Lower bound (date math) of the recent-anomalies window used in results aggregations.",
    )
    result_sort_fields: Dict[str, str] = Field(
        default_factory=lambda: {
            "totalAnomalies": "total_anomalies_in_24hr",
            "latestAnomalyTime": "latest_anomaly_time",
        },
        description=(
            "Client sort field -> aggregation name. Sort fields not listed here "
            "leave the detector bucket order to the search engine."
        ),
    )

    # Anomaly result formatting
    score_precision: int = Field(
        default=2,
        ge=0,
        description="Decimal places kept when formatting anomaly grade and confidence.",
    )


@lru_cache(maxsize=1)
def _load_yaml_parameters() -> Dict[str, Any]:
    """
    Load base configuration from parameters/parameters.yaml.

    Cached to:
    - Avoid repeated disk I/O
    - Guarantee consistent config during process lifetime
    """
    if not PARAMETERS_PATH.exists():
        logger.warning("parameters_yaml_missing", expected=str(PARAMETERS_PATH))
        return {}

    try:
        with PARAMETERS_PATH.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            logger.warning(
                "parameters_yaml_not_dict",
                path=str(PARAMETERS_PATH),
                type=type(data).__name__,
            )
            return {}
        logger.info("parameters_yaml_loaded", path=str(PARAMETERS_PATH))
        return data
    except (OSError, yaml.YAMLError) as exc:
        logger.error("parameters_yaml_load_error", path=str(PARAMETERS_PATH), error=str(exc))
        return {}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Construct and return the final validated Settings object.

    This function is:
    - Cached (singleton per process)
    - The ONLY supported way to access runtime settings

    Raises:
        pydantic.ValidationError if the merged configuration is invalid.
    """
    # 1) YAML defaults
    yaml_data = _load_yaml_parameters()

    # 2) env overrides (partial)
    try:
        env_settings = Settings()
        env_data = env_settings.model_dump(exclude_unset=True)
        logger.info("settings_loaded_env_only_partial", fields=list(env_data.keys()))
    except ValidationError as exc:
        logger.warning("settings_env_validation_error", errors=exc.errors())
        raise

    # 3) merge + final validation
    merged: Dict[str, Any] = {**yaml_data, **env_data}
    settings = Settings.model_validate(merged)

    logger.info(
        "settings_loaded",
        environment=settings.environment,
        service_name=settings.service_name,
        anomaly_lookback_window=settings.anomaly_lookback_window,
        result_sort_fields=sorted(settings.result_sort_fields),
        score_precision=settings.score_precision,
    )

    return settings
