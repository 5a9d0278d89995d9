# -------------------------------------------------------------------
# schemas/output_schema.py
#
# WHAT THIS FILE IS FOR
# --------------------
# This module defines the **typed output shapes** produced by the
# detector helpers before they are handed to the HTTP layer.
#
# NAMING CONVENTION (IMPORTANT)
# -----------------------------
# Fields use **snake_case** internally and carry a camelCase alias.
# Helpers return `model_dump(by_alias=True)` so the dict that leaves
# this package already matches the client contract:
#
#     InitProgress(percentage_str="50%").model_dump(by_alias=True)
#     -> {"percentageStr": "50%", ...}
#
# WHAT THIS FILE IS NOT FOR
# ------------------------
# This module does NOT:
# - Perform JSON key conversion of free-form payloads
# - Include business rules
# -------------------------------------------------------------------

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class InitProgress(BaseModel):
    """
    Realtime detector initialization progress.

    Values are copied through from the backend untouched.
    """

    model_config = ConfigDict(populate_by_name=True)

    percentage_str: Any = Field(None, alias="percentageStr")
    estimated_minutes_left: Any = Field(None, alias="estimatedMinutesLeft")
    needed_shingles: Any = Field(None, alias="neededShingles")


class FeatureDataPoint(BaseModel):
    """
    One feature value plotted against an anomaly result time window.

    Times are whatever the result documents carry (epoch millis as a rule).
    """

    model_config = ConfigDict(populate_by_name=True)

    start_time: Any = Field(None, alias="startTime")
    end_time: Any = Field(None, alias="endTime")
    plot_time: Any = Field(None, alias="plotTime")
    data: Any = None


class AnomalyResults(BaseModel):
    """
    Anomaly results reshaped for charting.

    `anomalies` entries keep every upstream field they carry, so they
    stay untyped dicts; `feature_data` is keyed by feature id.
    """

    model_config = ConfigDict(populate_by_name=True)

    anomalies: List[Dict[str, Any]] = Field(default_factory=list)
    feature_data: Dict[Any, List[FeatureDataPoint]] = Field(default_factory=dict, alias="featureData")


class ErrorClassification(BaseModel):
    """
    Classification of an upstream search engine error.

    Contract:
      kind="index_not_found" -> the queried index does not exist yet
      kind="generic"         -> anything else
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    kind: Literal["index_not_found", "generic"] = "generic"
    status_code: Optional[int] = Field(None, alias="statusCode")
    message: Optional[str] = None
