# -------------------------------------------------------------------
# schemas/input_schema.py
#
# WHAT THIS FILE IS FOR
# --------------------
# This module defines the **typed input fragments** consumed by the
# detector helpers:
#
#   - GetDetectorsQueryParams: list/sort parameters sent by clients
#   - DetectorStateFragment:   one detector's realtime job state
#   - TaskFragment:            one detector's historical task state
#
# KEY DESIGN DECISION
# -------------------
# Like the public API itself, these schemas accept **both camelCase and
# snake_case** field names:
#
#   - camelCase:  featureCount, sortField, sortDirection
#   - snake_case: feature_count, sort_field, sort_direction
#
# This is implemented via:
#   - alias=camelCase on each field
#   - populate_by_name=True in model_config
#
# Fragments are transient: they are built per request from upstream
# query results and discarded after state resolution.
#
# WHAT THIS FILE IS NOT FOR
# ------------------------
# This module does NOT:
# - Resolve detector states (see functions/detectors/detector_state.py)
# - Convert payload keys
# - Perform I/O
# -------------------------------------------------------------------

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GetDetectorsQueryParams(BaseModel):
    """
    Query parameters of the detector list endpoint.

    Supports both snake_case and camelCase field names.
    """

    model_config = ConfigDict(populate_by_name=True)

    from_: int = Field(0, alias="from", ge=0)
    size: int = Field(20, ge=0)
    search: str = ""
    indices: str = ""
    sort_direction: Literal["asc", "desc"] = Field("desc", alias="sortDirection")
    sort_field: str = Field("name", alias="sortField")


class DetectorStateFragment(BaseModel):
    """
    Raw realtime state of a single detector.

    `state` is the upstream job state name (e.g. "DISABLED", "RUNNING");
    `error` is the free-text error reported by the job subsystem.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    state: Optional[str] = None
    error: Optional[str] = None
    feature_count: int = Field(0, alias="featureCount", ge=0)

    @field_validator("state", mode="before")
    @classmethod
    def _state_name(cls, v: Any) -> Any:
        # DetectorState members are accepted and reduced to their name
        name = getattr(v, "name", None)
        return name if isinstance(name, str) else v


class TaskFragment(BaseModel):
    """
    Raw state of a detector's historical task. A missing state means no task.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    state: Optional[str] = None
