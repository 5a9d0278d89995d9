"""
functions/detectors/detector_state.py

WHAT THIS FILE IS FOR
---------------------
This module defines the *single canonical rule set* for deriving a
detector's public state from the raw fragments reported by the
anomaly detection backend.

It is responsible for:
- The DetectorState enumeration exposed to clients
- Mapping raw job state names onto DetectorState
- Reclassifying stopped realtime detectors from their error text
  and feature count
- Mapping historical task states onto DetectorState
- Extracting realtime initialization progress

PUBLIC CONTRACT RULES
---------------------
Realtime job state (resolve_job_state), ordered:

- DISABLED with zero features          -> FEATURE_REQUIRED
- DISABLED with a "Stopped detector"
  error mentioning "We might have bugs" -> UNEXPECTED_FAILURE
- DISABLED with any other
  "Stopped detector" error              -> INIT_FAILURE
- anything else                         -> unchanged

The feature check is evaluated against the *raw* DISABLED state, so it
wins over both failure reclassifications.

Historical task state (resolve_task_state):

- no task / no state -> DISABLED
- FAILED             -> UNEXPECTED_FAILURE
- CREATED            -> INIT
- STOPPED            -> DISABLED
- anything else      -> looked up by name (RUNNING, FINISHED, ...)

ERROR TEXT HEURISTIC
--------------------
"Stopped detector" marks a detector the backend stopped on its own.
All such stops are initialization failures except the unknown
prediction error, whose message contains "We might have bugs".

This is substring matching on human-readable text. It is kept behind
is_stopped_detector_error() / is_unexpected_failure_error() so it can
be swapped for a structured error code without touching callers.

WHAT THIS FILE IS NOT FOR
-------------------------
This module MUST NOT:
- Fetch job, task or profile data
- Raise on malformed fragments (unknown names resolve to None)
- Keep state between calls

It performs **pure, deterministic mapping only**.
"""

from __future__ import annotations

import copy
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import structlog

from schemas.input_schema import DetectorStateFragment, TaskFragment
from schemas.output_schema import InitProgress

logger = structlog.get_logger(__name__)

STOPPED_DETECTOR_MARKER = "Stopped detector"
UNEXPECTED_FAILURE_MARKER = "We might have bugs"


class DetectorState(str, Enum):
    """
    Client-facing detector state.

    Member names match the raw names used by the backend; values are
    the labels shown to users.
    """

    ENABLED = "Enabled"
    DISABLED = "Stopped"
    INIT = "Initializing"
    INIT_FAILURE = "Initialization failure"
    UNEXPECTED_FAILURE = "Unexpected failure"
    FEATURE_REQUIRED = "Feature required"
    RUNNING = "Running"
    FINISHED = "Finished"


# historical task states that do not share a name with a DetectorState
_TASK_STATE_ALIASES: Dict[str, DetectorState] = {
    "FAILED": DetectorState.UNEXPECTED_FAILURE,
    "CREATED": DetectorState.INIT,
    "STOPPED": DetectorState.DISABLED,
}


def lookup_detector_state(raw: Union[str, DetectorState, None]) -> Optional[DetectorState]:
    """
    Look up a DetectorState by its raw backend name.

    Unknown or missing names return None instead of raising.
    """
    if isinstance(raw, DetectorState):
        return raw
    if not isinstance(raw, str):
        return None

    try:
        return DetectorState[raw]
    except KeyError:
        logger.warning("detector_state_unknown", raw_state=raw)
        return None


def is_stopped_detector_error(error: Optional[str]) -> bool:
    return error is not None and STOPPED_DETECTOR_MARKER in error


def is_unexpected_failure_error(error: Optional[str]) -> bool:
    return error is not None and UNEXPECTED_FAILURE_MARKER in error


def resolve_job_state(fragment: DetectorStateFragment) -> Optional[DetectorState]:
    """
    Resolve the realtime state of one detector.

    Returns None when the raw state name is not a known DetectorState.
    """
    base = lookup_detector_state(fragment.state)
    if base is not DetectorState.DISABLED:
        return base

    if fragment.feature_count == 0:
        return DetectorState.FEATURE_REQUIRED

    if is_stopped_detector_error(fragment.error):
        if is_unexpected_failure_error(fragment.error):
            return DetectorState.UNEXPECTED_FAILURE
        return DetectorState.INIT_FAILURE

    return base


def resolve_task_state(fragment: Optional[TaskFragment]) -> Optional[DetectorState]:
    """
    Resolve the state of a detector from its historical task.

    `fragment=None` means the detector has no task at all.
    """
    raw = fragment.state if fragment is not None else None
    if raw is None:
        return DetectorState.DISABLED

    alias = _TASK_STATE_ALIASES.get(raw)
    if alias is not None:
        return alias

    return lookup_detector_state(raw)


def get_historical_detector_state(task: Optional[Mapping[str, Any]]) -> Optional[DetectorState]:
    """
    Dict-level wrapper around resolve_task_state() for raw task documents.
    """
    if not isinstance(task, Mapping):
        return resolve_task_state(None)

    state = task.get("state")
    return resolve_task_state(TaskFragment(state=state if isinstance(state, str) else None))


def get_final_detector_states(
    detector_state_responses: Sequence[Mapping[str, Any]],
    final_detectors: Sequence[Mapping[str, Any]],
) -> List[Dict[str, Any]]:
    """
    Resolve the state of every detector in a list response.

    `detector_state_responses[i]` belongs to `final_detectors[i]`; the
    detector supplies the feature count (len of featureAttributes).
    Returns deep copies with `state` replaced by the resolved DetectorState.
    """
    final_states: List[Dict[str, Any]] = []

    for i, response in enumerate(detector_state_responses):
        detector_state = copy.deepcopy(dict(response))
        detector = final_detectors[i] if i < len(final_detectors) else {}
        features = detector.get("featureAttributes") or []
        error = detector_state.get("error")

        fragment = DetectorStateFragment(
            state=detector_state.get("state") if isinstance(detector_state.get("state"), str) else None,
            error=error if isinstance(error, str) else None,
            feature_count=len(features) if isinstance(features, list) else 0,
        )
        resolved = resolve_job_state(fragment)

        if resolved is not None and resolved.name != fragment.state:
            logger.info(
                "detector_state_reclassified",
                index=i,
                raw_state=fragment.state,
                resolved_state=resolved.name,
                feature_count=fragment.feature_count,
            )

        detector_state["state"] = resolved
        final_states.append(detector_state)

    return final_states


def get_detector_init_progress(detector_state_response: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Extract realtime initialization progress, camelCased.

    Input:  {"init_progress": {"percentage": "70%", "estimated_minutes_left": 77, "needed_shingles": 77}}
    Output: {"percentageStr": "70%", "estimatedMinutesLeft": 77, "neededShingles": 77}
    """
    progress = detector_state_response.get("init_progress")
    if progress is None or not isinstance(progress, Mapping):
        return None

    return InitProgress(
        percentage_str=progress.get("percentage"),
        estimated_minutes_left=progress.get("estimated_minutes_left"),
        needed_shingles=progress.get("needed_shingles"),
    ).model_dump(by_alias=True)
