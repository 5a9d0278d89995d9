"""
functions/detectors/task_info.py

Historical detector helpers: index task and result search responses by
detector id, then attach each detector's task state and anomaly count.

A detector without a task is reported as DISABLED with 0 anomalies.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping, Optional, Sequence

import structlog

from functions.detectors.detector_state import DetectorState, get_historical_detector_state
from functions.utils.payload_access import get_path

logger = structlog.get_logger(__name__)


def get_detector_tasks(detector_task_responses: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Map detector id -> anomaly_detection_task, skipping responses without a task.
    """
    detector_to_task: Dict[str, Any] = {}
    for response in detector_task_responses:
        detector_id = get_path(response, ["_id"], "")
        task = get_path(response, ["anomaly_detection_task"])
        if task is not None:
            detector_to_task[detector_id] = task
    return detector_to_task


def get_detector_results(detector_results_responses: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Map detector id -> results search response.

    The id is read from the first hit; responses with no hits are skipped.
    """
    detector_to_results: Dict[str, Any] = {}
    for response in detector_results_responses:
        detector_id = get_path(response, ["hits", "hits", 0, "_source", "detector_id"])
        if detector_id is not None:
            detector_to_results[detector_id] = response
    return detector_to_results


def merge_anomaly_count(
    detector: Mapping[str, Any],
    resolved_state: Optional[DetectorState],
    hit_count: Optional[int],
) -> Dict[str, Any]:
    """
    Return a copy of `detector` with curState and totalAnomalies attached.
    """
    return {
        **copy.deepcopy(dict(detector)),
        "curState": resolved_state,
        "totalAnomalies": hit_count if hit_count is not None else 0,
    }


def append_task_info(
    detector_map: Mapping[str, Mapping[str, Any]],
    detector_to_task_map: Mapping[str, Any],
    detector_to_results_map: Mapping[str, Any],
) -> Dict[str, Dict[str, Any]]:
    """
    Attach task state and total anomalies to every detector in `detector_map`.
    """
    out: Dict[str, Dict[str, Any]] = {}
    missing_tasks: List[str] = []

    for detector_id, detector in detector_map.items():
        if detector_id not in detector_to_task_map:
            missing_tasks.append(detector_id)
            out[detector_id] = merge_anomaly_count(detector, DetectorState.DISABLED, 0)
            continue

        state = get_historical_detector_state(detector_to_task_map[detector_id])
        total_anomalies = get_path(detector_to_results_map.get(detector_id), ["hits", "total", "value"], 0)
        out[detector_id] = merge_anomaly_count(detector, state, total_anomalies)

    if missing_tasks:
        logger.debug("detectors_without_task", count=len(missing_tasks))

    return out
