"""
functions/detectors/anomaly_results.py

WHAT THIS FILE IS FOR
---------------------
Helpers around the anomaly results index:

- get_result_aggregation_query(): builds the search body that summarizes
  recent anomalies per detector for the detector list page
- anomaly_result_mapper(): reshapes camelCased anomaly result documents
  into one anomaly series plus one data series per feature, ready for
  charting

SCORE FORMATTING
----------------
anomalyGrade and confidence are rendered as fixed-point strings
(`score_precision` decimals, default 2) only when the grade is positive.
Results with no grade or a zero grade report both as the integer 0.

WHAT THIS FILE IS NOT FOR
-------------------------
This module does not run the search or decide which detectors to query.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import structlog

from functions.utils.settings import get_settings
from schemas.input_schema import GetDetectorsQueryParams
from schemas.output_schema import AnomalyResults, FeatureDataPoint

logger = structlog.get_logger(__name__)


def get_result_aggregation_query(
    detectors: Sequence[str],
    query_params: GetDetectorsQueryParams,
    *,
    lookback_window: Optional[str] = None,
    sort_fields: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Build the per-detector anomaly summary aggregation.

    Buckets are sorted only when `query_params.sort_field` names an
    aggregation (totalAnomalies / latestAnomalyTime by default); other
    sort fields are applied by the caller on the detector documents.
    """
    settings = get_settings()
    lookback = lookback_window or settings.anomaly_lookback_window
    sortable = sort_fields if sort_fields is not None else settings.result_sort_fields

    terms: Dict[str, Any] = {
        "field": "detector_id",
        "size": query_params.from_ + query_params.size,
    }
    agg_name = sortable.get(query_params.sort_field)
    if agg_name:
        terms["order"] = {agg_name: query_params.sort_direction}

    return {
        "size": 0,
        "query": {
            "bool": {
                "must": [
                    {"terms": {"detector_id": list(detectors)}},
                    {"range": {"anomaly_grade": {"gt": 0}}},
                ]
            }
        },
        "aggs": {
            "unique_detectors": {
                "terms": terms,
                "aggs": {
                    "total_anomalies_in_24hr": {
                        "filter": {
                            "range": {"data_start_time": {"gte": lookback, "lte": "now"}},
                        }
                    },
                    "latest_anomaly_time": {"max": {"field": "data_start_time"}},
                },
            }
        },
    }


def _is_positive(value: Any) -> bool:
    try:
        return value is not None and float(value) > 0
    except (TypeError, ValueError):
        return False


def _format_score(value: Any, precision: int) -> Union[str, int]:
    try:
        return f"{float(value):.{precision}f}"
    except (TypeError, ValueError):
        return 0


def anomaly_result_mapper(
    anomaly_results: Sequence[Mapping[str, Any]],
    *,
    precision: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Reshape anomaly results into {"anomalies": [...], "featureData": {...}}.

    Feature series are initialised from the first result's features;
    features that only appear in later results get their own series too.
    """
    if not anomaly_results:
        return AnomalyResults().model_dump(by_alias=True)

    digits = precision if precision is not None else get_settings().score_precision

    feature_data: Dict[Any, List[FeatureDataPoint]] = {}
    for feature in anomaly_results[0].get("featureData") or []:
        if isinstance(feature, Mapping) and feature.get("featureId") is not None:
            feature_data[feature["featureId"]] = []

    anomalies: List[Dict[str, Any]] = []
    for result in anomaly_results:
        others = {
            k: copy.deepcopy(v)
            for k, v in result.items()
            if k not in ("featureData", "dataStartTime", "dataEndTime", "entity")
        }
        grade = result.get("anomalyGrade")
        positive = _is_positive(grade)
        start_time = result.get("dataStartTime")
        end_time = result.get("dataEndTime")

        anomaly: Dict[str, Any] = {
            **others,
            "anomalyGrade": _format_score(grade, digits) if positive else 0,
            "confidence": _format_score(result.get("confidence"), digits) if positive else 0,
            "startTime": start_time,
            "endTime": end_time,
            "plotTime": end_time,
        }
        if "entity" in result:
            anomaly["entity"] = copy.deepcopy(result["entity"])
        anomalies.append(anomaly)

        for feature in result.get("featureData") or []:
            if not isinstance(feature, Mapping) or feature.get("featureId") is None:
                continue
            feature_data.setdefault(feature["featureId"], []).append(
                FeatureDataPoint(
                    start_time=start_time,
                    end_time=end_time,
                    plot_time=end_time,
                    data=feature.get("data"),
                )
            )

    logger.debug(
        "anomaly_results_mapped",
        result_count=len(anomalies),
        feature_count=len(feature_data),
    )

    return AnomalyResults(anomalies=anomalies, feature_data=feature_data).model_dump(by_alias=True)
