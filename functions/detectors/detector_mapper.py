"""
functions/detectors/detector_mapper.py

WHAT THIS FILE IS FOR
---------------------
This module converts detector payloads between the client contract
(camelCase) and the search engine documents (snake_case).

Most detector fields are converted blindly with the recursive helpers
in functions/utils/json_naming_converter.py. A few fields hold
user-authored structures (query DSL, UI state) whose inner keys must
reach the other side untouched. Those are declared below as explicit
PassthroughField tables, one per schema:

    DETECTOR_PASSTHROUGH_FIELDS   filterQuery      <-> filter_query
                                  uiMetadata       <-> ui_metadata
    featureAttributes             featureAttributes <-> feature_attributes
                                  (each feature mapped with the feature table)
    FEATURE_PASSTHROUGH_FIELDS    aggregationQuery <-> aggregation_query

Engine-only fields that never reach clients are listed in
DETECTOR_DROPPED_ENGINE_FIELDS.

It also:
- Flattens detector-with-job search hits into one camelCase detector
- Splits detectors into historical and realtime ones

WHAT THIS FILE IS NOT FOR
-------------------------
This module MUST NOT:
- Resolve detector states (see detector_state.py)
- Validate detector definitions
- Perform I/O

All functions return new objects; inputs are never mutated.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from functions.utils.json_naming_converter import (
    convert_keys_camel_to_snake,
    convert_keys_snake_to_camel,
)
from functions.utils.payload_access import get_path


@dataclass(frozen=True)
class PassthroughField:
    """
    A field copied verbatim (inner keys untouched) under its renamed key.

    `default` builds the value used when the field is absent; None means
    an absent field stays absent.
    """

    client_key: str
    engine_key: str
    default: Optional[Callable[[], Any]] = None


DETECTOR_PASSTHROUGH_FIELDS: Tuple[PassthroughField, ...] = (
    PassthroughField("filterQuery", "filter_query", dict),
    PassthroughField("uiMetadata", "ui_metadata", dict),
)

FEATURE_PASSTHROUGH_FIELDS: Tuple[PassthroughField, ...] = (
    PassthroughField("aggregationQuery", "aggregation_query"),
)

FEATURE_ATTRIBUTES = PassthroughField("featureAttributes", "feature_attributes", list)

DETECTOR_DROPPED_ENGINE_FIELDS: Tuple[str, ...] = ("feature_query", "adJob")


def _copy_fields(
    source: Mapping[str, Any],
    fields: Sequence[PassthroughField],
    *,
    to_engine: bool,
) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for f in fields:
        src_key, dst_key = (f.client_key, f.engine_key) if to_engine else (f.engine_key, f.client_key)
        if src_key in source:
            out[dst_key] = copy.deepcopy(source[src_key])
        elif f.default is not None:
            out[dst_key] = f.default()
    return out


def _without(source: Mapping[str, Any], keys: Sequence[str]) -> Dict[str, Any]:
    return {k: v for k, v in source.items() if k not in keys}


def _source_keys(fields: Sequence[PassthroughField], *, to_engine: bool) -> List[str]:
    return [f.client_key if to_engine else f.engine_key for f in fields]


def _feature_to_snake_case(feature: Mapping[str, Any]) -> Dict[str, Any]:
    exempt = _source_keys(FEATURE_PASSTHROUGH_FIELDS, to_engine=True)
    return {
        **convert_keys_camel_to_snake(_without(feature, exempt)),
        **_copy_fields(feature, FEATURE_PASSTHROUGH_FIELDS, to_engine=True),
    }


def _feature_to_camel_case(feature: Mapping[str, Any]) -> Dict[str, Any]:
    exempt = _source_keys(FEATURE_PASSTHROUGH_FIELDS, to_engine=False)
    return {
        **convert_keys_snake_to_camel(_without(feature, exempt)),
        **_copy_fields(feature, FEATURE_PASSTHROUGH_FIELDS, to_engine=False),
    }


def _features(source: Mapping[str, Any], key: str) -> List[Mapping[str, Any]]:
    features = source.get(key)
    if not isinstance(features, list):
        return []
    return [f for f in features if isinstance(f, Mapping)]


def convert_detector_keys_to_snake_case(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Client detector (camelCase) -> engine detector document (snake_case).

    filterQuery / uiMetadata default to {}; featureAttributes defaults to [].
    """
    if not isinstance(payload, Mapping):
        payload = {}

    exempt = _source_keys(DETECTOR_PASSTHROUGH_FIELDS, to_engine=True) + [FEATURE_ATTRIBUTES.client_key]

    return {
        **convert_keys_camel_to_snake(_without(payload, exempt)),
        **_copy_fields(payload, DETECTOR_PASSTHROUGH_FIELDS, to_engine=True),
        FEATURE_ATTRIBUTES.engine_key: [
            _feature_to_snake_case(f) for f in _features(payload, FEATURE_ATTRIBUTES.client_key)
        ],
    }


def convert_preview_input_keys_to_snake_case(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Detector preview request (camelCase) -> engine preview request.

    The embedded `detector` goes through the detector tables; everything
    else (periodStart, periodEnd, detectorId, ...) is converted blindly.
    """
    if not isinstance(payload, Mapping):
        payload = {}

    detector = payload.get("detector")
    return {
        **convert_keys_camel_to_snake(_without(payload, ["detector"])),
        "detector": convert_detector_keys_to_snake_case(detector if isinstance(detector, Mapping) else {}),
    }


def convert_detector_keys_to_camel_case(response: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Engine detector document (snake_case) -> client detector (camelCase).

    Job fields come from the `adJob` entry (already flattened by
    get_detectors_with_job):
        enabled      <- adJob.enabled (default False)
        enabledTime  <- adJob.enabled_time
        disabledTime <- adJob.disabled_time
    Optional values that are absent upstream are omitted.
    """
    if not isinstance(response, Mapping):
        response = {}

    exempt = (
        _source_keys(DETECTOR_PASSTHROUGH_FIELDS, to_engine=False)
        + [FEATURE_ATTRIBUTES.engine_key]
        + list(DETECTOR_DROPPED_ENGINE_FIELDS)
    )

    out: Dict[str, Any] = {
        **convert_keys_snake_to_camel(_without(response, exempt)),
        **_copy_fields(response, DETECTOR_PASSTHROUGH_FIELDS, to_engine=False),
        FEATURE_ATTRIBUTES.client_key: [
            _feature_to_camel_case(f) for f in _features(response, FEATURE_ATTRIBUTES.engine_key)
        ],
        "enabled": bool(get_path(response, ["adJob", "enabled"], False)),
    }

    optional = {
        "enabledTime": get_path(response, ["adJob", "enabled_time"]),
        "disabledTime": get_path(response, ["adJob", "disabled_time"]),
        "categoryField": copy.deepcopy(response.get("category_field")),
    }
    out.update({k: v for k, v in optional.items() if v is not None})

    return out


def get_detectors_with_job(detectors_with_job_responses: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """
    Flatten detector+job search hits into client detectors.

    Input hit:
        {"_id": ..., "_primary_term": ..., "_seq_no": ...,
         "anomaly_detector": {...}, "anomaly_detector_job": {...}}
    """
    detectors: List[Dict[str, Any]] = []
    for hit in detectors_with_job_responses:
        detector = get_path(hit, ["anomaly_detector"], {})
        job = get_path(hit, ["anomaly_detector_job"], {})
        flattened = {
            **(detector if isinstance(detector, Mapping) else {}),
            "id": hit.get("_id"),
            "primaryTerm": hit.get("_primary_term"),
            "seqNo": hit.get("_seq_no"),
            "adJob": dict(job) if isinstance(job, Mapping) else {},
        }
        detectors.append(convert_detector_keys_to_camel_case(flattened))
    return detectors


# a detector carrying a detectionDateRange key, even a null one, is historical
def get_historical_detectors(detectors: Sequence[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    return [d for d in detectors if "detectionDateRange" in d]


def get_realtime_detectors(detectors: Sequence[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    return [d for d in detectors if "detectionDateRange" not in d]
