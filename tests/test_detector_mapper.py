# tests/test_detector_mapper.py
from __future__ import annotations

import copy

from functions.detectors.detector_mapper import (
    convert_detector_keys_to_camel_case,
    convert_detector_keys_to_snake_case,
    convert_preview_input_keys_to_snake_case,
    get_detectors_with_job,
    get_historical_detectors,
    get_realtime_detectors,
)

FILTER_QUERY = {"bool": {"filter": [{"range": {"cpuUsage": {"gt": 10}}}], "minimum_should_match": 1}}
AGG_QUERY = {"avg_cpu": {"avg": {"field": "cpuUsage"}}}


def _client_detector() -> dict:
    return {
        "name": "cpu-detector",
        "description": "",
        "timeField": "timestamp",
        "indices": ["server-metrics"],
        "filterQuery": copy.deepcopy(FILTER_QUERY),
        "uiMetadata": {"features": {"avgCpu": {"aggregationBy": "avg"}}},
        "detectionInterval": {"period": {"interval": 10, "unit": "Minutes"}},
        "featureAttributes": [
            {
                "featureName": "avg_cpu",
                "featureEnabled": True,
                "aggregationQuery": copy.deepcopy(AGG_QUERY),
            }
        ],
    }


def test_convert_detector_keys_to_snake_case_keeps_exempt_subtrees_verbatim() -> None:
    out = convert_detector_keys_to_snake_case(_client_detector())

    assert out["time_field"] == "timestamp"
    assert out["detection_interval"] == {"period": {"interval": 10, "unit": "Minutes"}}

    # exempt fields: renamed, inner keys untouched
    assert out["filter_query"] == FILTER_QUERY
    assert out["ui_metadata"] == {"features": {"avgCpu": {"aggregationBy": "avg"}}}
    assert "filterQuery" not in out

    feature = out["feature_attributes"][0]
    assert feature["feature_name"] == "avg_cpu"
    assert feature["feature_enabled"] is True
    assert feature["aggregation_query"] == AGG_QUERY


def test_convert_detector_keys_to_snake_case_defaults_missing_exempt_fields() -> None:
    out = convert_detector_keys_to_snake_case({"name": "d"})
    assert out == {"name": "d", "filter_query": {}, "ui_metadata": {}, "feature_attributes": []}


def test_convert_detector_keys_to_snake_case_does_not_mutate_payload() -> None:
    payload = _client_detector()
    before = copy.deepcopy(payload)

    out = convert_detector_keys_to_snake_case(payload)
    out["filter_query"]["bool"]["minimum_should_match"] = 99

    assert payload == before


def test_convert_preview_input_keys_to_snake_case_converts_envelope_and_detector() -> None:
    payload = {
        "periodStart": 1,
        "periodEnd": 2,
        "detectorId": "abc",
        "detector": _client_detector(),
    }

    out = convert_preview_input_keys_to_snake_case(payload)

    assert out["period_start"] == 1
    assert out["period_end"] == 2
    assert out["detector_id"] == "abc"
    assert out["detector"]["filter_query"] == FILTER_QUERY
    assert out["detector"]["feature_attributes"][0]["aggregation_query"] == AGG_QUERY


def test_convert_preview_input_without_detector_gets_empty_detector() -> None:
    out = convert_preview_input_keys_to_snake_case({"periodStart": 1})
    assert out["detector"] == {"filter_query": {}, "ui_metadata": {}, "feature_attributes": []}


def test_convert_detector_keys_to_camel_case_maps_job_and_drops_engine_fields() -> None:
    response = {
        "name": "cpu-detector",
        "time_field": "timestamp",
        "filter_query": copy.deepcopy(FILTER_QUERY),
        "ui_metadata": {"features": {"avg_cpu": {}}},
        "feature_query": {"should_not": "leak"},
        "feature_attributes": [
            {"feature_id": "f1", "feature_name": "avg_cpu", "aggregation_query": copy.deepcopy(AGG_QUERY)}
        ],
        "category_field": ["host"],
        "adJob": {"enabled": True, "enabled_time": 100, "disabled_time": 50},
    }

    out = convert_detector_keys_to_camel_case(response)

    assert out["timeField"] == "timestamp"
    assert out["filterQuery"] == FILTER_QUERY
    assert out["uiMetadata"] == {"features": {"avg_cpu": {}}}
    assert out["featureAttributes"] == [
        {"featureId": "f1", "featureName": "avg_cpu", "aggregationQuery": AGG_QUERY}
    ]
    assert out["enabled"] is True
    assert out["enabledTime"] == 100
    assert out["disabledTime"] == 50
    assert out["categoryField"] == ["host"]
    assert "featureQuery" not in out
    assert "adJob" not in out


def test_convert_detector_keys_to_camel_case_defaults_without_job() -> None:
    out = convert_detector_keys_to_camel_case({"name": "d"})

    assert out["enabled"] is False
    assert out["filterQuery"] == {}
    assert out["uiMetadata"] == {}
    assert out["featureAttributes"] == []
    assert "enabledTime" not in out
    assert "disabledTime" not in out
    assert "categoryField" not in out


def test_snake_then_camel_round_trip_restores_client_detector() -> None:
    client = _client_detector()

    back = convert_detector_keys_to_camel_case(convert_detector_keys_to_snake_case(client))

    for key, value in client.items():
        assert back[key] == value
    assert back["enabled"] is False


def test_get_detectors_with_job_flattens_hits() -> None:
    hits = [
        {
            "_id": "d1",
            "_primary_term": 1,
            "_seq_no": 7,
            "anomaly_detector": {
                "name": "cpu",
                "last_update_time": 123,
                "detection_date_range": {"start_time": 1, "end_time": 2},
                "feature_attributes": [],
            },
            "anomaly_detector_job": {"enabled": False, "disabled_time": 99},
        },
        {"_id": "d2", "_primary_term": 1, "_seq_no": 3, "anomaly_detector": {"name": "mem"}},
    ]

    out = get_detectors_with_job(hits)

    assert out[0]["id"] == "d1"
    assert out[0]["primaryTerm"] == 1
    assert out[0]["seqNo"] == 7
    assert out[0]["lastUpdateTime"] == 123
    assert out[0]["detectionDateRange"] == {"startTime": 1, "endTime": 2}
    assert out[0]["enabled"] is False
    assert out[0]["disabledTime"] == 99

    assert out[1]["id"] == "d2"
    assert out[1]["enabled"] is False
    assert "adJob" not in out[1]


def test_historical_and_realtime_split_on_detection_date_range_key() -> None:
    detectors = [
        {"id": "h", "detectionDateRange": {"startTime": 1, "endTime": 2}},
        {"id": "r"},
        {"id": "r2", "detectionDateRange": None},
    ]

    # a null range still marks the detector historical
    assert [d["id"] for d in get_historical_detectors(detectors)] == ["h", "r2"]
    assert [d["id"] for d in get_realtime_detectors(detectors)] == ["r"]
