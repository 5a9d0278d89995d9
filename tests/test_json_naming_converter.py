# tests/test_json_naming_converter.py
from __future__ import annotations

from functions.utils.json_naming_converter import (
    camel_to_snake,
    convert_keys_camel_to_snake,
    convert_keys_snake_to_camel,
    snake_to_camel,
)


def test_snake_to_camel_basic() -> None:
    assert snake_to_camel("feature_attributes") == "featureAttributes"
    assert snake_to_camel("detection_interval") == "detectionInterval"
    assert snake_to_camel("x") == "x"  # unchanged when no underscore


def test_snake_to_camel_preserves_leading_and_trailing_underscores() -> None:
    assert snake_to_camel("_seq_no") == "_seqNo"
    assert snake_to_camel("hello_world_") == "helloWorld_"
    assert snake_to_camel("__hello_world__") == "__helloWorld__"
    assert snake_to_camel("___") == "___"  # only underscores


def test_camel_to_snake_basic() -> None:
    assert camel_to_snake("featureAttributes") == "feature_attributes"
    assert camel_to_snake("seqNo") == "seq_no"
    assert camel_to_snake("feature1Name") == "feature1_name"
    assert camel_to_snake("name") == "name"  # unchanged when no capitals


def test_camel_to_snake_leaves_snake_case_and_leading_underscores_alone() -> None:
    assert camel_to_snake("_id") == "_id"
    assert camel_to_snake("already_snake") == "already_snake"
    assert camel_to_snake("_primaryTerm") == "_primary_term"


def test_convert_keys_snake_to_camel_converts_nested_dict_and_list_keys() -> None:
    inp = {
        "time_field": "timestamp",
        "detection_interval": {"period": {"interval": 10, "unit": "Minutes"}},
        "feature_attributes": [
            {"feature_name": "cpu", "feature_enabled": True},
        ],
    }

    out = convert_keys_snake_to_camel(inp)

    assert out["timeField"] == "timestamp"
    assert out["detectionInterval"]["period"]["interval"] == 10
    assert out["featureAttributes"][0]["featureName"] == "cpu"
    assert out["featureAttributes"][0]["featureEnabled"] is True


def test_convert_keys_leaves_primitives_intact() -> None:
    for fn in (convert_keys_snake_to_camel, convert_keys_camel_to_snake):
        assert fn("x") == "x"
        assert fn(123) == 123
        assert fn(None) is None
        assert fn(True) is True


def test_convert_keys_does_not_mutate_input() -> None:
    inp = {"result_index": "r", "nested_block": {"inner_key": [1, 2]}}
    out = convert_keys_snake_to_camel(inp)

    out["nestedBlock"]["innerKey"].append(3)

    assert inp == {"result_index": "r", "nested_block": {"inner_key": [1, 2]}}


def test_convert_keys_converts_every_nested_key() -> None:
    inp = {"ui_metadata": {"feature_list": {"cpu_usage": {"agg_by": "avg"}}}}

    out = convert_keys_snake_to_camel(inp)

    assert out == {"uiMetadata": {"featureList": {"cpuUsage": {"aggBy": "avg"}}}}


def test_convert_keys_copies_values_under_non_string_keys() -> None:
    inner = {"keep_me": [1]}
    inp = {7: inner}

    out = convert_keys_snake_to_camel(inp)
    out[7]["keep_me"].append(2)

    assert out == {7: {"keep_me": [1, 2]}}
    assert inner == {"keep_me": [1]}


def test_camel_snake_camel_round_trip_restores_original() -> None:
    payload = {
        "name": "detector-1",
        "timeField": "@timestamp",
        "detectionInterval": {"period": {"interval": 1, "unit": "Minutes"}},
        "shingleSize": 8,
        "lastUpdateTime": 1700000000000,
        "detectionDateRange": {"startTime": 1, "endTime": 2},
        "indices": ["server-log-*"],
        "featureList": [{"featureId": "f1", "feature1Name": "cpu"}],
    }

    snake = convert_keys_camel_to_snake(payload)
    assert snake["detection_interval"]["period"]["unit"] == "Minutes"
    assert snake["feature_list"][0]["feature1_name"] == "cpu"

    assert convert_keys_snake_to_camel(snake) == payload
