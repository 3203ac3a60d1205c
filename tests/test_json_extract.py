import pytest

from symptomrelay.errors import MalformedUpstreamOutput
from symptomrelay.services.json_extract import find_json_object, parse_json_object


def test_extracts_object_surrounded_by_prose():
    text = 'Here is the analysis:\n{"summary": "Tension headache", "risk_level": "low"}\nStay well!'
    assert parse_json_object(text) == {"summary": "Tension headache", "risk_level": "low"}


def test_extracts_object_inside_code_fence():
    text = '```json\n{"conditions": ["Migraine"]}\n```'
    assert parse_json_object(text) == {"conditions": ["Migraine"]}


def test_braces_inside_strings_do_not_end_the_span():
    text = 'prefix {"summary": "avoid {triggers} and \\"}\\" marks", "risk_level": "low"} suffix'
    parsed = parse_json_object(text)
    assert parsed["summary"] == 'avoid {triggers} and "}" marks'
    assert parsed["risk_level"] == "low"


def test_nested_objects_are_kept_whole():
    text = '{"summary": "x", "extra": {"a": {"b": 1}}} trailing {"other": 2}'
    assert find_json_object(text) == '{"summary": "x", "extra": {"a": {"b": 1}}}'


def test_first_balanced_object_wins():
    text = '{"risk_level": "high"} and later {"risk_level": "low"}'
    assert parse_json_object(text) == {"risk_level": "high"}


@pytest.mark.parametrize(
    "text",
    [
        "I'm sorry, I cannot help with that.",
        "",
        '{"summary": "never closed"',
        "{'summary': 'single quotes are not JSON'}",
        '{"summary": "trailing comma",}',
    ],
)
def test_unusable_text_is_malformed(text):
    with pytest.raises(MalformedUpstreamOutput):
        parse_json_object(text)


def test_too_deeply_nested_object_is_malformed():
    depth = 100_000
    text = '{"summary": ' + "[" * depth + "]" * depth + "}"

    with pytest.raises(MalformedUpstreamOutput):
        parse_json_object(text)
