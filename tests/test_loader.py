import json

import pytest

from conftest import FIXTURES
from docuflow.errors import ParseError
from docuflow.workflow.loader import load_workflow


@pytest.mark.parametrize("case", sorted(FIXTURES.glob("*.json")), ids=lambda p: p.name)
def test_fixtures_load(case):
    text = case.read_text(encoding="utf-8")
    wf = load_workflow(text)
    assert wf == json.loads(text)


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "",
        "[1, 2, 3]",
        '{"nodes": []}',
        '{"connections": {}}',
        '{"nodes": [{"name": "A"}], "connections": {}}',
        '{"nodes": [{"name": "A", "type": "x.y", "parameters": "oops"}], "connections": {}}',
        '{"nodes": "A", "connections": {}}',
    ],
)
def test_invalid_input_raises_parse_error(text):
    with pytest.raises(ParseError):
        load_workflow(text)


def test_unknown_fields_pass_through():
    text = json.dumps({
        "name": "x",
        "nodes": [{"name": "A", "type": "x.y", "custom": {"k": 1}}],
        "connections": {},
        "versionId": "42",
        "tags": [{"name": "ops"}],
    })
    wf = load_workflow(text)
    assert wf["versionId"] == "42"
    assert wf["nodes"][0]["custom"] == {"k": 1}
