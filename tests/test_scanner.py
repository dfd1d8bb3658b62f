import copy
import re

import pytest

from conftest import GENERIC_KEY, OPENAI_KEY, SLACK_TOKEN
from docuflow.errors import ConfigError, ScanError
from docuflow.sanitize.patterns import DEFAULT_PATTERNS, GENERIC_KEY as GENERIC_PATTERN, build_patterns
from docuflow.sanitize.scanner import redact_text, scan


@pytest.mark.parametrize(
    "secret, pattern_name",
    [
        (OPENAI_KEY, "OpenAI Key"),
        ("sk-proj-" + "Zy9" * 10, "OpenAI Key"),
        (SLACK_TOKEN, "Slack Token"),
        (GENERIC_KEY, "Generic Key"),
        ("Q" * 32, "Generic Key"),
    ],
)
def test_each_default_pattern_is_redacted(secret, pattern_name):
    out, found = redact_text(f"token: {secret} end")
    assert found == [pattern_name], f"{secret!r} reported as {found}"
    assert out == f"token: [REDACTED:{pattern_name}] end"


def test_specific_patterns_win_over_generic():
    # the key body alone is a 40-char alnum run the generic pattern would also take
    out, found = redact_text(OPENAI_KEY)
    assert found == ["OpenAI Key"]
    out, found = redact_text(SLACK_TOKEN)
    assert found == ["Slack Token"]
    assert "Generic Key" not in out


def test_short_runs_are_not_flagged():
    assert redact_text("A" * 31) == ("A" * 31, [])
    assert redact_text("sk-" + "b" * 19) == ("sk-" + "b" * 19, [])
    assert redact_text("={{ $json.summary }}")[1] == []


def test_several_secrets_in_one_string_all_flagged():
    text = f"primary={OPENAI_KEY}&backup={GENERIC_KEY}&chat={SLACK_TOKEN}"
    out, found = redact_text(text)
    assert sorted(found) == ["Generic Key", "OpenAI Key", "Slack Token"]
    for s in (OPENAI_KEY, GENERIC_KEY, SLACK_TOKEN):
        assert s not in out
    assert out.startswith("primary=[REDACTED:OpenAI Key]&backup=")


def test_scan_walks_nested_tree_and_reports_paths():
    tree = {
        "url": f"https://api.example.com/?key={GENERIC_KEY}",
        "headers": [{"name": "Authorization", "value": f"Bearer {OPENAI_KEY}"}],
        "odd key": {"token": SLACK_TOKEN},
        "retries": 3,
        "enabled": True,
        "body": None,
    }
    result = scan(tree)

    assert [(m.pattern, m.path) for m in result.matches] == [
        ("Generic Key", "$.url"),
        ("OpenAI Key", "$.headers[0].value"),
        ("Slack Token", "$['odd key'].token"),
    ]
    assert result.tree["retries"] == 3
    assert result.tree["enabled"] is True
    assert result.tree["body"] is None
    assert result.tree["headers"][0]["name"] == "Authorization"


def test_non_string_leaves_and_keys_are_never_scanned():
    long_number = 12345678901234567890123456789012345678
    tree = {GENERIC_KEY: long_number, "flags": [True, False, 1.5]}
    result = scan(tree)
    assert result.matches == []
    assert result.tree == tree


def test_scan_does_not_mutate_input():
    tree = {"a": [f"{OPENAI_KEY}"], "b": {"c": GENERIC_KEY}}
    before = copy.deepcopy(tree)
    result = scan(tree)
    assert tree == before
    assert result.tree is not tree
    assert result.tree["a"] is not tree["a"]


def test_rescanning_redacted_output_finds_nothing():
    tree = {"a": f"{OPENAI_KEY} {SLACK_TOKEN} {GENERIC_KEY}", "b": ["[REDACTED:Generic Key]"]}
    first = scan(tree)
    second = scan(first.tree)
    assert len(first.matches) == 3
    assert second.matches == []
    assert second.tree == first.tree


@pytest.mark.parametrize(
    "text",
    [
        f"[REDACTED: old={OPENAI_KEY}]",
        f"[REDACTED:{GENERIC_KEY}]",
        f"[REDACTED:Slack Token {SLACK_TOKEN}]",
    ],
)
def test_lookalike_placeholders_are_still_scanned(text):
    result = scan({"v": text})
    assert len(result.matches) == 1
    for s in (OPENAI_KEY, GENERIC_KEY, SLACK_TOKEN):
        assert s not in result.tree["v"]


def test_placeholders_of_extra_patterns_are_skipped_on_rescan():
    patterns = build_patterns([{"name": "GitHub Token", "regex": r"ghp_[A-Za-z0-9]{36}"}])
    first = scan({"v": "ghp_" + "a1B2" * 9}, patterns)
    assert first.tree["v"] == "[REDACTED:GitHub Token]"
    assert scan(first.tree, patterns).matches == []


@pytest.mark.parametrize(
    "key",
    [
        "sk-proj-AbCdEfGhIjKlMnOpQrSt_UvWxYz0123-456789abcdefGHIJ",
        "sk-svcacct-Ab_Cd-Ef_Gh-Ij_Kl-Mn_Op-Qr_St",
        "sk-admin-0123456789_abcdefghij-KLMNOP",
    ],
)
def test_openai_keys_with_underscores_and_dashes_are_redacted_whole(key):
    out, found = redact_text(f"Bearer {key}")
    assert out == "Bearer [REDACTED:OpenAI Key]"
    assert found == ["OpenAI Key"]


def test_sk_inside_a_word_is_not_an_openai_key():
    text = "disk-usage-monitoring-report-daily"
    assert redact_text(text) == (text, [])


def test_cyclic_tree_raises_scan_error():
    tree = {"a": []}
    tree["a"].append(tree)
    with pytest.raises(ScanError):
        scan(tree)


def test_shared_subtree_is_not_a_cycle():
    shared = {"token": GENERIC_KEY}
    result = scan({"x": shared, "y": shared})
    assert [m.path for m in result.matches] == ["$.x.token", "$.y.token"]


def test_build_patterns_inserts_extras_before_generic():
    patterns = build_patterns([{"name": "GitHub Token", "regex": r"ghp_[A-Za-z0-9]{36}"}])
    names = [p.name for p in patterns]
    assert names == ["OpenAI Key", "Slack Token", "GitHub Token", "Generic Key"]
    assert patterns[-1] is GENERIC_PATTERN

    token = "ghp_" + "a1B2" * 9
    out, found = redact_text(f"auth {token}", patterns)
    assert found == ["GitHub Token"]
    assert out == "auth [REDACTED:GitHub Token]"


def test_build_patterns_without_extras_is_default_registry():
    assert build_patterns([]) is DEFAULT_PATTERNS


@pytest.mark.parametrize(
    "extra",
    [
        [{"name": "Broken", "regex": "([a-z"}],
        [{"name": "", "regex": "abc"}],
        [{"regex": "abc"}],
        ["not-a-mapping"],
    ],
)
def test_build_patterns_rejects_bad_entries(extra):
    with pytest.raises(ConfigError):
        build_patterns(extra)


def test_placeholders_do_not_match_any_default_pattern():
    for p in DEFAULT_PATTERNS:
        ph = f"[REDACTED:{p.name}]"
        assert not any(q.matches(ph) for q in DEFAULT_PATTERNS), ph
        assert re.fullmatch(r"\[REDACTED:[^\[\]]*\]", ph)
