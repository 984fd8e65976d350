"""Tests for the CSP codec."""

from __future__ import annotations

import pytest

from cspkit.errors import PolicyEncodeError
from cspkit.middleware.csp_builder import build_csp, merge_csp, parse_csp
from cspkit.models.policy import SOURCE_ANY, SOURCE_NONE, SOURCE_SELF, Policy, default_policy

DEFAULT_CSP = "default-src 'none'; connect-src 'self'; img-src 'self'; script-src 'self'; style-src 'self'"


# ── build_csp ────────────────────────────────────────────────────────────


class TestBuildCsp:
    def test_default_policy_literal(self):
        assert build_csp(default_policy()) == DEFAULT_CSP

    def test_empty_policy(self):
        assert build_csp(Policy()) == ""

    def test_single_directive(self):
        assert build_csp(Policy(default_src=[SOURCE_SELF])) == "default-src 'self'"

    def test_tokens_joined_with_single_space(self):
        policy = Policy(default_src=[SOURCE_SELF, "*.trusted.com"])
        assert build_csp(policy) == "default-src 'self' *.trusted.com"

    def test_no_trailing_separator(self):
        text = build_csp(Policy(default_src=[SOURCE_SELF], img_src=[SOURCE_ANY]))
        assert not text.endswith(";")
        assert text == "default-src 'self'; img-src *"

    def test_scalar_directive(self):
        policy = Policy(default_src=[SOURCE_SELF], report_to="csp-endpoint")
        assert build_csp(policy) == "default-src 'self'; report-to csp-endpoint"

    def test_report_only_does_not_change_body(self):
        enforce = Policy(script_src=[SOURCE_SELF])
        report_only = Policy(script_src=[SOURCE_SELF], report_only=True)
        assert build_csp(enforce) == build_csp(report_only)


class TestBuildCspOmission:
    """Absent directives never appear in the text."""

    def test_empty_source_list_omitted(self):
        policy = Policy(default_src=[SOURCE_SELF], script_src=[])
        assert "script-src" not in build_csp(policy)

    def test_empty_scalar_omitted(self):
        policy = Policy(default_src=[SOURCE_SELF], report_to="")
        assert "report-to" not in build_csp(policy)

    def test_no_bare_directive_names(self):
        text = build_csp(default_policy())
        for part in text.split("; "):
            assert " " in part


class TestBuildCspOrder:
    """Canonical directive order and token insertion order."""

    def test_directive_order_independent_of_construction(self):
        a = Policy(style_src=[SOURCE_SELF], default_src=[SOURCE_NONE], worker_src=["blob:"])
        b = Policy(worker_src=["blob:"], default_src=[SOURCE_NONE], style_src=[SOURCE_SELF])
        assert build_csp(a) == build_csp(b) == "default-src 'none'; style-src 'self'; worker-src blob:"

    def test_token_insertion_order_kept(self):
        policy = Policy(script_src=["https://b.com", SOURCE_SELF, "https://a.com"])
        assert build_csp(policy) == "script-src https://b.com 'self' https://a.com"

    def test_every_directive_in_canonical_order(self):
        tokens = ["x.example"]
        policy = Policy(
            default_src=tokens, child_src=tokens, connect_src=tokens, font_src=tokens,
            frame_src=tokens, img_src=tokens, manifest_src=tokens, media_src=tokens,
            object_src=tokens, script_src=tokens, style_src=tokens, worker_src=tokens,
            report_to="group",
        )
        names = [part.split(" ", 1)[0] for part in build_csp(policy).split("; ")]
        assert names == [
            "default-src", "child-src", "connect-src", "font-src", "frame-src",
            "img-src", "manifest-src", "media-src", "object-src", "script-src",
            "style-src", "worker-src", "report-to",
        ]

    def test_tuple_sources_accepted(self):
        policy = Policy(img_src=(SOURCE_SELF, "data:"))
        assert build_csp(policy) == "img-src 'self' data:"


class TestBuildCspErrors:
    def test_bare_string_in_source_list(self):
        with pytest.raises(PolicyEncodeError, match="script-src"):
            build_csp(Policy(script_src="'self'"))

    def test_non_string_token(self):
        with pytest.raises(PolicyEncodeError, match="img-src"):
            build_csp(Policy(img_src=[SOURCE_SELF, 42]))

    def test_non_string_scalar(self):
        with pytest.raises(PolicyEncodeError, match="report-to"):
            build_csp(Policy(report_to=["group"]))


# ── parse_csp ────────────────────────────────────────────────────────────


class TestParseCsp:
    def test_default_policy_literal(self):
        assert parse_csp(DEFAULT_CSP) == default_policy()

    def test_empty_string(self):
        assert parse_csp("") == Policy()

    def test_none(self):
        assert parse_csp(None) == Policy()

    def test_whitespace_only(self):
        assert parse_csp("   ") == Policy()

    def test_scalar_directive(self):
        policy = parse_csp("report-to  csp-endpoint ")
        assert policy.report_to == "csp-endpoint"

    def test_report_only_flag(self):
        policy = parse_csp("default-src 'self'", report_only=True)
        assert policy.report_only is True
        assert policy.default_src == [SOURCE_SELF]

    def test_trailing_semicolons(self):
        policy = parse_csp("default-src 'self';;; script-src 'self';")
        assert policy == Policy(default_src=[SOURCE_SELF], script_src=[SOURCE_SELF])

    def test_case_insensitive_directives(self):
        assert parse_csp("Default-Src 'self'").default_src == [SOURCE_SELF]

    def test_tokens_keep_case(self):
        assert parse_csp("script-src 'nonce-AbC123'").script_src == ["'nonce-AbC123'"]

    def test_first_occurrence_wins(self):
        policy = parse_csp("script-src 'self'; script-src *")
        assert policy.script_src == [SOURCE_SELF]


class TestParseCspTolerance:
    """Decoding never fails; malformed and unknown segments are dropped."""

    def test_unknown_directive_ignored(self):
        policy = parse_csp("default-src 'self'; frame-ancestors 'none'; img-src *")
        assert policy == Policy(default_src=[SOURCE_SELF], img_src=[SOURCE_ANY])

    def test_report_uri_is_not_report_to(self):
        policy = parse_csp("default-src 'none'; style-src cdn.example.com; report-uri /_/csp-reports")
        assert policy.report_to == ""
        assert policy.style_src == ["cdn.example.com"]

    def test_directive_without_value_dropped(self):
        policy = parse_csp("upgrade-insecure-requests; script-src; img-src 'self'")
        assert policy == Policy(img_src=[SOURCE_SELF])

    def test_garbage_text(self):
        assert parse_csp(";;; \x00 ;\n; ??? ") == Policy()

    def test_multiple_spaces_between_tokens(self):
        assert parse_csp("script-src   'self'   https:").script_src == [SOURCE_SELF, "https:"]

    def test_tab_separator(self):
        assert parse_csp("default-src\t'self'").default_src == [SOURCE_SELF]


# ── round trip ───────────────────────────────────────────────────────────


# Mozilla examples from https://developer.mozilla.org/en-US/docs/Web/HTTP/CSP
ROUND_TRIP_CASES = [
    ("default", default_policy(), DEFAULT_CSP),
    ("mozilla 1", Policy(default_src=[SOURCE_SELF]), "default-src 'self'"),
    (
        "mozilla 2",
        Policy(default_src=[SOURCE_SELF, "*.trusted.com"]),
        "default-src 'self' *.trusted.com",
    ),
    (
        "mozilla 3",
        Policy(
            default_src=[SOURCE_SELF],
            img_src=[SOURCE_ANY],
            media_src=["media1.com", "media2.com"],
            script_src=["userscripts.example.com"],
        ),
        "default-src 'self'; img-src *; media-src media1.com media2.com; script-src userscripts.example.com",
    ),
    (
        "mozilla 4",
        Policy(default_src=["https://onlinebanking.jumbobank.com"]),
        "default-src https://onlinebanking.jumbobank.com",
    ),
    (
        "mozilla 5",
        Policy(default_src=[SOURCE_SELF, "*.mailsite.com"], img_src=[SOURCE_ANY]),
        "default-src 'self' *.mailsite.com; img-src *",
    ),
    (
        "with report-to",
        Policy(frame_src=["https://player.example"], report_to="main-endpoint"),
        "frame-src https://player.example; report-to main-endpoint",
    ),
]


@pytest.mark.parametrize(
    "policy,text", [(p, t) for _, p, t in ROUND_TRIP_CASES], ids=[n for n, _, _ in ROUND_TRIP_CASES]
)
def test_build_then_parse(policy, text):
    encoded = build_csp(policy)
    assert encoded == text
    assert parse_csp(encoded) == policy
    assert build_csp(parse_csp(encoded)) == encoded


def test_round_trip_preserves_report_only_when_passed():
    policy = Policy(connect_src=[SOURCE_SELF, "wss:"], report_only=True)
    assert parse_csp(build_csp(policy), report_only=policy.report_only) == policy


# ── merge_csp ────────────────────────────────────────────────────────────


class TestMergeCsp:
    def test_merge_adds_new_values(self):
        base = Policy(script_src=[SOURCE_SELF])
        override = Policy(script_src=["https://cdn.example.com"])
        assert merge_csp(base, override).script_src == [SOURCE_SELF, "https://cdn.example.com"]

    def test_merge_deduplicates(self):
        base = Policy(script_src=[SOURCE_SELF, "https:"])
        override = Policy(script_src=[SOURCE_SELF, "https://cdn.example.com"])
        result = merge_csp(base, override)
        assert result.script_src == [SOURCE_SELF, "https:", "https://cdn.example.com"]

    def test_merge_new_directive(self):
        base = Policy(default_src=[SOURCE_SELF])
        override = Policy(font_src=["https://fonts.gstatic.com"])
        result = merge_csp(base, override)
        assert result.default_src == [SOURCE_SELF]
        assert result.font_src == ["https://fonts.gstatic.com"]

    def test_merge_scalar_override_wins(self):
        result = merge_csp(Policy(report_to="a"), Policy(report_to="b"))
        assert result.report_to == "b"

    def test_merge_empty_scalar_keeps_base(self):
        assert merge_csp(Policy(report_to="a"), Policy()).report_to == "a"

    def test_merge_keeps_base_mode(self):
        result = merge_csp(Policy(report_only=True), Policy(report_only=False))
        assert result.report_only is True

    def test_merge_does_not_mutate_inputs(self):
        base = Policy(script_src=[SOURCE_SELF])
        merge_csp(base, Policy(script_src=["https://cdn.example.com"]))
        assert base.script_src == [SOURCE_SELF]
