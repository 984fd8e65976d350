"""CSP policy model and the directive registry.

The registry is the single source of the canonical directive order: the codec
walks it for both encoding and decoding, so the order of ``Policy`` fields
carries no meaning.

Source tokens must not contain whitespace or ``;``. They are emitted verbatim
and such tokens will not survive a parse round trip; this is not checked.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple

HEADER_POLICY = "Content-Security-Policy"
HEADER_REPORT_ONLY = "Content-Security-Policy-Report-Only"

SOURCE_NONE = "'none'"
SOURCE_SELF = "'self'"
SOURCE_ANY = "*"

SOURCE_LIST = "source-list"
SCALAR = "scalar"


class Directive(NamedTuple):
    """One registry entry: wire name, slot kind, and the Policy attribute."""

    name: str
    kind: str
    attr: str


# Canonical order. default-src first, remaining fetch directives
# alphabetically, reporting last.
DIRECTIVES: tuple[Directive, ...] = (
    Directive("default-src", SOURCE_LIST, "default_src"),
    Directive("child-src", SOURCE_LIST, "child_src"),
    Directive("connect-src", SOURCE_LIST, "connect_src"),
    Directive("font-src", SOURCE_LIST, "font_src"),
    Directive("frame-src", SOURCE_LIST, "frame_src"),
    Directive("img-src", SOURCE_LIST, "img_src"),
    Directive("manifest-src", SOURCE_LIST, "manifest_src"),
    Directive("media-src", SOURCE_LIST, "media_src"),
    Directive("object-src", SOURCE_LIST, "object_src"),
    Directive("script-src", SOURCE_LIST, "script_src"),
    Directive("style-src", SOURCE_LIST, "style_src"),
    Directive("worker-src", SOURCE_LIST, "worker_src"),
    Directive("report-to", SCALAR, "report_to"),
)

DIRECTIVES_BY_NAME: dict[str, Directive] = {d.name: d for d in DIRECTIVES}


@dataclass
class Policy:
    """A CSP policy: one slot per supported directive.

    Empty lists and the empty string mean the directive is absent.
    ``report_only`` only selects the header name.
    """

    default_src: list[str] = field(default_factory=list)
    child_src: list[str] = field(default_factory=list)
    connect_src: list[str] = field(default_factory=list)
    font_src: list[str] = field(default_factory=list)
    frame_src: list[str] = field(default_factory=list)
    img_src: list[str] = field(default_factory=list)
    manifest_src: list[str] = field(default_factory=list)
    media_src: list[str] = field(default_factory=list)
    object_src: list[str] = field(default_factory=list)
    script_src: list[str] = field(default_factory=list)
    style_src: list[str] = field(default_factory=list)
    worker_src: list[str] = field(default_factory=list)
    report_to: str = ""
    report_only: bool = False

    @property
    def header_name(self) -> str:
        return HEADER_REPORT_ONLY if self.report_only else HEADER_POLICY


def default_policy() -> Policy:
    """Deny by default, allow same-origin scripts, styles, images and fetches."""
    return Policy(
        default_src=[SOURCE_NONE],
        script_src=[SOURCE_SELF],
        connect_src=[SOURCE_SELF],
        img_src=[SOURCE_SELF],
        style_src=[SOURCE_SELF],
    )
