"""Pure-function CSP (Content-Security-Policy) codec.

``build_csp`` and ``parse_csp`` are inverses for policies whose tokens carry
no whitespace or ``;``. Encoding is strict about slot shapes; parsing is total
and drops whatever it does not recognise.
"""

from __future__ import annotations

from cspkit.errors import PolicyEncodeError
from cspkit.models.policy import DIRECTIVES, DIRECTIVES_BY_NAME, SOURCE_LIST, Policy


def _encode_sources(name: str, sources: object) -> str:
    if isinstance(sources, str) or not isinstance(sources, (list, tuple)):
        raise PolicyEncodeError(
            f"{name}: expected a list of source tokens, got {type(sources).__name__}"
        )
    for token in sources:
        if not isinstance(token, str):
            raise PolicyEncodeError(
                f"{name}: source token must be a string, got {type(token).__name__}"
            )
    return " ".join(sources)


def build_csp(policy: Policy) -> str:
    """Build the header value for a policy.

    Example:
        >>> build_csp(Policy(default_src=["'self'"], script_src=["'self'", "https:"]))
        "default-src 'self'; script-src 'self' https:"

    Raises:
        PolicyEncodeError: a slot holds a value of the wrong shape.
    """
    parts = []
    for directive in DIRECTIVES:
        value = getattr(policy, directive.attr)
        if directive.kind == SOURCE_LIST:
            if not value:
                continue
            parts.append(f"{directive.name} {_encode_sources(directive.name, value)}")
        else:
            if not isinstance(value, str):
                raise PolicyEncodeError(
                    f"{directive.name}: expected a string, got {type(value).__name__}"
                )
            if not value:
                continue
            parts.append(f"{directive.name} {value}")
    return "; ".join(parts)


def parse_csp(csp_string: str | None, report_only: bool = False) -> Policy:
    """Parse header text into a Policy. Never raises.

    Example:
        >>> parse_csp("default-src 'self'; script-src 'self' https:")
        Policy(default_src=["'self'"], script_src=["'self'", 'https:'], ...)
    """
    slots: dict[str, list[str] | str] = {}
    if not csp_string or not csp_string.strip():
        return Policy(report_only=report_only)
    for part in csp_string.split(";"):
        part = part.strip()
        if not part:
            continue
        tokens = part.split(None, 1)
        if len(tokens) != 2:
            continue
        directive = DIRECTIVES_BY_NAME.get(tokens[0].lower())
        if directive is None:
            continue
        # First occurrence wins, as in browsers
        if directive.attr in slots:
            continue
        if directive.kind == SOURCE_LIST:
            slots[directive.attr] = tokens[1].split()
        else:
            slots[directive.attr] = tokens[1].strip()
    return Policy(report_only=report_only, **slots)


def merge_csp(base: Policy, override: Policy) -> Policy:
    """Merge override directives into base, deduplicating values.

    Override tokens are appended to base tokens for each source list.
    A non-empty override scalar replaces the base scalar. The delivery mode
    is taken from base.
    """
    slots: dict[str, list[str] | str] = {}
    for directive in DIRECTIVES:
        base_value = getattr(base, directive.attr)
        override_value = getattr(override, directive.attr)
        if directive.kind == SOURCE_LIST:
            merged = list(base_value)
            existing = set(merged)
            for v in override_value:
                if v not in existing:
                    merged.append(v)
                    existing.add(v)
            slots[directive.attr] = merged
        else:
            slots[directive.attr] = override_value or base_value
    return Policy(report_only=base.report_only, **slots)
