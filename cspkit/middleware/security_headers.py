"""Content-Security-Policy header injection middleware."""

from __future__ import annotations

from pathlib import Path

import structlog
import yaml
from starlette.responses import Response

from cspkit.config.loader import CSPSettings
from cspkit.errors import PolicyEncodeError
from cspkit.middleware.csp_builder import build_csp, merge_csp, parse_csp
from cspkit.middleware.pipeline import Handler, Middleware, MiddlewarePipeline, RequestContext
from cspkit.models.policy import Policy, default_policy

logger = structlog.get_logger()

_PRESETS_PATH = Path(__file__).parent.parent / "config" / "policy_presets.yaml"

# Cache loaded presets
_presets: dict[str, str] | None = None


def load_presets() -> dict[str, str]:
    """Load policy presets from YAML, caching after first load."""
    global _presets
    if _presets is not None:
        return _presets
    if not _PRESETS_PATH.exists():
        logger.error("policy_presets_not_found", path=str(_PRESETS_PATH))
        _presets = {}
        return _presets
    with open(_PRESETS_PATH) as f:
        _presets = yaml.safe_load(f) or {}
    logger.debug("presets_loaded", names=sorted(_presets))
    return _presets


def reset_presets_cache() -> None:
    """Reset the presets cache (for testing)."""
    global _presets
    _presets = None


def resolve_policy(settings: CSPSettings) -> Policy:
    """Build the configured policy: preset, then override, then delivery options."""
    preset_text = load_presets().get(settings.policy_preset)
    if preset_text is None:
        logger.warning("unknown_policy_preset", preset=settings.policy_preset)
        policy = default_policy()
    else:
        policy = parse_csp(preset_text)

    if settings.policy_override:
        policy = merge_csp(policy, parse_csp(settings.policy_override))
    if settings.report_to:
        policy.report_to = settings.report_to
    policy.report_only = settings.report_only
    return policy


class SecurityHeaders(Middleware):
    """Set the CSP header on every response.

    The header name follows the policy's report-only flag. If the policy
    cannot be encoded the header is skipped and the response passes through.
    """

    def __init__(self, policy: Policy) -> None:
        self.policy = policy

    async def process_response(self, response: Response, context: RequestContext) -> Response:
        try:
            header_value = build_csp(self.policy)
        except PolicyEncodeError as exc:
            logger.error("csp_header_encode_failed", request_id=context.request_id, error=str(exc))
            return response
        if header_value:
            response.headers[self.policy.header_name] = header_value
        return response


def csp_handler(policy: Policy, handler: Handler) -> Handler:
    """Wrap a downstream handler so its responses carry the policy header."""
    pipeline = MiddlewarePipeline()
    pipeline.add(SecurityHeaders(policy))
    return pipeline.wrap(handler)
