"""
cspkit CLI
"""
import argparse
import json
import sys

from cspkit.config.loader import CSPSettings
from cspkit.errors import PolicyEncodeError
from cspkit.middleware.csp_builder import build_csp, parse_csp
from cspkit.middleware.security_headers import load_presets, resolve_policy
from cspkit.models.policy import DIRECTIVES, SOURCE_LIST


def _cmd_encode(args) -> int:
    settings = CSPSettings(
        policy_preset=args.preset,
        policy_override=args.override,
        report_only=args.report_only,
        report_to=args.report_to,
    )
    policy = resolve_policy(settings)
    try:
        value = build_csp(policy)
    except PolicyEncodeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(f"{policy.header_name}: {value}")
    return 0


def _cmd_decode(args) -> int:
    policy = parse_csp(args.text)
    decoded = {}
    for directive in DIRECTIVES:
        value = getattr(policy, directive.attr)
        if value:
            decoded[directive.name] = list(value) if directive.kind == SOURCE_LIST else value
    print(json.dumps(decoded, indent=2))
    return 0


def _cmd_presets(args) -> int:
    for name in sorted(load_presets()):
        print(name)
    return 0


def main(argv=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="cspkit - Content-Security-Policy encoder / decoder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print the header for the default preset
  python -m cspkit encode

  # Strict preset in report-only mode, with an extra script host
  python -m cspkit encode --preset strict --report-only --override "script-src cdn.example.com"

  # Decode a header value
  python -m cspkit decode "default-src 'self'; img-src *"
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    encode_parser = subparsers.add_parser('encode', help='Print a CSP header')
    encode_parser.add_argument('--preset', default='default', help='Preset name')
    encode_parser.add_argument('--override', default='', help='CSP text merged onto the preset')
    encode_parser.add_argument('--report-to', default='', help='Reporting endpoint name')
    encode_parser.add_argument('--report-only', action='store_true',
                               help='Use the Report-Only header')
    encode_parser.set_defaults(func=_cmd_encode)

    decode_parser = subparsers.add_parser('decode', help='Decode a CSP header value to JSON')
    decode_parser.add_argument('text', help='Header value')
    decode_parser.set_defaults(func=_cmd_decode)

    presets_parser = subparsers.add_parser('presets', help='List policy presets')
    presets_parser.set_defaults(func=_cmd_presets)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
