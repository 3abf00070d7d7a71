"""otp - generate TOTP tokens from secrets kept in the system keyring.

Usage:
    otp list                                      (list providers)
    otp gen <provider>                            (print code, copy to clipboard)
    otp add --secret <base32> --provider <name>   (add a provider)
    otp remove <provider>                         (remove a provider)
    otp export                                    (print all secrets)
    otp check                                     (find providers missing a secret)
"""

import argparse
import logging
import sys
from typing import Optional

from .clipboard import copy_to_clipboard
from .config import ProviderRegistry, default_config_path
from .errors import OtpError
from .manager import OtpManager
from .store import KeyringSecretStore, keyring_service
from .totp import DEFAULT_DIGITS

# Colors
GREEN = "\033[32m"
RED = "\033[31m"
YELLOW = "\033[33m"
NC = "\033[0m"

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="otp", description="Generate TOTP tokens")
    parser.add_argument("--config", help=f"Config file (default: {default_config_path()})")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")

    sub = parser.add_subparsers(dest="command", metavar="<command>")
    sub.required = True

    sub.add_parser("list", help="List providers available on the system")

    gen = sub.add_parser("gen", help="Generate a new TOTP token")
    gen.add_argument("provider", help="Provider to generate token for")
    gen.add_argument("--no-copy", action="store_true", help="Do not copy the token to the clipboard")

    add = sub.add_parser("add", help="Add a new provider")
    add.add_argument("-s", "--secret", required=True,
                     help="Base32 secret provided by the service using TOTP")
    add.add_argument("-p", "--provider", required=True, help="Label for the service provider")
    add.add_argument("-d", "--digits", type=int, default=DEFAULT_DIGITS,
                     help=f"Token length (default: {DEFAULT_DIGITS})")

    sub.add_parser("export", help="Export all providers to standard output")

    remove = sub.add_parser("remove", help="Remove a provider from the system")
    remove.add_argument("provider", help="Provider to remove from system")

    sub.add_parser("check", help="Report providers whose secret is missing from the keychain")

    return parser


def setup_logging(debug: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def run(args: argparse.Namespace, manager: OtpManager) -> int:
    """Execute a parsed command. Errors propagate to the caller."""
    if args.command == "list":
        for name in manager.list_providers():
            print(name)

    elif args.command == "gen":
        result = manager.generate(args.provider)
        print(result)
        if not args.no_copy:
            copy_to_clipboard(result.code)

    elif args.command == "add":
        print(f"Adding provider '{args.provider}' in keychain")
        manager.add(args.provider, args.secret, digits=args.digits)

    elif args.command == "remove":
        manager.remove(args.provider)
        print(f"{GREEN}Provider '{args.provider}' removed.{NC}")

    elif args.command == "export":
        for name, secret in manager.export():
            print(f"{name}: {secret}")

    elif args.command == "check":
        missing = manager.check()
        for name in missing:
            print(f"{YELLOW}{name}: secret missing from keychain{NC}")
        if missing:
            return 1
        print(f"{GREEN}All {len(manager.list_providers())} provider(s) consistent.{NC}")

    return 0


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)

    try:
        registry = ProviderRegistry.load(args.config)
        manager = OtpManager(KeyringSecretStore(keyring_service()), registry)
        return run(args, manager)
    except OtpError as e:
        print(f"{RED}Error: {e}{NC}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print(f"\n{YELLOW}Interrupted.{NC}", file=sys.stderr)
        return 130
