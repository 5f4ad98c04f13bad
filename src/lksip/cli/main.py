#!/usr/bin/env python3
"""
CLI for managing LiveKit SIP trunks, dispatch rules and participants
"""

import argparse
import asyncio
import logging
import sys

from lksip import __version__
from lksip.cli import sip_commands
from lksip.services.sip.exceptions import SIPCommandError
from lksip.utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _add_update_flags(parser, resource: str, scalars, lists):
    parser.add_argument("payload", nargs="*", metavar="JSON", help=f"JSON file or literal with the full {resource} (replaces it)")
    parser.add_argument("--id", help=f"ID for the {resource} to update")
    for flag, help_text in scalars:
        parser.add_argument(f"--{flag}", help=help_text)
    for flag, help_text in lists:
        parser.add_argument(f"--{flag}", action="append", metavar="VALUE[,VALUE]", help=f'{help_text} (repeatable; "" clears the list)')


def _add_resource_group(subparsers, name, aliases, help_text, resource, handlers, update_scalars, update_lists, delete_help):
    group = subparsers.add_parser(name, aliases=aliases, help=help_text)
    commands = group.add_subparsers(dest="sip_command", required=True)

    parser_list = commands.add_parser("list", help=f"List all {resource}s")
    parser_list.add_argument("--json", dest="json_output", action="store_true", help="Output as JSON")
    parser_list.set_defaults(func=handlers["list"])

    parser_create = commands.add_parser("create", help=f"Create a {resource}")
    parser_create.add_argument("payloads", nargs="*", metavar="JSON", help="JSON request file or literal (repeatable)")
    parser_create.set_defaults(func=handlers["create"])

    parser_update = commands.add_parser("update", help=f"Update a {resource}")
    _add_update_flags(parser_update, resource, update_scalars, update_lists)
    parser_update.set_defaults(func=handlers["update"])

    parser_delete = commands.add_parser("delete", help=f"Delete a {resource}")
    parser_delete.add_argument("ids", nargs="+", metavar="ID", help=delete_help)
    parser_delete.set_defaults(func=handlers["delete"])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lksip",
        description="Manage LiveKit SIP trunks, dispatch rules and participants.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List inbound trunks as JSON
  lksip sip inbound list --json

  # Rename a trunk and clear its numbers
  lksip sip inbound update --id ST_123 --name front-desk --numbers ""

  # Replace an outbound trunk from a file
  lksip sip outbound update --id ST_456 trunk.json

  # Dial a number into a room and wait for an answer
  lksip sip participant create --trunk ST_456 --call +15105550100 --room support --wait
""",
    )

    parser.add_argument("--url", help="URL of the LiveKit server (default: $LIVEKIT_URL)")
    parser.add_argument("--api-key", help="API key (default: $LIVEKIT_API_KEY)")
    parser.add_argument("--api-secret", help="API secret (default: $LIVEKIT_API_SECRET)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

    parser_sip = subparsers.add_parser("sip", help="Manage SIP Trunks, Dispatch Rules, and Participants")
    sip_subparsers = parser_sip.add_subparsers(dest="sip_group", required=True)

    _add_resource_group(
        sip_subparsers,
        "inbound",
        ["in", "inbound-trunk"],
        "Inbound SIP Trunk management",
        "inbound trunk",
        {
            "list": sip_commands.list_inbound_trunks,
            "create": sip_commands.create_inbound_trunk,
            "update": sip_commands.update_inbound_trunk,
            "delete": sip_commands.delete_trunks,
        },
        update_scalars=[
            ("name", "Sets a new name for the trunk"),
            ("auth-user", "Set username for authentication"),
            ("auth-pass", "Set password for authentication"),
        ],
        update_lists=[("numbers", "Sets a new list of numbers for the trunk")],
        delete_help="SIP trunk ID to delete",
    )

    _add_resource_group(
        sip_subparsers,
        "outbound",
        ["out", "outbound-trunk"],
        "Outbound SIP Trunk management",
        "outbound trunk",
        {
            "list": sip_commands.list_outbound_trunks,
            "create": sip_commands.create_outbound_trunk,
            "update": sip_commands.update_outbound_trunk,
            "delete": sip_commands.delete_trunks,
        },
        update_scalars=[
            ("name", "Sets a new name for the trunk"),
            ("address", "Sets a new destination address for the trunk"),
            ("transport", "Sets a new transport for the trunk (udp, tcp, tls or auto)"),
            ("auth-user", "Set username for authentication"),
            ("auth-pass", "Set password for authentication"),
        ],
        update_lists=[("numbers", "Sets a new list of numbers for the trunk")],
        delete_help="SIP trunk ID to delete",
    )

    _add_resource_group(
        sip_subparsers,
        "dispatch",
        ["dispatch-rule"],
        "SIP Dispatch Rule management",
        "dispatch rule",
        {
            "list": sip_commands.list_dispatch_rules,
            "create": sip_commands.create_dispatch_rule,
            "update": sip_commands.update_dispatch_rule,
            "delete": sip_commands.delete_dispatch_rules,
        },
        update_scalars=[("name", "Sets a new name for the rule")],
        update_lists=[("trunks", "Sets a new list of trunk IDs")],
        delete_help="SIP dispatch rule ID to delete",
    )

    parser_participant = sip_subparsers.add_parser("participant", help="SIP Participant management")
    participant_commands = parser_participant.add_subparsers(dest="sip_command", required=True)

    parser_create = participant_commands.add_parser("create", help="Create a SIP Participant")
    parser_create.add_argument("payloads", nargs="*", metavar="JSON", help="JSON request file or literal")
    parser_create.add_argument("--trunk", metavar="SIP_TRUNK_ID", help="SIP trunk to use for the call (overrides json config)")
    parser_create.add_argument("--number", metavar="SIP_NUMBER", help="SIP number to use for the call (overrides json config)")
    parser_create.add_argument("--call", metavar="SIP_CALL_TO", help="number to call (overrides json config)")
    parser_create.add_argument("--room", metavar="ROOM_NAME", help="room to place the call to (overrides json config)")
    parser_create.add_argument("--wait", action="store_true", help="wait for the call to be answered (overrides json config)")
    parser_create.add_argument(
        "--timeout",
        type=sip_commands.parse_duration,
        default=sip_commands.DEFAULT_WAIT_TIMEOUT,
        help="timeout for the call to dial, e.g. 80s or 2m (requires --wait)",
    )
    parser_create.set_defaults(func=sip_commands.create_sip_participant)

    parser_transfer = participant_commands.add_parser("transfer", help="Transfer a SIP Participant")
    parser_transfer.add_argument("--room", required=True, help="Name of the room the participant is in")
    parser_transfer.add_argument("--identity", required=True, help="Identity of the SIP participant")
    parser_transfer.add_argument("--to", required=True, metavar="SIP_URL", help="SIP URL to transfer the call to. Use 'tel:<phone number>' to transfer to a phone")
    parser_transfer.add_argument("--play-dialtone", action="store_true", help="play a dial tone to the participant while the transfer is attempted")
    parser_transfer.set_defaults(func=sip_commands.transfer_sip_participant)

    return parser


def parse_args(argv=None):
    """Parse command line arguments"""
    return build_parser().parse_args(argv)


async def main(argv=None):
    """Async main entry point"""
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        return await args.func(args)
    except SIPCommandError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1


def run():
    """Console script entry point"""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    run()
