#!/usr/bin/env python3
"""OpenStack readiness tools — CLI entrypoint."""

import argparse

from stackready.commands.image import register_image_command
from stackready.commands.password import register_password_command
from stackready.commands.winrm import register_winrm_command
from stackready.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(description="OpenStack readiness tools")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_image_command(subparsers)
    register_password_command(subparsers)
    register_winrm_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging(verbose=args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
