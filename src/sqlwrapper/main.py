#
# SPDX-License-Identifier: AGPL-3.0-only
# Copyright (c) 2026 m2-eng
# Author: m2-eng
# Co-Author: GitHub Copilot
# License: GNU Affero General Public License v3.0 (AGPL-3.0-only)
# Purpose: Command line launcher for the SQL wrapper API server.
#
"""
Command line launcher for the SQL wrapper API server.
"""

import argparse
import logging
import os
import sys

from sqlwrapper.api.main import CONFIG_ENV_VAR


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='SQL wrapper - per-caller SQL sessions over a shared connection pool',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sqlwrapper --config cfg/config.yaml
  sqlwrapper --config cfg/config.yaml --host 0.0.0.0 --port 8080

Note: The 'sqlwrapper' section of the config file holds one mapping per
      aspect (defaultconnection, connectionpool, logging).
        """
    )
    parser.add_argument('--config',
                        default='cfg/config.yaml',
                        help='Path to config file (default: cfg/config.yaml)')
    parser.add_argument('--host',
                        default='127.0.0.1',
                        help='API server host (default: 127.0.0.1)')
    parser.add_argument('--port',
                        type=int,
                        default=8000,
                        help='API server port (default: 8000)')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    if not os.path.exists(args.config):
        print(f"Config file not found: {args.config}", file=sys.stderr)
        return 1

    import uvicorn

    os.environ[CONFIG_ENV_VAR] = args.config
    print(f"Starting SQL wrapper API server on http://{args.host}:{args.port}")
    print(f"API Documentation: http://{args.host}:{args.port}/api/docs")
    uvicorn.run("sqlwrapper.api.main:app", host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
