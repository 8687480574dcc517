#!/usr/bin/env python3
"""
Main entry point for the AWS Resource Inventory.
"""

import argparse
import os
import re
import subprocess
import sys

from inventory.constants import DEFAULT_OUTPUT_DIRECTORY, DEFAULT_WORKERS, SUPPORTED_OUTPUT_FORMATS
from inventory.logging_utils import setup_logging


def _print_kv(key: str, value: str) -> None:
    print(f"  {key}: {value}")


def _check_aws_auth(profile=None) -> int:
    print("AWS Authentication Check")
    print("=" * 28)

    # Optional: AWS CLI helps with SSO login for non-experienced users.
    try:
        proc = subprocess.run(["aws", "--version"], capture_output=True, text=True)
        output = (proc.stdout or "") + (proc.stderr or "")
        m = re.search(r"aws-cli/(\d+)\.(\d+)\.(\d+)", output)
        if m:
            major, minor, patch = map(int, m.groups())
            _print_kv("aws CLI", f"{major}.{minor}.{patch}")
            if (major, minor, patch) < (2, 0, 0):
                print("  WARNING: AWS CLI v2 is recommended for SSO (aws sso login).")
        else:
            _print_kv("aws CLI", "installed (version unknown)")
    except FileNotFoundError:
        _print_kv("aws CLI", "not found (optional, but recommended for SSO)")

    profile = profile or os.getenv("AWS_PROFILE")
    if profile:
        _print_kv("AWS_PROFILE", profile)
    if os.getenv("AWS_ACCESS_KEY_ID"):
        _print_kv("AWS_ACCESS_KEY_ID", "set")

    from aws_inventory.config import AWSConfig
    from aws_inventory.utils import check_aws_credentials, create_session, extract_account_id
    from inventory.exceptions import ConfigurationError

    try:
        session = create_session(AWSConfig(aws_profile=profile))
        arn = check_aws_credentials(session)
        _print_kv("Account", extract_account_id(arn))
        _print_kv("Arn", arn)
        print("OK: AWS credentials are working.")
        return 0

    except (ConfigurationError, ValueError) as e:
        print(f"ERROR: AWS auth check failed: {e}")
        print("Next steps (SSO-friendly):")
        if profile:
            print(f"  1) Run: aws sso login --profile {profile}")
        else:
            print("  1) Run: aws configure sso")
            print("  2) Run: aws sso login --profile <your-profile>")
            print("  3) Set AWS_PROFILE=<your-profile> in your environment")
        print("Alternative (access keys):")
        print("  - Set AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY")
        return 1


def _list_categories() -> int:
    from aws_inventory.collectors import collector_names

    for name in collector_names():
        print(name)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Collect AWS resources across regions and write CSV reports"
    )
    parser.add_argument(
        "--region",
        "-r",
        default=os.getenv("AWS_DEFAULT_REGION"),
        help="AWS region(s), comma separated (default: $AWS_DEFAULT_REGION or ap-northeast-1). "
        "us-east-1 is always added for global services",
    )
    parser.add_argument(
        "--all-regions",
        action="store_true",
        help="Collect from every region enabled for the account",
    )
    parser.add_argument(
        "--profile",
        default=os.getenv("AWS_PROFILE"),
        help="AWS profile to use (default: $AWS_PROFILE)",
    )
    parser.add_argument(
        "--output-dir",
        "-D",
        default=DEFAULT_OUTPUT_DIRECTORY,
        help=f"Base output directory (default: {DEFAULT_OUTPUT_DIRECTORY})",
    )
    parser.add_argument(
        "--categories",
        "-c",
        default="",
        help="Comma separated list of categories to collect (e.g. 'ec2,kms,s3')",
    )
    parser.add_argument(
        "--html",
        "-H",
        action="store_true",
        help="Also write index.html, files.json and resources.zip next to the reports",
    )
    parser.add_argument(
        "--concurrency",
        "-C",
        type=int,
        default=DEFAULT_WORKERS,
        help=f"Maximum number of concurrent collection tasks (default: {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "--format",
        choices=SUPPORTED_OUTPUT_FORMATS,
        default="csv",
        help="Output format of the per-category files (default: csv)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Cancel the collection after this many seconds",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging",
    )
    parser.add_argument(
        "--list-categories",
        action="store_true",
        help="List the available categories and exit",
    )
    parser.add_argument(
        "--check-auth",
        action="store_true",
        help="Validate AWS credentials and print setup guidance, then exit",
    )
    return parser


def main(argv=None):
    """Main function."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if args.verbose else "WARNING")

    if args.list_categories:
        return _list_categories()

    if args.check_auth:
        return _check_aws_auth(args.profile)

    from aws_inventory.discover import EXIT_CANCELLED
    from aws_inventory.discover import main as aws_main

    try:
        return aws_main(args)
    except KeyboardInterrupt:
        print("Interrupted.")
        return EXIT_CANCELLED
    except Exception as e:
        print(f"Error running AWS resource inventory: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
