#!/usr/bin/env python3
"""
AWS resource inventory run.

Checks credentials, collects every selected resource type across regions and
writes the per-account CSV reports.
"""

import logging
from typing import Dict

from inventory.context import RunContext
from inventory.exceptions import ConfigurationError
from inventory.orchestrator import Orchestrator, RunResult
from inventory.output_utils import generate_html, resource_output_directory, save_inventory_results

from .collectors import build_registry
from .config import AWSConfig, get_all_enabled_regions, initialize_regions, parse_comma_list
from .name_resolvers import AWSNameResolver
from .utils import check_aws_credentials, create_session, extract_account_id

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130


def build_config(args) -> AWSConfig:
    """Translate parsed CLI arguments into an AWSConfig."""
    return AWSConfig(
        output_directory=args.output_dir,
        output_format=args.format,
        regions=parse_comma_list(args.region),
        max_workers=args.concurrency,
        categories=parse_comma_list(args.categories),
        timeout=args.timeout,
        aws_profile=args.profile,
    )


def print_summary(result: RunResult, saved_files: Dict[str, str]) -> None:
    print("\n===== AWS Resource Inventory Summary =====")
    for name, collector_result in result.results.items():
        status = "OK" if collector_result.ok else f"{len(collector_result.errors)} failed"
        print(f"  - {name}: {len(collector_result.resources)} resources ({status})")
    print(f"Total: {result.resource_count} resources")

    if saved_files:
        print("\nResults saved to:")
        for file_type, filepath in saved_files.items():
            print(f"  {file_type}: {filepath}")

    summary = result.failure_summary()
    if summary:
        print("\nProblems:")
        for line in summary:
            print(f"  {line}")
    print("==========================================\n")


def main(args) -> int:
    """Main inventory function."""
    print("AWS Resource Inventory")
    print("=" * 22)

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"ERROR: {e}")
        return EXIT_FAILURE

    print(f"Output format: {config.output_format.upper()}")
    print(f"Concurrency: {config.max_workers}")

    session = create_session(config)
    try:
        identity = check_aws_credentials(session)
        account_id = extract_account_id(identity)
        user_regions = get_all_enabled_regions(session) if args.all_regions else config.regions
    except (ConfigurationError, ValueError) as e:
        print(f"ERROR: {e}")
        return EXIT_FAILURE

    logger.info("AWS identity: %s", identity)
    regions = initialize_regions(user_regions)
    print(f"Account: {account_id}")
    print(f"Regions: {', '.join(regions)}")
    print()

    name_resolver = AWSNameResolver.from_session(session, regions)
    registry = build_registry(config, regions, name_resolver, session=session)
    orchestrator = Orchestrator(
        registry, regions, max_workers=config.max_workers, show_progress=True
    )

    ctx = RunContext(timeout=config.timeout)
    result = orchestrator.run(ctx, config.categories or None)

    output_dir = resource_output_directory(config.output_directory, account_id)
    saved_files = save_inventory_results(result, registry, output_dir, config.output_format)
    print_summary(result, saved_files)

    html_failed = False
    if args.html:
        try:
            index = generate_html(config.output_directory, account_id, list(result.results))
            print(f"HTML index: {index['index']}")
        except OSError as e:
            print(f"ERROR: failed to generate HTML index: {e}")
            html_failed = True

    if result.cancelled:
        print(f"Collection cancelled: {ctx.reason}")
        return EXIT_CANCELLED
    if result.errors:
        print("Collection finished with errors.")
        return EXIT_FAILURE
    if html_failed:
        return EXIT_FAILURE

    print("Collection completed successfully!")
    return EXIT_OK
