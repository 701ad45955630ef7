#
# Copyright OpenSearch Contributors
# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
#

import argparse
import logging
import sys
import time
from typing import Optional

import migration_config
import utils
from document_store import DocumentStoreClient
from mapping_updater import MappingUpdater
from migration_config import MigrationConfig
from stack_status import STATUS_FIELD_SPECS, STATUS_SCRIPT
from stack_status_migration_params import StackStatusMigrationParams
from task_monitor import AsyncTaskMonitor
from task_status import MigrationOutcome, OperationRequest

MIGRATION_VERSION: int = 1
__DESCRIPTION = "Add stack status"


def apply_overrides(config: MigrationConfig, params: StackStatusMigrationParams) -> MigrationConfig:
    # Overrides are held to the same rules as the config file, raises a ValueError otherwise
    if params.poll_interval_seconds is not None:
        migration_config.check_poll_interval(params.poll_interval_seconds)
        config.monitor.poll_interval_seconds = params.poll_interval_seconds
    if params.max_transient_failures is not None:
        migration_config.check_max_transient_failures(params.max_transient_failures)
        config.monitor.max_transient_failures = params.max_transient_failures
    if params.timeout_seconds is not None:
        migration_config.check_timeout(params.timeout_seconds)
        config.monitor.timeout_seconds = params.timeout_seconds
    return config


def build_request(config: MigrationConfig) -> OperationRequest:
    return OperationRequest(config.stacks.alias, STATUS_SCRIPT, query=config.stacks.query)


def print_report(config: MigrationConfig):  # pragma no cover
    print("Stack status migration, version " + str(MIGRATION_VERSION))
    print("Cluster: " + config.endpoint.get_url())
    print("Mapping index: " + config.stacks.index)
    print("Mapping fields: " + str(STATUS_FIELD_SPECS))
    print("Update by query target: " + config.stacks.alias)
    if config.stacks.query:
        print("Update by query filter: " + str(config.stacks.query))
    print("Script: " + STATUS_SCRIPT)


def migrate(client: DocumentStoreClient, config: MigrationConfig,
            monitor: Optional[AsyncTaskMonitor] = None) -> MigrationOutcome:
    """
    Adds the status mappings, then derives the status of every stack with an asynchronous update-by-query.
    A mapping failure raises before any update is submitted.
    """
    start_time = time.monotonic()
    logging.info("Start migration for adding stack status...")
    MappingUpdater(client).update(config.stacks.index, STATUS_FIELD_SPECS)
    if monitor is None:
        monitor = AsyncTaskMonitor(client, config.monitor.poll_interval_seconds,
                                   config.monitor.max_transient_failures, config.monitor.timeout_seconds)
    logging.info("Update stack status by query")
    handle = monitor.submit(build_request(config))
    outcome = monitor.await_completion(handle, __DESCRIPTION)
    logging.info(f"Done calling update by query to add stack status: Updated {outcome.updated_count:,}")
    logging.info("Finished adding stack status: Time=" + utils.format_duration(time.monotonic() - start_time))
    return outcome


def run(params: StackStatusMigrationParams) -> Optional[MigrationOutcome]:
    # Raises a ValueError if the config file is invalid
    config = apply_overrides(migration_config.load_config(params.config_file_path), params)
    if params.dryrun:
        logging.info("Dry-run flag enabled, no actual changes will be made\n")
        print_report(config)
        return None
    return migrate(DocumentStoreClient(config.endpoint), config)


if __name__ == '__main__':  # pragma no cover
    # Set log level
    logging.basicConfig(level=logging.INFO)
    # Set up parsing for command line arguments
    arg_parser = argparse.ArgumentParser(
        prog="python stack_status_migration.py",
        description="Adds status mappings to the stacks index and derives each stack's status " +
                    "from its legacy flags using an asynchronous update by query",
        formatter_class=argparse.RawTextHelpFormatter
    )
    # Required positional argument
    arg_parser.add_argument(
        "config_file_path",
        help="Path to the YAML file with the cluster endpoint and stacks index configuration"
    )
    # Flags
    arg_parser.add_argument("--dryrun", action="store_true",
                            help="Performs a dry-run. Only a report is printed - no changes are made")
    arg_parser.add_argument("--poll-interval", type=float, dest="poll_interval",
                            help="Seconds between task status polls (default: 5)")
    arg_parser.add_argument("--max-failures", type=int, dest="max_failures",
                            help="Consecutive failed status polls tolerated before giving up (default: 60)")
    arg_parser.add_argument("--timeout", type=float,
                            help="Maximum seconds to wait for the update task (default: no limit)")
    cli_args = arg_parser.parse_args()
    try:
        run(StackStatusMigrationParams(cli_args.config_file_path, dryrun=cli_args.dryrun,
                                       poll_interval_seconds=cli_args.poll_interval,
                                       max_transient_failures=cli_args.max_failures,
                                       timeout_seconds=cli_args.timeout))
    except (RuntimeError, ValueError) as e:
        logging.error("Stack status migration failed: " + str(e))
        sys.exit(1)
    logging.info("\n##### Stack status migration concluded #####\n")
    sys.exit(0)
