#
# Copyright OpenSearch Contributors
# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
#

from dataclasses import dataclass, field
from typing import Optional

import yaml

import endpoint_utils
from endpoint_info import EndpointInfo
from task_monitor import DEFAULT_MAX_TRANSIENT_FAILURES, DEFAULT_POLL_INTERVAL_SECONDS

# Constants
CLUSTER_KEY = "cluster"
STACKS_KEY = "stacks"
MONITOR_KEY = "monitor"
INDEX_KEY = "index"
ALIAS_KEY = "alias"
QUERY_KEY = "query"
POLL_INTERVAL_KEY = "poll_interval_seconds"
MAX_FAILURES_KEY = "max_transient_failures"
TIMEOUT_KEY = "timeout_seconds"


@dataclass
class StacksConfig:
    # Versioned index that receives the mapping update
    index: str
    # Name targeted by update-by-query, usually an alias of the versioned index
    alias: str
    query: Optional[dict] = None


@dataclass
class MonitorConfig:
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    max_transient_failures: Optional[int] = DEFAULT_MAX_TRANSIENT_FAILURES
    timeout_seconds: Optional[float] = None


@dataclass
class MigrationConfig:
    endpoint: EndpointInfo
    stacks: StacksConfig
    monitor: MonitorConfig = field(default_factory=MonitorConfig)


def __get_section(config: dict, key: str, required: bool = True) -> dict:
    section = config.get(key)
    if section is None:
        if required:
            raise ValueError(f"Missing {key} configuration in migration config")
        return dict()
    if not isinstance(section, dict):
        raise ValueError(f"Invalid {key} configuration in migration config, expected a mapping")
    return section


def __is_number(value) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float))


# A zero or negative interval would poll the cluster in a tight loop
def check_poll_interval(value):
    if not __is_number(value) or value <= 0:
        raise ValueError(f"Invalid value for monitor setting {POLL_INTERVAL_KEY}: {value}")


# None means unbounded, otherwise at least one failed poll must be tolerated
def check_max_transient_failures(value):
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Invalid value for monitor setting {MAX_FAILURES_KEY}: {value}")


def check_timeout(value):
    if value is None:
        return
    if not __is_number(value) or value < 0:
        raise ValueError(f"Invalid value for monitor setting {TIMEOUT_KEY}: {value}")


def parse_stacks_config(stacks: dict) -> StacksConfig:
    index = stacks.get(INDEX_KEY)
    if not isinstance(index, str) or len(index) == 0:
        raise ValueError("No index name defined in stacks configuration")
    alias = stacks.get(ALIAS_KEY) or index
    query = stacks.get(QUERY_KEY)
    if query is not None and not isinstance(query, dict):
        raise ValueError("Invalid query in stacks configuration, expected a mapping")
    return StacksConfig(index, alias, query)


def parse_monitor_config(monitor: dict) -> MonitorConfig:
    result = MonitorConfig()
    if POLL_INTERVAL_KEY in monitor:
        check_poll_interval(monitor[POLL_INTERVAL_KEY])
        result.poll_interval_seconds = monitor[POLL_INTERVAL_KEY]
    if MAX_FAILURES_KEY in monitor:
        check_max_transient_failures(monitor[MAX_FAILURES_KEY])
        result.max_transient_failures = monitor[MAX_FAILURES_KEY]
    if TIMEOUT_KEY in monitor:
        check_timeout(monitor[TIMEOUT_KEY])
        result.timeout_seconds = monitor[TIMEOUT_KEY]
    return result


def parse_config(config: dict) -> MigrationConfig:
    if not isinstance(config, dict):
        raise ValueError("Migration config must be a mapping")
    # Raises a ValueError on invalid endpoint or auth configuration
    endpoint = endpoint_utils.get_endpoint_info(__get_section(config, CLUSTER_KEY))
    stacks = parse_stacks_config(__get_section(config, STACKS_KEY))
    monitor = parse_monitor_config(__get_section(config, MONITOR_KEY, required=False))
    return MigrationConfig(endpoint, stacks, monitor)


def load_config(config_file_path: str) -> MigrationConfig:
    with open(config_file_path, 'r') as config_file:
        return parse_config(yaml.safe_load(config_file))
