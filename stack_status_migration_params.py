#
# Copyright OpenSearch Contributors
# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
#

from dataclasses import dataclass
from typing import Optional


# Command-line values override the corresponding "monitor" settings from the config file
@dataclass
class StackStatusMigrationParams:
    config_file_path: str
    dryrun: bool = False
    poll_interval_seconds: Optional[float] = None
    max_transient_failures: Optional[int] = None
    timeout_seconds: Optional[float] = None
