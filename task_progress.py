#
# Copyright OpenSearch Contributors
# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
#

import logging
import math
from typing import Optional

from task_status import TaskStatus


# Class that tracks the progress of a single server-side task across polls. The last-known values from valid
# snapshots are retained so that they can be reported when a later snapshot is invalid or incomplete. A counter of
# consecutive poll failures is also kept, and is reset by any valid snapshot.
class TaskProgress:

    # Private member variables
    __max_transient_failures: Optional[int]
    __updated_count: Optional[int]
    __total_count: Optional[int]
    __elapsed_nanos: Optional[int]
    __last_diagnostic: Optional[str]
    __seq_poll_failures: int
    __poll_count: int

    def __init__(self, max_transient_failures: Optional[int] = None):
        self.__max_transient_failures = max_transient_failures
        self.__updated_count = None
        self.__total_count = None
        self.__elapsed_nanos = None
        self.__last_diagnostic = None
        self.__seq_poll_failures = 0
        self.__poll_count = 0

    def record_status(self, status: TaskStatus):
        if not status.valid:
            self.record_poll_failure(status.diagnostic)
            return
        self.__poll_count += 1
        self.__seq_poll_failures = 0
        # Missing fields keep their last-known values
        if status.updated_count is not None:
            # The updated count never decreases
            if self.__updated_count is not None and status.updated_count < self.__updated_count:
                logging.warning(f"Ignoring updated count {status.updated_count}, lower than the last-known "
                                f"count {self.__updated_count}")
            else:
                self.__updated_count = status.updated_count
        if status.total_count is not None:
            self.__total_count = status.total_count
        if status.elapsed_nanos is not None:
            self.__elapsed_nanos = status.elapsed_nanos

    def record_poll_failure(self, diagnostic: Optional[str] = None):
        self.__poll_count += 1
        self.__seq_poll_failures += 1
        self.__last_diagnostic = diagnostic

    def get_updated_count(self) -> int:
        return self.__updated_count if self.__updated_count is not None else 0

    def get_total_count(self) -> Optional[int]:
        return self.__total_count

    def get_elapsed_seconds(self) -> int:
        if self.__elapsed_nanos is None:
            return 0
        return self.__elapsed_nanos // 1_000_000_000

    def get_last_diagnostic(self) -> Optional[str]:
        return self.__last_diagnostic

    def get_poll_count(self) -> int:
        return self.__poll_count

    def get_sequential_failures(self) -> int:
        return self.__seq_poll_failures

    def get_completion_percentage(self) -> Optional[int]:
        if not self.__total_count:
            return None
        return math.floor((self.get_updated_count() * 100) / self.__total_count)

    def is_too_many_failures(self) -> bool:
        if self.__max_transient_failures is None:
            return False
        # A healthy poll never counts against the limit
        return self.__seq_poll_failures > 0 and self.__seq_poll_failures >= self.__max_transient_failures

    def describe(self) -> str:
        total = "?" if self.__total_count is None else f"{self.__total_count:,}"
        description = f"RunningTimeInSeconds={self.get_elapsed_seconds()} " + \
                      f"Updated={self.get_updated_count():,} Total={total}"
        percentage = self.get_completion_percentage()
        if percentage is not None:
            description += f" ({percentage}%)"
        return description
