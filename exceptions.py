#
# Copyright OpenSearch Contributors
# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
#

from typing import Optional


# Transport or HTTP failure while talking to the cluster
class RequestError(RuntimeError):
    def __init__(self, message=None):
        super().__init__(message)


# The index mapping could not be extended (or refreshed). No documents have been touched.
class MappingUpdateError(RuntimeError):
    def __init__(self, message=None):
        super().__init__(message)


# The cluster rejected the update-by-query request, so there is no task to monitor
class SubmissionError(RuntimeError):
    def __init__(self, message=None):
        super().__init__(message)


# A single status poll failed. The server-side task keeps running, so this is recorded and polling continues.
class TransientPollError(RuntimeError):
    def __init__(self, message=None):
        super().__init__(message)


# Base class for errors raised after a task was accepted. These carry the last-known updated count.
class TaskMonitorError(RuntimeError):
    updated_count: int
    task_id: Optional[str]

    def __init__(self, message=None, updated_count: int = 0, task_id: Optional[str] = None):
        super().__init__(message)
        self.updated_count = updated_count
        self.task_id = task_id


# The task completed, but the cluster recorded an error or per-document failures for it
class TaskReportedFailure(TaskMonitorError):
    pass


# Too many consecutive poll failures, or the monitor deadline passed. The server-side task is NOT cancelled.
class TaskMonitorTimeoutError(TaskMonitorError):
    pass


# The caller asked the monitor to stop waiting. The server-side task is NOT cancelled.
class TaskMonitorCancelledError(TaskMonitorError):
    pass
