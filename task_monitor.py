#
# Copyright OpenSearch Contributors
# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
#

import dataclasses
import logging
import threading
import time
from typing import Optional

from document_store import DocumentStoreClient
from exceptions import RequestError, SubmissionError, TaskMonitorCancelledError, TaskMonitorTimeoutError, \
    TaskReportedFailure, TransientPollError
from task_progress import TaskProgress
from task_status import MigrationOutcome, OperationRequest, TaskHandle, TaskStatus

# Constants
TASK_KEY = "task"
DEFAULT_POLL_INTERVAL_SECONDS: float = 5
# At the default interval this tolerates roughly five minutes of an unreachable cluster
DEFAULT_MAX_TRANSIENT_FAILURES: int = 60


# Drives one asynchronous update-by-query task from submission to completion. The server-side task runs
# independently of this monitor: polling failures are tolerated, and giving up on the task never cancels it.
class AsyncTaskMonitor:
    # Private member variables
    __client: DocumentStoreClient
    __poll_interval_seconds: float
    __max_transient_failures: Optional[int]
    __timeout_seconds: Optional[float]
    __stop_event: threading.Event

    def __init__(self, client: DocumentStoreClient, poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
                 max_transient_failures: Optional[int] = DEFAULT_MAX_TRANSIENT_FAILURES,
                 timeout_seconds: Optional[float] = None, stop_event: Optional[threading.Event] = None):
        self.__client = client
        self.__poll_interval_seconds = poll_interval_seconds
        self.__max_transient_failures = max_transient_failures
        self.__timeout_seconds = timeout_seconds
        self.__stop_event = stop_event if stop_event is not None else threading.Event()

    def stop(self):
        """Stops waiting on the current task. The server-side task keeps running."""
        self.__stop_event.set()

    def submit(self, request: OperationRequest) -> TaskHandle:
        # Always run asynchronously so that the cluster returns a task ID immediately
        if request.synchronous:
            request = dataclasses.replace(request, synchronous=False)
        try:
            resp = self.__client.submit_scripted_update(request)
        except RequestError as e:
            raise SubmissionError(f"Update by query request was rejected for index: {request.index}") from e
        task_id = resp.get(TASK_KEY) if isinstance(resp, dict) else None
        if not task_id:
            raise SubmissionError(f"Update by query response for index {request.index} has no task: {resp}")
        logging.info(f"Update by query accepted for index {request.index}: Task={task_id}")
        return TaskHandle(str(task_id))

    def poll(self, handle: TaskHandle) -> TaskStatus:
        """
        Fetches a single status snapshot for the task.
        Raises a TransientPollError if the request fails or the snapshot is not well-formed.
        """
        try:
            body = self.__client.get_task_status(handle.task_id)
        except RequestError as e:
            raise TransientPollError(f"{e!s} ({e.__cause__!r})") from e
        status = TaskStatus.from_response(body)
        if not status.valid:
            raise TransientPollError(status.diagnostic)
        return status

    def check_and_log_progress(self, handle: TaskHandle, progress: TaskProgress,
                               description: str = "") -> Optional[TaskStatus]:
        # Returns None if the poll failed. Exactly one line is logged per poll.
        try:
            status = self.poll(handle)
        except TransientPollError as e:
            progress.record_poll_failure(str(e))
            logging.warning(f"Task response is invalid for {description}: {progress.describe()} "
                            f"Message={e!s} Task={handle} (will retry on next polling cycle)")
            return None
        progress.record_status(status)
        if status.completed:
            logging.info(f"Task completed for {description}: {progress.describe()} "
                         f"Polls={progress.get_poll_count()} Task={handle}")
        else:
            logging.info(f"Task not completed yet for {description}: {progress.describe()} Task={handle}")
        return status

    def __check_bounds(self, handle: TaskHandle, progress: TaskProgress, start_time: float):
        if progress.is_too_many_failures():
            raise TaskMonitorTimeoutError(f"Unable to fetch status for task {handle} after "
                                          f"{progress.get_sequential_failures()} consecutive attempts, last error: "
                                          f"{progress.get_last_diagnostic()}",
                                          progress.get_updated_count(), handle.task_id)
        if self.__timeout_seconds is not None and time.monotonic() - start_time >= self.__timeout_seconds:
            raise TaskMonitorTimeoutError(f"Task {handle} did not complete within {self.__timeout_seconds} seconds",
                                          progress.get_updated_count(), handle.task_id)

    def __wait(self, handle: TaskHandle, progress: TaskProgress, interval: float, start_time: float):
        if self.__timeout_seconds is not None:
            remaining = self.__timeout_seconds - (time.monotonic() - start_time)
            interval = max(0.0, min(interval, remaining))
        if self.__stop_event.wait(interval):
            raise TaskMonitorCancelledError(f"Stopped waiting for task {handle}, the task may still be running",
                                            progress.get_updated_count(), handle.task_id)

    def await_completion(self, handle: TaskHandle, description: str = "",
                         poll_interval_seconds: Optional[float] = None) -> MigrationOutcome:
        """
        Polls the task until a valid snapshot reports completion, and returns the number of updated documents.
        Invalid snapshots and failed polls are logged and retried; they never end the loop by themselves.
        If the terminal snapshot has no updated count, the last count from a valid snapshot is used (else 0).

        Raises a TaskMonitorTimeoutError if the consecutive failure limit or the deadline is reached,
        a TaskMonitorCancelledError if stop() is called, and a TaskReportedFailure if the completed task
        carries errors.
        """
        interval = self.__poll_interval_seconds if poll_interval_seconds is None else poll_interval_seconds
        progress = TaskProgress(self.__max_transient_failures)
        start_time = time.monotonic()
        while True:
            status = self.check_and_log_progress(handle, progress, description)
            if status is not None and status.completed:
                break
            self.__check_bounds(handle, progress, start_time)
            self.__wait(handle, progress, interval, start_time)
        # Loop terminated on a valid, completed snapshot
        if status.has_failures():
            raise TaskReportedFailure(f"Task {handle} for {description} completed with errors: "
                                      f"error={status.error} failures={status.failures[:10]}",
                                      progress.get_updated_count(), handle.task_id)
        return MigrationOutcome(progress.get_updated_count(), progress.get_total_count(), handle.task_id,
                                progress.get_elapsed_seconds())

    def run(self, request: OperationRequest, description: str = "") -> MigrationOutcome:
        handle = self.submit(request)
        return self.await_completion(handle, description)
