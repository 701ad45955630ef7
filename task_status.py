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

import jsonpath_ng

# Constants
SCRIPT_KEY = "script"
SOURCE_KEY = "source"
LANG_KEY = "lang"
QUERY_KEY = "query"
COMPLETED_KEY = "completed"
ERROR_KEY = "error"
PAINLESS_LANG = "painless"
# Truncate raw response bodies when they are used as a diagnostic
_MAX_DIAGNOSTIC_LENGTH = 1000
_UPDATED_JSONPATH = jsonpath_ng.parse("$.task.status.updated")
_TOTAL_JSONPATH = jsonpath_ng.parse("$.task.status.total")
_RUNNING_TIME_JSONPATH = jsonpath_ng.parse("$.task.running_time_in_nanos")
_FAILURES_JSONPATH = jsonpath_ng.parse("$.response.failures")


def _find_value(expr, data: dict):
    matches = expr.find(data)
    if matches:
        return matches[0].value
    return None


def _find_int(expr, data: dict) -> Optional[int]:
    value = _find_value(expr, data)
    # bool is a subclass of int, but never a valid count
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _to_diagnostic(body) -> str:
    diagnostic = str(body)
    if len(diagnostic) > _MAX_DIAGNOSTIC_LENGTH:
        diagnostic = diagnostic[:_MAX_DIAGNOSTIC_LENGTH] + "..."
    return diagnostic


# A scripted bulk update against a set of documents. Immutable once built.
@dataclass(frozen=True)
class OperationRequest:
    index: str
    script_source: str
    query: Optional[dict] = None
    script_lang: str = PAINLESS_LANG
    synchronous: bool = False

    def to_request_body(self) -> dict:
        body = {SCRIPT_KEY: {SOURCE_KEY: self.script_source, LANG_KEY: self.script_lang}}
        if self.query:
            body[QUERY_KEY] = self.query
        return body


# Opaque reference to the server-side task ("<node>:<id>")
@dataclass(frozen=True)
class TaskHandle:
    task_id: str

    def __str__(self) -> str:
        return self.task_id


# Snapshot of a single status poll. A new instance is built for every poll.
@dataclass(frozen=True)
class TaskStatus:
    completed: bool
    valid: bool
    updated_count: Optional[int] = None
    total_count: Optional[int] = None
    elapsed_nanos: Optional[int] = None
    diagnostic: Optional[str] = None
    failures: list = field(default_factory=list)
    error: Optional[dict] = None

    @classmethod
    def invalid(cls, diagnostic: str):
        # An invalid snapshot must never read as completed
        return cls(completed=False, valid=False, diagnostic=diagnostic)

    @classmethod
    def from_response(cls, body):
        """
        Builds a snapshot from the body returned by GET _tasks/<task_id>.
        Bodies that are not JSON objects, or that carry no boolean "completed" flag,
        produce an invalid snapshot with the raw body as the diagnostic.
        """
        if not isinstance(body, dict):
            return cls.invalid("Unexpected task response: " + _to_diagnostic(body))
        completed = body.get(COMPLETED_KEY)
        if not isinstance(completed, bool):
            return cls.invalid("Task response has no completion flag: " + _to_diagnostic(body))
        failures = _find_value(_FAILURES_JSONPATH, body)
        error = body.get(ERROR_KEY)
        return cls(completed=completed, valid=True,
                   updated_count=_find_int(_UPDATED_JSONPATH, body),
                   total_count=_find_int(_TOTAL_JSONPATH, body),
                   elapsed_nanos=_find_int(_RUNNING_TIME_JSONPATH, body),
                   failures=failures if isinstance(failures, list) else [],
                   error=error if isinstance(error, dict) else None)

    def has_failures(self) -> bool:
        return self.error is not None or len(self.failures) > 0


@dataclass(frozen=True)
class MigrationOutcome:
    updated_count: int
    total_count: Optional[int] = None
    task_id: Optional[str] = None
    elapsed_seconds: int = 0
