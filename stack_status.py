#
# Copyright OpenSearch Contributors
# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
#

from enum import Enum

# Legacy boolean flags on stack documents
IS_REGRESSED_FLAG = "is_regressed"
IS_HIDDEN_FLAG = "is_hidden"
DISABLE_NOTIFICATIONS_FLAG = "disable_notifications"
IS_FIXED_FLAG = "is_fixed"
# Fields added to the stacks mapping
STATUS_FIELD = "status"
SNOOZE_UNTIL_FIELD = "snooze_until_utc"
STATUS_FIELD_SPECS = {STATUS_FIELD: "keyword", SNOOZE_UNTIL_FIELD: "date"}


class StackStatus(str, Enum):
    OPEN = "open"
    FIXED = "fixed"
    REGRESSED = "regressed"
    SNOOZED = "snoozed"
    IGNORED = "ignored"
    DISCARDED = "discarded"


# Painless script applied by update-by-query. Flags are compared with "== true", so a missing flag counts as false.
STATUS_SCRIPT = (
    "if (ctx._source.is_regressed == true) { ctx._source.status = 'regressed'; } "
    "else if (ctx._source.is_hidden == true) { ctx._source.status = 'ignored'; } "
    "else if (ctx._source.disable_notifications == true) { ctx._source.status = 'ignored'; } "
    "else if (ctx._source.is_fixed == true) { ctx._source.status = 'fixed'; } "
    "else { ctx._source.status = 'open'; }"
)

# Same rule as STATUS_SCRIPT, first matching flag wins
STATUS_PRECEDENCE = [
    (IS_REGRESSED_FLAG, StackStatus.REGRESSED),
    (IS_HIDDEN_FLAG, StackStatus.IGNORED),
    (DISABLE_NOTIFICATIONS_FLAG, StackStatus.IGNORED),
    (IS_FIXED_FLAG, StackStatus.FIXED),
]


def derive_status(source: dict) -> StackStatus:
    for flag, status in STATUS_PRECEDENCE:
        if source.get(flag) is True:
            return status
    return StackStatus.OPEN
