#
# Copyright OpenSearch Contributors
# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
#

from jsondiff import diff


# Utility method to make a comma-separated string from a collection of names.
# If the collection is empty, "[]" is returned for clarity.
def string_from_names(names) -> str:
    return "[" + ", ".join(sorted(names)) + "]"


# Utility method to compare the JSON contents of a key in two dicts.
# This method handles checking if the key exists in either dict.
def has_differences(key: str, dict1: dict, dict2: dict) -> bool:
    if key not in dict1 and key not in dict2:
        return False
    elif key in dict1 and key in dict2:
        return bool(diff(dict1[key], dict2[key]))
    else:
        return True


# Formats a duration as days.hours:minutes:seconds
def format_duration(seconds: float) -> str:
    total = int(seconds)
    days, remainder = divmod(total, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{days}.{hours:02d}:{minutes:02d}:{secs:02d}"
