#
# Copyright OpenSearch Contributors
# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
#

import logging

import jsonpath_ng

import utils
from document_store import DocumentStoreClient, TYPE_KEY
from exceptions import MappingUpdateError, RequestError

# Constants
ACKNOWLEDGED_KEY = "acknowledged"
# GET <index>/_mapping is keyed by concrete index name, even when queried through an alias
_PROPERTIES_JSONPATH = jsonpath_ng.parse("$.*.mappings.properties")


# Extends an index mapping with new fields, then refreshes all indices so that the new mapping is visible
# before any document is updated to reference it. Mapping changes are permanent.
class MappingUpdater:
    __client: DocumentStoreClient

    def __init__(self, client: DocumentStoreClient):
        self.__client = client

    def __fetch_properties(self, index: str) -> dict:
        try:
            mapping = self.__client.get_mapping(index)
        except RequestError as e:
            raise MappingUpdateError(f"Failed to fetch mapping for index: {index}") from e
        properties = dict()
        for match in _PROPERTIES_JSONPATH.find(mapping):
            if isinstance(match.value, dict):
                properties.update(match.value)
        return properties

    def missing_fields(self, index: str, field_specs: dict[str, str]) -> dict[str, str]:
        """
        Returns the subset of field_specs that is not yet part of the index mapping.
        Raises a MappingUpdateError if a field already exists with a different type,
        since the cluster would reject the mapping update anyway.
        """
        existing = self.__fetch_properties(index)
        missing = dict()
        for name, field_type in field_specs.items():
            if name not in existing:
                missing[name] = field_type
                continue
            # Only the type matters, other mapping parameters may differ
            current = {name: {TYPE_KEY: existing[name].get(TYPE_KEY)}}
            if utils.has_differences(name, {name: {TYPE_KEY: field_type}}, current):
                raise MappingUpdateError(f"Field [{name}] in index {index} already exists with type "
                                         f"[{current[name][TYPE_KEY]}], cannot change it to [{field_type}]")
        return missing

    def refresh(self):
        logging.info("Begin refreshing all indices")
        try:
            self.__client.refresh_all()
        except RequestError as e:
            raise MappingUpdateError("Failed to refresh indices after mapping update") from e
        logging.info("Done refreshing all indices")

    def update(self, index: str, field_specs: dict[str, str]) -> dict[str, str]:
        missing = self.missing_fields(index, field_specs)
        if missing:
            logging.info(f"Add {utils.string_from_names(missing.keys())} mappings to index: {index}")
            try:
                resp = self.__client.update_mapping(index, missing)
            except RequestError as e:
                raise MappingUpdateError(f"Failed to update mapping for index: {index}") from e
            if not isinstance(resp, dict) or resp.get(ACKNOWLEDGED_KEY) is not True:
                raise MappingUpdateError(f"Mapping update for index {index} was not acknowledged: {resp}")
            logging.info(f"Done adding mapping for {utils.string_from_names(missing.keys())}")
        else:
            logging.info(f"Index {index} already has mappings for {utils.string_from_names(field_specs.keys())}")
        self.refresh()
        return missing
