#
# Copyright OpenSearch Contributors
# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
#

from typing import Optional

import requests

from endpoint_info import EndpointInfo
from exceptions import RequestError
from task_status import OperationRequest

# Constants
PROPERTIES_KEY = "properties"
TYPE_KEY = "type"
_MAPPING_PATH = "/_mapping"
_REFRESH_PATH = "_refresh"
_UPDATE_BY_QUERY_PATH = "/_update_by_query"
_TASKS_PATH = "_tasks/"
_WAIT_FOR_COMPLETION_PARAM = "wait_for_completion"
# Cap on how much of an error response body is carried into exception messages
_MAX_ERROR_BODY_LENGTH = 500


def _describe_response(resp: Optional[requests.Response]) -> str:
    if resp is None:
        return "no response"
    body = resp.text or ""
    if len(body) > _MAX_ERROR_BODY_LENGTH:
        body = body[:_MAX_ERROR_BODY_LENGTH] + "..."
    return f"status {resp.status_code}: {body}"


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


# Thin HTTP client for the handful of cluster APIs the migration needs.
# Every transport or HTTP failure is wrapped in a RequestError.
class DocumentStoreClient:
    __endpoint: EndpointInfo

    def __init__(self, endpoint: EndpointInfo):
        self.__endpoint = endpoint

    def get_endpoint(self) -> EndpointInfo:
        return self.__endpoint

    def __send_request(self, method: str, path: str, payload: Optional[dict] = None,
                       params: Optional[dict] = None) -> dict:
        url = self.__endpoint.add_path(path)
        try:
            resp = requests.request(method, url, json=payload, params=params, **self.__endpoint.request_kwargs())
            resp.raise_for_status()
        except requests.ConnectionError as e:
            raise RequestError(f"ConnectionError on {method} request to cluster endpoint: {url}") from e
        except requests.HTTPError as e:
            raise RequestError(f"HTTPError on {method} request to cluster endpoint: {url} - "
                               f"{_describe_response(e.response)}") from e
        except requests.Timeout as e:
            raise RequestError(f"Timed out on {method} request to cluster endpoint: {url}") from e
        except requests.exceptions.RequestException as e:
            raise RequestError(f"{method} request failure to cluster endpoint: {url} - {e!s}") from e
        try:
            return resp.json()
        except ValueError as e:
            raise RequestError(f"Invalid JSON in response to {method} request: {url} - "
                               f"{_describe_response(resp)}") from e

    def get_mapping(self, index: str) -> dict:
        return self.__send_request("GET", index + _MAPPING_PATH)

    def update_mapping(self, index: str, field_specs: dict[str, str]) -> dict:
        properties = dict()
        for name, field_type in field_specs.items():
            properties[name] = {TYPE_KEY: field_type}
        return self.__send_request("PUT", index + _MAPPING_PATH, {PROPERTIES_KEY: properties})

    def refresh_all(self) -> dict:
        return self.__send_request("POST", _REFRESH_PATH)

    def submit_scripted_update(self, request: OperationRequest) -> dict:
        params = {_WAIT_FOR_COMPLETION_PARAM: _bool_param(request.synchronous)}
        return self.__send_request("POST", request.index + _UPDATE_BY_QUERY_PATH, request.to_request_body(), params)

    def get_task_status(self, task_id: str) -> dict:
        # Never block server-side, the monitor controls the polling interval
        params = {_WAIT_FOR_COMPLETION_PARAM: _bool_param(False)}
        return self.__send_request("GET", _TASKS_PATH + task_id, params=params)
