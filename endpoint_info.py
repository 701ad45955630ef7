#
# Copyright OpenSearch Contributors
# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
#

from typing import Union

from requests_aws4auth import AWS4Auth

DEFAULT_TIMEOUT_SECONDS: int = 10


# Connection details for the OpenSearch/Elasticsearch cluster that holds the stacks index
class EndpointInfo:
    # Private member variables
    __url: str
    # "|" operator is only supported in 3.10+
    __auth: Union[AWS4Auth, tuple, None]
    __verify_ssl: bool
    __timeout_seconds: int

    def __init__(self, url: str, auth: Union[AWS4Auth, tuple, None] = None, verify_ssl: bool = True,
                 timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS):
        # Paths are always appended to a trailing slash
        self.__url = url if url.endswith("/") else url + "/"
        self.__auth = auth
        self.__verify_ssl = verify_ssl
        self.__timeout_seconds = timeout_seconds

    def __eq__(self, obj):
        return isinstance(obj, EndpointInfo) and \
            self.__url == obj.__url and \
            self.__auth == obj.__auth and \
            self.__verify_ssl == obj.__verify_ssl and \
            self.__timeout_seconds == obj.__timeout_seconds

    def __repr__(self) -> str:
        # Never print credentials
        return f"EndpointInfo(url={self.__url}, verify_ssl={self.__verify_ssl})"

    def add_path(self, path: str) -> str:
        return self.__url + path.lstrip("/")

    def get_url(self) -> str:
        return self.__url

    def get_auth(self) -> Union[AWS4Auth, tuple, None]:
        return self.__auth

    def is_verify_ssl(self) -> bool:
        return self.__verify_ssl

    def get_timeout(self) -> int:
        return self.__timeout_seconds

    # Keyword arguments shared by every request sent to this endpoint
    def request_kwargs(self) -> dict:
        return {"auth": self.__auth, "verify": self.__verify_ssl, "timeout": self.__timeout_seconds}
