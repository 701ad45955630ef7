#
# Copyright OpenSearch Contributors
# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
#

import re
from typing import Optional, Union

from botocore.session import Session
from requests_aws4auth import AWS4Auth

from endpoint_info import DEFAULT_TIMEOUT_SECONDS, EndpointInfo

# Constants
HOSTS_KEY = "hosts"
INSECURE_KEY = "insecure"
DISABLE_AUTH_KEY = "disable_authentication"
USER_KEY = "username"
PWD_KEY = "password"
AWS_SIGV4_KEY = "aws_sigv4"
AWS_REGION_KEY = "aws_region"
SERVERLESS_KEY = "serverless"
TIMEOUT_KEY = "timeout_seconds"
ES_SERVICE_NAME = "es"
AOSS_SERVICE_NAME = "aoss"
URL_REGION_PATTERN = re.compile(r"([\w-]*)\.(es|aoss)\.amazonaws\.com")


def get_url(cluster_config: dict) -> str:
    if HOSTS_KEY not in cluster_config:
        raise ValueError("No hosts defined in cluster configuration")
    hosts = cluster_config[HOSTS_KEY]
    # Only one reachable host is needed, so the first entry of a list is used
    if isinstance(hosts, list):
        if len(hosts) == 0:
            raise ValueError("Empty hosts list in cluster configuration")
        return hosts[0]
    return hosts


# Attempts to extract the AWS region from a URL of the form *.<region>.<service>.amazonaws.com
def derive_aws_region_from_url(url: str) -> Optional[str]:
    match = URL_REGION_PATTERN.search(url)
    if match:
        return match.group(1)
    return None


def get_aws_region(cluster_config: dict) -> str:
    if cluster_config.get(AWS_REGION_KEY) is not None:
        return cluster_config[AWS_REGION_KEY]
    derived_region = derive_aws_region_from_url(get_url(cluster_config))
    if derived_region is None:
        raise ValueError("No region configured for AWS SigV4 auth, or derivable from host URL")
    return derived_region


def is_sigv4(cluster_config: dict) -> bool:
    return bool(cluster_config.get(AWS_SIGV4_KEY, False))


def validate_auth(cluster_config: dict):
    if cluster_config.get(DISABLE_AUTH_KEY, False):
        return
    if is_sigv4(cluster_config):
        # Raises a ValueError if the region cannot be determined
        get_aws_region(cluster_config)
    elif USER_KEY in cluster_config and PWD_KEY not in cluster_config:
        raise ValueError("Invalid auth configuration (no password for username)")
    elif PWD_KEY in cluster_config and USER_KEY not in cluster_config:
        raise ValueError("Invalid auth configuration (no username for password)")


def get_aws_sigv4_auth(region: str, is_serverless: bool = False) -> AWS4Auth:
    credentials = Session().get_credentials()
    if not credentials:
        raise ValueError("Unable to fetch AWS session credentials for SigV4 auth")
    service = AOSS_SERVICE_NAME if is_serverless else ES_SERVICE_NAME
    return AWS4Auth(region=region, service=service, refreshable_credentials=credentials)


def get_auth(cluster_config: dict) -> Union[AWS4Auth, tuple, None]:
    if cluster_config.get(DISABLE_AUTH_KEY, False):
        return None
    if USER_KEY in cluster_config and PWD_KEY in cluster_config:
        return cluster_config[USER_KEY], cluster_config[PWD_KEY]
    if is_sigv4(cluster_config):
        return get_aws_sigv4_auth(get_aws_region(cluster_config), cluster_config.get(SERVERLESS_KEY, False))
    return None


def get_endpoint_info(cluster_config: dict) -> EndpointInfo:
    if not isinstance(cluster_config, dict):
        raise ValueError("Cluster configuration must be a mapping")
    url = get_url(cluster_config)
    # Raises a ValueError if there is an error in the auth configuration
    validate_auth(cluster_config)
    timeout = cluster_config.get(TIMEOUT_KEY, DEFAULT_TIMEOUT_SECONDS)
    # verify boolean is the inverse of the insecure flag
    return EndpointInfo(url, get_auth(cluster_config), not cluster_config.get(INSECURE_KEY, False), timeout)
