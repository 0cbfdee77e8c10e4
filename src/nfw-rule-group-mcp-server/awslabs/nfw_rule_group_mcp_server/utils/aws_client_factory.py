# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Cached boto3 client construction."""

import threading
from functools import lru_cache
from typing import Any, Optional

import boto3
from botocore.config import Config

from ..config.settings import get_settings
from ..consts import CACHE_MAX_SIZE, NETWORK_FIREWALL_SERVICE

_client_lock = threading.Lock()


@lru_cache(maxsize=CACHE_MAX_SIZE)
def get_aws_client(service_name: str, region: Optional[str] = None, profile: Optional[str] = None):
    """Get cached AWS client with proper configuration."""
    with _client_lock:
        config = Config(retries={"max_attempts": 3, "mode": "standard"}, read_timeout=30, connect_timeout=10)

        settings = get_settings()
        region = region or settings.default_region
        profile = profile or settings.aws_profile

        if profile:
            session = boto3.Session(profile_name=profile)
            return session.client(service_name, region_name=region, config=config)

        return boto3.client(service_name, region_name=region, config=config)


def clear_client_cache():
    """Clear the client cache for testing purposes."""
    get_aws_client.cache_clear()


def create_network_firewall_client(region: Optional[str] = None, profile: Optional[str] = None) -> Any:
    """Create Network Firewall client with proper config."""
    return get_aws_client(NETWORK_FIREWALL_SERVICE, region, profile)
