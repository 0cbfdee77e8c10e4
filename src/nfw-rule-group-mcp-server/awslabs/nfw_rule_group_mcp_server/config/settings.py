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

"""Settings for the Network Firewall Rule Group MCP server."""

from typing import Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..consts import (
    DEFAULT_AWS_REGION,
    DEFAULT_DELETE_TIMEOUT_SECONDS,
    DEFAULT_LIST_PAGE_SIZE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_POLL_INTERVAL_SECONDS,
)


class RuleGroupSettings(BaseSettings):
    """AWS and lifecycle settings, read from ``NFW_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="NFW_",
        case_sensitive=False,
    )

    aws_profile: Optional[str] = Field(default=None)
    default_region: str = Field(default=DEFAULT_AWS_REGION)
    log_level: str = Field(default=DEFAULT_LOG_LEVEL)
    delete_timeout_seconds: int = Field(default=DEFAULT_DELETE_TIMEOUT_SECONDS, ge=0)
    poll_interval_seconds: float = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, ge=0)
    list_page_size: int = Field(default=DEFAULT_LIST_PAGE_SIZE, ge=1, le=100)
    # Provider-level tags merged under every resource's own tags
    default_tags: Dict[str, str] = Field(default_factory=dict)


def get_settings() -> RuleGroupSettings:
    """Get global settings instance."""
    if not hasattr(get_settings, "_instance"):
        get_settings._instance = RuleGroupSettings()
    return get_settings._instance


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    if hasattr(get_settings, "_instance"):
        del get_settings._instance
