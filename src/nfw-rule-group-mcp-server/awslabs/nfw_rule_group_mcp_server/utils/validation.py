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

# utils/validation.py
import ipaddress
import re

from ..consts import (
    AWS_REGION_PATTERN,
    MAX_NAME_LENGTH,
    RULE_GROUP_ARN_PATTERN,
    RULE_GROUP_NAME_PATTERN,
)

_VARIABLE_PATTERN = re.compile(r"^\$[A-Za-z][A-Za-z0-9_]*$")
_PORT_RANGE_PATTERN = re.compile(r"^(\d{1,5}):(\d{1,5})$")


def validate_aws_region(region: str) -> bool:
    """Validate AWS region format."""
    return bool(region) and bool(AWS_REGION_PATTERN.match(region))


def validate_rule_group_arn(arn: str) -> bool:
    """Validate Network Firewall rule group ARN format."""
    return bool(arn) and bool(RULE_GROUP_ARN_PATTERN.match(arn))


def validate_rule_group_name(name: str) -> bool:
    return 0 < len(name) <= MAX_NAME_LENGTH and bool(RULE_GROUP_NAME_PATTERN.match(name))


def validate_cidr_block(cidr: str) -> bool:
    """Validate CIDR block format."""
    try:
        ipaddress.ip_network(cidr, strict=False)
        return "/" in cidr
    except ValueError:
        return False


def validate_port(port: int) -> bool:
    return 0 <= port <= 65535


def validate_header_address(value: str) -> bool:
    """Validate a stateful rule header address: ANY, a CIDR, an IP or a $VARIABLE."""
    if value.upper() == "ANY" or _VARIABLE_PATTERN.match(value):
        return True
    try:
        ipaddress.ip_network(value, strict=False)
        return True
    except ValueError:
        return False


def validate_header_port(value: str) -> bool:
    """Validate a stateful rule header port: ANY, a port, a from:to range or a $VARIABLE."""
    if value.upper() == "ANY" or _VARIABLE_PATTERN.match(value):
        return True
    if value.isdigit():
        return validate_port(int(value))
    match = _PORT_RANGE_PATTERN.match(value)
    if match:
        low, high = int(match.group(1)), int(match.group(2))
        return validate_port(low) and validate_port(high) and low <= high
    return False


def validate_port_set_entry(value: str) -> bool:
    """Validate a port set definition entry (a port or a from:to range)."""
    return value.upper() != "ANY" and not _VARIABLE_PATTERN.match(value) and validate_header_port(value)
