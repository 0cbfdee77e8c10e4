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

"""Constants for the Network Firewall Rule Group MCP Server."""

import re
from enum import Enum
from typing import Final

# Default AWS Region
DEFAULT_AWS_REGION: Final[str] = "us-east-1"

# Default Log Level
DEFAULT_LOG_LEVEL: Final[str] = "WARNING"

# MCP Server Description
MCP_SERVER_DESCRIPTION: Final[str] = (
    "AWS Network Firewall Rule Group MCP Server - Declarative management, "
    "drift detection and import of Network Firewall rule groups."
)

# Resource type handled by the configuration engine
RESOURCE_TYPE: Final[str] = "aws_networkfirewall_rule_group"

# boto3 service name
NETWORK_FIREWALL_SERVICE: Final[str] = "network-firewall"

# Lifecycle defaults
DEFAULT_DELETE_TIMEOUT_SECONDS: Final[int] = 600
DEFAULT_POLL_INTERVAL_SECONDS: Final[float] = 5.0
DEFAULT_LIST_PAGE_SIZE: Final[int] = 100

# Cache Configuration
CACHE_MAX_SIZE: Final[int] = 128

# Schema limits
MIN_CAPACITY: Final[int] = 1
MAX_CAPACITY: Final[int] = 30000
MAX_NAME_LENGTH: Final[int] = 128
MAX_DESCRIPTION_LENGTH: Final[int] = 512
MIN_STATELESS_PRIORITY: Final[int] = 1
MAX_STATELESS_PRIORITY: Final[int] = 65535
MAX_VARIABLE_KEY_LENGTH: Final[int] = 32

RULE_GROUP_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9-]+$")
RULE_VARIABLE_KEY_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
CUSTOM_ACTION_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")
AWS_REGION_PATTERN = re.compile(r"^[a-z]{2,3}(-gov)?-[a-z]+-\d+$")
RULE_GROUP_ARN_PATTERN = re.compile(
    r"^arn:aws[a-z-]*:network-firewall:[a-z0-9-]+:\d{12}:(stateful|stateless)-rulegroup/[a-zA-Z0-9-]+$"
)


class RuleGroupType(str, Enum):
    """Rule group types."""

    STATEFUL = "STATEFUL"
    STATELESS = "STATELESS"


class GeneratedRulesType(str, Enum):
    ALLOWLIST = "ALLOWLIST"
    DENYLIST = "DENYLIST"


class TargetType(str, Enum):
    TLS_SNI = "TLS_SNI"
    HTTP_HOST = "HTTP_HOST"


class StatefulAction(str, Enum):
    PASS = "PASS"
    DROP = "DROP"
    ALERT = "ALERT"


class StatefulRuleDirection(str, Enum):
    ANY = "ANY"
    FORWARD = "FORWARD"


class StatefulRuleProtocol(str, Enum):
    """Protocols accepted in a stateful rule header."""

    IP = "IP"
    TCP = "TCP"
    UDP = "UDP"
    ICMP = "ICMP"
    HTTP = "HTTP"
    FTP = "FTP"
    TLS = "TLS"
    SMB = "SMB"
    DNS = "DNS"
    DCERPC = "DCERPC"
    SSH = "SSH"
    SMTP = "SMTP"
    IMAP = "IMAP"
    MSN = "MSN"
    KRB5 = "KRB5"
    IKEV2 = "IKEV2"
    TFTP = "TFTP"
    NTP = "NTP"
    DHCP = "DHCP"


class RuleOrder(str, Enum):
    DEFAULT_ACTION_ORDER = "DEFAULT_ACTION_ORDER"
    STRICT_ORDER = "STRICT_ORDER"


class TCPFlag(str, Enum):
    FIN = "FIN"
    SYN = "SYN"
    RST = "RST"
    PSH = "PSH"
    ACK = "ACK"
    URG = "URG"
    ECE = "ECE"
    CWR = "CWR"


class RuleGroupStatus(str, Enum):
    ACTIVE = "ACTIVE"
    DELETING = "DELETING"


# Stateless actions provided by the service; anything else must be a custom action
STATELESS_STANDARD_ACTIONS: Final[frozenset] = frozenset({"aws:pass", "aws:drop", "aws:forward_to_sfe"})


class ErrorCode(Enum):
    """Error codes for the Rule Group MCP Server."""

    AWS_ERROR = "AWS_SERVICE_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    CONFIGURATION_PARSE_ERROR = "CONFIGURATION_PARSE_ERROR"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    INVALID_TOKEN = "INVALID_TOKEN"
    AWS_THROTTLING_ERROR = "AWS_THROTTLING_ERROR"
    AWS_ACCESS_DENIED = "AWS_ACCESS_DENIED"
    TIMEOUT = "TIMEOUT"
    SWEEP_FAILED = "SWEEP_FAILED"
    CHECK_FAILED = "CHECK_FAILED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# botocore error codes and the ErrorCode each one maps onto
AWS_ERROR_CODE_MAP: Final[dict] = {
    "ResourceNotFoundException": ErrorCode.RESOURCE_NOT_FOUND,
    "InvalidRequestException": ErrorCode.INVALID_INPUT,
    "InvalidTokenException": ErrorCode.INVALID_TOKEN,
    "ThrottlingException": ErrorCode.AWS_THROTTLING_ERROR,
    "AccessDeniedException": ErrorCode.AWS_ACCESS_DENIED,
    "UnrecognizedClientException": ErrorCode.AWS_ACCESS_DENIED,
}

# Error codes that mean the sweeper should skip the region rather than fail
SWEEP_SKIP_ERROR_CODES: Final[frozenset] = frozenset(
    {"AccessDeniedException", "UnrecognizedClientException", "UnsupportedOperationException", "InvalidClientTokenId"}
)

# Sanitization patterns for error messages
SANITIZATION_PATTERNS = [
    # AWS access keys
    (re.compile(r"AKIA[0-9A-Z]{16}"), "[ACCESS_KEY_REDACTED]"),
    # AWS secret keys (40 char base64-like strings)
    (re.compile(r"[A-Za-z0-9/+=]{40}"), "[SECRET_KEY_REDACTED]"),
    # ARNs
    (re.compile(r"arn:aws:[^:]+:[^:]*:[^:]*:[^:\s]+"), "[ARN_REDACTED]"),
]


def sanitize_error_message(message: str) -> str:
    """Sanitize error messages to remove sensitive information."""
    if len(message) > 10000:
        return "[TRUNCATED_FOR_SECURITY]"

    sanitized = message
    for pattern, replacement in SANITIZATION_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)

    return sanitized
