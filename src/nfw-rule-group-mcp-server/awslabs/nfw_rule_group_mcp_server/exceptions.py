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

"""Exceptions raised by the rule group manager and configuration engine."""

from typing import List, Optional

from botocore.exceptions import ClientError

from .consts import AWS_ERROR_CODE_MAP, ErrorCode


class RuleGroupError(Exception):
    """Base exception for rule group management errors.

    Every subclass carries an ``ErrorCode`` so tool responses can report a
    stable code alongside the sanitized message.
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR

    def __init__(self, message: str, error_code: Optional[ErrorCode] = None, aws_code: Optional[str] = None):
        super().__init__(message)
        if error_code is not None:
            self.error_code = error_code
        self.aws_code = aws_code


class RuleGroupNotFoundError(RuleGroupError):
    """The rule group does not exist (or no longer exists)."""

    error_code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(self, rule_group_arn: str):
        self.rule_group_arn = rule_group_arn
        super().__init__(f"NetworkFirewall Rule Group ({rule_group_arn}) not found")


class RuleGroupValidationError(RuleGroupError):
    """Desired configuration failed schema validation."""

    error_code = ErrorCode.INVALID_INPUT


class ConfigurationParseError(RuleGroupError):
    """Configuration text could not be parsed."""

    error_code = ErrorCode.CONFIGURATION_PARSE_ERROR

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        if line is not None:
            message = f"line {line}, column {column}: {message}"
        super().__init__(message)


class RuleGroupTimeoutError(RuleGroupError):
    """A lifecycle wait did not complete in time."""

    error_code = ErrorCode.TIMEOUT


class SweepError(RuleGroupError):
    """One or more rule groups could not be swept."""

    error_code = ErrorCode.SWEEP_FAILED

    def __init__(self, errors: List[Exception]):
        self.errors = errors
        details = "; ".join(str(e) for e in errors)
        super().__init__(f"{len(errors)} error(s) sweeping NetworkFirewall Rule Groups: {details}")


class AcceptanceCheckError(RuleGroupError):
    """An acceptance step or attribute check failed."""

    error_code = ErrorCode.CHECK_FAILED


def aws_error_code(error: Exception) -> Optional[str]:
    """Return the botocore error code of ``error`` or None."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


def is_not_found(error: Exception) -> bool:
    return aws_error_code(error) == "ResourceNotFoundException"


def from_client_error(error: ClientError, operation: str) -> RuleGroupError:
    """Translate a botocore ClientError into a RuleGroupError."""
    code = aws_error_code(error) or "Unknown"
    message = error.response.get("Error", {}).get("Message", str(error))
    return RuleGroupError(
        f"{operation} failed ({code}): {message}", AWS_ERROR_CODE_MAP.get(code, ErrorCode.AWS_ERROR), aws_code=code
    )
