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

"""Acceptance-test harness: flatmap state view, attribute checks and the step runner."""

from .checks import (
    AcceptanceState,
    Check,
    check_destroyed,
    check_disappears,
    check_exists,
    check_no_resource_attr,
    check_resource_attr,
    check_resource_attr_regional_arn,
    check_type_set_elem_attr,
    check_type_set_elem_nested_attrs,
    compose_checks,
)
from .flatmap import to_flatmap
from .harness import AcceptanceCase, AcceptanceStep

__all__ = [
    "AcceptanceCase",
    "AcceptanceState",
    "AcceptanceStep",
    "Check",
    "check_destroyed",
    "check_disappears",
    "check_exists",
    "check_no_resource_attr",
    "check_resource_attr",
    "check_resource_attr_regional_arn",
    "check_type_set_elem_attr",
    "check_type_set_elem_nested_attrs",
    "compose_checks",
    "to_flatmap",
]
