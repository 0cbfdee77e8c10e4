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

"""Assertions over applied resource state.

Every ``check_*`` factory returns a ``Check``: a callable taking the
``AcceptanceState`` and raising ``AcceptanceCheckError`` when the assertion
does not hold.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..exceptions import AcceptanceCheckError, RuleGroupNotFoundError
from ..models.rule_group_models import RuleGroupResource
from ..resources.rule_group_manager import RuleGroupManager
from .flatmap import to_flatmap


@dataclass
class AcceptanceState:
    """Applied resources of an acceptance case, keyed by address."""

    manager: RuleGroupManager
    resources: Dict[str, RuleGroupResource] = field(default_factory=dict)
    # Every ARN the case has created, for destroy verification
    created_arns: List[str] = field(default_factory=list)

    @property
    def region(self) -> str:
        return self.manager.region

    def resource(self, address: str) -> RuleGroupResource:
        if address not in self.resources:
            raise AcceptanceCheckError(f"Not found: {address} in state")
        return self.resources[address]

    def flatmap(self, address: str) -> Dict[str, str]:
        return to_flatmap(self.resource(address))


Check = Callable[[AcceptanceState], None]


def _attribute_matches(flat: Dict[str, str], key: str, expected: str) -> bool:
    if key in flat:
        return flat[key] == expected
    # Absent counts and empty strings equal their zero value
    if key.endswith(".#") or key.endswith(".%"):
        return expected == "0"
    return expected == ""


def check_resource_attr(address: str, key: str, expected: str) -> Check:
    def check(state: AcceptanceState) -> None:
        flat = state.flatmap(address)
        if not _attribute_matches(flat, key, expected):
            got = flat.get(key, "<not set>")
            raise AcceptanceCheckError(f"{address}: Attribute '{key}' expected {expected!r}, got {got!r}")

    return check


def check_no_resource_attr(address: str, key: str) -> Check:
    def check(state: AcceptanceState) -> None:
        flat = state.flatmap(address)
        zero = "0" if key.endswith((".#", ".%")) else ""
        if flat.get(key, zero) != zero:
            raise AcceptanceCheckError(f"{address}: Attribute '{key}' found when not expected: {flat[key]!r}")

    return check


def _pattern(path: str, suffix: str = "$") -> "re.Pattern[str]":
    parts = [r"\d+" if part == "*" else re.escape(part) for part in path.split(".")]
    return re.compile("^(" + r"\.".join(parts) + ")" + suffix)


def check_type_set_elem_attr(address: str, path: str, expected: str) -> Check:
    """Some value of the set at ``path`` (``*`` marks set indexes) equals ``expected``."""
    pattern = _pattern(path)

    def check(state: AcceptanceState) -> None:
        flat = state.flatmap(address)
        for key, value in flat.items():
            if pattern.match(key) and value == expected:
                return
        raise AcceptanceCheckError(f"{address}: no TypeSet element {path!r}, with value {expected!r} in state")

    return check


def check_type_set_elem_nested_attrs(address: str, path: str, expected: Dict[str, str]) -> Check:
    """Some element of the set at ``path`` has every attribute in ``expected``.

    Keys of ``expected`` are relative to the element, for example
    ``{"action": "PASS", "header.#": "1"}``.
    """
    pattern = _pattern(path, suffix=r"\.")

    def check(state: AcceptanceState) -> None:
        flat = state.flatmap(address)
        elements = sorted({match.group(1) for match in map(pattern.match, flat) if match})
        for element in elements:
            if all(_attribute_matches(flat, f"{element}.{key}", value) for key, value in expected.items()):
                return
        raise AcceptanceCheckError(
            f"{address}: no TypeSet element {path!r} with attributes {expected!r} in state "
            f"(checked {len(elements)} element(s))"
        )

    return check


def check_resource_attr_regional_arn(address: str, key: str, service: str, resource: str) -> Check:
    """``key`` is an ARN of ``service`` in the state's region for ``resource``."""

    def check(state: AcceptanceState) -> None:
        value = state.flatmap(address).get(key, "")
        pattern = re.compile(
            rf"^arn:aws[a-z-]*:{re.escape(service)}:{re.escape(state.region)}:\d{{12}}:{re.escape(resource)}$"
        )
        if not pattern.match(value):
            raise AcceptanceCheckError(
                f"{address}: Attribute '{key}' expected an ARN for {service} {resource} in {state.region}, "
                f"got {value!r}"
            )

    return check


def check_exists(address: str) -> Check:
    def check(state: AcceptanceState) -> None:
        arn = state.resource(address).arn
        if not arn:
            raise AcceptanceCheckError(f"No NetworkFirewall Rule Group ARN is set for {address}")
        try:
            state.manager.find(arn)
        except RuleGroupNotFoundError as e:
            raise AcceptanceCheckError(str(e)) from e

    return check


def check_disappears(address: str) -> Check:
    """Delete the resource behind the service's back."""

    def check(state: AcceptanceState) -> None:
        state.manager.delete(state.resource(address).arn)

    return check


def check_destroyed(state: AcceptanceState) -> None:
    """Every rule group the case created is gone."""
    for arn in state.created_arns:
        try:
            state.manager.find(arn)
        except RuleGroupNotFoundError:
            continue
        raise AcceptanceCheckError(f"NetworkFirewall Rule Group {arn} still exists")


def compose_checks(*checks: Optional[Check]) -> Check:
    def check(state: AcceptanceState) -> None:
        for index, item in enumerate(c for c in checks if c is not None):
            try:
                item(state)
            except AcceptanceCheckError as e:
                raise AcceptanceCheckError(f"Check {index + 1}/{len(checks)} error: {e}") from e

    return check
