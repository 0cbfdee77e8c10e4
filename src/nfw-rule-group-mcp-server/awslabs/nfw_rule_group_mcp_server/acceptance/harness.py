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

"""Step runner for rule group acceptance cases.

An ``AcceptanceCase`` is a list of steps run against one region. A config
step refreshes the current state, applies the plan for its configuration,
runs its checks and then requires the follow-up plan to be empty (or, with
``expect_non_empty_plan``, non-empty). An import step imports an applied
resource by ARN and optionally compares it with the applied state. Once the
steps finish, every remaining resource is destroyed and ``check_destroy``
runs.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..exceptions import AcceptanceCheckError, RuleGroupError
from ..iac.loader import load_configuration
from ..models.rule_group_models import RuleGroupResource
from ..resources.diff import Plan
from ..resources.rule_group_manager import RuleGroupManager
from ..utils.logger import get_logger
from .checks import AcceptanceState, Check
from .flatmap import to_flatmap

logger = get_logger(__name__)


@dataclass
class AcceptanceStep:
    config: Optional[str] = None
    check: Optional[Check] = None
    expect_non_empty_plan: bool = False
    # Regex the step's error must match; the step then passes without applying
    expect_error: Optional[str] = None

    resource_name: Optional[str] = None
    import_state: bool = False
    import_state_verify: bool = False
    import_state_verify_ignore: List[str] = field(default_factory=list)


@dataclass
class AcceptanceCase:
    manager: RuleGroupManager
    steps: List[AcceptanceStep]
    check_destroy: Optional[Check] = None

    def run(self) -> AcceptanceState:
        state = AcceptanceState(self.manager)
        try:
            for number, step in enumerate(self.steps, start=1):
                try:
                    if step.import_state:
                        self._run_import_step(step, state)
                    else:
                        self._run_config_step(step, state)
                except AcceptanceCheckError as e:
                    raise AcceptanceCheckError(f"Step {number}/{len(self.steps)} error: {e}") from e
        except Exception:
            self._destroy(state, raise_errors=False)
            raise

        self._destroy(state)
        if self.check_destroy is not None:
            self.check_destroy(state)
        return state

    # Steps

    def _run_config_step(self, step: AcceptanceStep, state: AcceptanceState) -> None:
        if step.config is None:
            raise AcceptanceCheckError("config step without configuration")
        try:
            configs = load_configuration(step.config)
            self._refresh(state)
            self._apply(configs, state)
        except RuleGroupError as e:
            if step.expect_error and re.search(step.expect_error, str(e)):
                logger.debug(f"Expected error matched: {e}")
                return
            raise
        if step.expect_error:
            raise AcceptanceCheckError(f"expected an error matching {step.expect_error!r}, got none")

        if step.check is not None:
            step.check(state)

        self._refresh(state)
        pending = [plan for plan in self._plans(configs, state) if not plan.empty]
        if pending and not step.expect_non_empty_plan:
            summary = "; ".join(f"{plan.address}: {plan.action.value} {plan.changed_paths()}" for plan in pending)
            raise AcceptanceCheckError(f"After applying this step, the plan was not empty: {summary}")
        if not pending and step.expect_non_empty_plan:
            raise AcceptanceCheckError("Expected a non-empty plan, but got an empty plan")

    def _run_import_step(self, step: AcceptanceStep, state: AcceptanceState) -> None:
        if not step.resource_name:
            raise AcceptanceCheckError("import step without resource_name")
        applied = state.resource(step.resource_name)
        imported = self.manager.import_resource(applied.arn)
        if not step.import_state_verify:
            return

        expected = _without_prefixes(to_flatmap(applied), step.import_state_verify_ignore)
        actual = _without_prefixes(to_flatmap(imported), step.import_state_verify_ignore)
        if expected != actual:
            differences = sorted(
                f"{key}: {expected.get(key, '<not set>')!r} != {actual.get(key, '<not set>')!r}"
                for key in set(expected) | set(actual)
                if expected.get(key) != actual.get(key)
            )
            raise AcceptanceCheckError(
                f"ImportStateVerify attributes not equivalent for {step.resource_name}: " + "; ".join(differences)
            )

    # State handling

    def _refresh(self, state: AcceptanceState) -> None:
        for address, prior in list(state.resources.items()):
            current = self.manager.read(prior.arn, prior=prior)
            if current is None:
                del state.resources[address]
            else:
                state.resources[address] = current

    def _plans(self, configs: Dict[str, RuleGroupResource], state: AcceptanceState) -> List[Plan]:
        addresses = sorted(set(configs) | set(state.resources))
        return [self.manager.plan(configs.get(a), state.resources.get(a), address=a) for a in addresses]

    def _apply(self, configs: Dict[str, RuleGroupResource], state: AcceptanceState) -> None:
        for plan in self._plans(configs, state):
            if plan.empty:
                continue
            logger.info(f"Applying {plan.address}: {plan.action.value}")
            result = self.manager.apply(configs.get(plan.address), state.resources.get(plan.address), plan)
            if result is None:
                state.resources.pop(plan.address, None)
                continue
            state.resources[plan.address] = result
            if result.arn not in state.created_arns:
                state.created_arns.append(result.arn)

    def _destroy(self, state: AcceptanceState, raise_errors: bool = True) -> None:
        for address in sorted(state.resources):
            try:
                self.manager.delete(state.resources[address].arn)
            except RuleGroupError as e:
                if raise_errors:
                    raise
                logger.warning(f"Error destroying {address} after a failed step: {e}")
        state.resources.clear()


def _without_prefixes(flat: Dict[str, str], prefixes: List[str]) -> Dict[str, str]:
    return {key: value for key, value in flat.items() if not any(key.startswith(p) for p in prefixes)}
