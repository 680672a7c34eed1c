#!/usr/bin/env python3
"""
state_registry.py - State identifiers, the ordered test plan, and its transition table

The test is a linear state machine: each plan step moves to the next on
NEXT and to DONE_FAILURE on FAIL. The last step's NEXT goes to DONE_SUCCESS.
Both DONE states are outside the plan and absorb all further ticks.
"""

from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Sequence

from config.harness_config import HARNESS_CONFIG
from states.adjust_depth import change_depth, descend_to_test_depth
from states.arm import ArmState, DisarmState
from states.base import HarnessState
from states.follow_bottom import FollowBottomState
from states.init_sensor import InitSensorState
from states.mode_change import ManualModeState, RangeHoldModeState
from states.pause import PauseState
from states.terminal import DoneFailureState, DoneSuccessState

StateFactory = Callable[..., HarnessState]


class StateId(Enum):
    INIT_SENSOR = "INIT_SENSOR"
    ARM = "ARM"
    DESCEND_TO_TEST_DEPTH = "DESCEND_TO_TEST_DEPTH"
    PAUSE_AT_TEST_DEPTH = "PAUSE_AT_TEST_DEPTH"
    ENGAGE_RANGE_HOLD = "ENGAGE_RANGE_HOLD"
    PAUSE_IN_RANGE_HOLD = "PAUSE_IN_RANGE_HOLD"
    FOLLOW_BOTTOM_1 = "FOLLOW_BOTTOM_1"
    CHANGE_DEPTH = "CHANGE_DEPTH"
    PAUSE_AT_NEW_DEPTH = "PAUSE_AT_NEW_DEPTH"
    FOLLOW_BOTTOM_2 = "FOLLOW_BOTTOM_2"
    PAUSE_AFTER_FOLLOW = "PAUSE_AFTER_FOLLOW"
    RETURN_TO_MANUAL = "RETURN_TO_MANUAL"
    DISARM = "DISARM"
    DONE_SUCCESS = "DONE_SUCCESS"
    DONE_FAILURE = "DONE_FAILURE"


TERMINAL_STATES = {StateId.DONE_SUCCESS, StateId.DONE_FAILURE}

TERMINAL_FACTORIES: Dict[StateId, StateFactory] = {
    StateId.DONE_SUCCESS: DoneSuccessState,
    StateId.DONE_FAILURE: DoneFailureState,
}


class PlanStep(NamedTuple):
    state_id: StateId
    factory: StateFactory
    requires_position: bool = True


class Transition(NamedTuple):
    on_next: StateId
    on_fail: StateId


def default_plan(pause_s: float = HARNESS_CONFIG['pause_s']) -> List[PlanStep]:
    pause = partial(PauseState, duration_s=pause_s)
    return [
        PlanStep(StateId.INIT_SENSOR, InitSensorState, requires_position=False),
        PlanStep(StateId.ARM, ArmState),
        PlanStep(StateId.DESCEND_TO_TEST_DEPTH, descend_to_test_depth),
        PlanStep(StateId.PAUSE_AT_TEST_DEPTH, pause),
        PlanStep(StateId.ENGAGE_RANGE_HOLD, RangeHoldModeState),
        PlanStep(StateId.PAUSE_IN_RANGE_HOLD, pause),
        PlanStep(StateId.FOLLOW_BOTTOM_1, FollowBottomState.one_pattern_length),
        PlanStep(StateId.CHANGE_DEPTH, change_depth),
        PlanStep(StateId.PAUSE_AT_NEW_DEPTH, pause),
        PlanStep(StateId.FOLLOW_BOTTOM_2, FollowBottomState.one_pattern_length),
        PlanStep(StateId.PAUSE_AFTER_FOLLOW, pause),
        PlanStep(StateId.RETURN_TO_MANUAL, ManualModeState),
        PlanStep(StateId.DISARM, DisarmState),
    ]


def build_transition_table(plan: Sequence[PlanStep]) -> Dict[StateId, Transition]:
    table = {}
    for index, step in enumerate(plan):
        if index + 1 < len(plan):
            on_next = plan[index + 1].state_id
        else:
            on_next = StateId.DONE_SUCCESS
        table[step.state_id] = Transition(on_next, StateId.DONE_FAILURE)
    return table


class StateRegistry:
    """Holds a test plan and its transitions"""

    def __init__(self, plan: Optional[Sequence[PlanStep]] = None):
        self.plan: List[PlanStep] = list(plan) if plan is not None else default_plan()
        self.transitions = build_transition_table(self.plan)
        self._steps = {step.state_id: step for step in self.plan}

    @property
    def first_state(self) -> StateId:
        return self.plan[0].state_id if self.plan else StateId.DONE_SUCCESS

    def get_step(self, state_id: StateId) -> Optional[PlanStep]:
        return self._steps.get(state_id)

    def next_state(self, state_id: StateId) -> StateId:
        return self.transitions[state_id].on_next

    def fail_state(self, state_id: StateId) -> StateId:
        return self.transitions[state_id].on_fail

    def validate(self) -> Dict[str, Any]:
        """
        Check the plan is usable.

        Returns:
            Dict with 'valid': bool, 'duplicates': List[StateId], 'terminal_in_plan': List[StateId]
        """
        seen = set()
        duplicates = []
        for step in self.plan:
            if step.state_id in seen:
                duplicates.append(step.state_id)
            seen.add(step.state_id)

        terminal_in_plan = [s for s in seen if s in TERMINAL_STATES]

        return {
            'valid': not duplicates and not terminal_in_plan,
            'duplicates': duplicates,
            'terminal_in_plan': terminal_in_plan,
        }
