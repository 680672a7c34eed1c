#!/usr/bin/env python3
"""
orchestrator.py - Tick-driven state machine that runs the range-hold test

The host calls update() once per update period. Within a tick, in order:
  1. refresh the context time and vehicle position
  2. run the virtual rangefinder bridge (once it exists)
  3. skip the rest of the tick if a step needing a position has none;
     every step after sensor init needs one
  4. create the current state if it was just entered
  5. update the time spent in the state and advance it
  6. follow the transition table on NEXT or FAIL
Nothing blocks; waiting is a state returning SAME.
"""

import logging
import time
from typing import Callable, List, Optional, Tuple

from harness_services import HarnessServices
from run_context import RunContext
from state_registry import (TERMINAL_FACTORIES, TERMINAL_STATES, StateId,
                            StateRegistry)
from states.base import HarnessState, StateResult

logger = logging.getLogger(__name__)


class RangeHoldTestOrchestrator:
    def __init__(self, services: HarnessServices,
                 clock: Callable[[], float] = time.monotonic,
                 registry: Optional[StateRegistry] = None,
                 ctx: Optional[RunContext] = None):
        self.services = services
        self.clock = clock
        self.registry = registry or StateRegistry()
        self.ctx = ctx or RunContext()
        self.update_period_ms = services.config['update_period_ms']

        self.current_state_id: StateId = self.registry.first_state
        self.state: Optional[HarnessState] = None
        self.init_state = True
        self.history: List[StateId] = []

        self.time_script_s: Optional[float] = None
        self.time_state_s = 0.0
        self.tick_count = 0

        validation = self.registry.validate()
        if not validation['valid']:
            raise ValueError(f"Invalid test plan: {validation}")

        logger.info("Range-hold test plan: %s", " -> ".join(s.state_id.value for s in self.registry.plan))

    @property
    def finished(self) -> bool:
        return self.current_state_id in TERMINAL_STATES and not self.init_state

    @property
    def succeeded(self) -> bool:
        return self.finished and self.current_state_id == StateId.DONE_SUCCESS

    def update(self) -> Tuple[Callable, int]:
        """Tick entry point. Returns the next callback and its delay in ms."""
        self.step()
        return self.update, self.update_period_ms

    def step(self) -> StateResult:
        now = self.clock()
        if self.time_script_s is None:
            self.time_script_s = now
            self.time_state_s = now
        self.tick_count += 1

        ctx = self.ctx
        ctx.dur_script_s = now - self.time_script_s
        ctx.pos_curr = self.services.vehicle.get_position()

        # The virtual rangefinder runs every tick once initialized
        if self.services.bridge is not None:
            self.services.bridge.update(ctx)

        if self._waiting_for_position():
            self.services.status.send_trim("Test step waiting.", "No position was available.")
            return StateResult.SAME

        if self.init_state:
            self._create_state(now)

        ctx.dur_state_s = now - self.time_state_s

        result = self.state.advance()

        if self.finished:
            return result

        if result == StateResult.NEXT:
            self.state.clean_up()
            self._transition(self.registry.next_state(self.current_state_id), now, create_now=False)
        elif result == StateResult.FAIL:
            self.state.clean_up()
            self._transition(self.registry.fail_state(self.current_state_id), now, create_now=True)

        return result

    def _waiting_for_position(self) -> bool:
        if self.ctx.pos_curr is not None or self.finished:
            return False
        step = self.registry.get_step(self.current_state_id)
        return step is not None and step.requires_position

    def _create_state(self, now: float):
        if self.current_state_id in TERMINAL_STATES:
            factory = TERMINAL_FACTORIES[self.current_state_id]
        else:
            factory = self.registry.get_step(self.current_state_id).factory

        self.state = factory(self.ctx, self.services)
        self.init_state = False
        self.time_state_s = now
        self.history.append(self.current_state_id)
        logger.debug("Entered %s at %.2fs", self.current_state_id.value, self.ctx.dur_script_s)

    def _transition(self, state_id: StateId, now: float, create_now: bool):
        logger.info("%s -> %s at %.2fs", self.current_state_id.value, state_id.value, self.ctx.dur_script_s)
        logger.debug("Run status: %s", self.ctx.get_status())
        self.current_state_id = state_id
        self.init_state = True
        # The failure state must make the vehicle safe on this very tick
        if create_now:
            self._create_state(now)
