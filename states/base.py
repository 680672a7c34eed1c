#!/usr/bin/env python3
"""
states/base.py - Base class for range-hold test states

Constructing a state performs its one-time setup (it may command the
vehicle). advance() is then called once per tick until it returns NEXT or
FAIL, at which point the orchestrator calls clean_up() exactly once.
"""

from abc import ABC, abstractmethod
from enum import Enum

from harness_services import HarnessServices
from run_context import RunContext


class StateResult(Enum):
    SAME = 1    # run this state again next tick
    NEXT = 2    # move on to the next state
    FAIL = 3    # go to the failure terminal state


class HarnessState(ABC):
    """Base class for all test states"""

    STATE_NAME = "BASE_STATE"

    def __init__(self, ctx: RunContext, services: HarnessServices):
        self.ctx = ctx
        self.services = services
        self.name = self.STATE_NAME

    @property
    def status(self):
        return self.services.status

    @property
    def config(self):
        return self.services.config

    @abstractmethod
    def advance(self) -> StateResult:
        """Run one tick of the state"""
        pass

    def clean_up(self) -> None:
        """Called once when advance() leaves the state"""
        pass

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"
