from __future__ import annotations

from statemachine import State, StateMachine

from pathbot.engine.types import RunOutcome, RunState


class RunFSM(StateMachine):
    """FSM wrapper around RunState.

    - idle -> running -> won | failed
    - any state rewinds to idle (replay, clear, level change)

    The scheduler mutates positions itself; the FSM only guards outcome transitions.
    """

    idle = State(RunOutcome.idle.value, value=RunOutcome.idle.value, initial=True)
    running = State(RunOutcome.running.value, value=RunOutcome.running.value)
    won = State(RunOutcome.won.value, value=RunOutcome.won.value)
    failed = State(RunOutcome.failed.value, value=RunOutcome.failed.value)

    begin = idle.to(running)
    win = running.to(won)
    lose = running.to(failed)
    rewind = idle.to(idle) | running.to(idle) | won.to(idle) | failed.to(idle)

    def __init__(self, run_state: RunState):
        self.run_state = run_state
        super().__init__(start_value=run_state.outcome.value)

    def sync_outcome_to_model(self) -> None:
        self.run_state.outcome = RunOutcome(str(self.current_state.value))
