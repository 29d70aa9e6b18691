import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from colorControl import rgb_to_hex
from cubeConfig import BOOT_AGE
from cubeErrors import ParseError
from cubeModels import PartialCommand, TargetState
from modeReconciler import reconcile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApplyResult:
    accepted: bool
    state: Optional[TargetState] = None
    reason: str = ""


class StateStore:
    """Owns the one target state shared by command workers and the render loop.

    Every ``apply`` reconciles and swaps the state while holding the lock, so
    concurrent commands are fully ordered and no reader sees half an update.
    States are immutable, so ``snapshot`` hands out the current value as is.
    """

    def __init__(self, initial: Optional[TargetState] = None,
                 clock: Callable[[], float] = time.monotonic,
                 boot_age: float = BOOT_AGE):
        self._clock = clock
        self._lock = threading.Lock()
        if initial is None:
            initial = TargetState(updated_at=clock() - boot_age)
        self._state = initial

    def snapshot(self) -> TargetState:
        with self._lock:
            return self._state

    def apply(self, cmd: PartialCommand) -> ApplyResult:
        if cmd.is_empty():
            logger.warning("API: rejected update (no valid fields)")
            return ApplyResult(accepted=False, reason="no valid fields")

        with self._lock:
            try:
                new_state = reconcile(self._state, cmd, self._clock())
            except ParseError as e:
                return ApplyResult(accepted=False, reason=e.reason)
            self._state = new_state

        logger.info(
            "API: Updated Targets (Mode=%s, Color=%.3f, Geom=%s, Bg=%s)",
            new_state.mode.value,
            new_state.colour,
            new_state.geometry.value,
            rgb_to_hex(new_state.background_color),
        )
        return ApplyResult(accepted=True, state=new_state)
