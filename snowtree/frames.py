from __future__ import annotations

"""
snowtree/frames.py

Display-refresh scheduling.

FrameScheduler plays the role of the host's "request animation frame"
facility: callbacks are queued for the next refresh and run once when the
engine loop calls dispatch(). Each animated component gets its own
AnimationHandle from start(); the handle re-requests a frame after every
step until stop() is called. There is no module-level frame state, so any
number of independent engines can share one scheduler.
"""

from typing import Callable, Dict, List, Optional, Set, Tuple

FrameCallback = Callable[[int], None]

# Dispatch order inside one refresh. Equal orders have no guaranteed
# relative ordering; callers must not rely on it.
ORDER_SIMULATION = 0
ORDER_AFTER_LAYOUT = 10


class FrameScheduler:
    def __init__(self) -> None:
        self._next_id = 1
        self._pending: Dict[int, Tuple[int, FrameCallback]] = {}
        # ids of the batch currently being dispatched (cancel can still hit them)
        self._running: Set[int] = set()
        self.now_ms = 0

    def request(self, callback: FrameCallback, order: int = ORDER_SIMULATION) -> int:
        frame_id = self._next_id
        self._next_id += 1
        self._pending[frame_id] = (order, callback)
        return frame_id

    def cancel(self, frame_id: Optional[int]) -> None:
        if frame_id is None:
            return
        self._pending.pop(frame_id, None)
        self._running.discard(frame_id)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def dispatch(self, now_ms: int) -> int:
        """
        Run every callback requested before this call, lowest order first.
        Callbacks requested while dispatching wait for the next refresh.
        Returns the number of callbacks that ran.
        """
        self.now_ms = int(now_ms)
        batch: List[Tuple[int, int, FrameCallback]] = sorted(
            (order, frame_id, cb) for frame_id, (order, cb) in self._pending.items()
        )
        self._pending = {}
        self._running = {frame_id for _, frame_id, _ in batch}
        ran = 0
        for _, frame_id, cb in batch:
            if frame_id not in self._running:
                continue
            self._running.discard(frame_id)
            cb(self.now_ms)
            ran += 1
        self._running = set()
        return ran


class AnimationHandle:
    """
    Owns the recurring frame request of one component.

    stop() is idempotent and safe whether or not a frame is currently queued.
    """

    def __init__(self, scheduler: FrameScheduler, step: FrameCallback, order: int = ORDER_SIMULATION) -> None:
        self.scheduler = scheduler
        self.order = order
        self._step = step
        self.frame_id: Optional[int] = None
        self.stopped = False
        self.frames = 0

    @property
    def active(self) -> bool:
        return not self.stopped

    def schedule(self) -> None:
        if self.stopped or self.frame_id is not None:
            return
        self.frame_id = self.scheduler.request(self._on_frame, self.order)

    def _on_frame(self, now_ms: int) -> None:
        self.frame_id = None
        if self.stopped:
            return
        self._step(now_ms)
        self.frames += 1
        self.schedule()

    def stop(self) -> None:
        if self.stopped:
            return
        self.stopped = True
        self.scheduler.cancel(self.frame_id)
        self.frame_id = None


def start_animation(scheduler: FrameScheduler, step: FrameCallback, order: int = ORDER_SIMULATION) -> AnimationHandle:
    handle = AnimationHandle(scheduler, step, order)
    handle.schedule()
    return handle
