import random
import threading
from typing import Callable, List, Optional, Tuple

from .clock import PipelineClock
from .config import SimulationConfig
from .isa import InstructionFactory
from .pipeline import HazardClassifier
from .report import describe_state
from .stages import StageAdvancer
from .state import PipelineState
from .log import get_logger

logger = get_logger(__name__)


def build_clock(config: Optional[SimulationConfig] = None,
                rng: Optional[random.Random] = None,
                classifier: Optional[HazardClassifier] = None) -> PipelineClock:
    config = config or SimulationConfig()
    rng = rng if rng is not None else random.Random(config.seed)
    classifier = classifier or HazardClassifier(rng, config.hazards)
    factory = InstructionFactory(rng, config)
    return PipelineClock(factory, StageAdvancer(classifier), batch_size=config.batch_size)


def initialize(clock: Optional[PipelineClock] = None) -> PipelineState:
    return (clock or build_clock()).initialize()


def tick(state: PipelineState, clock: PipelineClock) -> Tuple[PipelineState, str]:
    return clock.tick(state)


def reset(state: PipelineState, clock: PipelineClock) -> PipelineState:
    return clock.reset(state)


def describe(state: PipelineState, instr_id: int) -> str:
    return describe_state(state, instr_id)


def is_complete(state: PipelineState) -> bool:
    return state.is_complete()


class Simulator:
    """
    One simulation session: the state, its random source and its clock.

    Every mutation holds ``lock``, so a manual step, a reset and an
    ``AutoRunner`` never interleave.
    """
    def __init__(self, config: Optional[SimulationConfig] = None,
                 rng: Optional[random.Random] = None,
                 classifier: Optional[HazardClassifier] = None):
        self.config = config or SimulationConfig()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self.clock = build_clock(self.config, self.rng, classifier)
        self.lock = threading.RLock()
        self.state = self.clock.initialize()
        self.history: List[str] = []

    @property
    def cycle(self) -> int:
        return self.state.cycle

    def step(self) -> str:
        with self.lock:
            state, text = self.clock.tick(self.state)
            if state.is_complete():
                logger.info(f"All instructions retired at cycle {state.cycle - 1}, appending a new batch")
                state = self.clock.replenish(state)
            self.state = state
            self.history.append(text)
            return text

    def run(self, cycles: int) -> List[str]:
        return [self.step() for _ in range(cycles)]

    def reset(self) -> PipelineState:
        with self.lock:
            self.state = self.clock.reset(self.state)
            self.history.clear()
            return self.state

    def select(self, instr_id: int) -> str:
        with self.lock:
            detail = describe_state(self.state, instr_id)
            self.state.selected = instr_id
            self.state.explanation = detail
            return detail

    def describe(self, instr_id: int) -> str:
        with self.lock:
            return describe_state(self.state, instr_id)

    def is_complete(self) -> bool:
        with self.lock:
            return self.state.is_complete()

    def set_speed(self, speed: float):
        self.config = self.config.with_updates(speed=speed)


class AutoRunner:
    """Ticks a simulator from a background thread until stopped."""

    def __init__(self, simulator: Simulator, interval: Optional[float] = None,
                 max_cycles: Optional[int] = None,
                 on_cycle: Optional[Callable[[str], None]] = None):
        self.simulator = simulator
        self.interval = interval
        self.max_cycles = max_cycles
        self.on_cycle = on_cycle
        self.cycles_run = 0
        self.error: Optional[BaseException] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.running:
            return
        self.cycles_run = 0
        self.error = None
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="pipeviz-auto", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None):
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def join(self, timeout: Optional[float] = None):
        if self._thread is not None:
            self._thread.join(timeout)

    def _current_interval(self) -> float:
        # re-read every cycle so set_speed applies while running
        if self.interval is not None:
            return self.interval
        return self.simulator.config.interval

    def _limit_reached(self) -> bool:
        return self.max_cycles is not None and self.cycles_run >= self.max_cycles

    def _loop(self):
        while not self._limit_reached() and not self._stop.wait(self._current_interval()):
            try:
                text = self.simulator.step()
                self.cycles_run += 1
                if self.on_cycle is not None:
                    self.on_cycle(text)
            except Exception as e:
                self.error = e
                logger.exception(f"Auto runner aborted after {self.cycles_run} cycles")
                return
        logger.info(f"Auto runner stopped after {self.cycles_run} cycles")
