from typing import List, Tuple

from .behaviors import Behavior
from .isa import InstructionFactory
from .report import render_cycle
from .stages import StageAdvancer
from .state import PipelineState
from .log import get_logger

logger = get_logger(__name__)


class PipelineClock:
    def __init__(self, factory: InstructionFactory, advancer: StageAdvancer, batch_size: int = 5):
        self.factory = factory
        self.advancer = advancer
        self.batch_size = batch_size

    def initialize(self) -> PipelineState:
        state = PipelineState()
        return self.replenish(state)

    def tick(self, state: PipelineState) -> Tuple[PipelineState, str]:
        """
        Run one cycle over every instruction in program order.

        The caller's state is never touched: the cycle is computed on a copy
        which is returned only if every step succeeded.
        """
        work = state.copy()
        cycle = work.cycle
        behaviors: List[Behavior] = []

        for position, instr in enumerate(work.instructions):
            behaviors.extend(self.advancer.advance(instr, work.instructions, cycle, position))
        for instr in work.instructions:
            instr.check()

        work.cycle = cycle + 1
        work.explanation = render_cycle(cycle, behaviors)
        logger.debug(f"cycle {cycle} done, {len(behaviors)} events")
        return work, work.explanation

    def replenish(self, state: PipelineState) -> PipelineState:
        work = state.copy()
        batch = self.factory.create_batch(self.batch_size, work.last_id)
        work.instructions.extend(batch)
        work.last_id += len(batch)
        return work

    def reset(self, state: PipelineState) -> PipelineState:
        """Fresh state at cycle 1; instruction ids restart at 1, so they are unique per run only."""
        logger.info(f"Pipeline reset at cycle {state.cycle}")
        return self.initialize()
