from typing import List

from .base import Stage, PIPELINE
from .behaviors import Behavior, FetchBehavior, AdvanceBehavior, StallBehavior, ResolveBehavior
from .isa import Instruction
from .pipeline import HazardClassifier, find_instruction
from .log import get_logger

logger = get_logger(__name__)


class StageAdvancer:
    def __init__(self, classifier: HazardClassifier):
        self.classifier = classifier

    def advance(self, instr: Instruction, instructions: List[Instruction],
                cycle: int, position: int) -> List[Behavior]:
        """
        Move ``instr`` at most one stage forward in ``cycle``.

        Stage records are mutated in place. The returned behaviors describe
        what happened, one explanation line each.
        """
        current = instr.stage

        if current == Stage.BEGIN:
            return self._try_fetch(instr, instructions, cycle, position)
        if current == Stage.WB:
            return []

        next_stage = PIPELINE[current]
        # a dangling dependency id is treated as no dependency
        dependent = find_instruction(instructions, instr.dependency)
        result = self.classifier.classify(instr, current, next_stage, dependent)
        record = instr.stages[current]

        if result.hazard:
            record.stall(result.kind)
            logger.debug(f"cycle {cycle}: #{instr.id} {current.name} ---x--> {next_stage.name} ({result.kind})")
            return [StallBehavior(cycle, instr.id, instr.name, current, result.kind)]

        instr.stages[next_stage].enter(cycle)
        logger.debug(f"cycle {cycle}: #{instr.id} {current.name} -> {next_stage.name}")
        if record.stalled:
            kind = record.hazard
            record.clear()
            return [ResolveBehavior(cycle, instr.id, instr.name, next_stage, kind)]
        return [AdvanceBehavior(cycle, instr.id, instr.name, next_stage)]

    def _try_fetch(self, instr: Instruction, instructions: List[Instruction],
                   cycle: int, position: int) -> List[Behavior]:
        # no overtaking: the previous instruction must have reached Decode
        if position > 0 and not instructions[position - 1].stages[Stage.ID].occupied:
            return []
        instr.stages[Stage.IF].enter(cycle)
        logger.debug(f"cycle {cycle}: #{instr.id} fetched")
        return [FetchBehavior(cycle, instr.id, instr.name)]
