import random
from dataclasses import dataclass
from typing import Optional, List, Tuple

from .base import Stage, HazardKind, RANDOM_HAZARD_KINDS
from .config import HazardConfig
from .isa import Instruction, TEMPLATE_REGISTRY
from .log import get_logger

logger = get_logger(__name__)

CONTROL_PREFIXES: Tuple[str, ...] = tuple(
    mnemonic for mnemonic, cls in TEMPLATE_REGISTRY.items() if cls().is_control
)


@dataclass(frozen=True)
class HazardResult:
    hazard: bool
    kind: Optional[HazardKind] = None


NO_HAZARD = HazardResult(hazard=False)


def find_instruction(instructions: List[Instruction], instr_id: Optional[int]) -> Optional[Instruction]:
    if instr_id is None:
        return None
    for instr in instructions:
        if instr.id == instr_id:
            return instr
    return None


class HazardClassifier:
    """
    Decides whether an instruction is held back this cycle.

    The policy is probabilistic and illustrative, it does not model a real
    datapath. All randomness comes from the injected ``rng``.
    """
    def __init__(self, rng: random.Random, config: Optional[HazardConfig] = None):
        self.rng = rng
        self.config = config or HazardConfig()

    def classify(self, instr: Instruction, current: Stage, next_stage: Stage,
                 dependent: Optional[Instruction]) -> HazardResult:
        if instr.dependencies and dependent is not None:
            return self._dependent_hazard(instr, current, next_stage, dependent)
        if self._roll(self.config.random_probability):
            return HazardResult(True, self.rng.choice(RANDOM_HAZARD_KINDS))
        return NO_HAZARD

    def _dependent_hazard(self, instr: Instruction, current: Stage, next_stage: Stage,
                          dependent: Instruction) -> HazardResult:
        if next_stage == Stage.EX and not dependent.completed:
            return self._maybe(self.config.raw_probability, HazardKind.RAW)
        if next_stage == Stage.MEM and current == Stage.EX:
            return self._maybe(self.config.structural_probability, HazardKind.STRUCTURAL)
        if instr.name.startswith(CONTROL_PREFIXES):
            return self._maybe(self.config.control_probability, HazardKind.CONTROL)
        return NO_HAZARD

    def _maybe(self, p: float, kind: HazardKind) -> HazardResult:
        if self._roll(p):
            return HazardResult(True, kind)
        return NO_HAZARD

    def _roll(self, p: float) -> bool:
        return self.rng.random() < p
