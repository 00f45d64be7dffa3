import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, Type, List

from .base import Stage, STAGES, HazardKind, PipelineInvariantError
from .config import SimulationConfig
from .log import get_logger

logger = get_logger(__name__)


class InstrKind(Enum):
    ARITHMETIC = "arithmetic"
    LOAD = "load"
    STORE = "store"
    BRANCH = "branch"
    JUMP = "jump"


TEMPLATE_REGISTRY: Dict[str, Type['Template']] = {}

# Help registry
def template(mnemonic: str, kind: InstrKind):
    def wrapper(cls):
        TEMPLATE_REGISTRY[mnemonic] = cls
        cls._meta_mnemonic = mnemonic
        cls._meta_kind = kind
        return cls
    return wrapper


class Template(ABC):
    """
    Template describe one entry of the instruction catalogue.
    Nothing is executed, the text is only displayed.
    """
    @property
    def mnemonic(self) -> str: return self._meta_mnemonic

    @property
    def kind(self) -> InstrKind: return self._meta_kind

    @property
    def is_control(self) -> bool:
        return self.kind in (InstrKind.BRANCH, InstrKind.JUMP)

    @abstractmethod
    def disassemble(self) -> str: pass


@template("ADD", InstrKind.ARITHMETIC)
class Add(Template):
    def disassemble(self) -> str:
        return "ADD R1, R2, R3"

@template("SUB", InstrKind.ARITHMETIC)
class Sub(Template):
    def disassemble(self) -> str:
        return "SUB R4, R5, R6"

@template("LW", InstrKind.LOAD)
class Lw(Template):
    def disassemble(self) -> str:
        return "LW R7, 0(R8)"

@template("SW", InstrKind.STORE)
class Sw(Template):
    def disassemble(self) -> str:
        return "SW R9, 4(R10)"

@template("BEQ", InstrKind.BRANCH)
class Beq(Template):
    def disassemble(self) -> str:
        return "BEQ R11, R12, label"

@template("JUMP", InstrKind.JUMP)
class Jump(Template):
    def disassemble(self) -> str:
        return "JUMP label"


def catalogue() -> List[str]:
    return [cls().disassemble() for cls in TEMPLATE_REGISTRY.values()]


@dataclass
class StageRecord:
    occupied: bool = False
    cycle: Optional[int] = None
    stalled: bool = False
    hazard: Optional[HazardKind] = None

    def enter(self, cycle: int):
        if self.occupied:
            raise PipelineInvariantError(f"Stage already entered at cycle {self.cycle}")
        self.occupied = True
        self.cycle = cycle
        self.stalled = False
        self.hazard = None

    def stall(self, kind: HazardKind):
        if not self.occupied:
            raise PipelineInvariantError("Cannot stall a stage that was never entered")
        self.stalled = True
        self.hazard = kind

    def clear(self):
        self.stalled = False
        self.hazard = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle": self.cycle,
            "stalled": self.stalled,
            "hazard": self.hazard.value if self.hazard else None,
        }


def _empty_stages() -> Dict[Stage, StageRecord]:
    return {s: StageRecord() for s in STAGES}


@dataclass
class Instruction:
    id: int
    name: str
    dependencies: List[int] = field(default_factory=list)
    stages: Dict[Stage, StageRecord] = field(default_factory=_empty_stages)

    @property
    def stage(self) -> Stage:
        """highest occupied stage, BEGIN if not fetched yet"""
        for s in reversed(STAGES):
            if self.stages[s].occupied:
                return s
        return Stage.BEGIN

    @property
    def completed(self) -> bool:
        return self.stages[Stage.WB].occupied

    @property
    def dependency(self) -> Optional[int]:
        return self.dependencies[0] if self.dependencies else None

    def check(self):
        current = self.stage
        last_cycle = None
        for s in STAGES:
            record = self.stages[s]
            if s <= current and not record.occupied:
                raise PipelineInvariantError(f"Instruction {self.id}: {s.label} skipped")
            if not record.occupied:
                if record.cycle is not None or record.stalled:
                    raise PipelineInvariantError(f"Instruction {self.id}: {s.label} not entered but carries state")
                continue
            if last_cycle is not None and record.cycle < last_cycle:
                raise PipelineInvariantError(f"Instruction {self.id}: {s.label} entered before previous stage")
            last_cycle = record.cycle
            if record.stalled and s != current:
                raise PipelineInvariantError(f"Instruction {self.id}: stale stall left in {s.label}")
            if record.stalled != (record.hazard is not None):
                raise PipelineInvariantError(f"Instruction {self.id}: stall flag and hazard kind disagree in {s.label}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "dependencies": list(self.dependencies),
            "stages": {s.label: self.stages[s].to_dict() for s in STAGES},
        }


class InstructionFactory:
    def __init__(self, rng: random.Random, config: Optional[SimulationConfig] = None):
        self.rng = rng
        self.config = config or SimulationConfig()
        self.names = catalogue()

    def create_batch(self, count: int, next_id_start: int) -> List[Instruction]:
        batch = []
        for i in range(count):
            instr_id = next_id_start + i + 1
            name = self.rng.choice(self.names)
            dependencies = []
            if i > 0 and self._wants_dependency():
                dependencies.append(next_id_start + self.rng.randrange(i) + 1)
            batch.append(Instruction(id=instr_id, name=name, dependencies=dependencies))
        logger.info(f"Created batch of {count} instructions (ids {next_id_start + 1}..{next_id_start + count})")
        return batch

    def _wants_dependency(self) -> bool:
        p = self.config.dependency_probability
        if p >= 1.0:
            return True
        return self.rng.random() < p
