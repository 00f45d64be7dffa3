from functools import total_ordering
from enum import Enum


@total_ordering
class Stage(Enum):
    BEGIN = 0 # means not fetched yet
    IF = 1
    ID = 2
    EX = 3
    MEM = 4
    WB = 5
    END = 6 # means retired, never occupied

    def __le__(self, other):
        if not isinstance(other, Stage):
            return NotImplemented
        return self.value <= other.value

    def __hash__(self):
        return hash(self.value)

    def __sub__(self, other):
        return self.value - other.value

    @property
    def index(self) -> int:
        """position in the five-stage pipeline, -1 for BEGIN"""
        return self.value - 1

    @property
    def label(self) -> str:
        return STAGE_LABELS.get(self, self.name)


STAGES = (Stage.IF, Stage.ID, Stage.EX, Stage.MEM, Stage.WB)

STAGE_LABELS = {
    Stage.IF: "Fetch",
    Stage.ID: "Decode",
    Stage.EX: "Execute",
    Stage.MEM: "Memory",
    Stage.WB: "Writeback",
}

PIPELINE = {
    Stage.BEGIN: Stage.IF,
    Stage.IF: Stage.ID,
    Stage.ID: Stage.EX,
    Stage.EX: Stage.MEM,
    Stage.MEM: Stage.WB,
    Stage.WB: Stage.END,
}


class HazardKind(Enum):
    RAW = "RAW"
    WAR = "WAR"
    WAW = "WAW"
    CONTROL = "Control"
    STRUCTURAL = "Structural"

    def __str__(self):
        return self.value


# kinds drawn when an instruction has no usable dependency
RANDOM_HAZARD_KINDS = (HazardKind.RAW, HazardKind.WAR, HazardKind.WAW, HazardKind.STRUCTURAL)


class PipelineError(Exception):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InstructionNotFound(PipelineError, LookupError):
    def __init__(self, instr_id: int):
        super().__init__(f"Instruction {instr_id} not found")
        self.instr_id = instr_id


class PipelineInvariantError(PipelineError):
    pass
