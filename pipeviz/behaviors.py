from dataclasses import dataclass, asdict
from typing import Optional

from .base import Stage, HazardKind


@dataclass
class Behavior:
    """base behavior"""
    cycle: int
    instr_id: int
    name: str

    def to_dict(self):
        d = asdict(self)
        d["type"] = self.__class__.__name__
        for key, val in d.items():
            if isinstance(val, Stage):
                d[key] = val.label
            elif isinstance(val, HazardKind):
                d[key] = val.value
        return d

    @property
    def subject(self) -> str:
        return f"Instruction {self.instr_id} ({self.name})"

    def __str__(self):
        return f"Cycle={self.cycle}, {self.subject}"


@dataclass
class FetchBehavior(Behavior):
    """instruction enters the pipeline"""

    def __str__(self):
        return f"{self.subject} starts Fetch stage."


@dataclass
class AdvanceBehavior(Behavior):
    """instruction moves one stage forward"""
    stage: Stage

    def __str__(self):
        return f"{self.subject} advances to {self.stage.label} stage."


@dataclass
class StallBehavior(Behavior):
    """stall behavior"""
    stage: Stage
    hazard: HazardKind

    def __str__(self):
        return f"{self.subject} is stalled in {self.stage.label} stage due to {self.hazard} hazard."


@dataclass
class ResolveBehavior(Behavior):
    """stall cleared, instruction moves on"""
    stage: Stage
    hazard: Optional[HazardKind] = None

    def __str__(self):
        return f"{self.subject} resolves hazard and advances to {self.stage.label} stage."
