import copy
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

from .base import InstructionNotFound
from .isa import Instruction


@dataclass
class PipelineState:
    """
    Everything a display layer needs to draw the pipeline.

    ``cycle`` is the number of the next cycle to execute. ``last_id`` is the
    id origin for the next batch of instructions.
    """
    cycle: int = 1
    instructions: List[Instruction] = field(default_factory=list)
    last_id: int = 0
    selected: Optional[int] = None
    explanation: str = ""

    def find(self, instr_id: int) -> Instruction:
        for instr in self.instructions:
            if instr.id == instr_id:
                return instr
        raise InstructionNotFound(instr_id)

    def is_complete(self) -> bool:
        return all(instr.completed for instr in self.instructions)

    def copy(self) -> "PipelineState":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cycle": self.cycle,
            "selected": self.selected,
            "explanation": self.explanation,
            "complete": self.is_complete(),
            "instructions": [instr.to_dict() for instr in self.instructions],
        }
