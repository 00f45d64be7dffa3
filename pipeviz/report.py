from typing import Iterable, List

from .base import Stage, STAGES, HazardKind
from .behaviors import Behavior
from .isa import Instruction
from .state import PipelineState

STAGE_EXPLANATIONS = {
    Stage.IF: "In this stage, the processor fetches the instruction from memory at the address stored in the program counter (PC).",
    Stage.ID: "The fetched instruction is decoded to determine the operation to be performed and the operands to be used.",
    Stage.EX: "The ALU performs the operation specified by the instruction on the operands.",
    Stage.MEM: "If required, memory is accessed for read or write operations.",
    Stage.WB: "The result of the operation is written back to the register file.",
}

HAZARD_EXPLANATIONS = {
    HazardKind.RAW: "Read After Write (RAW): This data hazard occurs when an instruction tries to read a source before a previous instruction writes to it.",
    HazardKind.WAR: "Write After Read (WAR): This hazard occurs when an instruction tries to write to a destination before a previous instruction reads it.",
    HazardKind.WAW: "Write After Write (WAW): This hazard occurs when an instruction tries to write to a destination before a previous instruction writes to the same destination.",
    HazardKind.CONTROL: "Control Hazard: Occurs with branch instructions when the pipeline has to be flushed if the branch prediction was incorrect.",
    HazardKind.STRUCTURAL: "Structural Hazard: Occurs when multiple instructions try to use the same hardware resource simultaneously.",
}


def explain_stage(stage: Stage) -> str:
    return STAGE_EXPLANATIONS[stage]


def explain_hazard(kind: HazardKind) -> str:
    return HAZARD_EXPLANATIONS[kind]


def render_cycle(cycle: int, behaviors: Iterable[Behavior]) -> str:
    lines = [f"Cycle {cycle}:"]
    lines.extend(f"- {b}" for b in behaviors)
    return "\n".join(lines)


def describe(instr: Instruction) -> str:
    lines = [f"Instruction {instr.id} ({instr.name}):"]
    for s in STAGES:
        record = instr.stages[s]
        if not record.occupied:
            continue
        line = f"- {s.label}: Cycle {record.cycle}"
        if record.stalled:
            line += f" (Stalled - {record.hazard} hazard)"
        lines.append(line)
    if instr.dependencies:
        lines.append("")
        lines.append(f"Depends on instruction(s): {', '.join(str(d) for d in instr.dependencies)}")
    return "\n".join(lines)


def describe_state(state: PipelineState, instr_id: int) -> str:
    return describe(state.find(instr_id))


def _cell(instr: Instruction, stage: Stage) -> str:
    record = instr.stages[stage]
    if not record.occupied:
        return ""
    if record.stalled:
        return f"{record.cycle}*{record.hazard}"
    return str(record.cycle)


def render_chart(state: PipelineState) -> str:
    """
    Text pipeline diagram: one row per instruction, one column per stage.
    Each cell holds the entry cycle, a stalled cell is marked ``<cycle>*<kind>``.
    """
    header = ["#", "Instruction"] + [s.label for s in STAGES]
    rows: List[List[str]] = [header]
    for instr in state.instructions:
        marker = ">" if instr.id == state.selected else ""
        rows.append([f"{marker}{instr.id}", instr.name] + [_cell(instr, s) for s in STAGES])

    widths = [max(len(row[i]) for row in rows) for i in range(len(header))]
    out = []
    for n, row in enumerate(rows):
        out.append(" | ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip())
        if n == 0:
            out.append("-+-".join("-" * w for w in widths))
    return "\n".join(out)


def snapshot(state: PipelineState) -> dict:
    return state.to_dict()
