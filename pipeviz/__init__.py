from .base import Stage, STAGES, PIPELINE, HazardKind, PipelineError, InstructionNotFound, PipelineInvariantError
from .config import HazardConfig, SimulationConfig, load_config
from .isa import Instruction, StageRecord, InstructionFactory
from .pipeline import HazardClassifier, HazardResult
from .stages import StageAdvancer
from .state import PipelineState
from .clock import PipelineClock
from .simulator import Simulator, AutoRunner, build_clock, initialize, tick, reset, describe, is_complete

__version__ = "0.1.0"
