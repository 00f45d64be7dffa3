from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class HazardConfig(BaseModel):
    """
    Probabilities used by the hazard classifier. They are illustrative,
    not derived from any real microarchitecture.
    """
    model_config = ConfigDict(frozen=True)

    raw_probability: float = Field(0.7, ge=0.0, le=1.0)
    structural_probability: float = Field(0.3, ge=0.0, le=1.0)
    control_probability: float = Field(0.5, ge=0.0, le=1.0)
    random_probability: float = Field(0.15, ge=0.0, le=1.0)


class SimulationConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    batch_size: int = Field(5, ge=1)
    dependency_probability: float = Field(1.0, ge=0.0, le=1.0)
    speed: float = Field(1.0, ge=0.5, le=5.0) # cycles per second for the auto runner
    seed: Optional[int] = None
    hazards: HazardConfig = Field(default_factory=HazardConfig)

    @property
    def interval(self) -> float:
        return 1.0 / self.speed

    def with_updates(self, **changes) -> "SimulationConfig":
        # model_copy skips validation, so rebuild instead
        return SimulationConfig.model_validate({**self.model_dump(), **changes})


def load_config(path: Union[str, Path]) -> SimulationConfig:
    text = Path(path).read_text(encoding="utf-8")
    return SimulationConfig.model_validate_json(text)
