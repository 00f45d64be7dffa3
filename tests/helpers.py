import random

from pipeviz.pipeline import HazardResult, NO_HAZARD


class FixedRandom(random.Random):
    """random() always returns ``value``; choice() and randrange() derive from it."""
    value = 0.99

    def random(self):
        return self.value


class CountingRandom(random.Random):
    """Seeded source that counts how many floats were drawn."""
    draws = 0

    def random(self):
        self.draws += 1
        return super().random()


class ScriptedClassifier:
    """
    Reports the hazards listed in ``script`` and nothing else.

    ``script`` maps ``(instr_id, current_stage)`` to a list of kinds, one
    consumed per attempt. An exhausted or missing entry means no hazard.
    """
    def __init__(self, script=None):
        self.script = {k: list(v) for k, v in (script or {}).items()}
        self.calls = []

    def classify(self, instr, current, next_stage, dependent):
        self.calls.append((instr.id, current, next_stage, dependent.id if dependent else None))
        kinds = self.script.get((instr.id, current))
        if kinds:
            return HazardResult(True, kinds.pop(0))
        return NO_HAZARD


class ExplodingClassifier:
    """Raises on the ``fail_on``-th call."""
    def __init__(self, fail_on: int):
        self.fail_on = fail_on
        self.calls = 0

    def classify(self, instr, current, next_stage, dependent):
        self.calls += 1
        if self.calls >= self.fail_on:
            raise RuntimeError("classifier failure")
        return NO_HAZARD


def fixed_random(value: float, seed: int = 0) -> FixedRandom:
    rng = FixedRandom(seed)
    rng.value = value
    return rng
