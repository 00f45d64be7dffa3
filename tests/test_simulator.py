"""
Tests for the simulation session, the module-level API and the auto runner.
"""

import logging

import pytest
from pydantic import ValidationError

import pipeviz
from pipeviz.base import Stage, InstructionNotFound
from pipeviz.config import SimulationConfig
from pipeviz.simulator import AutoRunner, Simulator, build_clock

from .helpers import fixed_random


def _quiet_sim(**config):
    return Simulator(SimulationConfig(**config), rng=fixed_random(0.99))


class TestModuleApi:
    def test_round_trip(self):
        clock = build_clock(SimulationConfig(seed=5))
        state = pipeviz.initialize(clock)
        state, text = pipeviz.tick(state, clock)
        assert text.startswith("Cycle 1:")
        assert not pipeviz.is_complete(state)
        assert pipeviz.describe(state, 1).startswith("Instruction 1 ")
        state = pipeviz.reset(state, clock)
        assert state.cycle == 1

    def test_initialize_without_clock(self):
        state = pipeviz.initialize()
        assert len(state.instructions) == 5


class TestSimulator:
    def test_seed_makes_runs_reproducible(self):
        a = Simulator(SimulationConfig(seed=77))
        b = Simulator(SimulationConfig(seed=77))
        assert a.run(30) == b.run(30)

    def test_step_replenishes_when_complete(self):
        sim = _quiet_sim(batch_size=1)
        sim.run(4)
        assert len(sim.state.instructions) == 1
        sim.step()
        assert [i.id for i in sim.state.instructions] == [1, 2]
        assert sim.state.instructions[1].stage == Stage.BEGIN
        sim.step()
        assert sim.state.instructions[1].stages[Stage.IF].cycle == 6

    def test_history(self):
        sim = _quiet_sim()
        texts = sim.run(3)
        assert sim.history == texts
        assert sim.cycle == 4

    def test_select(self):
        sim = _quiet_sim()
        sim.run(2)
        detail = sim.select(1)
        assert sim.state.selected == 1
        assert sim.state.explanation == detail
        assert "- Decode: Cycle 2" in detail

    def test_select_unknown(self):
        sim = _quiet_sim()
        with pytest.raises(InstructionNotFound):
            sim.select(99)
        assert sim.state.selected is None

    def test_reset(self):
        sim = _quiet_sim()
        sim.run(6)
        sim.select(2)
        state = sim.reset()
        assert state.cycle == 1
        assert state.selected is None
        assert sim.history == []
        assert not sim.is_complete()

    def test_set_speed(self):
        sim = _quiet_sim()
        sim.set_speed(4)
        assert sim.config.interval == pytest.approx(0.25)
        with pytest.raises(ValidationError):
            sim.set_speed(10)
        assert sim.config.speed == 4


class TestAutoRunner:
    def test_runs_requested_cycles(self):
        sim = _quiet_sim()
        seen = []
        runner = AutoRunner(sim, interval=0.001, max_cycles=3, on_cycle=seen.append)
        runner.start()
        runner.join(timeout=5)
        assert not runner.running
        assert runner.cycles_run == 3
        assert sim.cycle == 4
        assert seen == sim.history

    def test_stop_leaves_state_resumable(self):
        sim = _quiet_sim()
        runner = AutoRunner(sim, interval=0.001)
        runner.start()
        assert runner.running
        runner.stop(timeout=5)
        assert not runner.running

        cycle = sim.cycle
        assert cycle == 1 + runner.cycles_run
        for instr in sim.state.instructions:
            instr.check()
        sim.step()
        assert sim.cycle == cycle + 1

    def test_start_twice_is_harmless(self):
        sim = _quiet_sim()
        runner = AutoRunner(sim, interval=0.05, max_cycles=2)
        runner.start()
        runner.start()
        runner.join(timeout=5)
        assert runner.cycles_run == 2

    def test_stop_before_start(self):
        runner = AutoRunner(_quiet_sim(), interval=0.001)
        runner.stop()
        assert not runner.running

    def test_zero_cycle_limit_runs_nothing(self):
        sim = _quiet_sim()
        runner = AutoRunner(sim, interval=0.001, max_cycles=0)
        runner.start()
        runner.join(timeout=5)
        assert runner.cycles_run == 0
        assert sim.cycle == 1
        assert sim.history == []

    def test_restart_after_limit_runs_limit_again(self):
        sim = _quiet_sim()
        runner = AutoRunner(sim, interval=0.001, max_cycles=2)
        runner.start()
        runner.join(timeout=5)
        runner.start()
        runner.join(timeout=5)
        assert runner.cycles_run == 2
        assert sim.cycle == 5

    def test_callback_failure_is_logged_and_stops(self, caplog):
        def explode(text):
            raise ValueError("display gone")

        sim = _quiet_sim()
        runner = AutoRunner(sim, interval=0.001, on_cycle=explode)
        with caplog.at_level(logging.ERROR, logger="pipeviz"):
            runner.start()
            runner.join(timeout=5)
        assert not runner.running
        assert isinstance(runner.error, ValueError)
        assert runner.cycles_run == 1
        assert any("Auto runner aborted" in r.getMessage() for r in caplog.records)
        sim.step()
        assert sim.cycle == 3
