"""
Run loop for particle tracing.

For every timestep the driver

    1. starts a new input interval when the time passes the next input time
       (loads fields, calls scenario.new_timestep),
    2. samples E and B at each live particle and applies one Boris push,
    3. calls scenario.after_push.

After the last step it calls scenario.finalize. Everything runs sequentially
on one thread; injection always completes before the push of that step.
"""

import sys
import time as _time
import numpy as np
from tqdm import tqdm
from typing import Optional

from particle_pusher.config import ParticleParameters
from particle_pusher.core.fields import StaticFields
from particle_pusher.physics.boris import push_particles
from particle_pusher.transport.scenario import Scenario


class ParticleDriver:
    """
    Drives a scenario through time over a set of fields.

    Example:
        params = ParticleParameters(mode='single', dt=1e-3, end_time=1.0)
        fields = StaticFields(B=UniformField((0, 0, 1e-9)))
        driver = ParticleDriver(create_scenario('single', params), fields, params)
        particles = driver.run()
    """

    def __init__(self, scenario: Scenario, fields=None,
                 params: Optional[ParticleParameters] = None):
        """
        Parameters:
            scenario: Scenario providing injection/boundary hooks
            fields: StaticFields or FieldSequence (zero fields if None)
            params: Run parameters (the scenario's if None)
        """
        self.scenario = scenario
        self.fields = fields if fields is not None else StaticFields()
        self.params = params if params is not None else scenario.params

        self.particles = None
        self.input_file_counter = 0
        self.step = 0

    @property
    def max_steps(self) -> int:
        p = self.params
        return int((p.end_time - p.start_time) / p.dt)

    def _new_timesteps(self, step: int, time: float):
        """Start every input interval whose start time has been reached."""
        while time >= self.input_file_counter * self.params.input_dt:
            self.input_file_counter += 1
            self.fields.advance(self.input_file_counter)
            f = self.fields
            self.scenario.new_timestep(self.input_file_counter, step, time,
                                       self.particles, f.E, f.B, f.V)

    def run(self, num_steps: Optional[int] = None, verbose: bool = False):
        """
        Run the scenario from start_time.

        Parameters:
            num_steps: Number of push steps (default: (end_time - start_time) / dt)
            verbose: Show a progress bar and print a summary on stderr

        Returns:
            The ParticleArray at the end of the run
        """
        p = self.params
        if num_steps is None:
            num_steps = self.max_steps

        self.input_file_counter = int(np.floor(p.start_time / p.input_dt))
        self.fields.load_initial(self.input_file_counter)
        f = self.fields
        self.particles = self.scenario.initial_particles(f.E, f.B, f.V)

        if verbose:
            print(f"\nTracing particles ({self.scenario.name})...", file=sys.stderr)
            print(f"  Initial particles: {len(self.particles)}", file=sys.stderr)
            print(f"  Steps: {num_steps} x {p.dt} s", file=sys.stderr)

        start_time = _time.time()
        for step in tqdm(range(num_steps), disable=not verbose, unit='step'):
            self.step = step
            time = p.start_time + step * p.dt

            self._new_timesteps(step, time)

            f = self.fields
            f.set_time(time)
            push_particles(self.particles, f.B, f.E, p.dt)
            self.scenario.after_push(step, time, self.particles, f.E, f.B, f.V)

        f = self.fields
        self.scenario.finalize(self.particles, f.E, f.B, f.V)

        if verbose:
            elapsed = _time.time() - start_time
            print(f"\nTracing complete!", file=sys.stderr)
            print(f"  Time: {elapsed:.1f}s", file=sys.stderr)
            print(f"  Particles: {self.particles}", file=sys.stderr)

        return self.particles
