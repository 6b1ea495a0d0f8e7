"""
Particle scenarios: injection, boundary and diagnostic policy for a run.

A scenario provides four hooks, called by the driver in this order:

    initial_particles(E, B, V)                      once, before the first step
    new_timestep(input_file_counter, step, time, particles, E, B, V)
                                                    whenever a new input interval starts
    after_push(step, time, particles, E, B, V)      after every push of all particles
    finalize(particles, E, B, V)                    once, after the last step

Hooks a scenario does not override do nothing. Particles are only ever
appended to the arena and injection batches always have the same size, so a
particle's injection batch is ``index // batch_size``.

Available scenarios (see SCENARIOS):
    single         one particle, trajectory printed every step
    distribution   a thermal population at one point, dumped every input step
    precipitation  particles injected along the x axis, absorbed at an inner radius
    analysator     particles read from a text stream, printed every input step
    reflectivity   particles injected in front of a moving shock, classified as
                   transmitted or reflected
"""

import sys
import numpy as np
from collections import namedtuple
from pathlib import Path
from typing import Optional, TextIO

from particle_pusher.config import ParticleParameters
from particle_pusher.core.particle import Particle, ParticleArray
from particle_pusher.physics.distribution import create_distribution
from particle_pusher.io.writer import write_particles
from particle_pusher.io.histogram import Histogram2D


# Any |B| seen during the minimum search must beat this to move the start point
_MIN_B_SENTINEL = 99999999999.

# Precipitation record for a particle lost through the outer boundary
LOST_LATITUDE = -5.
LOST_ENERGY = -1.

PrecipitationEvent = namedtuple(
    'PrecipitationEvent', ['index', 'start_timestep', 'start_x', 'latitude', 'energy_eV'])

TrajectoryPoint = namedtuple('TrajectoryPoint', ['index', 'time', 'position', 'velocity'])


def _format_state(index: int, time: float, x: np.ndarray, v: np.ndarray) -> str:
    return (f"{index} {time:g}\t{x[0]:g} {x[1]:g} {x[2]:g}\t"
            f"{v[0]:g} {v[1]:g} {v[2]:g}")


class Scenario:
    """Base scenario: every hook is a no-op."""

    name = None

    def __init__(self, params: Optional[ParticleParameters] = None,
                 output: Optional[TextIO] = None, output_dir=None):
        """
        Parameters:
            params: Run parameters (defaults if None)
            output: Stream for per-step text records (stdout if None)
            output_dir: Directory for diagnostic files written at finalize
        """
        self.params = params if params is not None else ParticleParameters()
        self.output = output
        self.output_dir = Path(output_dir) if output_dir is not None else Path('.')

    def _emit(self, line: str):
        print(line, file=self.output if self.output is not None else sys.stdout)

    def _dump(self, particles: ParticleArray, input_file_counter: int) -> bool:
        filename = self.params.output_filename(input_file_counter - 1)
        return write_particles(particles, self.output_dir / filename)

    def initial_particles(self, E, B, V) -> ParticleArray:
        return ParticleArray()

    def new_timestep(self, input_file_counter: int, step: int, time: float,
                     particles: ParticleArray, E, B, V):
        pass

    def after_push(self, step: int, time: float, particles: ParticleArray, E, B, V):
        pass

    def finalize(self, particles: ParticleArray, E, B, V):
        pass


class SingleParticleScenario(Scenario):
    """
    One particle starting at rest in the plasma frame, state printed every step.

    Parameters:
        keep_trajectory: Also collect every state in ``self.trajectory``
            (memory grows with the number of steps)
    """

    name = 'single'

    def __init__(self, *args, keep_trajectory: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.keep_trajectory = keep_trajectory
        self.trajectory = []

    def initial_particles(self, E, B, V) -> ParticleArray:
        position = np.array(self.params.init_position, dtype=np.float64)
        bulk_velocity = V(position)

        particles = ParticleArray(1)
        particles.append(Particle(self.params.mass, self.params.charge, position, bulk_velocity))
        return particles

    def after_push(self, step, time, particles, E, B, V):
        x = particles.positions[0].copy()
        v = particles.velocities[0].copy()
        if self.keep_trajectory:
            self.trajectory.append(TrajectoryPoint(0, time, x, v))
        self._emit(_format_state(0, time, x, v))


class DistributionScenario(Scenario):
    """A population drawn from a velocity distribution, all starting at one point."""

    name = 'distribution'

    def initial_particles(self, E, B, V) -> ParticleArray:
        p = self.params
        distribution = create_distribution(p, seed=p.random_seed)

        position = np.array(p.init_position, dtype=np.float64)
        bulk_velocity = V(position)

        particles = ParticleArray(p.num_particles)
        velocities = distribution.sample(p.num_particles) + bulk_velocity
        particles.extend(position, velocities, p.mass, p.charge)
        return particles

    def new_timestep(self, input_file_counter, step, time, particles, E, B, V):
        self._dump(particles, input_file_counter)

    def finalize(self, particles, E, B, V):
        write_particles(particles, self.output_dir / self.params.final_output_filename)


class PrecipitationScenario(Scenario):
    """
    Particles injected along the x axis and tracked until they precipitate.

    Every input step injects ``num_particles`` particles with evenly spaced
    start x between ``precip_start_x`` and ``precip_stop_x``. Each one starts
    at the point of minimum |B| along z at its x, found by a linear scan.
    A particle reaching ``|x| <= precip_inner_boundary`` is absorbed (latitude
    and energy recorded); one with ``x <= precip_start_x`` is lost.
    """

    name = 'precipitation'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.events = []
        self._scan = None

    def start_x(self, offset: int) -> float:
        p = self.params
        return (p.precip_start_x
                + float(offset) / p.num_particles * (p.precip_stop_x - p.precip_start_x))

    def scan_coordinates(self) -> np.ndarray:
        """z samples of the minimum-|B| search (accumulated, not multiplied)."""
        if self._scan is None:
            p = self.params
            coords = []
            z = p.precip_scan_min
            while z < p.precip_scan_max:
                coords.append(z)
                z += p.precip_scan_step
            self._scan = np.array(coords, dtype=np.float64)
        return self._scan

    def minimum_field_position(self, x: float, B) -> np.ndarray:
        """
        Point (x, 0, z) with the smallest |B| along the z scan.

        The first minimum wins on ties; if no sample beats the sentinel the
        point stays at (x, 0, 0).
        """
        z = self.scan_coordinates()
        candidates = np.zeros((len(z), 3))
        candidates[:, 0] = x
        candidates[:, 2] = z

        magnitudes = np.linalg.norm(B(candidates), axis=1)
        magnitudes = np.where(np.isnan(magnitudes), np.inf, magnitudes)

        position = np.array([x, 0.0, 0.0])
        if len(z) > 0:
            best = int(np.argmin(magnitudes))
            if magnitudes[best] < _MIN_B_SENTINEL:
                position = candidates[best]
        return position

    def new_timestep(self, input_file_counter, step, time, particles, E, B, V):
        p = self.params
        for i in range(p.num_particles):
            position = self.minimum_field_position(self.start_x(i), B)
            particles.append(Particle(p.mass, p.charge, position, V(position)))

        self._dump(particles, input_file_counter)

    def after_push(self, step, time, particles, E, B, V):
        p = self.params
        positions = particles.positions

        for i in particles.get_alive_indices():
            x = positions[i]
            start_x = self.start_x(particles.offset_in_batch(i, p.num_particles))
            start_timestep = particles.batch_of(i, p.num_particles)

            if np.linalg.norm(x) <= p.precip_inner_boundary:
                latitude = np.arctan2(x[2], x[0])
                event = PrecipitationEvent(int(i), start_timestep, start_x, latitude,
                                           particles.kinetic_energy_eV(i))
            elif x[0] <= p.precip_start_x:
                event = PrecipitationEvent(int(i), start_timestep, start_x,
                                           LOST_LATITUDE, LOST_ENERGY)
            else:
                continue

            self.events.append(event)
            self._emit(f"{event.index} {event.start_timestep} {event.start_x:f} "
                       f"{event.latitude:f} {event.energy_eV:f}")
            particles.disable(i)


class AnalysatorScenario(Scenario):
    """Particles read from a text stream (``x y z vx vy vz`` per record)."""

    name = 'analysator'

    def __init__(self, *args, input_stream: Optional[TextIO] = None,
                 keep_trajectory: bool = False, **kwargs):
        super().__init__(*args, **kwargs)
        self.input_stream = input_stream
        self.keep_trajectory = keep_trajectory
        self.trajectory = []

    @staticmethod
    def _tokens(stream):
        for line in stream:
            yield from line.split()

    def initial_particles(self, E, B, V) -> ParticleArray:
        stream = self.input_stream if self.input_stream is not None else sys.stdin
        if stream is sys.stdin:
            print("Reading initial particle data from stdin", file=sys.stderr)
            print("(format: x y z vx vy vz)", file=sys.stderr)

        particles = ParticleArray()
        record = []
        for token in self._tokens(stream):
            try:
                record.append(float(token))
            except ValueError:
                break
            if len(record) == 6:
                particles.append(Particle(self.params.mass, self.params.charge,
                                          record[:3], record[3:]))
                record = []
        return particles

    def new_timestep(self, input_file_counter, step, time, particles, E, B, V):
        positions = particles.positions
        velocities = particles.velocities
        for i in particles.get_alive_indices():
            x = positions[i].copy()
            v = velocities[i].copy()
            if self.keep_trajectory:
                self.trajectory.append(TrajectoryPoint(int(i), time, x, v))
            self._emit(_format_state(i, time, x, v))


class ShockReflectivityScenario(Scenario):
    """
    Particles injected upstream of a moving, parabolic shock front.

    The front at time t is

        x(y, t) = -(y / y0)^2 (y_scale - s (t - t_ref)) + x_offset + s (t - t_ref)

    with y0 = reflect_start_y and s the shock speed. Each input step injects
    ``num_particles`` particles at each of ``reflect_num_points`` points on
    the front. After every push, a particle more than
    ``reflect_downstream_boundary`` behind the front is transmitted, one more
    than ``reflect_upstream_boundary`` in front of it is reflected; both are
    recorded as (y, injection time) and disabled.
    """

    name = 'reflectivity'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        p = self.params
        bins = (p.histogram_bins_y, p.histogram_bins_t)
        low = (p.reflect_start_y, p.start_time)
        high = (p.reflect_stop_y, p.end_time)
        self.transmitted = Histogram2D(bins, low, high)
        self.reflected = Histogram2D(bins, low, high)

    @property
    def batch_size(self) -> int:
        return self.params.reflect_num_points * self.params.num_particles

    def shock_x(self, y, time: float):
        """x coordinate of the shock front at height ``y`` and ``time``."""
        p = self.params
        shift = p.reflect_shock_speed * (time - p.reflect_reference_time)
        x = y / p.reflect_start_y
        x = -x * x
        x = x * (p.reflect_y_scale - shift)
        return x + p.reflect_x_offset + shift

    def new_timestep(self, input_file_counter, step, time, particles, E, B, V):
        p = self.params
        distribution = create_distribution(p, seed=p.random_seed + step)

        for i in range(p.reflect_num_points):
            start_y = (p.reflect_start_y
                       + float(i) / p.reflect_num_points * (p.reflect_stop_y - p.reflect_start_y))
            position = np.array([self.shock_x(start_y, time), start_y, 0.0])
            bulk_velocity = V(position)

            velocities = distribution.sample(p.num_particles) + bulk_velocity
            particles.extend(position, velocities, p.mass, p.charge)

        self._dump(particles, input_file_counter)

    def after_push(self, step, time, particles, E, B, V):
        p = self.params
        positions = particles.positions

        for i in particles.get_alive_indices():
            x = positions[i, 0]
            y = positions[i, 1]

            front = self.shock_x(y, time)
            boundary_left = front - p.reflect_downstream_boundary
            boundary_right = front + p.reflect_upstream_boundary

            start_time = p.start_time + particles.batch_of(i, self.batch_size) * p.input_dt
            if x < boundary_left:
                self.transmitted.add_value((y, start_time))
            elif x > boundary_right:
                self.reflected.add_value((y, start_time))
            else:
                continue
            particles.disable(i)

    def finalize(self, particles, E, B, V):
        for name, histogram in (('transmitted', self.transmitted),
                                ('reflected', self.reflected)):
            data_file = self.output_dir / f"{name}.dat"
            histogram.save(data_file)
            histogram.write_bov_ascii(self.output_dir / f"{name}.dat.bov", 0, data_file)


SCENARIOS = {
    cls.name: cls for cls in (
        SingleParticleScenario,
        DistributionScenario,
        PrecipitationScenario,
        AnalysatorScenario,
        ShockReflectivityScenario,
    )
}


def create_scenario(name: str, params: Optional[ParticleParameters] = None,
                    **kwargs) -> Scenario:
    """
    Instantiate a scenario by name.

    Raises:
        ValueError: if no scenario is registered under ``name``
    """
    if name not in SCENARIOS:
        raise ValueError(f"Can't find particle pusher mode '{name}'. "
                         f"Available: {list(SCENARIOS.keys())}")
    return SCENARIOS[name](params, **kwargs)
