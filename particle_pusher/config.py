"""
Run parameters and YAML loading.

A parameter file is a flat YAML mapping, optionally nested under a top-level
``particles:`` key:

    particles:
      mode: precipitation
      num_particles: 64
      dt: 0.01
"""

import re
import yaml
from dataclasses import dataclass, fields
from pathlib import Path

from particle_pusher.constants import PROTON_MASS, ELEMENTARY_CHARGE


_INT_PLACEHOLDER = re.compile(r'%[-+ 0#]*\d*[diu]')


@dataclass
class ParticleParameters:
    """All knobs of a particle run (SI units)."""

    mode: str = 'distribution'
    input_filename_pattern: str = 'bulk.%07i.h5'
    output_filename_pattern: str = 'particles.%07i.h5'
    final_output_filename: str = 'particles_final.h5'

    # Start point for single / distribution modes
    init_x: float = 0.0
    init_y: float = 0.0
    init_z: float = 0.0

    # Injected population
    num_particles: int = 10000
    random_seed: int = 42
    distribution: str = 'maxwell'
    temperature: float = 1e6            # K
    particle_vel: float = 0.0           # m/s, monoenergetic speed
    mass: float = PROTON_MASS
    charge: float = ELEMENTARY_CHARGE

    # Time stepping
    start_time: float = 0.0
    end_time: float = 100.0
    input_dt: float = 1.0
    dt: float = 0.01

    # Precipitation
    precip_inner_boundary: float = 2.0e7
    precip_start_x: float = -2.0e8
    precip_stop_x: float = -1.0e8
    precip_scan_min: float = -1e7
    precip_scan_max: float = 1e7
    precip_scan_step: float = 1e5

    # Shock reflectivity
    reflect_start_y: float = 5.814e7
    reflect_stop_y: float = -5.814e7
    reflect_y_scale: float = 6.0e7
    reflect_x_offset: float = 5.3e7
    reflect_shock_speed: float = 10e6 / 435.
    reflect_reference_time: float = 250.
    reflect_upstream_boundary: float = 2.0e7
    reflect_downstream_boundary: float = 2.0e7
    reflect_num_points: int = 200
    histogram_bins_y: int = 200
    histogram_bins_t: int = 600

    def __post_init__(self):
        # '%%' is a literal percent sign, not a placeholder
        unescaped = self.output_filename_pattern.replace('%%', '')
        if len(_INT_PLACEHOLDER.findall(unescaped)) != 1:
            raise ValueError("output_filename_pattern must contain exactly one integer "
                             f"placeholder, got '{self.output_filename_pattern}'")
        if self.num_particles < 0:
            raise ValueError(f"num_particles must be >= 0, got {self.num_particles}")
        if self.input_dt <= 0 or self.dt <= 0:
            raise ValueError(f"dt and input_dt must be positive (dt={self.dt}, "
                             f"input_dt={self.input_dt})")

    @property
    def init_position(self):
        return (self.init_x, self.init_y, self.init_z)

    def output_filename(self, index: int) -> str:
        return self.output_filename_pattern % index

    @classmethod
    def from_dict(cls, values: dict) -> 'ParticleParameters':
        known = {f.name: f.type for f in fields(cls)}
        unknown = sorted(set(values) - set(known))
        if unknown:
            raise ValueError(f"Unknown parameter(s) {unknown}. "
                             f"Available: {sorted(known)}")
        # YAML 1.1 reads exponent literals such as 1e6 as strings
        return cls(**{key: known[key](value) for key, value in values.items()})


def load_parameters(path) -> ParticleParameters:
    """Load ParticleParameters from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Parameter file not found: {path}")

    with open(path) as f:
        values = yaml.safe_load(f) or {}

    if 'particles' in values and isinstance(values['particles'], dict):
        values = values['particles']
    return ParticleParameters.from_dict(values)
