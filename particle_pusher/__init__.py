"""
particle_pusher: test-particle tracing through precomputed plasma fields

Integrates charged-particle trajectories through time-varying E, B and bulk
velocity fields from an external plasma simulation, with scenario-specific
injection, boundary and diagnostic logic.

Modules:
    core: Particle arena, field sampling
    physics: Boris pusher, velocity distributions
    transport: Scenarios and the run loop
    io: Particle dumps, reflectivity event logs
"""

__version__ = "0.1.0"

from particle_pusher.config import ParticleParameters, load_parameters
from particle_pusher.core.particle import ParticleArray, Particle
from particle_pusher.physics.boris import push, push_particles
from particle_pusher.transport.scenario import Scenario, create_scenario, SCENARIOS
from particle_pusher.transport.driver import ParticleDriver

__all__ = [
    "ParticleParameters",
    "load_parameters",
    "ParticleArray",
    "Particle",
    "push",
    "push_particles",
    "Scenario",
    "create_scenario",
    "SCENARIOS",
    "ParticleDriver",
]
