"""Transport module: scenarios and the run loop."""

from particle_pusher.transport.scenario import create_scenario
from particle_pusher.transport.driver import ParticleDriver

__all__ = ["create_scenario", "ParticleDriver"]
