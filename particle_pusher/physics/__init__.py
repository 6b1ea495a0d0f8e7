"""Physics module: Boris pusher and velocity distributions."""

from particle_pusher.physics.boris import push, push_particles
from particle_pusher.physics.distribution import create_distribution

__all__ = ["push", "push_particles", "create_distribution"]
