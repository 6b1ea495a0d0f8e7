"""I/O module: particle dumps and histogram event logs."""

from particle_pusher.io.writer import Writer, write_particles
from particle_pusher.io.histogram import Histogram2D

__all__ = ["Writer", "write_particles", "Histogram2D"]
