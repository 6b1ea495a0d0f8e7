"""Core module: Particle arena and fields."""

from particle_pusher.core.particle import ParticleArray, Particle
from particle_pusher.core.fields import (UniformField, FunctionField, GridField,
                                         FieldSnapshot, FieldSequence, StaticFields)

__all__ = ["ParticleArray", "Particle", "UniformField", "FunctionField", "GridField",
           "FieldSnapshot", "FieldSequence", "StaticFields"]
