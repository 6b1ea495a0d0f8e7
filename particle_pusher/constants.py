"""Physical constants (SI)."""

SPEED_OF_LIGHT = 299792458.0            # m/s
PROTON_MASS = 1.672621898e-27           # kg
ELEMENTARY_CHARGE = 1.6021766208e-19    # C
BOLTZMANN = 1.38064852e-23              # J/K
