"""Physical constants and abundances for the ionization front models.

All values are in cgs units.  Fundamental constants follow CODATA 2018;
the abundances and the hydrogen cross section are the values used by the
classic one-dimensional photo-ionization test problems.
"""
from __future__ import annotations

# Boltzmann constant (erg K^-1)
K_B: float = 1.380649e-16

# Proton mass (g)
M_P: float = 1.67262192369e-24

# Julian year (s)
YEAR: float = 3.15576e7

# Parsec and multiples (cm)
PC: float = 3.0856775814913673e18
KPC: float = 1.0e3 * PC
MPC: float = 1.0e6 * PC

# 100 km s^-1 Mpc^-1 expressed in s^-1; H0 = h * H0_UNIT
H0_UNIT: float = 1.0e7 / MPC

# Helium abundance by number relative to all nuclei
ABU_HE: float = 0.074
ABU_H: float = 1.0 - ABU_HE

# Trace species (carbon) contributing free electrons even in neutral gas
ABU_C: float = 7.1e-7

# Mean molecular weight per hydrogen-equivalent particle
MU: float = (1.0 - ABU_HE) + 4.0 * ABU_HE

# Hydrogen photo-ionization cross section at the Lyman limit (cm^2)
SIGMA_H: float = 6.30e-18

# Case-B recombination coefficient fit: alpha_B = ALPHA_B_1E4 * (T / 1e4)^ALPHA_B_SLOPE
ALPHA_B_1E4: float = 2.59e-13
ALPHA_B_SLOPE: float = -0.7
# Temperature range (K) over which the fit is calibrated
ALPHA_B_T_RANGE: tuple = (1.0e3, 1.0e5)

# Floor on neutral and ionized fractions
FRACTION_MIN: float = 1.0e-14

__all__ = [
    "K_B",
    "M_P",
    "YEAR",
    "PC",
    "KPC",
    "MPC",
    "H0_UNIT",
    "ABU_HE",
    "ABU_H",
    "ABU_C",
    "MU",
    "SIGMA_H",
    "ALPHA_B_1E4",
    "ALPHA_B_SLOPE",
    "ALPHA_B_T_RANGE",
    "FRACTION_MIN",
]
