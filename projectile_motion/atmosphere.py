"""
Atmosphere Model
================
Air temperature, pressure and density as functions of altitude, using the
NASA Glenn Research Center "Earth Atmosphere Model":

  - Troposphere (h < 11 km): linear lapse
  - Lower stratosphere (11 km ≤ h < 25 km): isothermal, exponential pressure
  - Upper stratosphere (h ≥ 25 km): slow warming

Temperature in °C, pressure in kPa, density in kg/m³.

Reference: https://www.grc.nasa.gov/www/k-12/airplane/atmosmet.html
"""

import numpy as np


# ── Model constants ───────────────────────────────────────────────────────
TROPOPAUSE_ALT = 11000.0        # m
STRATOSPHERE_SPLIT_ALT = 25000.0  # m
KELVIN_OFFSET = 273.1           # as used by the GRC fit
GAS_CONSTANT_KPA = 0.2869       # kJ/(kg·K), gives ρ in kg/m³ from p in kPa


def air_temperature(altitude: float) -> float:
    """Air temperature (°C) at the given altitude (m)."""
    if altitude < TROPOPAUSE_ALT:
        return 15.04 - 0.00649 * altitude
    elif altitude < STRATOSPHERE_SPLIT_ALT:
        return -56.46
    else:
        return -131.21 + 0.00299 * altitude


def air_pressure(altitude: float) -> float:
    """Air pressure (kPa) at the given altitude (m)."""
    temperature = air_temperature(altitude)
    if altitude < TROPOPAUSE_ALT:
        return 101.29 * ((temperature + KELVIN_OFFSET) / 288.08) ** 5.256
    elif altitude < STRATOSPHERE_SPLIT_ALT:
        return 22.65 * np.exp(1.73 - 0.000157 * altitude)
    else:
        return 2.488 * ((temperature + KELVIN_OFFSET) / 216.6) ** -11.388


def air_density(altitude: float, air_resistance_on: bool = True) -> float:
    """
    Air density (kg/m³) from the equation of state ρ = p / (R·T).

    Returns 0 when air resistance is switched off, which removes drag
    from every trajectory without special-casing it elsewhere.
    """
    if not air_resistance_on:
        return 0.0
    temperature = air_temperature(altitude)
    pressure = air_pressure(altitude)
    return float(pressure / (GAS_CONSTANT_KPA * (temperature + KELVIN_OFFSET)))


# ── Vectorized version for plotting ───────────────────────────────────────
def atmosphere_profile(alt_array: np.ndarray) -> dict:
    """
    Compute the atmospheric profile for an array of altitudes.
    Returns dict with keys: 'altitude', 'temperature', 'pressure', 'density'.
    """
    T = np.array([air_temperature(h) for h in alt_array])
    P = np.array([air_pressure(h) for h in alt_array])
    rho = np.array([air_density(h) for h in alt_array])
    return {
        'altitude': alt_array,
        'temperature': T,
        'pressure': P,
        'density': rho,
    }


if __name__ == "__main__":
    print("Atmosphere Model Verification")
    print("=" * 48)
    print(f"{'Alt (m)':>10} {'T (°C)':>10} {'P (kPa)':>12} {'ρ (kg/m³)':>12}")
    print("-" * 48)
    for h in [0, 1000, 2000, 3000, 4000, 5000]:
        print(f"{h:>10.0f} {air_temperature(h):>10.2f} "
              f"{air_pressure(h):>12.3f} {air_density(h):>12.5f}")
