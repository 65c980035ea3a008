from __future__ import annotations

import warnings

import numpy as np
import pandas as pd

from ..units import (Quantity, extract_value, gas_solubility, is_pressure,
                     is_temperature, is_volume, molarity_concentration,
                     require_quantity)
from .constants import find_gas_constants, get_constant

# Range of liquid water at atmospheric pressure, in K.  The van't Hoff
# extrapolation of solubility constants is not reliable outside it.
_SOLUBILITY_T_RANGE = (273.15, 373.15)


# ======================================================================

def calculate_ideal_gas_molarity(pressure: Quantity,
                                 temperature: Quantity) -> Quantity:
    """
    Calculate the gas phase equivalent concentration of an ideal gas,
    i.e. mol of gas per L of volume, :math:`n/V = P/(RT)`.

    Parameters
    ----------
    pressure : Quantity
        Pressure of the gas.
    temperature : Quantity
        Temperature of the gas.

    Returns
    -------
    Quantity
        Molarity concentration in ``M``.

    Examples
    --------
    >>> from microbialkitchen.units import pressure, temperature
    >>> c = calculate_ideal_gas_molarity(pressure(1, 'atm'),
    ...                                  temperature(0, 'C'))
    >>> print(c.format('.4f')[0])
    0.0446 M
    """
    require_quantity(pressure, is_pressure, 'pressure')
    require_quantity(temperature, is_temperature, 'temperature')

    temperature_K = extract_value(temperature, 'K')
    pressure_bar = extract_value(pressure, 'bar')
    R_ideal = get_constant('R_in_L_bar_per_K_mol')
    molarity_M = pressure_bar / (R_ideal * temperature_K)
    return molarity_concentration(molarity_M, 'M')


def calculate_ideal_gas_amount(pressure: Quantity, temperature: Quantity,
                               volume: Quantity) -> Quantity:
    """
    Calculate the amount of an ideal gas at a specific pressure,
    temperature and volume.  Returns an amount quantity in ``mol``.
    """
    molarity = calculate_ideal_gas_molarity(pressure, temperature)
    require_quantity(volume, is_volume, 'volume')
    return molarity * volume


def calculate_gas_solubility(gas: str, temperature: Quantity,
                             constants: pd.DataFrame = None) -> Quantity:
    r"""
    Calculate the Henry's law solubility constant of a gas at a specific
    temperature using the van't Hoff equation:

    .. math:: K_H = H_0 \exp\left(S \left(\frac{1}{T} -
              \frac{1}{T_0}\right)\right)

    Parameters
    ----------
    gas : str
        Name of the gas, e.g. ``'CO2'``.
    temperature : Quantity
        Temperature of the solution.
    constants : DataFrame, optional
        Gas solubility table, see `get_gas_solubility_table`.  Defaults
        to the package table.

    Returns
    -------
    Quantity
        Gas solubility in ``M/bar``.

    Raises
    ------
    ValueError
        If `gas` is missing.
    MissingConstantsError, AmbiguousConstantsError
        If `constants` does not hold exactly one entry for `gas`.

    Warns
    -----
    UserWarning
        If any temperature is outside 0 - 100 °C.
    """
    if not gas:
        raise ValueError("No gas given.")
    gas_constants = find_gas_constants(gas, constants)
    require_quantity(temperature, is_temperature, 'temperature')

    temperature_K = extract_value(temperature, 'K')
    lo, hi = _SOLUBILITY_T_RANGE
    if np.any((temperature_K < lo) | (temperature_K > hi)):
        warnings.warn(f"Temperature outside {lo:g} - {hi:g} K, solubility "
                      f"of {gas} is extrapolated.", stacklevel=2)

    KH = gas_constants['H0'] * np.exp(
        gas_constants['vant_hoff_slope'] *
        (1 / temperature_K - 1 / gas_constants['T0']))
    return gas_solubility(KH, 'M/bar')
