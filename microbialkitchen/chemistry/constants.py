"""
Physical and chemical constants used by the calculation functions.
Both the scalar constants and the gas solubility table can be replaced
by passing an alternative mapping / table to the accessor functions.
"""
from __future__ import annotations

from typing import Mapping

import pandas as pd

from ..units import temperature
from .exception import AmbiguousConstantsError, MissingConstantsError

# ======================================================================

_CONSTANTS = {
    'R_in_L_bar_per_K_mol': 0.08314462618,  # Ideal gas constant.
    'pKa1_carbonic_acid': 6.35,
    'pKa2_carbonic_acid': 10.33,
    'pKw': 14.0,  # Water at 25 °C.
}

# Default temperature of calculations that accept one.
STANDARD_TEMPERATURE = temperature(25.0, 'C')

# Henry's law solubility constants with van't Hoff temperature
# dependence, see `calculate_gas_solubility`.  From: Sander, R.
# Compilation of Henry's law constants (version 4.0) for water as
# solvent. Atmos Chem Phys 15, 4399-4981 (2015).
#   H0: M/bar at T0 (= 100 * mol/m^3/Pa).
#   vant_hoff_slope: d(ln H)/d(1/T) in K.
#   T0: reference temperature in K.
_GAS_SOLUBILITY = pd.DataFrame({
    'gas': ['CO2'],
    'H0': [3.3e-4 * 100],
    'vant_hoff_slope': [2400.0],
    'T0': [298.15],
})

_GAS_COLUMNS = ('gas', 'H0', 'vant_hoff_slope', 'T0')


# ----------------------------------------------------------------------

def get_constant(name: str, constants: Mapping[str, float] = None
                 ) -> float:
    """
    Return the constant `name` from `constants`, or from the package
    defaults if not given.

    Raises
    ------
    MissingConstantsError
        If no constant of that name exists.
    """
    constants = _CONSTANTS if constants is None else constants
    try:
        return float(constants[name])
    except KeyError:
        raise MissingConstantsError(f"No constant named '{name}'.",
                                    name=name) from None


def get_constants() -> dict[str, float]:
    """Return a copy of the default constants."""
    return dict(_CONSTANTS)


def get_gas_solubility_table() -> pd.DataFrame:
    """
    Return a copy of the default gas solubility table.  This can be
    extended with further rows and passed to `calculate_gas_solubility`
    as `constants`.

    >>> table = get_gas_solubility_table()
    >>> list(table.columns)
    ['gas', 'H0', 'vant_hoff_slope', 'T0']
    """
    return _GAS_SOLUBILITY.copy()


def find_gas_constants(gas: str, table: pd.DataFrame = None) -> pd.Series:
    """
    Find the solubility constants of `gas`.

    Parameters
    ----------
    gas : str
        Gas name, e.g. ``'CO2'``.
    table : DataFrame, optional
        Table with columns ``gas``, ``H0``, ``vant_hoff_slope`` and
        ``T0``.  Defaults to the package table.

    Returns
    -------
    Series
        The single matching row.

    Raises
    ------
    MissingConstantsError
        If no row matches `gas`.
    AmbiguousConstantsError
        If more than one row matches `gas`.
    ValueError
        If `table` lacks any of the required columns.
    """
    table = _GAS_SOLUBILITY if table is None else table
    missing = [c for c in _GAS_COLUMNS if c not in table.columns]
    if missing:
        raise ValueError(f"Gas solubility table is missing columns: "
                         f"{', '.join(missing)}.")

    rows = table[table['gas'] == gas]
    if len(rows) == 0:
        raise MissingConstantsError(f"No constants stored for gas "
                                    f"'{gas}'.", gas=gas)
    elif len(rows) > 1:
        raise AmbiguousConstantsError(f"More than one set of constants "
                                      f"for gas '{gas}'.", gas=gas)
    return rows.iloc[0]
