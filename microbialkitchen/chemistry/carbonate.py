r"""
Carbonate system calculations.

Dissolved inorganic carbon (DIC) is partitioned between carbonic acid
(:math:`H_2CO_3^*`, i.e. dissolved CO2 plus true carbonic acid),
bicarbonate and carbonate according to the fractions

.. math::
    \alpha_0 = \frac{h^2}{D}, \quad \alpha_1 = \frac{K_1 h}{D}, \quad
    \alpha_2 = \frac{K_1 K_2}{D}, \quad D = h^2 + K_1 h + K_1 K_2

where :math:`h = 10^{-pH}`.  Carbonate alkalinity including water is
:math:`TA = DIC (\alpha_1 + 2 \alpha_2) + K_w / h - h`.

In an *open system* the solution is equilibrated with a gas phase of
fixed CO2 partial pressure so that :math:`[H_2CO_3^*] = K_H pCO_2`.  In a
*closed system* a liquid volume :math:`V_l` and a headspace volume
:math:`V_g` share a fixed total inorganic carbon (TIC, expressed per
litre of liquid), split between the dissolved and gas phases.

pH values are plain numbers (or dimensionless quantities) on input and
are returned as NumPy arrays.  Functions solving for pH use a bracketed
root search with the `ph_bounds`, `ph_xtol` and `ph_maxiter` options.
"""
from __future__ import annotations

import numpy as np
import numpy.typing as npt
import pandas as pd

from .._opts import get_options
from ..solve import solve_rows
from ..tabular import make_column
from ..units import (Quantity, extract_value, gas_pressure,
                     is_dimensionless, is_gas_pressure,
                     is_molarity_concentration, is_temperature, is_volume,
                     molarity_concentration, require_quantity)
from .constants import STANDARD_TEMPERATURE, get_constant
from .gas import calculate_gas_solubility


# ======================================================================

def calculate_carbonic_acid(pH: npt.ArrayLike, DIC: Quantity) -> Quantity:
    """
    Calculate the carbonic acid (:math:`H_2CO_3^*`) concentration at the
    given pH and dissolved inorganic carbon.  Returned in the unit of
    `DIC`.
    """
    alpha_0, _, _ = _alphas(_hydrogen_ion(pH))
    return _times_dic(DIC, alpha_0)


def calculate_bicarbonate(pH: npt.ArrayLike, DIC: Quantity) -> Quantity:
    """Calculate the bicarbonate concentration.  See
    `calculate_carbonic_acid`."""
    _, alpha_1, _ = _alphas(_hydrogen_ion(pH))
    return _times_dic(DIC, alpha_1)


def calculate_carbonate(pH: npt.ArrayLike, DIC: Quantity) -> Quantity:
    """Calculate the carbonate concentration.  See
    `calculate_carbonic_acid`."""
    _, _, alpha_2 = _alphas(_hydrogen_ion(pH))
    return _times_dic(DIC, alpha_2)


def calculate_carbonate_speciation(pH: npt.ArrayLike, DIC: Quantity
                                   ) -> pd.DataFrame:
    """
    Calculate the full carbonate speciation.

    Returns
    -------
    DataFrame
        Columns ``pH``, ``DIC``, ``H2CO3*``, ``HCO3-`` and ``CO3-2``,
        with concentrations as quantity columns in the unit of `DIC`.

    Examples
    --------
    >>> from microbialkitchen.units import quantity
    >>> df = calculate_carbonate_speciation([6.35, 10.33],
    ...                                     quantity(2, 'mM'))
    >>> df.columns.tolist()
    ['pH', 'DIC', 'H2CO3*', 'HCO3-', 'CO3-2']
    """
    h = _hydrogen_ion(pH)
    require_quantity(DIC, is_molarity_concentration, 'DIC')
    h, dic = np.broadcast_arrays(h, DIC.to_value())
    dic = molarity_concentration(dic, DIC.unit)
    alphas = _alphas(h)
    return pd.DataFrame({
        'pH': -np.log10(h),
        'DIC': make_column(dic),
        'H2CO3*': make_column(dic * alphas[0]),
        'HCO3-': make_column(dic * alphas[1]),
        'CO3-2': make_column(dic * alphas[2]),
    })


# -- Open System -------------------------------------------------------

def calculate_open_system_DIC(pH: npt.ArrayLike, pCO2: Quantity,
                              temperature: Quantity = STANDARD_TEMPERATURE
                              ) -> Quantity:
    """
    Calculate the dissolved inorganic carbon of a solution in
    equilibrium with a gas phase of CO2 partial pressure `pCO2`.

    Parameters
    ----------
    pH : float or array-like
        Solution pH.
    pCO2 : Quantity
        CO2 partial pressure.
    temperature : Quantity, default = 25 °C
        Temperature used for the CO2 solubility.

    Returns
    -------
    Quantity
        DIC as a molarity concentration in ``M``.
    """
    h = _hydrogen_ion(pH)
    pCO2_bar, KH = _open_system_args(pCO2, temperature)
    alpha_0, _, _ = _alphas(h)
    return molarity_concentration(KH * pCO2_bar / alpha_0, 'M')


def calculate_open_system_alkalinity(
        pH: npt.ArrayLike, pCO2: Quantity,
        temperature: Quantity = STANDARD_TEMPERATURE) -> Quantity:
    """
    Calculate the alkalinity of an open system solution at the given pH.
    Returned as a molarity concentration in ``M``.  See
    `calculate_open_system_DIC`.
    """
    h = _hydrogen_ion(pH)
    pCO2_bar, KH = _open_system_args(pCO2, temperature)
    return molarity_concentration(_open_alkalinity(h, pCO2_bar, KH), 'M')


def calculate_open_system_pH(pCO2: Quantity, alkalinity: Quantity,
                             temperature: Quantity = STANDARD_TEMPERATURE
                             ) -> np.ndarray:
    """
    Calculate the pH of an open system solution with the given
    alkalinity by solving the charge balance.

    Returns
    -------
    ndarray
        pH of each row.  Rows with missing inputs give NaN.

    Raises
    ------
    SolverError
        If the pH is outside the `ph_bounds` option for some row.
    """
    pCO2_bar, KH = _open_system_args(pCO2, temperature)
    require_quantity(alkalinity, is_molarity_concentration, 'alkalinity')

    def balance(pH, p, kh):
        return _open_alkalinity(10.0 ** -pH, p, kh)

    return _solve_pH(balance, extract_value(alkalinity, 'M'), pCO2_bar, KH)


# -- Closed System -----------------------------------------------------

def calculate_closed_system_DIC(pH: npt.ArrayLike, TIC: Quantity,
                                V_liquid: Quantity, V_gas: Quantity,
                                temperature: Quantity = STANDARD_TEMPERATURE
                                ) -> Quantity:
    """
    Calculate the dissolved inorganic carbon in a closed vessel where
    the total inorganic carbon is partitioned between the liquid and the
    headspace.

    Parameters
    ----------
    pH : float or array-like
        Solution pH.
    TIC : Quantity
        Total inorganic carbon of the vessel per volume of liquid.
    V_liquid, V_gas : Quantity
        Volumes of the liquid and the headspace.
    temperature : Quantity, default = 25 °C
        Temperature of the system.

    Returns
    -------
    Quantity
        DIC as a molarity concentration in ``M``.
    """
    h = _hydrogen_ion(pH)
    args = _closed_system_args(TIC, V_liquid, V_gas, temperature)
    return molarity_concentration(_closed_dic(h, *args), 'M')


def calculate_closed_system_pCO2(pH: npt.ArrayLike, TIC: Quantity,
                                 V_liquid: Quantity, V_gas: Quantity,
                                 temperature: Quantity = STANDARD_TEMPERATURE
                                 ) -> Quantity:
    """
    Calculate the headspace CO2 partial pressure of a closed system.
    Returned as a gas pressure in ``bar``.  See
    `calculate_closed_system_DIC`.
    """
    h = _hydrogen_ion(pH)
    args = _closed_system_args(TIC, V_liquid, V_gas, temperature)
    alpha_0, _, _ = _alphas(h)
    KH = args[3]
    return gas_pressure(_closed_dic(h, *args) * alpha_0 / KH, 'bar')


def calculate_closed_system_TIC(pH: npt.ArrayLike, pCO2: Quantity,
                                V_liquid: Quantity, V_gas: Quantity,
                                temperature: Quantity = STANDARD_TEMPERATURE
                                ) -> Quantity:
    """
    Calculate the total inorganic carbon (per volume of liquid) of a
    closed system with headspace CO2 partial pressure `pCO2` at the
    given pH.  This is the inverse of `calculate_closed_system_pCO2`.
    Returned as a molarity concentration in ``M``.
    """
    h = _hydrogen_ion(pH)
    pCO2_bar, KH = _open_system_args(pCO2, temperature)
    require_quantity(V_liquid, is_volume, 'V_liquid')
    require_quantity(V_gas, is_volume, 'V_gas')

    alpha_0, _, _ = _alphas(h)
    dic = KH * pCO2_bar / alpha_0
    gas_mol_per_L = pCO2_bar / (get_constant('R_in_L_bar_per_K_mol') *
                                extract_value(temperature, 'K'))
    TIC = dic + gas_mol_per_L * (extract_value(V_gas, 'L') /
                                 extract_value(V_liquid, 'L'))
    return molarity_concentration(TIC, 'M')


def calculate_closed_system_alkalinity(
        pH: npt.ArrayLike, TIC: Quantity, V_liquid: Quantity,
        V_gas: Quantity, temperature: Quantity = STANDARD_TEMPERATURE
) -> Quantity:
    """
    Calculate the alkalinity of a closed system at the given pH.
    Returned as a molarity concentration in ``M``.  See
    `calculate_closed_system_DIC`.
    """
    h = _hydrogen_ion(pH)
    args = _closed_system_args(TIC, V_liquid, V_gas, temperature)
    return molarity_concentration(_closed_alkalinity(h, *args), 'M')


def calculate_closed_system_pH(TIC: Quantity, alkalinity: Quantity,
                               V_liquid: Quantity, V_gas: Quantity,
                               temperature: Quantity = STANDARD_TEMPERATURE
                               ) -> np.ndarray:
    """
    Calculate the pH of a closed system with the given alkalinity by
    solving the charge balance.  See `calculate_open_system_pH` for the
    return value and errors.
    """
    args = _closed_system_args(TIC, V_liquid, V_gas, temperature)
    require_quantity(alkalinity, is_molarity_concentration, 'alkalinity')

    def balance(pH, *row):
        return _closed_alkalinity(10.0 ** -pH, *row)

    return _solve_pH(balance, extract_value(alkalinity, 'M'), *args)


# -- Private Functions -------------------------------------------------

def _hydrogen_ion(pH) -> np.ndarray:
    if isinstance(pH, Quantity):
        require_quantity(pH, is_dimensionless, 'pH')
        pH = pH.to_value()
    elif isinstance(pH, (str, bytes)):
        raise TypeError(f"pH must be numeric, got {pH!r}.")
    return 10.0 ** -np.atleast_1d(np.asarray(pH, dtype=float))


def _acid_constants() -> tuple[float, float, float]:
    return (10.0 ** -get_constant('pKa1_carbonic_acid'),
            10.0 ** -get_constant('pKa2_carbonic_acid'),
            10.0 ** -get_constant('pKw'))


def _alphas(h):
    """Fractions of DIC as carbonic acid, bicarbonate and carbonate."""
    K1, K2, _ = _acid_constants()
    denom = h * h + K1 * h + K1 * K2
    return h * h / denom, K1 * h / denom, K1 * K2 / denom


def _alkalinity(h, dic):
    _, alpha_1, alpha_2 = _alphas(h)
    Kw = _acid_constants()[2]
    return dic * (alpha_1 + 2 * alpha_2) + Kw / h - h


def _open_alkalinity(h, pCO2_bar, KH):
    alpha_0, _, _ = _alphas(h)
    return _alkalinity(h, KH * pCO2_bar / alpha_0)


def _closed_dic(h, TIC_M, V_liquid_L, V_gas_L, KH, T_K):
    alpha_0, _, _ = _alphas(h)
    RT = get_constant('R_in_L_bar_per_K_mol') * T_K
    return TIC_M * V_liquid_L / (V_liquid_L + V_gas_L * alpha_0 / (KH * RT))


def _closed_alkalinity(h, *args):
    return _alkalinity(h, _closed_dic(h, *args))


def _times_dic(DIC: Quantity, fraction: np.ndarray) -> Quantity:
    require_quantity(DIC, is_molarity_concentration, 'DIC')
    return DIC * fraction


def _open_system_args(pCO2: Quantity, temperature: Quantity):
    """Return (pCO2 in bar, CO2 solubility in M/bar)."""
    require_quantity(pCO2, is_gas_pressure, 'pCO2')
    require_quantity(temperature, is_temperature, 'temperature')
    KH = extract_value(calculate_gas_solubility('CO2', temperature),
                       'M/bar')
    return extract_value(pCO2, 'bar'), KH


def _closed_system_args(TIC: Quantity, V_liquid: Quantity,
                        V_gas: Quantity, temperature: Quantity):
    """Return (TIC in M, V_liquid in L, V_gas in L, KH in M/bar, T in K)."""
    require_quantity(TIC, is_molarity_concentration, 'TIC')
    require_quantity(V_liquid, is_volume, 'V_liquid')
    require_quantity(V_gas, is_volume, 'V_gas')
    require_quantity(temperature, is_temperature, 'temperature')
    KH = extract_value(calculate_gas_solubility('CO2', temperature),
                       'M/bar')
    return (extract_value(TIC, 'M'), extract_value(V_liquid, 'L'),
            extract_value(V_gas, 'L'), KH, extract_value(temperature, 'K'))


def _solve_pH(balance, alkalinity_M: np.ndarray, *args) -> np.ndarray:
    opts = get_options()
    return solve_rows(balance, alkalinity_M, *args, x_range=opts.ph_bounds,
                      xtol=opts.ph_xtol, maxiter=opts.ph_maxiter)
