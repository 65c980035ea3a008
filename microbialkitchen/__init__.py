"""
**microbialkitchen** provides unit-aware chemical quantities and common
chemistry calculations for microbiology and geochemistry work:

- `microbialkitchen.units`: quantities with units, conversion, derived
  kinds (molarity, gas solubility, ...) and argument checks.
- `microbialkitchen.tabular`: quantity columns for pandas tables.
- `microbialkitchen.chemistry`: gas solubility, ideal gas law and
  carbonate system calculations.

The most commonly used names are available directly from this package.

Examples
--------
>>> from microbialkitchen import (quantity, temperature, pressure,
...                               calculate_ideal_gas_molarity)
>>> c = calculate_ideal_gas_molarity(pressure(1, 'atm'),
...                                  temperature(0, 'C'))
>>> print(c.format('.3g', auto_scale=True)[0])
44.6 mM
"""

__version__ = "0.1.0"

import sys

assert sys.version_info >= (3, 10)

from ._opts import Options, get_options, set_options, options
from .units import (Quantity, UnitKind, DEFAULT_REGISTRY, quantity, convert,
                    convert_quantity, extract_value, auto_scale,
                    best_unit, format_quantity, combine_quantities,
                    volume, mass, molecular_weight, amount,
                    molarity_concentration, mass_concentration, pressure,
                    gas_pressure, gas_solubility, temperature,
                    require_quantity, is_quantity, is_dimensionless,
                    is_volume, is_mass, is_molecular_weight, is_amount,
                    is_molarity_concentration, is_mass_concentration,
                    is_pressure, is_gas_pressure, is_gas_solubility,
                    is_temperature)
from .tabular import (QuantityDtype, QuantityArray, make_column,
                      is_quantity_column, explicitize_units,
                      implicitize_units)
from .chemistry import (calculate_ideal_gas_molarity,
                        calculate_ideal_gas_amount,
                        calculate_gas_solubility, calculate_carbonic_acid,
                        calculate_bicarbonate, calculate_carbonate,
                        calculate_carbonate_speciation,
                        calculate_open_system_DIC,
                        calculate_open_system_alkalinity,
                        calculate_open_system_pH,
                        calculate_closed_system_DIC,
                        calculate_closed_system_pCO2,
                        calculate_closed_system_TIC,
                        calculate_closed_system_alkalinity,
                        calculate_closed_system_pH)
