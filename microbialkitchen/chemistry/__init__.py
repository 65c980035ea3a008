"""
**microbialkitchen.chemistry** provides closed-form chemistry
calculations built on unit-aware quantities: ideal gas relations, gas
solubility (Henry's law) and the carbonate system in open and closed
settings.

Each function checks the kind of every quantity argument first (see
`microbialkitchen.units.require_quantity`), so that passing, for
example, a concentration where a pressure is expected fails with a
clear `WrongQuantityKindError`.
"""

from .exception import (ConstantsError, MissingConstantsError,
                        AmbiguousConstantsError)
from .constants import (STANDARD_TEMPERATURE, get_constant, get_constants,
                        get_gas_solubility_table, find_gas_constants)
from .gas import (calculate_ideal_gas_molarity, calculate_ideal_gas_amount,
                  calculate_gas_solubility)
from .carbonate import (calculate_carbonic_acid, calculate_bicarbonate,
                        calculate_carbonate, calculate_carbonate_speciation,
                        calculate_open_system_DIC,
                        calculate_open_system_alkalinity,
                        calculate_open_system_pH,
                        calculate_closed_system_DIC,
                        calculate_closed_system_pCO2,
                        calculate_closed_system_TIC,
                        calculate_closed_system_alkalinity,
                        calculate_closed_system_pH)
