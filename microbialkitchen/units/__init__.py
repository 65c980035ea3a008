"""
**microbialkitchen.units** provides unit-aware values for chemical
calculations.

A `Quantity` binds an ordered sequence of real values to a single unit
symbol, e.g. ``quantity([1, 2, 3], 'mM')``.  Units are looked up in a
registry which groups them by physical kind (volume, molarity,
pressure, ...).  Within a kind, units form metric families such as
``fM ... mM M`` which convert by pure scaling.  Temperature in ``C`` or
``F`` is the single offset (affine) scale and is converted via kelvin.

Arithmetic enforces compatibility:

- Addition, subtraction and comparison require the same kind and
  convert the right operand to the unit of the left operand.
- Multiplying or dividing by plain numbers or dimensionless quantities
  keeps the unit.
- A fixed set of kind combinations is supported for multiplication and
  division, e.g. molarity × volume → amount and molarity ÷ pressure →
  solubility.  Results are in the base unit of the resulting kind.
  Other combinations raise `UnsupportedOperationError`.

Derived kinds such as `gas_solubility` or `gas_pressure` additionally
restrict the legal units.  Calculation functions check their arguments
with `require_quantity` and predicates like `is_pressure`.

Examples
--------
>>> from microbialkitchen.units import quantity, volume
>>> conc = quantity(10, 'mM')
>>> print(conc + quantity(0.5, 'M'))
510 mM
>>> print((conc * volume(250, 'mL')).auto_scale())
2.5 mmol
"""

from .exception import (UnitsError, UnknownUnitError,
                        IncompatibleUnitError, UnsupportedOperationError,
                        InvalidUnitForKindError, WrongQuantityKindError,
                        RegistryLockedError)
from ._base import (UnitKind, UnitDefinition, UnitRegistry,
                    DEFAULT_REGISTRY, METRIC_PREFIXES, lookup, kind_of,
                    convert)
from . import _defs  # Populates DEFAULT_REGISTRY.
from ._quantity import (Quantity, quantity, convert_quantity,
                        extract_value, best_unit, auto_scale,
                        format_quantity, combine_quantities)
from ._kinds import (DerivedKind, volume, mass, molecular_weight, amount,
                     molarity_concentration, mass_concentration, pressure,
                     gas_pressure, gas_solubility, temperature, is_quantity,
                     is_dimensionless, is_volume, is_mass,
                     is_molecular_weight, is_amount,
                     is_molarity_concentration, is_mass_concentration,
                     is_pressure, is_gas_pressure, is_gas_solubility,
                     is_temperature, require_quantity)
