from ._base import DEFAULT_REGISTRY as _reg, UnitKind

# == Base Unit Definitions =============================================

# -- Dimensionless -----------------------------------------------------

_reg.set_base_unit('', UnitKind.DIMENSIONLESS)

# -- Volume ------------------------------------------------------------

_reg.set_base_unit('L', UnitKind.VOLUME)
_reg.add_metric_units(UnitKind.VOLUME, 'L', prefixes=['p', 'n', 'µ', 'm'])

# -- Mass --------------------------------------------------------------

_reg.set_base_unit('g', UnitKind.MASS)
_reg.add_metric_units(UnitKind.MASS, 'g',
                      prefixes=['p', 'n', 'µ', 'm', 'k'])

# -- Molecular Weight --------------------------------------------------

_reg.set_base_unit('g/mol', UnitKind.MOLECULAR_WEIGHT)
_reg.add_metric_units(UnitKind.MOLECULAR_WEIGHT, 'g/mol', prefixes=['k'])

# -- Amount ------------------------------------------------------------

_reg.set_base_unit('mol', UnitKind.AMOUNT)
_reg.add_metric_units(UnitKind.AMOUNT, 'mol',
                      prefixes=['f', 'p', 'n', 'µ', 'm', 'k'])

# -- Molarity ----------------------------------------------------------

# M = mol/L.
_reg.set_base_unit('M', UnitKind.MOLARITY)
_reg.add_metric_units(UnitKind.MOLARITY, 'M',
                      prefixes=['f', 'p', 'n', 'µ', 'm'])

# -- Mass Concentration ------------------------------------------------

_reg.set_base_unit('g/L', UnitKind.MASS_CONCENTRATION)
_reg.add_metric_units(UnitKind.MASS_CONCENTRATION, 'g/L',
                      prefixes=['p', 'n', 'µ', 'm', 'k'])

# -- Pressure ----------------------------------------------------------

_reg.set_base_unit('bar', UnitKind.PRESSURE)
_reg.add_metric_units(UnitKind.PRESSURE, 'bar', prefixes=['µ', 'm', 'k'])
_reg.add_metric_units(UnitKind.PRESSURE, 'Pa', factor=1e-5,
                      prefixes=['', 'h', 'k', 'M', 'G'])
_reg.add_unit('atm', UnitKind.PRESSURE, 1.01325)  # Standard atmosphere.
_reg.add_unit('psi', UnitKind.PRESSURE, 0.06894757293168361)
_reg.add_metric_units(UnitKind.PRESSURE, 'Torr', factor=1.01325 / 760,
                      prefixes=['m', ''])  # 760 Torr = 1 atm exactly.

# -- Solubility --------------------------------------------------------

# Henry's law solubility constants, M/bar = mol / L / bar.
_reg.set_base_unit('M/bar', UnitKind.SOLUBILITY)
_reg.add_metric_units(UnitKind.SOLUBILITY, 'M/bar',
                      prefixes=['f', 'p', 'n', 'µ', 'm'])
_reg.add_metric_units(UnitKind.SOLUBILITY, 'M/atm', factor=1 / 1.01325,
                      prefixes=['µ', 'm', ''])

# -- Temperature -------------------------------------------------------

# Offset scales have no conversion factor, see `_convert_temperature`.
_reg.set_base_unit('K', UnitKind.TEMPERATURE)
_reg.add_unit('C', UnitKind.TEMPERATURE, None)
_reg.add_unit('F', UnitKind.TEMPERATURE, None)
_reg.add_alias('°C', 'C')
_reg.add_alias('°F', 'F')

# ----------------------------------------------------------------------

_reg.lock()
