from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

import numpy.typing as npt

from ._base import DEFAULT_REGISTRY, UnitKind
from ._quantity import Quantity
from .exception import InvalidUnitForKindError, WrongQuantityKindError


# ======================================================================

@dataclass(frozen=True)
class DerivedKind:
    """
    A semantic quantity kind layered on top of a physical `UnitKind`,
    optionally restricting which units are legal.

    Attributes
    ----------
    name : str
        Descriptive name used in error messages.
    base : UnitKind
        Physical kind of the values.
    units : frozenset[str] or None
        Allowed canonical unit symbols.  `None` allows every unit of
        `base`.
    default_unit : str
        Unit used when none is given to `make`.
    """
    name: str
    base: UnitKind
    units: Optional[frozenset] = None
    default_unit: str = None

    def __str__(self):
        return self.name

    def allows(self, unit: str) -> bool:
        """Return `True` if `unit` is legal for this kind."""
        if unit not in DEFAULT_REGISTRY:
            return False
        defn = DEFAULT_REGISTRY.lookup(unit)
        if defn.kind is not self.base:
            return False
        return self.units is None or defn.symbol in self.units

    def check_unit(self, unit: str):
        """
        Raises
        ------
        UnknownUnitError
            If `unit` is not known.
        InvalidUnitForKindError
            If `unit` is not allowed by this kind.
        """
        defn = DEFAULT_REGISTRY.lookup(unit)
        if not self.allows(defn.symbol):
            allowed = sorted(self.units if self.units is not None else
                             DEFAULT_REGISTRY.units_of(self.base))
            raise InvalidUnitForKindError(
                f"'{defn.symbol}' ({defn.kind}) is not a valid unit for "
                f"a {self.name} quantity.  Valid units: "
                f"{', '.join(repr(u) for u in allowed)}.",
                units=(defn.symbol,), kinds=(self.name, defn.kind))

    def make(self, values: npt.ArrayLike, unit: str = None) -> Quantity:
        """Construct a `Quantity` tagged with this kind."""
        return Quantity(values, self.default_unit if unit is None else unit,
                        subkind=self)

    def is_instance(self, q: Any) -> bool:
        """
        Return `True` if `q` is a `Quantity` of this kind, i.e. it carries
        this tag, or it is untagged (or tagged with a broader kind) and
        its unit is allowed.
        """
        if not isinstance(q, Quantity):
            return False
        if q.subkind is self:
            return True
        return self.allows(q.unit)


# -- Derived Kinds -----------------------------------------------------

DIMENSIONLESS = DerivedKind('dimensionless', UnitKind.DIMENSIONLESS,
                            default_unit='')
VOLUME = DerivedKind('volume', UnitKind.VOLUME, default_unit='L')
MASS = DerivedKind('mass', UnitKind.MASS, default_unit='g')
MOLECULAR_WEIGHT = DerivedKind('molecular weight',
                               UnitKind.MOLECULAR_WEIGHT,
                               default_unit='g/mol')
AMOUNT = DerivedKind('amount', UnitKind.AMOUNT, default_unit='mol')
MOLARITY_CONCENTRATION = DerivedKind('molarity concentration',
                                     UnitKind.MOLARITY, default_unit='M')
MASS_CONCENTRATION = DerivedKind('mass concentration',
                                 UnitKind.MASS_CONCENTRATION,
                                 default_unit='g/L')
PRESSURE = DerivedKind('pressure', UnitKind.PRESSURE, default_unit='bar')
# Gas partial pressures, excluding scales only used for condensed phases.
GAS_PRESSURE = DerivedKind(
    'gas pressure', UnitKind.PRESSURE,
    units=frozenset(u for u in DEFAULT_REGISTRY.units_of(UnitKind.PRESSURE)
                    if u not in ('kbar', 'MPa', 'GPa')),
    default_unit='bar')
GAS_SOLUBILITY = DerivedKind('gas solubility', UnitKind.SOLUBILITY,
                             default_unit='M/bar')
TEMPERATURE = DerivedKind('temperature', UnitKind.TEMPERATURE,
                          default_unit='K')


# -- Constructor Functions ---------------------------------------------

def volume(values: npt.ArrayLike, unit: str = 'L') -> Quantity:
    """Construct a volume quantity, e.g. ``volume(10, 'mL')``."""
    return VOLUME.make(values, unit)


def mass(values: npt.ArrayLike, unit: str = 'g') -> Quantity:
    """Construct a mass quantity."""
    return MASS.make(values, unit)


def molecular_weight(values: npt.ArrayLike, unit: str = 'g/mol'
                     ) -> Quantity:
    """Construct a molecular weight quantity."""
    return MOLECULAR_WEIGHT.make(values, unit)


def amount(values: npt.ArrayLike, unit: str = 'mol') -> Quantity:
    """Construct an amount (of substance) quantity."""
    return AMOUNT.make(values, unit)


def molarity_concentration(values: npt.ArrayLike, unit: str = 'M'
                           ) -> Quantity:
    """
    Construct a molar concentration quantity.

    >>> from microbialkitchen.units import molarity_concentration
    >>> print(molarity_concentration(10, 'mM'))
    10 mM
    """
    return MOLARITY_CONCENTRATION.make(values, unit)


def mass_concentration(values: npt.ArrayLike, unit: str = 'g/L'
                       ) -> Quantity:
    """Construct a mass concentration quantity."""
    return MASS_CONCENTRATION.make(values, unit)


def pressure(values: npt.ArrayLike, unit: str = 'bar') -> Quantity:
    """Construct a pressure quantity."""
    return PRESSURE.make(values, unit)


def gas_pressure(values: npt.ArrayLike, unit: str = 'bar') -> Quantity:
    """
    Construct a gas (partial) pressure quantity.  The high pressure
    scales ``kbar``, ``MPa`` and ``GPa`` are not allowed.
    """
    return GAS_PRESSURE.make(values, unit)


def gas_solubility(values: npt.ArrayLike, unit: str = 'M/bar'
                   ) -> Quantity:
    """
    Construct a Henry's law gas solubility quantity.  Only compound
    molarity per pressure units such as ``'mM/bar'`` are allowed.
    """
    return GAS_SOLUBILITY.make(values, unit)


def temperature(values: npt.ArrayLike, unit: str = 'K') -> Quantity:
    """Construct a temperature quantity, e.g. ``temperature(25, 'C')``."""
    return TEMPERATURE.make(values, unit)


# -- Predicates --------------------------------------------------------

def is_quantity(x: Any) -> bool:
    """Return `True` if `x` is a `Quantity` of any kind."""
    return isinstance(x, Quantity)


def _predicate(dk: DerivedKind) -> Callable[[Any], bool]:
    def pred(x: Any) -> bool:
        return dk.is_instance(x)

    name = dk.name.replace(' ', '_')
    pred.__name__ = pred.__qualname__ = f"is_{name}"
    pred.__doc__ = f"Return `True` if `x` is a {dk.name} quantity."
    pred.expected = dk
    return pred


is_quantity.expected = None
is_dimensionless = _predicate(DIMENSIONLESS)
is_volume = _predicate(VOLUME)
is_mass = _predicate(MASS)
is_molecular_weight = _predicate(MOLECULAR_WEIGHT)
is_amount = _predicate(AMOUNT)
is_molarity_concentration = _predicate(MOLARITY_CONCENTRATION)
is_mass_concentration = _predicate(MASS_CONCENTRATION)
is_pressure = _predicate(PRESSURE)
is_gas_pressure = _predicate(GAS_PRESSURE)
is_gas_solubility = _predicate(GAS_SOLUBILITY)
is_temperature = _predicate(TEMPERATURE)


def require_quantity(q: Any, predicate: Callable[[Any], bool] = is_quantity,
                     name: str = None) -> Quantity:
    """
    Check that argument `q` satisfies `predicate`.  Calculation
    functions call this on each argument before using it.

    Parameters
    ----------
    q : Any
        Argument to check.
    predicate : Callable[[Any], bool], default = is_quantity
        One of the `is_...` predicates, e.g. `is_pressure`.
    name : str, optional
        Argument name used in the error message.

    Returns
    -------
    Quantity
        `q`, unchanged.

    Raises
    ------
    WrongQuantityKindError
        If `q` fails the check.  The message names the expected and
        actual kind.

    Examples
    --------
    >>> from microbialkitchen.units import (quantity, require_quantity,
    ...                                     is_pressure)
    >>> require_quantity(quantity(1, 'mM'), is_pressure, 'pressure')
    Traceback (most recent call last):
    ...
    microbialkitchen.units.exception.WrongQuantityKindError: 'pressure' must be a pressure quantity, got a molarity quantity in 'mM'.
    """
    if predicate(q):
        return q

    # `kinds` holds the kind objects: (expected DerivedKind or None,
    # actual derived or unit kind or None for non-quantities).
    expected_kind = getattr(predicate, 'expected', None)
    expected = (_a(f"{expected_kind} quantity") if expected_kind is not None
                else "a Quantity")
    if isinstance(q, Quantity):
        actual = _a(f"{q.kind} quantity in '{q.unit}'")
        actual_kind = q.subkind if q.subkind is not None else q.kind
    else:
        actual = f"{type(q).__name__} {q!r}"
        actual_kind = None
    label = f"'{name}'" if name else "Argument"
    raise WrongQuantityKindError(
        f"{label} must be {expected}, got {actual}.",
        kinds=(expected_kind, actual_kind), value_type=type(q))


def _a(noun: str) -> str:
    return f"{'an' if noun[0] in 'aeiou' else 'a'} {noun}"
