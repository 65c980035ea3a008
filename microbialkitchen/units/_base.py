from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from typing import Iterable, Iterator, Optional

import numpy as np
import numpy.typing as npt

from .exception import (IncompatibleUnitError, RegistryLockedError,
                        UnknownUnitError)


# ======================================================================

class UnitKind(Enum):
    """
    Physical kinds of quantity.  Each kind has exactly one base unit in
    a registry and every unit belongs to exactly one kind.
    """
    DIMENSIONLESS = 'dimensionless'
    VOLUME = 'volume'
    MASS = 'mass'
    MOLECULAR_WEIGHT = 'molecular weight'
    AMOUNT = 'amount'
    MOLARITY = 'molarity'
    MASS_CONCENTRATION = 'mass concentration'
    PRESSURE = 'pressure'
    SOLUBILITY = 'solubility'
    TEMPERATURE = 'temperature'

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class UnitDefinition:
    """
    A single unit symbol known to a registry.

    Attributes
    ----------
    symbol : str
        Canonical symbol, e.g. ``'mM'``.
    kind : UnitKind
        Physical kind of the unit.
    factor : float or None
        Multiplier giving the value in the base unit of `kind`, i.e.
        ``value_in_base = value * factor``.  This is `None` for offset
        temperature scales which cannot be converted by scaling.
    stem : str
        Unprefixed symbol of the metric family this unit belongs to,
        e.g. ``'M'`` for ``'mM'``.
    scale : float
        Metric prefix multiplier of this unit within its family.
    """
    symbol: str
    kind: UnitKind
    factor: Optional[float]
    stem: str
    scale: float = 1.0

    @property
    def is_affine(self) -> bool:
        return self.factor is None


# Metric prefixes applied systematically to a unit stem.
METRIC_PREFIXES = {
    'f': 1e-15,
    'p': 1e-12,
    'n': 1e-9,
    'µ': 1e-6,  # Micro sign (U+00B5) is canonical.
    'm': 1e-3,
    '': 1.0,
    'h': 1e2,
    'k': 1e3,
    'M': 1e6,
    'G': 1e9,
}

# Alternative spellings of the micro prefix.
_MICRO_ALIASES = ('μ', 'u')  # Greek mu (U+03BC), ASCII 'u'.


# ----------------------------------------------------------------------

class UnitRegistry:
    """
    Table of known units.  A registry is populated with `set_base_unit`,
    `add_unit` and `add_metric_units`, then `lock` is called after which
    it is read-only.  Units can still be added to a locked registry
    inside an explicit ``with registry.unlocked():`` block, which is
    intended for tests and custom unit setups.

    The process-wide registry used by `Quantity` is `DEFAULT_REGISTRY`,
    populated once when `microbialkitchen.units` is imported.
    """

    def __init__(self):
        self._units: dict[str, UnitDefinition] = {}
        self._aliases: dict[str, str] = {}
        self._base: dict[UnitKind, str] = {}
        self._locked = False

    def __contains__(self, symbol: str) -> bool:
        return self._resolve(symbol) in self._units

    def __len__(self) -> int:
        return len(self._units)

    def __repr__(self):
        return (f"UnitRegistry({len(self._units)} units, "
                f"{'locked' if self._locked else 'unlocked'})")

    # -- Administration ------------------------------------------------

    @property
    def locked(self) -> bool:
        return self._locked

    def lock(self):
        """Make the registry read-only."""
        self._locked = True

    @contextmanager
    def unlocked(self) -> Iterator[UnitRegistry]:
        """
        Context manager temporarily allowing units to be added to a
        locked registry.  The previous locked state is restored on exit.
        """
        previous, self._locked = self._locked, False
        try:
            yield self
        finally:
            self._locked = previous

    def _check_unlocked(self, symbol: str):
        if self._locked:
            raise RegistryLockedError(
                f"Cannot add unit '{symbol}': registry is locked.",
                units=(symbol,))

    def set_base_unit(self, symbol: str, kind: UnitKind):
        """
        Add `symbol` as the base unit of `kind`.  All other units of this
        kind are defined relative to it.
        """
        if kind in self._base:
            raise ValueError(f"Base unit of {kind} already set to "
                             f"'{self._base[kind]}'.")
        self.add_unit(symbol, kind, 1.0, _base=True)
        self._base[kind] = symbol

    def add_unit(self, symbol: str, kind: UnitKind,
                 factor: Optional[float], *, stem: str = None,
                 scale: float = 1.0, _base: bool = False):
        """
        Add a single unit.

        Parameters
        ----------
        symbol : str
            New unit symbol.
        kind : UnitKind
            Kind of the unit.  The base unit of this kind must already
            be set unless `symbol` is the base unit itself.
        factor : float or None
            Multiplier converting a value in this unit to the base unit.
            Only temperature units may give `None` to mark an offset
            (affine) scale.
        stem, scale :
            Metric family of the unit and the prefix multiplier within
            it.  If omitted the unit is the sole member of its own
            family.

        Raises
        ------
        RegistryLockedError
            If the registry is locked.
        ValueError
            If the symbol is already defined or the factor is invalid.
        """
        self._check_unlocked(symbol)
        if symbol in self._units or symbol in self._aliases:
            raise ValueError(f"Unit '{symbol}' already defined.")
        if not _base and kind not in self._base:
            raise ValueError(f"Base unit of {kind} must be set before "
                             f"adding '{symbol}'.")
        if factor is None:
            if kind is not UnitKind.TEMPERATURE:
                raise ValueError(f"Only temperature units may be "
                                 f"affine, got '{symbol}' ({kind}).")
        elif not (np.isfinite(factor) and factor > 0):
            raise ValueError(f"Conversion factor for '{symbol}' must be "
                             f"finite and > 0, got {factor}.")

        self._units[symbol] = UnitDefinition(
            symbol, kind, None if factor is None else float(factor),
            symbol if stem is None else stem, float(scale))

    def add_metric_units(self, kind: UnitKind, stem: str,
                         factor: float = 1.0,
                         prefixes: Iterable[str] = ('',)):
        """
        Add a family of units formed by applying metric `prefixes` to
        `stem`.  The unprefixed `stem` has conversion `factor`, others
        are scaled by the prefix.  Units using the micro prefix also
        accept the Greek mu and ASCII 'u' spellings.

        >>> reg = UnitRegistry()
        >>> reg.set_base_unit('L', UnitKind.VOLUME)
        >>> reg.add_metric_units(UnitKind.VOLUME, 'L', prefixes=['µ', 'm'])
        >>> reg.convert(1, 'uL', 'L')
        1e-06
        """
        for prefix in prefixes:
            scale = METRIC_PREFIXES[prefix]
            symbol = prefix + stem
            if symbol == self._base.get(kind):
                continue
            self.add_unit(symbol, kind, factor * scale, stem=stem,
                          scale=scale)
            if prefix == 'µ':
                for alt in _MICRO_ALIASES:
                    self.add_alias(alt + stem, symbol)

    def add_alias(self, alias: str, symbol: str):
        """Allow `alias` as an alternative spelling of `symbol`."""
        self._check_unlocked(alias)
        if alias in self._units or alias in self._aliases:
            raise ValueError(f"Unit '{alias}' already defined.")
        self._aliases[alias] = self.lookup(symbol).symbol

    def copy(self) -> UnitRegistry:
        """Return an unlocked copy of this registry."""
        new = UnitRegistry()
        new._units = dict(self._units)
        new._aliases = dict(self._aliases)
        new._base = dict(self._base)
        return new

    # -- Queries -------------------------------------------------------

    def _resolve(self, symbol: str) -> str:
        return self._aliases.get(symbol, symbol)

    def lookup(self, symbol: str) -> UnitDefinition:
        """
        Return the definition of `symbol` (which may be an alias).

        Raises
        ------
        UnknownUnitError
            If `symbol` is not known.
        """
        if not isinstance(symbol, str):
            raise TypeError(f"Unit symbol must be a string, got "
                            f"{type(symbol).__name__}.")
        try:
            return self._units[self._resolve(symbol)]
        except KeyError:
            close = get_close_matches(symbol, list(self._units), n=3)
            hint = (f" Did you mean: {', '.join(repr(s) for s in close)}?"
                    if close else "")
            raise UnknownUnitError(f"Unknown unit '{symbol}'.{hint}",
                                   units=(symbol,)) from None

    def kind_of(self, symbol: str) -> UnitKind:
        """Return the `UnitKind` of `symbol`."""
        return self.lookup(symbol).kind

    def base_unit(self, kind: UnitKind) -> str:
        """Return the base unit symbol of `kind`."""
        try:
            return self._base[kind]
        except KeyError:
            raise UnknownUnitError(f"No base unit defined for {kind}.",
                                   kinds=(kind,)) from None

    def units_of(self, kind: UnitKind) -> list[str]:
        """Return all canonical unit symbols of `kind`."""
        return [s for s, d in self._units.items() if d.kind is kind]

    def family(self, symbol: str) -> list[UnitDefinition]:
        """
        Return the metric family of `symbol`, i.e. all units sharing its
        stem, in order of increasing scale.
        """
        defn = self.lookup(symbol)
        members = [d for d in self._units.values()
                   if d.kind is defn.kind and d.stem == defn.stem]
        return sorted(members, key=lambda d: d.scale)

    def convert(self, value: npt.ArrayLike, from_unit: str,
                to_unit: str) -> float | np.ndarray:
        """
        Convert `value` from one unit to another of the same kind.

        Parameters
        ----------
        value : scalar or array-like
            Value(s) to convert.
        from_unit, to_unit : str
            Unit symbols.

        Returns
        -------
        result : float or ndarray
            Converted value(s).  Scalars remain scalars.

        Raises
        ------
        UnknownUnitError
            If either unit is unknown.
        IncompatibleUnitError
            If the units are of different kinds.
        """
        from_def, to_def = self.lookup(from_unit), self.lookup(to_unit)
        if from_def.kind is not to_def.kind:
            raise IncompatibleUnitError(
                f"Cannot convert '{from_def.symbol}' ({from_def.kind}) "
                f"to '{to_def.symbol}' ({to_def.kind}).",
                units=(from_def.symbol, to_def.symbol),
                kinds=(from_def.kind, to_def.kind))

        if not np.isscalar(value):
            value = np.asarray(value, dtype=float)

        if from_def.is_affine or to_def.is_affine:
            return _convert_temperature(value, from_def.symbol,
                                        to_def.symbol)
        if from_def.symbol == to_def.symbol:
            return value * 1.0
        return value * (from_def.factor / to_def.factor)


# ----------------------------------------------------------------------

def _convert_temperature(x: npt.ArrayLike, from_unit: str,
                         to_unit: str) -> float | np.ndarray:
    """
    Conversions of temperatures are a special case due to the offset of
    the C and F scales.

    .. note: Arithmetic is simplified by converting `x` to Kelvin then
       converting to final units.

    Parameters
    ----------
    x : scalar or array-like
        Temperature to be converted.
    from_unit, to_unit : str
        String matching C, F or K.

    Returns
    -------
    result : scalar or array-like
        Converted temperature value.
    """
    # Convert 'from' -> Kelvin.
    if from_unit == 'C':
        x = x + 273.15  # This style (instead of +=) allows for NumPy ufunc.
    elif from_unit == 'K':
        x = x * 1.0
    elif from_unit == 'F':
        x = (x + 459.67) * 5 / 9
    else:
        raise IncompatibleUnitError(
            f"Cannot convert temperature: {from_unit} -> {to_unit}",
            units=(from_unit, to_unit))

    # Convert Kelvin -> 'to'.
    if to_unit == 'C':
        x = x - 273.15
    elif to_unit == 'K':
        pass
    elif to_unit == 'F':
        x = (x * 9 / 5) - 459.67
    else:
        raise IncompatibleUnitError(
            f"Cannot convert temperature: {from_unit} -> {to_unit}",
            units=(from_unit, to_unit))

    return x


# == Default Registry ===================================================

# Populated by `_defs` on import of the `units` package, then locked.
DEFAULT_REGISTRY = UnitRegistry()


def lookup(symbol: str) -> UnitDefinition:
    """Return the definition of `symbol` in the default registry."""
    return DEFAULT_REGISTRY.lookup(symbol)


def kind_of(symbol: str) -> UnitKind:
    """Return the `UnitKind` of `symbol` in the default registry."""
    return DEFAULT_REGISTRY.kind_of(symbol)


def convert(value: npt.ArrayLike, from_unit: str,
            to_unit: str) -> float | np.ndarray:
    """
    Convert `value` between units using the default registry.  See
    `UnitRegistry.convert`.

    >>> from microbialkitchen.units import convert
    >>> convert(0, 'C', 'K')
    273.15
    """
    return DEFAULT_REGISTRY.convert(value, from_unit, to_unit)
