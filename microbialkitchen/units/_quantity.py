from __future__ import annotations

import numbers
import operator
from typing import Any, Callable, Iterable, Iterator, Optional

import numpy as np
import numpy.typing as npt

from .._opts import get_options
from ._base import DEFAULT_REGISTRY, UnitDefinition, UnitKind
from .exception import IncompatibleUnitError, UnsupportedOperationError

_K = UnitKind

# Relative tolerance used by `==` so that values differing only by
# rescaling through another unit compare equal.
EQ_RTOL = 1e-12


# ======================================================================

class Quantity:
    """
    Ordered sequence of real values sharing a single unit.  A length-1
    `Quantity` is a scalar; there is no separate scalar type.  Missing
    values are stored as NaN.

    Quantities are immutable value objects: values are copied on
    construction, stored read-only and every operation returns a new
    `Quantity`.  The only way back to plain numbers is `to_value` or
    `extract_value`; implicit conversion via ``np.asarray(q)`` or
    ``float(q)`` raises `TypeError`.

    Parameters
    ----------
    values : scalar or 1-D array-like of real
        Value(s).  `None` elements are treated as missing.
    unit : str, default = ''
        Unit symbol (aliases are accepted and canonicalised).
    subkind : DerivedKind, optional
        Derived quantity kind tag.  If given, `unit` must be allowed by
        it.  This is normally set via the constructor functions such as
        `molarity_concentration` rather than directly.

    Raises
    ------
    UnknownUnitError
        If `unit` is not known.
    InvalidUnitForKindError
        If `unit` is not allowed by `subkind`.
    TypeError
        If `values` are strings, complex or otherwise non-numeric.
    ValueError
        If `values` has more than one dimension.

    Examples
    --------
    >>> from microbialkitchen.units import Quantity
    >>> dic = Quantity([1, 2, 3], 'mM')
    >>> print(dic.sum())
    6 mM
    >>> print(dic.convert('µM'))
    [1000, 2000, 3000] µM
    """
    __slots__ = ('_values', '_unit', '_subkind')

    # Keep NumPy from treating quantities as plain arrays in mixed
    # operations, so that `ndarray + Quantity` is handled here.
    __array_ufunc__ = None

    def __init__(self, values: npt.ArrayLike, unit: str = '',
                 subkind=None):
        defn = DEFAULT_REGISTRY.lookup(unit)
        if subkind is not None:
            subkind.check_unit(defn.symbol)
        self._values = _as_values(values)
        self._unit = defn.symbol
        self._subkind = subkind

    @classmethod
    def _new(cls, values: np.ndarray, unit: str, subkind=None) -> Quantity:
        """Construct without validation, taking ownership of `values`."""
        obj = object.__new__(cls)
        values = np.asarray(values, dtype=float).reshape(-1)
        values.flags.writeable = False
        obj._values, obj._unit, obj._subkind = values, unit, subkind
        return obj

    # -- Properties ----------------------------------------------------

    @property
    def values(self) -> np.ndarray:
        """Read-only view of the stored values, in `unit`."""
        return self._values

    @property
    def unit(self) -> str:
        return self._unit

    @property
    def definition(self) -> UnitDefinition:
        return DEFAULT_REGISTRY.lookup(self._unit)

    @property
    def kind(self) -> UnitKind:
        return self.definition.kind

    @property
    def subkind(self):
        """Derived quantity kind tag, or `None` if untagged."""
        return self._subkind

    # -- Conversion ----------------------------------------------------

    def convert(self, unit: str) -> Quantity:
        """
        Return a new quantity with values rescaled to `unit`.

        Raises
        ------
        IncompatibleUnitError
            If `unit` is of a different kind.
        InvalidUnitForKindError
            If this quantity has a derived kind that does not allow
            `unit`.
        """
        target = DEFAULT_REGISTRY.lookup(unit).symbol
        if self._subkind is not None:
            self._subkind.check_unit(target)
        values = DEFAULT_REGISTRY.convert(self._values, self._unit, target)
        return self._new(values, target, self._subkind)

    def to_value(self, unit: str = None) -> np.ndarray:
        """
        Return a writable copy of the values, converted to `unit` if
        given.
        """
        if unit is None:
            return self._values.copy()
        return np.array(DEFAULT_REGISTRY.convert(self._values, self._unit,
                                                 unit), dtype=float)

    def is_na(self) -> np.ndarray:
        """Boolean array flagging missing values."""
        return np.isnan(self._values)

    def best_unit(self) -> str:
        """
        Choose the most readable unit of the same metric family.  This
        is the largest prefix not exceeding the mean absolute magnitude
        of the finite, non-zero values.  Offset temperature scales,
        dimensionless quantities and quantities without such values
        keep their unit.  If this quantity has a derived kind only units
        it allows are considered.
        """
        defn = self.definition
        if defn.is_affine or defn.kind is _K.DIMENSIONLESS:
            return self._unit

        family = DEFAULT_REGISTRY.family(self._unit)
        if self._subkind is not None:
            family = [d for d in family if self._subkind.allows(d.symbol)]

        mags = np.abs(self._values)
        mags = mags[np.isfinite(mags) & (mags > 0)]
        if mags.size == 0 or not family:
            return self._unit

        # Compare in units of the unprefixed stem.  The small allowance
        # absorbs rounding so that repeated scaling is stable.
        magnitude = mags.mean() * defn.scale
        fits = [d for d in family if d.scale <= magnitude * (1 + 1e-9)]
        return (fits[-1] if fits else family[0]).symbol

    def auto_scale(self) -> Quantity:
        """Return this quantity converted to `best_unit`."""
        unit = self.best_unit()
        return self if unit == self._unit else self.convert(unit)

    # -- Formatting ----------------------------------------------------

    def format(self, spec: str = None, auto_scale: bool = False
               ) -> list[str]:
        """
        Format each value with its unit, e.g. ``'10 mM'``.

        Parameters
        ----------
        spec : str, optional
            Format specification for the numbers.  Defaults to the
            `format_spec` option.
        auto_scale : bool, default = False
            If `True` format in `best_unit` instead of the stored unit.

        Returns
        -------
        list[str]
            One string per element.  Missing values give ``'NaN'``.
        """
        q = self.auto_scale() if auto_scale else self
        spec = get_options().format_spec if spec is None else spec
        return [_with_unit(_format_number(v, spec), q._unit)
                if not np.isnan(v) else 'NaN' for v in q._values]

    def __format__(self, spec: str) -> str:
        spec = spec or None
        if len(self._values) == 1:
            return self.format(spec)[0]
        return self._str_seq(spec)

    def __str__(self):
        if len(self._values) == 1:
            return self.format()[0]
        return self._str_seq(None)

    def _str_seq(self, spec: Optional[str]) -> str:
        spec = get_options().format_spec if spec is None else spec
        nums = ', '.join(_format_number(v, spec) for v in self._values)
        return _with_unit(f"[{nums}]", self._unit)

    def __repr__(self):
        nums = ', '.join(repr(float(v)) for v in self._values)
        return f"{type(self).__name__}([{nums}], {self._unit!r})"

    # -- Container Behaviour -------------------------------------------

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, key) -> Quantity:
        if isinstance(key, (numbers.Integral, np.integer)) and not \
                isinstance(key, bool):
            return self._new(self._values[[key]], self._unit, self._subkind)
        if isinstance(key, Quantity):
            raise TypeError("Cannot index with a Quantity.")
        return self._new(self._values[key], self._unit, self._subkind)

    def __iter__(self) -> Iterator[Quantity]:
        for i in range(len(self._values)):
            yield self[i]

    def __bool__(self):
        raise TypeError("The truth value of a Quantity is ambiguous.  "
                        "Compare it with another Quantity, e.g. "
                        "`(q > quantity(0, 'mM')).all()`.")

    def __array__(self, dtype=None, copy=None):
        raise TypeError(f"Quantity in '{self._unit}' cannot be converted "
                        f"implicitly to an array.  Use extract_value(q, "
                        f"unit) or make_column(...) instead.")

    def __float__(self):
        raise TypeError(f"Quantity in '{self._unit}' cannot be converted "
                        f"implicitly to float.  Use extract_value(q, "
                        f"unit) instead.")

    def __hash__(self):
        """
        Hash of the values in the base unit, so that quantities which
        compare equal across units (e.g. ``1 mM`` and ``0.001 M``) can
        be used as keys, as when joining tables.  Values are rounded to
        11 significant digits first to absorb conversion rounding.
        """
        key = tuple(float(f"{v:.10e}") for v in self._base_values())
        if self.kind is _K.DIMENSIONLESS and len(key) == 1:
            return hash(key[0])  # Same as the equal plain number.
        return hash((self.kind, key))

    # -- Arithmetic ----------------------------------------------------

    def __add__(self, other):
        return self._add_sub(other, operator.add, reflected=False)

    def __radd__(self, other):
        return self._add_sub(other, operator.add, reflected=True)

    def __sub__(self, other):
        return self._add_sub(other, operator.sub, reflected=False)

    def __rsub__(self, other):
        return self._add_sub(other, operator.sub, reflected=True)

    def __mul__(self, other):
        num = _plain_numeric(other)
        if num is not None:
            self._check_not_affine('scale')
            return self._new(self._values * num, self._unit, self._subkind)
        if not isinstance(other, Quantity):
            return NotImplemented

        # Dimensionless factors keep the other operand's unit.
        if other.kind is _K.DIMENSIONLESS:
            self._check_not_affine('scale')
            return self._new(self._values * other._values, self._unit,
                             self._subkind)
        if self.kind is _K.DIMENSIONLESS:
            other._check_not_affine('scale')
            return other._new(self._values * other._values, other._unit,
                              other._subkind)

        result_kind = (_PRODUCTS.get((self.kind, other.kind)) or
                       _PRODUCTS.get((other.kind, self.kind)))
        if result_kind is None:
            raise UnsupportedOperationError(
                f"Cannot multiply '{self._unit}' ({self.kind}) by "
                f"'{other._unit}' ({other.kind}).",
                units=(self._unit, other._unit),
                kinds=(self.kind, other.kind))
        return _in_base(self._base_values() * other._base_values(),
                        result_kind)

    def __rmul__(self, other):
        num = _plain_numeric(other)
        if num is None:
            return NotImplemented
        self._check_not_affine('scale')
        return self._new(num * self._values, self._unit, self._subkind)

    def __truediv__(self, other):
        num = _plain_numeric(other)
        if num is not None:
            self._check_not_affine('scale')
            return self._new(self._values / num, self._unit, self._subkind)
        if not isinstance(other, Quantity):
            return NotImplemented

        if other.kind is _K.DIMENSIONLESS:
            self._check_not_affine('scale')
            return self._new(self._values / other._values, self._unit,
                             self._subkind)

        # Ratio of like quantities, taken in base units (for temperature
        # this is the absolute scale).
        if self.kind is other.kind:
            return _in_base(self._base_values() / other._base_values(),
                            _K.DIMENSIONLESS)

        result_kind = _QUOTIENTS.get((self.kind, other.kind))
        if result_kind is None:
            raise UnsupportedOperationError(
                f"Cannot divide '{self._unit}' ({self.kind}) by "
                f"'{other._unit}' ({other.kind}).",
                units=(self._unit, other._unit),
                kinds=(self.kind, other.kind))
        return _in_base(self._base_values() / other._base_values(),
                        result_kind)

    def __rtruediv__(self, other):
        num = _plain_numeric(other)
        if num is None:
            return NotImplemented
        if self.kind is not _K.DIMENSIONLESS:
            raise UnsupportedOperationError(
                f"Cannot divide a plain number by '{self._unit}' "
                f"({self.kind}).", units=(self._unit,), kinds=(self.kind,))
        return self._new(num / self._values, self._unit)

    def __neg__(self):
        self._check_not_affine('negate')
        return self._new(-self._values, self._unit, self._subkind)

    def __pos__(self):
        return self._new(self._values.copy(), self._unit, self._subkind)

    def __abs__(self):
        self._check_not_affine('take the absolute value of')
        return self._new(np.abs(self._values), self._unit, self._subkind)

    def _add_sub(self, other, op: Callable, reflected: bool):
        if isinstance(other, Quantity):
            self._check_same_kind(other, 'add or subtract')
            self._check_not_affine('add or subtract')
            other._check_not_affine('add or subtract')
            rhs = DEFAULT_REGISTRY.convert(other._values, other._unit,
                                           self._unit)
        else:
            rhs = _plain_numeric(other)
            if rhs is None:
                return NotImplemented
            if self.kind is not _K.DIMENSIONLESS:
                raise IncompatibleUnitError(
                    f"Cannot add or subtract a plain number and "
                    f"'{self._unit}' ({self.kind}).  Construct a "
                    f"Quantity with quantity(value, unit) first.",
                    units=(self._unit,), kinds=(self.kind,))

        values = op(rhs, self._values) if reflected else op(self._values,
                                                            rhs)
        return self._new(values, self._unit, self._subkind)

    # -- Comparison ----------------------------------------------------

    def __eq__(self, other):
        return self._compare(other, _isclose)

    def __ne__(self, other):
        result = self._compare(other, _isclose)
        return result if result is NotImplemented else ~result

    def __lt__(self, other):
        return self._compare(other, operator.lt)

    def __le__(self, other):
        return self._compare(other, lambda a, b: (a < b) | _isclose(a, b))

    def __gt__(self, other):
        return self._compare(other, operator.gt)

    def __ge__(self, other):
        return self._compare(other, lambda a, b: (a > b) | _isclose(a, b))

    def _compare(self, other, op: Callable) -> np.ndarray:
        if isinstance(other, Quantity):
            self._check_same_kind(other, 'compare')
            rhs = DEFAULT_REGISTRY.convert(other._values, other._unit,
                                           self._unit)
        else:
            rhs = _plain_numeric(other)
            if rhs is None:
                return NotImplemented
            if self.kind is not _K.DIMENSIONLESS:
                raise IncompatibleUnitError(
                    f"Cannot compare '{self._unit}' ({self.kind}) with a "
                    f"plain number.", units=(self._unit,),
                    kinds=(self.kind,))
        return np.asarray(op(self._values, rhs), dtype=bool)

    def _check_same_kind(self, other: Quantity, action: str):
        if self.kind is not other.kind:
            raise IncompatibleUnitError(
                f"Cannot {action} '{self._unit}' ({self.kind}) and "
                f"'{other._unit}' ({other.kind}).",
                units=(self._unit, other._unit),
                kinds=(self.kind, other.kind))

    def _check_not_affine(self, action: str):
        # Sums, differences and multiples are only meaningful on the
        # absolute scale.
        if self.definition.is_affine:
            raise UnsupportedOperationError(
                f"Cannot {action} temperatures on the offset "
                f"'{self._unit}' scale.  Convert to 'K' first.",
                units=(self._unit,), kinds=(self.kind,))

    # -- Reductions ----------------------------------------------------

    def sum(self, skipna: bool = True) -> Quantity:
        return self._reduce('sum', skipna)

    def mean(self, skipna: bool = True) -> Quantity:
        return self._reduce('mean', skipna)

    def median(self, skipna: bool = True) -> Quantity:
        return self._reduce('median', skipna)

    def min(self, skipna: bool = True) -> Quantity:
        return self._reduce('min', skipna)

    def max(self, skipna: bool = True) -> Quantity:
        return self._reduce('max', skipna)

    def std(self, skipna: bool = True, ddof: int = 1) -> Quantity:
        return self._reduce('std', skipna, ddof=ddof)

    def _reduce(self, name: str, skipna: bool, ddof: int = 1) -> Quantity:
        """
        Reduce values to a single value in the stored unit.  With
        `skipna` missing values are ignored; an empty (or all missing)
        quantity sums to zero and gives NaN otherwise.
        """
        if name in ('sum', 'std'):
            self._check_not_affine(f'take the {name} of')

        values = self._values
        if skipna:
            values = values[~np.isnan(values)]

        if name == 'sum':
            result = values.sum()
        elif values.size == 0:
            result = np.nan
        elif name == 'std':
            result = (values.std(ddof=ddof) if values.size > ddof else
                      np.nan)
        else:
            result = _REDUCTIONS[name](values)
        return self._new(np.array([result]), self._unit, self._subkind)

    # -- Private -------------------------------------------------------

    def _base_values(self) -> np.ndarray:
        return DEFAULT_REGISTRY.convert(
            self._values, self._unit, DEFAULT_REGISTRY.base_unit(self.kind))


# ----------------------------------------------------------------------

# Physical kind combinations with a defined result.  Products are
# commutative; quotients are (numerator, denominator).
_PRODUCTS = {
    (_K.MOLARITY, _K.VOLUME): _K.AMOUNT,
    (_K.MASS_CONCENTRATION, _K.VOLUME): _K.MASS,
    (_K.AMOUNT, _K.MOLECULAR_WEIGHT): _K.MASS,
    (_K.MOLARITY, _K.MOLECULAR_WEIGHT): _K.MASS_CONCENTRATION,
    (_K.SOLUBILITY, _K.PRESSURE): _K.MOLARITY,
}

_QUOTIENTS = {
    (_K.AMOUNT, _K.VOLUME): _K.MOLARITY,
    (_K.AMOUNT, _K.MOLARITY): _K.VOLUME,
    (_K.MASS, _K.VOLUME): _K.MASS_CONCENTRATION,
    (_K.MASS, _K.MASS_CONCENTRATION): _K.VOLUME,
    (_K.MASS, _K.AMOUNT): _K.MOLECULAR_WEIGHT,
    (_K.MASS, _K.MOLECULAR_WEIGHT): _K.AMOUNT,
    (_K.MASS_CONCENTRATION, _K.MOLECULAR_WEIGHT): _K.MOLARITY,
    (_K.MASS_CONCENTRATION, _K.MOLARITY): _K.MOLECULAR_WEIGHT,
    (_K.MOLARITY, _K.PRESSURE): _K.SOLUBILITY,
    (_K.MOLARITY, _K.SOLUBILITY): _K.PRESSURE,
}

_REDUCTIONS = {
    'mean': np.mean,
    'median': np.median,
    'min': np.min,
    'max': np.max,
}


def _as_values(values: Any) -> np.ndarray:
    """Validate and copy `values` into a read-only 1-D float array."""
    if isinstance(values, Quantity):
        raise TypeError("Values are already a Quantity; use quantity(q, "
                        "unit) or q.convert(unit) instead.")
    if isinstance(values, (str, bytes)):
        raise TypeError(f"Quantity values must be numeric, got "
                        f"{values!r}.")

    arr = np.asarray(values)
    if arr.dtype == object:
        arr = np.array([_as_float(v) for v in arr.reshape(-1)],
                       dtype=float).reshape(arr.shape)
    elif arr.dtype.kind not in 'biuf':
        raise TypeError(f"Quantity values must be real numbers, got "
                        f"dtype '{arr.dtype}'.")

    if arr.ndim > 1:
        raise ValueError(f"Quantity values must be one-dimensional, got "
                         f"shape {arr.shape}.")
    arr = np.array(arr, dtype=float).reshape(-1)
    arr.flags.writeable = False
    return arr


def _as_float(v: Any) -> float:
    if v is None:
        return np.nan
    if isinstance(v, (numbers.Real, np.number)) and not isinstance(
            v, (np.complexfloating, complex)):
        return float(v)
    raise TypeError(f"Quantity values must be real numbers, got {v!r}.")


def _plain_numeric(x: Any) -> Optional[float | np.ndarray]:
    """
    Return `x` as a float or float array if it is plain real numeric
    data (scalar, list, tuple or 1-D ndarray), otherwise `None`.
    """
    if isinstance(x, Quantity):
        return None
    if isinstance(x, numbers.Real):
        return float(x)
    if isinstance(x, (np.ndarray, list, tuple)):
        arr = np.asarray(x)
        if arr.dtype.kind in 'biuf' and arr.ndim <= 1:
            return arr.astype(float)
    return None


def _isclose(a, b) -> np.ndarray:
    return np.isclose(a, b, rtol=EQ_RTOL, atol=0.0)


def _in_base(values: np.ndarray, kind: UnitKind) -> Quantity:
    return Quantity._new(values, DEFAULT_REGISTRY.base_unit(kind))


def _format_number(v: float, spec: str) -> str:
    return 'NaN' if np.isnan(v) else format(float(v), spec)


def _with_unit(text: str, unit: str) -> str:
    return f"{text} {unit}" if unit else text


# == Public Functions ==================================================

def quantity(values: npt.ArrayLike | Quantity, unit: str = None
             ) -> Quantity:
    """
    Construct a `Quantity`.  This is the main entry point for turning
    plain numbers into unit-aware values.

    Parameters
    ----------
    values : scalar, 1-D array-like or Quantity
        Value(s).  If a `Quantity` is given it is returned unchanged, or
        converted if `unit` is also given.
    unit : str, optional
        Unit symbol.  Plain values without a unit are dimensionless.

    Returns
    -------
    Quantity

    Examples
    --------
    >>> from microbialkitchen.units import quantity
    >>> print(quantity(10, 'mM'))
    10 mM
    >>> print(quantity(quantity(10, 'mM'), 'M'))
    0.01 M
    """
    if isinstance(values, Quantity):
        return values if unit is None else values.convert(unit)
    return Quantity(values, '' if unit is None else unit)


def convert_quantity(q: Quantity, unit: str) -> Quantity:
    """Return `q` converted to `unit`.  See `Quantity.convert`."""
    return _require_type(q).convert(unit)


def extract_value(q: Quantity, unit: str = None) -> np.ndarray:
    """
    Return the values of `q` as a plain float array, converted to
    `unit` if given.  This is the way for quantity data to leave the
    units system, e.g. to pass to a solver or a plotting routine.

    >>> from microbialkitchen.units import quantity, extract_value
    >>> extract_value(quantity([1, 2], 'mM'), 'µM')
    array([1000., 2000.])
    """
    return _require_type(q).to_value(unit)


def best_unit(q: Quantity) -> str:
    """Return the most readable unit for `q`.  See `Quantity.best_unit`."""
    return _require_type(q).best_unit()


def auto_scale(q: Quantity) -> Quantity:
    """
    Return `q` converted to its most readable unit of the same metric
    family.  Applying this repeatedly gives the same unit.

    >>> from microbialkitchen.units import quantity, auto_scale
    >>> print(auto_scale(quantity(0.0446, 'M')))
    44.6 mM
    """
    return _require_type(q).auto_scale()


def format_quantity(q: Quantity, spec: str = None,
                    auto_scale: bool = False) -> list[str]:
    """Format each value of `q` with its unit.  See `Quantity.format`."""
    return _require_type(q).format(spec, auto_scale=auto_scale)


def combine_quantities(quantities: Iterable[Quantity]) -> Quantity:
    """
    Concatenate quantities of one kind into a single `Quantity` in the
    unit of the first.

    Raises
    ------
    IncompatibleUnitError
        If the quantities are of more than one kind.  The message lists
        the offending kinds.
    ValueError
        If `quantities` is empty.
    """
    items = [_require_type(q) for q in quantities]
    if not items:
        raise ValueError("Need at least one quantity to combine.")

    first = items[0]
    for q in items[1:]:
        if q.kind is not first.kind:
            raise IncompatibleUnitError(
                f"Cannot combine '{first.unit}' ({first.kind}) with "
                f"'{q.unit}' ({q.kind}).", units=(first.unit, q.unit),
                kinds=(first.kind, q.kind))

    values = np.concatenate([
        DEFAULT_REGISTRY.convert(q.values, q.unit, first.unit)
        for q in items])
    subkind = (first.subkind if all(q.subkind is first.subkind
                                    for q in items) else None)
    return Quantity._new(values, first.unit, subkind)


def _require_type(q: Any) -> Quantity:
    if not isinstance(q, Quantity):
        raise TypeError(f"Expected a Quantity, got {type(q).__name__}.")
    return q
