"""
**microbialkitchen.tabular** lets quantities live in pandas tables.

A column of quantities is stored as a `QuantityArray` (a pandas
extension array holding floats in one unit) with dtype
``quantity[<unit>]``, so that filtering, sorting, concatenation,
grouping and display work as for numeric columns while keeping the
unit.  Reductions return `Quantity` values in the column's unit.

Examples
--------
>>> import pandas as pd
>>> from microbialkitchen import quantity, make_column
>>> df = pd.DataFrame({'DIC': make_column([quantity(1, 'mM'),
...                                        quantity(0.002, 'M'),
...                                        quantity(3, 'mM')])})
>>> print(df['DIC'].sum())
6 mM
>>> explicitize_units(df).columns.tolist()
['DIC [mM]']
"""
from __future__ import annotations

import numbers
import re
import warnings
from typing import Any, Iterable, Mapping, Sequence

import numpy as np
import pandas as pd
from pandas.api.extensions import (ExtensionArray, ExtensionDtype,
                                   register_extension_dtype, take)
from pandas.api.indexers import check_array_indexer
from pandas.api.types import is_integer, pandas_dtype

from .units import DEFAULT_REGISTRY, Quantity, combine_quantities
from .units.exception import (IncompatibleUnitError,
                              UnsupportedOperationError)


# ======================================================================

@register_extension_dtype
class QuantityDtype(ExtensionDtype):
    """
    pandas dtype of a quantity column.  The string form is
    ``'quantity[<unit>]'``, e.g. ``pd.Series([1, 2], dtype='quantity[mM]')``.
    """
    _metadata = ('unit',)
    _match = re.compile(r'^quantity\[(?P<unit>[^\[\]]*)\]$')
    type = Quantity
    na_value = np.nan

    def __init__(self, unit: str = ''):
        self.unit = DEFAULT_REGISTRY.lookup(unit).symbol

    @property
    def name(self) -> str:
        return f"quantity[{self.unit}]"

    @property
    def unit_kind(self):
        return DEFAULT_REGISTRY.kind_of(self.unit)

    @classmethod
    def construct_array_type(cls) -> type[QuantityArray]:
        return QuantityArray

    @classmethod
    def construct_from_string(cls, string: str) -> QuantityDtype:
        if not isinstance(string, str):
            raise TypeError(f"'construct_from_string' expects a string, "
                            f"got {type(string)}")
        match = cls._match.match(string)
        if match is None:
            raise TypeError(f"Cannot construct a '{cls.__name__}' from "
                            f"'{string}'")
        return cls(match.group('unit'))

    def _get_common_dtype(self, dtypes: list) -> QuantityDtype | None:
        # Columns of one kind are reconciled to the first unit, anything
        # else falls back to object.
        if all(isinstance(t, QuantityDtype) and
               t.unit_kind is self.unit_kind for t in dtypes):
            return dtypes[0]
        return None


# ----------------------------------------------------------------------

class QuantityArray(ExtensionArray):
    """
    pandas extension array of quantities sharing one unit.

    Parameters
    ----------
    values : Quantity or 1-D array-like of float
        Values of the column.  If a `Quantity` is given its unit is used
        (or it is converted to `unit`).
    unit : str, optional
        Unit of plain `values`.  Required if `values` is not a
        `Quantity`.
    """

    def __init__(self, values: Quantity | Sequence[float], unit: str = None):
        if isinstance(values, Quantity):
            q = values if unit is None else values.convert(unit)
            data, unit, subkind = q.to_value(), q.unit, q.subkind
        else:
            if unit is None:
                raise TypeError("A unit is required to build a "
                                "QuantityArray from plain values.")
            data, subkind = np.array(values, dtype=float), None
            if data.ndim != 1:
                raise ValueError("QuantityArray values must be "
                                 "one-dimensional.")
        self._data = data
        self._dtype = QuantityDtype(unit)
        self._subkind = subkind

    @classmethod
    def _simple_new(cls, data: np.ndarray, dtype: QuantityDtype,
                    subkind=None) -> QuantityArray:
        obj = cls.__new__(cls)
        obj._data, obj._dtype, obj._subkind = data, dtype, subkind
        return obj

    # -- Constructors required by pandas -------------------------------

    @classmethod
    def _from_sequence(cls, scalars, *, dtype=None, copy: bool = False
                       ) -> QuantityArray:
        if isinstance(dtype, str):
            dtype = pandas_dtype(dtype)
        if dtype is not None and not isinstance(dtype, QuantityDtype):
            raise TypeError(f"Expected a quantity dtype, got {dtype}.")

        if isinstance(scalars, (QuantityArray, Quantity)):
            arr = (scalars if isinstance(scalars, QuantityArray) else
                   cls(scalars))
            return (arr.astype(dtype, copy=True) if dtype is not None else
                    arr.copy())

        items = list(scalars)
        quantities = [x for x in items if isinstance(x, Quantity)]
        if quantities:
            first = quantities[0]
            unit = first.unit if dtype is None else dtype.unit
            values = []
            for x in items:
                if isinstance(x, Quantity):
                    if x.kind is not first.kind:
                        raise IncompatibleUnitError(
                            f"Cannot combine '{first.unit}' ({first.kind}) "
                            f"with '{x.unit}' ({x.kind}) in one column.",
                            units=(first.unit, x.unit),
                            kinds=(first.kind, x.kind))
                    values.extend(x.to_value(unit))
                elif _is_missing(x):
                    values.append(np.nan)
                else:
                    raise TypeError(f"Cannot mix plain values and "
                                    f"quantities in one column: {x!r}.")
            subkind = (first.subkind if all(q.subkind is first.subkind
                                            for q in quantities) else None)
            if subkind is not None and not subkind.allows(unit):
                subkind = None
            return cls._simple_new(np.array(values, dtype=float),
                                   QuantityDtype(unit), subkind)

        if dtype is None:
            raise TypeError("Cannot infer the unit of a quantity column "
                            "without quantities or a 'quantity[unit]' "
                            "dtype.")
        return cls._simple_new(
            np.array([_plain_float(x) for x in items], dtype=float), dtype)

    @classmethod
    def _from_sequence_of_strings(cls, strings, *, dtype=None,
                                  copy: bool = False) -> QuantityArray:
        """
        Parse strings such as ``'2.5'`` (in the unit of `dtype`) or
        ``'2.5 mM'``.  Empty strings are missing values.
        """
        if isinstance(dtype, str):
            dtype = pandas_dtype(dtype)
        values = []
        for s in strings:
            if _is_missing(s) or not str(s).strip():
                values.append(np.nan)
                continue
            number, _, unit = str(s).strip().partition(' ')
            value = float(number)
            if unit.strip() and unit.strip() != dtype.unit:
                value = DEFAULT_REGISTRY.convert(value, unit.strip(),
                                                 dtype.unit)
            values.append(value)
        return cls._simple_new(np.array(values, dtype=float), dtype)

    @classmethod
    def _from_factorized(cls, values: np.ndarray, original: QuantityArray
                         ) -> QuantityArray:
        return cls._simple_new(np.asarray(values, dtype=float),
                               original.dtype, original._subkind)

    @classmethod
    def _concat_same_type(cls, to_concat: Sequence[QuantityArray]
                          ) -> QuantityArray:
        first = to_concat[0]
        data = np.concatenate([a._data for a in to_concat])
        subkind = (first._subkind if all(a._subkind is first._subkind
                                         for a in to_concat) else None)
        return cls._simple_new(data, first.dtype, subkind)

    # -- Properties ----------------------------------------------------

    @property
    def dtype(self) -> QuantityDtype:
        return self._dtype

    @property
    def unit(self) -> str:
        return self._dtype.unit

    @property
    def quantity(self) -> Quantity:
        """The whole column as a single `Quantity`."""
        return Quantity._new(self._data.copy(), self.unit, self._subkind)

    @property
    def nbytes(self) -> int:
        return self._data.nbytes

    def __len__(self) -> int:
        return len(self._data)

    # -- Element Access ------------------------------------------------

    def __getitem__(self, item):
        if is_integer(item):
            value = self._data[item]
            if np.isnan(value):
                return self.dtype.na_value
            return Quantity._new(np.array([value]), self.unit, self._subkind)

        item = check_array_indexer(self, item)
        return self._simple_new(self._data[item], self._dtype,
                                self._subkind)

    def __setitem__(self, key, value):
        values = self._coerce_values(value)
        key = check_array_indexer(self, key)
        if is_integer(key) and np.ndim(values) == 1:
            if len(values) != 1:
                raise ValueError("Cannot set a single element from "
                                 f"{len(values)} values.")
            values = values[0]
        self._data[key] = values

    def _coerce_values(self, value) -> float | np.ndarray:
        """Convert `value` to floats in this column's unit."""
        if isinstance(value, QuantityArray):
            value = value.quantity
        if isinstance(value, Quantity):
            return value.to_value(self.unit)
        if _is_missing(value):
            return np.nan
        if isinstance(value, (list, tuple, np.ndarray, pd.Series)):
            return self._from_sequence(value, dtype=self.dtype)._data
        raise TypeError(f"Cannot set a plain value {value!r} in a "
                        f"'{self.dtype}' column, use a Quantity.")

    def isna(self) -> np.ndarray:
        return np.isnan(self._data)

    def copy(self) -> QuantityArray:
        return self._simple_new(self._data.copy(), self._dtype,
                                self._subkind)

    def take(self, indices, *, allow_fill: bool = False, fill_value=None
             ) -> QuantityArray:
        if allow_fill:
            fill_value = (np.nan if fill_value is None else
                          self._coerce_values(fill_value))
            if np.ndim(fill_value):
                fill_value = fill_value[0]
        data = take(self._data, indices, allow_fill=allow_fill,
                    fill_value=fill_value)
        return self._simple_new(data, self._dtype, self._subkind)

    def unique(self) -> QuantityArray:
        return self._simple_new(pd.unique(self._data), self._dtype,
                                self._subkind)

    def _values_for_factorize(self) -> tuple[np.ndarray, float]:
        return self._data, np.nan

    def _values_for_argsort(self) -> np.ndarray:
        return self._data

    def searchsorted(self, value, side: str = 'left', sorter=None):
        # A single Quantity is a scalar here, not a sequence of values.
        if isinstance(value, Quantity) and len(value) == 1:
            value = value.to_value(self.unit)[0]
        else:
            value = self._coerce_values(value)
        return self._data.searchsorted(value, side=side, sorter=sorter)

    # -- Conversion ----------------------------------------------------

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        if dtype is not None and np.dtype(dtype) != object:
            raise TypeError(f"Cannot convert a '{self.dtype}' column to "
                            f"{np.dtype(dtype)} implicitly.  Use "
                            f"explicitize_units() or extract_value() "
                            f"instead.")
        out = np.empty(len(self._data), dtype=object)
        for i in range(len(self._data)):
            out[i] = self[i]
        return out

    def astype(self, dtype, copy: bool = True):
        dtype = pandas_dtype(dtype)
        if isinstance(dtype, QuantityDtype):
            if dtype == self.dtype:
                return self.copy() if copy else self
            subkind = (self._subkind if self._subkind is not None and
                       self._subkind.allows(dtype.unit) else None)
            data = DEFAULT_REGISTRY.convert(self._data, self.unit,
                                            dtype.unit)
            return self._simple_new(np.asarray(data, dtype=float), dtype,
                                    subkind)
        return super().astype(dtype, copy=copy)

    def _formatter(self, boxed: bool = False):
        return lambda x: str(x) if isinstance(x, Quantity) else 'NaN'

    # -- Reductions ----------------------------------------------------

    _REDUCTIONS = ('sum', 'mean', 'median', 'min', 'max', 'std', 'sem')

    def _reduce(self, name: str, *, skipna: bool = True,
                keepdims: bool = False, **kwargs):
        if name not in self._REDUCTIONS:
            raise UnsupportedOperationError(
                f"'{name}' is not supported for '{self.dtype}' columns "
                f"as the result would not have unit '{self.unit}'.",
                units=(self.unit,))

        q = self.quantity
        n_valid = int((~q.is_na()).sum()) if skipna else len(q)
        if name == 'sum':
            result = q.sum(skipna=skipna)
            if n_valid < kwargs.get('min_count', 0):
                result = Quantity._new(np.array([np.nan]), q.unit,
                                       q.subkind)
        elif name in ('std', 'sem'):
            result = q.std(skipna=skipna, ddof=kwargs.get('ddof', 1))
            if name == 'sem':
                result = result / np.sqrt(n_valid) if n_valid else result
        else:
            result = getattr(q, name)(skipna=skipna)

        if keepdims:
            return type(self)(result)
        return result

    _GROUPBY_WRAPPED = ('sum', 'mean', 'median', 'min', 'max', 'first',
                        'last', 'std', 'sem', 'cumsum', 'cummin', 'cummax')
    _GROUPBY_PLAIN = ('idxmin', 'idxmax', 'any', 'all', 'rank')

    def _groupby_op(self, *, how: str, has_dropped_na: bool,
                    min_count: int, ngroups: int, ids: np.ndarray,
                    **kwargs):
        if how not in self._GROUPBY_WRAPPED + self._GROUPBY_PLAIN:
            raise UnsupportedOperationError(
                f"Grouped '{how}' is not supported for '{self.dtype}' "
                f"columns.", units=(self.unit,))
        if how in ('sum', 'std', 'sem', 'cumsum') and \
                DEFAULT_REGISTRY.lookup(self.unit).is_affine:
            raise UnsupportedOperationError(
                f"Grouped '{how}' of temperatures on the offset "
                f"'{self.unit}' scale is not supported.  Convert to 'K' "
                f"first.", units=(self.unit,))

        # Use pandas' masked float implementation on the raw values.
        floats = pd.array(self._data, dtype='Float64')
        result = floats._groupby_op(how=how, has_dropped_na=has_dropped_na,
                                    min_count=min_count, ngroups=ngroups,
                                    ids=ids, **kwargs)
        if how in self._GROUPBY_PLAIN:
            return result
        data = np.asarray(result.to_numpy(dtype=float, na_value=np.nan))
        return self._simple_new(data, self._dtype, self._subkind)

    # -- Arithmetic & Comparison ---------------------------------------

    def _binary_op(self, other, op, reflected: bool = False):
        if isinstance(other, (pd.Series, pd.Index, pd.DataFrame)):
            return NotImplemented
        if isinstance(other, QuantityArray):
            other = other.quantity
        lhs, rhs = (other, self.quantity) if reflected else (self.quantity,
                                                             other)
        result = op(lhs, rhs)
        if result is NotImplemented:
            return NotImplemented
        if isinstance(result, Quantity):
            return type(self)(result)
        return result

    def __add__(self, other):
        return self._binary_op(other, lambda a, b: a + b)

    def __radd__(self, other):
        return self._binary_op(other, lambda a, b: a + b, reflected=True)

    def __sub__(self, other):
        return self._binary_op(other, lambda a, b: a - b)

    def __rsub__(self, other):
        return self._binary_op(other, lambda a, b: a - b, reflected=True)

    def __mul__(self, other):
        return self._binary_op(other, lambda a, b: a * b)

    def __rmul__(self, other):
        return self._binary_op(other, lambda a, b: a * b, reflected=True)

    def __truediv__(self, other):
        return self._binary_op(other, lambda a, b: a / b)

    def __rtruediv__(self, other):
        return self._binary_op(other, lambda a, b: a / b, reflected=True)

    def __neg__(self):
        return type(self)(-self.quantity)

    def __abs__(self):
        return type(self)(abs(self.quantity))

    def __eq__(self, other):
        return self._binary_op(other, lambda a, b: a == b)

    def __ne__(self, other):
        return self._binary_op(other, lambda a, b: a != b)

    def __lt__(self, other):
        return self._binary_op(other, lambda a, b: a < b)

    def __le__(self, other):
        return self._binary_op(other, lambda a, b: a <= b)

    def __gt__(self, other):
        return self._binary_op(other, lambda a, b: a > b)

    def __ge__(self, other):
        return self._binary_op(other, lambda a, b: a >= b)


# ----------------------------------------------------------------------

def _is_missing(x: Any) -> bool:
    return x is None or x is pd.NA or (isinstance(x, float) and np.isnan(x))


def _plain_float(x: Any) -> float:
    if _is_missing(x):
        return np.nan
    if isinstance(x, numbers.Real):
        return float(x)
    raise TypeError(f"Quantity column values must be real numbers, got "
                    f"{x!r}.")


# == Public Functions ==================================================

def make_column(quantities: Quantity | Iterable[Quantity]) -> QuantityArray:
    """
    Build a quantity column from a `Quantity` or a sequence of them.
    Quantities of the same kind in different units are converted to the
    unit of the first; `None` or NaN elements are missing values.

    Raises
    ------
    IncompatibleUnitError
        If the quantities are of more than one kind.  The message names
        the offending kinds.
    """
    if isinstance(quantities, Quantity):
        return QuantityArray(quantities)
    items = list(quantities)
    if all(isinstance(x, Quantity) for x in items):
        return QuantityArray(combine_quantities(items))
    return QuantityArray._from_sequence(items)


def is_quantity_column(column: Any) -> bool:
    """
    Return `True` if `column` holds quantities, i.e. it is a
    `QuantityArray`, a pandas object with a quantity dtype or a
    `Quantity` (as used in mapping tables).
    """
    if isinstance(column, (QuantityArray, Quantity)):
        return True
    return (isinstance(column, (pd.Series, pd.Index)) and
            isinstance(column.dtype, QuantityDtype))


def _column_quantity(column: Any) -> Quantity:
    if isinstance(column, Quantity):
        return column
    if isinstance(column, (pd.Series, pd.Index)):
        column = column.array
    return column.quantity


def explicitize_units(table: pd.DataFrame | Mapping[str, Any],
                      columns: Iterable[str] = None, *, prefix: str = ' [',
                      suffix: str = ']') -> pd.DataFrame | dict:
    """
    Replace quantity columns with plain float columns whose names carry
    the unit, e.g. ``DIC`` in mM becomes ``DIC [mM]``.  This is required
    before reshaping operations that need one plain numeric type per
    cell.  Dimensionless columns keep their name.

    Parameters
    ----------
    table : DataFrame or Mapping[str, Any]
        Table to convert.  A mapping may hold `Quantity`,
        `QuantityArray` or `Series` columns.
    columns : Iterable[str], optional
        Names of the columns to convert.  By default all quantity
        columns are converted.
    prefix, suffix : str
        Text placed around the unit in the new column name.

    Returns
    -------
    DataFrame or dict
        New table of the same type.  The input is not modified.

    Raises
    ------
    KeyError
        If a name in `columns` is not in `table`.
    """
    names = list(table.keys())
    selected = names if columns is None else list(columns)
    missing = [c for c in selected if c not in names]
    if missing:
        raise KeyError(f"Columns not in table: {', '.join(missing)}.")

    out = {}
    for name in names:
        column = table[name]
        if name in selected and is_quantity_column(column):
            q = _column_quantity(column)
            new_name = f"{name}{prefix}{q.unit}{suffix}" if q.unit else name
            out[new_name] = q.to_value()
        else:
            out[name] = column

    if isinstance(table, pd.DataFrame):
        return pd.DataFrame(out, index=table.index)
    return out


def implicitize_units(table: pd.DataFrame | Mapping[str, Any], *,
                      prefix: str = ' [', suffix: str = ']'
                      ) -> pd.DataFrame | dict:
    """
    Reverse of `explicitize_units`: columns named like ``DIC [mM]``
    become quantity columns named ``DIC``.

    Warns
    -----
    UserWarning
        If the text in brackets is not a known unit.  The column is
        left unchanged.
    """
    out = {}
    for name, column in table.items():
        if isinstance(name, str) and name.endswith(suffix) and \
                prefix in name:
            cut = name.rfind(prefix)
            base, unit = name[:cut], name[cut + len(prefix):
                                          len(name) - len(suffix)]
            if unit in DEFAULT_REGISTRY:
                values = np.asarray(column, dtype=float)
                out[base] = QuantityArray(values, unit)
                continue
            warnings.warn(f"Column '{name}': '{unit}' is not a known unit, "
                          f"column left unchanged.", stacklevel=2)
        out[name] = column

    if isinstance(table, pd.DataFrame):
        return pd.DataFrame(out, index=table.index)
    return out
