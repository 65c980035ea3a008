from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Iterator

# ======================================================================


@dataclass(frozen=True, kw_only=True)
class Options:
    """
    Dataclass that holds option flags for the package.  See
    `get_options` and `set_options` for full details.
    """
    format_spec: str
    ph_bounds: tuple[float, float]
    ph_xtol: float
    ph_maxiter: int

    def __post_init__(self):
        """Check certain values"""
        lo, hi = self.ph_bounds
        if not lo < hi:
            raise ValueError(f"Require 'ph_bounds' lower < upper, got "
                             f"{self.ph_bounds}.")
        if self.ph_xtol <= 0:
            raise ValueError("Require 'ph_xtol' > 0.")
        if self.ph_maxiter < 1:
            raise ValueError("Require 'ph_maxiter' >= 1.")
        try:
            format(1.0, self.format_spec)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid 'format_spec': "
                             f"{self.format_spec!r}") from None


# Create single instance and set defaults.
_options = Options(
    format_spec='g',
    ph_bounds=(0.0, 14.0),
    ph_xtol=1e-12,
    ph_maxiter=100
)


# ----------------------------------------------------------------------

def get_options() -> Options:
    """
    Returns
    -------
    options : Options
        Returns a copy of the current options.  For a full description
        of each option, see `set_options`.
    """
    return replace(_options)


# noinspection PyIncorrectDocstring
def set_options(**kwargs):
    """
    Set the current package options.

    Parameters
    ----------
    format_spec : str, default = 'g'
        Format specification applied to each value when quantities are
        converted to text, e.g. ``'.3g'`` or ``'.2f'``.

    ph_bounds : (float, float), default = (0.0, 14.0)
        Bracket searched when solving a charge balance for pH.  Each
        row must have a sign change of the charge balance inside this
        bracket, otherwise a `SolverError` is raised.

    ph_xtol : float, default = 1e-12
        Absolute pH tolerance of the bracketed root search.

    ph_maxiter : int, default = 100
        Maximum number of iterations of the root search for each row.

    Raises
    ------
    ValueError
        If any of the new values are invalid.  The current options
        are unchanged in this case.

    See Also
    --------
    get_options, options

    Examples
    --------
    >>> from microbialkitchen import quantity, set_options
    >>> set_options(format_spec='.2f')
    >>> print(quantity(1.2345, 'mM'))
    1.23 mM
    >>> set_options(format_spec='g')
    """
    global _options
    _options = replace(_options, **kwargs)


@contextmanager
def options(**kwargs) -> Iterator[Options]:
    """
    Context manager that applies `set_options` on entry and restores
    the previous options on exit.

    >>> from microbialkitchen import options
    >>> with options(ph_bounds=(2.0, 12.0)):
    ...     pass
    """
    global _options
    previous = _options
    set_options(**kwargs)
    try:
        yield get_options()
    finally:
        _options = previous
