from __future__ import annotations

from typing import Callable, Tuple

import numpy as np
import numpy.typing as npt
from scipy.optimize import root_scalar

from .exception import SolverError


# ======================================================================

def y_to_x(fn: Callable[[float], float], y: float,
           x_range: Tuple[float, float], xtol: float = 2e-12,
           rtol: float = 8.881784197001252e-16, maxiter: int = 100) -> float:
    """
    Given a single-valued scalar function ``y = fn(x)``, find the `x`
    value that would result in the `y` value provided.  This is a simple
    method used when the inverse of a function is not available.
    Internally, the `brentq` method of SciPy is used to find the value
    of `x`.

    Parameters
    ----------
    fn : Callable[[float], float]
        Function ``y = fn(x)`` to invert / solve for `x`.
    y : float
        Objective value.
    x_range : (float, float)
        Bracket in which to search for `x`.
    xtol, rtol : float
        Convergence parameters - Refer to SciPy `brentq` for more
        information.
    maxiter : int
        Maximum number of iterations permitted - Refer to SciPy `brentq`
        for more information.

    Returns
    -------
    x : float
        The value giving the `y` value provided via ``y = fn(x)``.

    Raises
    ------
    SolverError
        If ``fn(x) - y`` does not change sign over `x_range` or the
        search did not converge.

    Examples
    --------
    >>> round(y_to_x(lambda x: x ** 3, 8.0, (0.0, 5.0)), 9)
    2.0
    """

    def trial_fn(x: float) -> float:
        return y - fn(x)

    x_a, x_b = x_range
    f_a, f_b = trial_fn(x_a), trial_fn(x_b)
    if f_a == 0:
        return float(x_a)
    if f_b == 0:
        return float(x_b)
    if not (np.isfinite(f_a) and np.isfinite(f_b)) or \
            np.sign(f_a) == np.sign(f_b):
        raise SolverError(f"Could not find 'x' value for y = fn(x) = "
                          f"{y:.5G} in interval {x_range}.",
                          flag='no sign change',
                          details=f"fn(x) - y = {f_a:.5G}, {f_b:.5G} at "
                                  f"the interval ends.",
                          bracket=tuple(x_range))

    sol = root_scalar(trial_fn, method='brentq', bracket=x_range,
                      xtol=xtol, rtol=rtol, maxiter=maxiter)
    if sol.converged:
        return sol.root
    else:
        raise SolverError(f"Could not find 'x' value for y = fn(x) = "
                          f"{y:.5G} in interval {x_range}.", flag=sol.flag,
                          bracket=tuple(x_range), iterations=sol.iterations)


# ----------------------------------------------------------------------

def solve_rows(fn: Callable[..., float], y: npt.ArrayLike,
               *args: npt.ArrayLike, x_range: Tuple[float, float],
               xtol: float = 2e-12, maxiter: int = 100) -> np.ndarray:
    """
    Row-wise version of `y_to_x` for vectorised inputs.  For each row
    `i`, solve ``fn(x, args[0][i], args[1][i], ...) = y[i]`` for `x`.

    Parameters
    ----------
    fn : Callable[..., float]
        Function of `x` and one scalar from each of `args`, monotonic in
        `x` over `x_range`.
    y : array-like
        Objective values.
    args : array-like
        Additional per-row parameters of `fn`.  All of `y` and `args`
        are broadcast to a common 1-D shape.
    x_range : (float, float)
        Bracket in which to search for `x`, shared by all rows.
    xtol, maxiter :
        Convergence parameters passed to `y_to_x`.

    Returns
    -------
    x : ndarray
        Solutions, one per row.  Rows where `y` or any of `args` is NaN
        give NaN.

    Raises
    ------
    SolverError
        If any row cannot be solved.  The error has a `row` attribute
        giving the index of the failing row.
    """
    arrays = np.broadcast_arrays(*(np.atleast_1d(np.asarray(a, dtype=float))
                                   for a in (y, *args)))
    if arrays[0].ndim > 1:
        raise ValueError("Inputs must be scalar or one-dimensional.")

    x = np.full(arrays[0].shape, np.nan)
    for i, row in enumerate(zip(*arrays)):
        if np.isnan(row).any():
            continue

        y_i, params = row[0], row[1:]
        try:
            x[i] = y_to_x(lambda x_: fn(x_, *params), y_i, x_range,
                          xtol=xtol, maxiter=maxiter)
        except SolverError as e:
            e.row = i
            raise
    return x
