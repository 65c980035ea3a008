from __future__ import annotations

# ======================================================================

class SolverError(RuntimeError):
    """
    This exception is raised when a root search fails to bracket or
    converge to a solution, e.g. when no pH in the search interval
    balances the charge of a solution.  The attributes describe where
    and why the search failed.

    Parameters
    ----------
    args :
        Passed to `RuntimeError`.
    flag : str, default = None
        Status of the search, e.g. ``'no sign change'`` if the bracket
        does not contain a root or SciPy's ``'convergence error'``.
    details : str, default = None
        Additional text relating to the specific type of failure.
    bracket : (float, float), default = None
        Interval that was searched.
    iterations : int, default = None
        Iterations used before giving up.
    row : int, default = None
        Index of the failing row for row-wise solutions (set by
        `solve_rows`).
    """

    def __init__(self, *args, flag: str = None, details: str = None,
                 bracket: tuple[float, float] = None, iterations: int = None,
                 row: int = None):
        super().__init__(*args)
        self.flag, self.details = flag, details
        self.bracket, self.iterations = bracket, iterations
        self.row = row

    def __str__(self):
        """Failure notice followed by the known details, one per line."""
        lines = [super().__str__()]
        if self.row is not None:
            lines.append(f"Failed at row {self.row}.")
        for label, value in (('flag', self.flag), ('details', self.details),
                             ('bracket', self.bracket),
                             ('iterations', self.iterations)):
            if value is not None:
                lines.append(f"    {label}: {value}")
        return '\n'.join(lines)
