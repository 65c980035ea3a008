"""
**microbialkitchen.solve** provides the bracketed root searches used to
invert monotonic functions, such as solving a charge balance for pH.
Internally these use SciPy's `brentq` method.
"""

from .exception import SolverError
from .inverse import y_to_x, solve_rows
