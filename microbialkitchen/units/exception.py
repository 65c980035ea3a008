"""
Exceptions raised by the units system.  All derive from `UnitsError`
which is itself a `ValueError`, so existing ``except ValueError``
handlers continue to work.
"""


# ======================================================================

class UnitsError(ValueError):
    """
    Base class for errors raised when units or quantity kinds do not
    match what an operation requires.

    Notes
    -----
    Additional keyword arguments given at construction are stored as
    attributes, e.g. ``err.units`` or ``err.kinds``, so that callers can
    inspect the offending symbols without parsing the message.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args)
        for k, v in kwargs.items():
            setattr(self, k, v)


class UnknownUnitError(UnitsError):
    """The unit symbol is not present in the registry."""


class IncompatibleUnitError(UnitsError):
    """Operands or columns belong to different unit kinds."""


class UnsupportedOperationError(UnitsError):
    """
    Arithmetic combining two unit kinds for which no result kind is
    defined, a reduction that would change the unit, or arithmetic on
    offset temperature scales.
    """


class InvalidUnitForKindError(UnitsError):
    """
    The unit is valid for the physical kind but not for the requested
    derived quantity kind.
    """


class WrongQuantityKindError(UnitsError):
    """An argument did not satisfy a `require_quantity` check."""


class RegistryLockedError(UnitsError, RuntimeError):
    """Attempted to add units to a locked registry."""
