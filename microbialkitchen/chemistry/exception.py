# ======================================================================

class ConstantsError(LookupError):
    """
    Base class for failed lookups of physical or chemical constants.
    Additional keyword arguments (e.g. `gas` or `name`) are stored as
    attributes.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args)
        for k, v in kwargs.items():
            setattr(self, k, v)

    def __str__(self):
        # LookupError would otherwise quote a single argument like KeyError.
        return ' '.join(str(a) for a in self.args)


class MissingConstantsError(ConstantsError):
    """No entry matches the requested constant or gas."""


class AmbiguousConstantsError(ConstantsError):
    """More than one entry matches the requested gas."""
