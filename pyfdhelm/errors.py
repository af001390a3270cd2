"""pyfdhelm.errors"""


class ConfigurationError(TypeError):
    """A face element cannot be built from the objects it was given.

    Raised at construction time, e.g. when the bulk element does not provide
    the Helmholtz equations or no bulk element / face index was supplied.
    """


class NumericalDegeneracyError(ValueError):
    """A zero (or negative) geometric Jacobian was met at a quadrature point."""
