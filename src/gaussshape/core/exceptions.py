"""Exception hierarchy for Gaussian shape comparison."""


class GaussShapeError(Exception):
    """Base class for all errors raised by the package."""


class InvalidArgumentError(GaussShapeError, ValueError):
    """A caller-supplied value violates a documented precondition."""


class EmptyMoleculeError(InvalidArgumentError):
    """A molecule without atoms was passed where atoms are required."""


class InternalInvariantError(GaussShapeError, RuntimeError):
    """Internal data structures disagree with each other.

    This indicates a defect in the calling code rather than bad input and
    should not be caught and ignored.
    """
