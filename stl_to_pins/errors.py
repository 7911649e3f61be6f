"""Exception hierarchy for the mesh-to-pin pipeline."""


class PinBedError(Exception):
    """Base class for every error raised by stl_to_pins."""


class InvalidInputError(PinBedError, ValueError):
    """Empty mesh, too few points, bad grid or region."""


class FallbackUndefinedError(InvalidInputError):
    """Undetermined pins exist but there is no measured height to average."""


class DegenerateGeometryError(PinBedError, ArithmeticError):
    """Geometry that would otherwise divide by zero."""


class DegenerateVectorError(DegenerateGeometryError):
    pass


class DegeneratePlaneError(DegenerateGeometryError):
    pass


class DegenerateTriangleError(DegenerateGeometryError):
    pass


class IOFailureError(PinBedError, OSError):
    """Output sink (or mesh source) could not be opened, read or written."""


class MeshLoadError(IOFailureError):
    pass
