"""
Winding Design Errors
Raised before any state is touched, so the previous design stays on screen
"""


class WindingDesignError(ValueError):
    """Base class for every recoverable design input problem"""


class InvalidSpecError(WindingDesignError):
    """Machine parameters are missing, non-integer, non-positive or unsupported"""


class DegenerateFormulaError(WindingDesignError):
    """Distribution factor would divide by zero (q = 0 or sin(alpha/2) = 0)"""


class PitchOutOfRangeError(WindingDesignError):
    """Custom pitch offset leaves a zero or negative coil span"""
