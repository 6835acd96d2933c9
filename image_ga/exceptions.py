"""
Exception hierarchy for the image reconstruction GA.

Configuration errors are raised synchronously before the generation loop
starts; nothing in the loop itself is expected to raise under a valid
configuration.
"""


class ImageGAError(Exception):
    """Base for all image GA exceptions."""

    pass


class ConfigurationError(ImageGAError):
    """Raised when run configuration is invalid."""

    pass


class OddPopulationSizeError(ConfigurationError):
    """Population size cannot be split into crossover pairs."""

    pass


class InvalidRangeError(ConfigurationError):
    """A numeric parameter lies outside its allowed range."""

    pass


class ShapeMismatchError(ImageGAError):
    """Target length does not match the population's gene axis."""

    pass


class DatasetError(ImageGAError):
    """Malformed image buffer, or pixel values outside [0, 1]."""

    pass
