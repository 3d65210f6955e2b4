"""Exception types raised by the density view generator."""


class FormatError(ValueError):
    """Volume header or raw data could not be interpreted."""


class RendererUnavailableError(RuntimeError):
    """No rendering context is attached to the generator."""


class DisambiguationExhausted(RuntimeError):
    """No free filename was found within the allowed number of suffixes."""
