"""Exceptions raised while configuring a Mandelbrot render."""


class InvalidConfiguration(ValueError):
    """The render parameters cannot describe a valid image."""


class InvalidSampleCount(InvalidConfiguration):
    """Super-sampling was requested with fewer than one sample per pixel."""
