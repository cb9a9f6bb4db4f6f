"""Exceptions raised by alpha_crop."""


class AlphaCropError(Exception):
    pass


class InvalidImageError(AlphaCropError):
    """Pixel buffer is missing, empty, or its length does not match its size."""


class ImageLoadError(AlphaCropError):
    """Image could not be read, fetched or decoded."""


class ImageWriteError(AlphaCropError):
    pass
