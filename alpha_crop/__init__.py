from .bounds import (
    CROP_SIZE_OFFSET,
    DEFAULT_INACCURACY_PX,
    ContentBounds,
    CropResult,
    PixelBuffer,
    clamp_stride,
    crop_buffer,
    extract,
    is_edge_opaque,
    scan_bounds,
    validate_buffer,
)
from .errors import AlphaCropError, ImageLoadError, ImageWriteError, InvalidImageError
