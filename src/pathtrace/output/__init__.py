"""Image output: gamma correction, 8-bit quantization and file export."""

from pathtrace.output.export import (
    COLOR_SCALE,
    PixelSink,
    gamma_correct,
    image_to_uint8,
    quantize,
    quantize_channel,
    write_image,
)

__all__ = [
    "COLOR_SCALE",
    "PixelSink",
    "gamma_correct",
    "image_to_uint8",
    "quantize",
    "quantize_channel",
    "write_image",
]
