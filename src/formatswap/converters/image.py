"""Raster image re-encoding with Pillow."""

import io

from formatswap.converters.base import ConversionContext, ConversionResult, Converter
from formatswap.errors import ConversionFailedError
from formatswap.formats import mime_type_for

# Format tag -> Pillow encoder name
PIL_FORMATS: dict[str, str] = {
    "JPG": "JPEG",
    "PNG": "PNG",
    "WEBP": "WEBP",
    "BMP": "BMP",
    "ICO": "ICO",
    "GIF": "GIF",
}

# Encoders without an alpha channel
OPAQUE_FORMATS = {"JPEG"}

ICO_MAX_SIZE = 256


def reencode_image(payload: bytes, target: str, context: ConversionContext) -> ConversionResult:
    """Decode an image, draw it on a same-sized surface and encode it as target.

    The surface matches the source's pixel dimensions exactly; nothing is
    resized. Only the first frame of animated sources is kept.

    Args:
        payload: Source image bytes.
        target: Target format tag, one of PIL_FORMATS.
        context: Receives progress 10, 50, 75, 90 and 100.

    Returns:
        ConversionResult with the encoded image.

    Raises:
        ConversionFailedError: If the source cannot be decoded or the
            target cannot be encoded.
    """
    try:
        from PIL import Image
    except ImportError as e:
        raise ConversionFailedError("Pillow is not installed. Run: pip install Pillow") from e

    context.report(10)

    surface = None
    try:
        try:
            with Image.open(io.BytesIO(payload)) as source:
                source.load()
                context.report(50)

                surface = Image.new("RGBA", source.size, (0, 0, 0, 0))
                context.report(75)

                with source.convert("RGBA") as frame:
                    surface.paste(frame, (0, 0))
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise ConversionFailedError("Failed to load image") from e

        context.report(90)

        try:
            data = _encode(surface, PIL_FORMATS[target])
        except (OSError, ValueError, KeyError) as e:
            raise ConversionFailedError("Failed to convert image") from e
    finally:
        # Released on every path, including a failed paste
        if surface is not None:
            surface.close()

    context.report(100)
    return ConversionResult(data=data, mime_type=mime_type_for(target))


def _encode(surface, pil_format: str) -> bytes:
    """Encode an RGBA surface in the given Pillow format."""
    options = {}
    if pil_format == "ICO":
        width, height = surface.size
        if width > ICO_MAX_SIZE or height > ICO_MAX_SIZE:
            raise ValueError(f"ICO images are limited to {ICO_MAX_SIZE}x{ICO_MAX_SIZE} pixels")
        options["sizes"] = [surface.size]

    buffer = io.BytesIO()
    if pil_format in OPAQUE_FORMATS:
        with surface.convert("RGB") as opaque:
            opaque.save(buffer, format=pil_format)
    else:
        surface.save(buffer, format=pil_format, **options)
    return buffer.getvalue()


def image_converter(target: str) -> Converter:
    """Build the registry entry that re-encodes any image as target."""

    def convert(payload: bytes, context: ConversionContext) -> ConversionResult:
        return reencode_image(payload, target, context)

    convert.__name__ = f"image_to_{target.lower()}"
    return convert
