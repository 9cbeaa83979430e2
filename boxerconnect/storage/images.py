"""Image normalization: orientation fix, bounded resize, re-encode without metadata."""

import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from boxerconnect.config import IMAGE_MAX_HEIGHT, IMAGE_MAX_WIDTH, IMAGE_OUTPUT_FORMAT, IMAGE_QUALITY
from boxerconnect.storage.errors import ProcessingError

logger = logging.getLogger(__name__)

# output format -> (Pillow encoder, MIME type, modes the encoder accepts)
OUTPUT_FORMATS: dict[str, tuple[str, str, tuple[str, ...]]] = {
    "webp": ("WEBP", "image/webp", ("RGB", "RGBA")),
    "jpeg": ("JPEG", "image/jpeg", ("RGB", "L")),
    "png": ("PNG", "image/png", ("RGB", "RGBA", "L", "LA")),
}


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or "transparency" in image.info


class ImageTransform:
    """
    Deterministic image pipeline used by every backend on the image store path.
    Any input Pillow can decode (JPEG, PNG, GIF, WebP...) comes out in one output format.
    """

    def __init__(
        self,
        max_width: int = IMAGE_MAX_WIDTH,
        max_height: int = IMAGE_MAX_HEIGHT,
        quality: int = IMAGE_QUALITY,
        output_format: str = IMAGE_OUTPUT_FORMAT,
    ) -> None:
        output_format = output_format.lower()
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {output_format}")
        self.max_width = max_width
        self.max_height = max_height
        self.quality = quality
        self.output_format = output_format

    @property
    def extension(self) -> str:
        return self.output_format

    @property
    def mime_type(self) -> str:
        return OUTPUT_FORMATS[self.output_format][1]

    def _normalize_mode(self, image: Image.Image) -> Image.Image:
        modes = OUTPUT_FORMATS[self.output_format][2]
        if image.mode in modes:
            return image
        if _has_alpha(image) and "RGBA" in modes:
            return image.convert("RGBA")
        return image.convert("RGB")

    def _encode(self, image: Image.Image) -> bytes:
        # Fresh info dict: EXIF, ICC and XMP are not written to the output
        image.info = {}
        encoder = OUTPUT_FORMATS[self.output_format][0]
        save_kwargs: dict = {"exif": b""}
        if encoder == "PNG":
            save_kwargs["optimize"] = True
        else:
            save_kwargs["quality"] = self.quality
        out = io.BytesIO()
        image.save(out, format=encoder, **save_kwargs)
        return out.getvalue()

    def transform(self, data: bytes) -> bytes:
        """Return the normalized image bytes. Raises ProcessingError if data cannot be decoded or re-encoded."""
        try:
            with Image.open(io.BytesIO(data)) as source:
                source.load()
                image = ImageOps.exif_transpose(source)
                image = self._normalize_mode(image)
                # thumbnail() keeps aspect ratio and never enlarges
                image.thumbnail((self.max_width, self.max_height), Image.Resampling.LANCZOS)
            processed = self._encode(image)
        # Pillow reports broken files from plugin decoders as SyntaxError
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
            raise ProcessingError(f"Could not process image: {exc}") from exc

        logger.debug(
            "Transformed image %d bytes -> %d bytes (%dx%d %s)",
            len(data), len(processed), image.width, image.height, self.output_format,
        )
        return processed
