"""
ThumbnailGenerator - Handles format detection and letterboxed thumbnail generation.
"""

import io
import logging
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .errors import DecodeFailure, UnsupportedFormat


class ThumbnailGenerator:
    """
    Generates square, letterboxed JPEG thumbnails using Pillow.
    """

    # MIME type -> Pillow decoder name
    DECODERS = {
        'image/jpeg': 'JPEG',
        'image/png': 'PNG',
        'image/webp': 'WEBP',
        'image/gif': 'GIF',
    }

    ALIASES = {
        'jpeg': 'image/jpeg',
        'jpg': 'image/jpeg',
        'png': 'image/png',
        'webp': 'image/webp',
        'gif': 'image/gif',
    }

    BACKGROUND = (0, 0, 0)

    def __init__(
        self,
        size: int = 400,
        quality: int = 80,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize thumbnail generator.

        Args:
            size: Edge length of the square thumbnail (default: 400)
            quality: JPEG quality for output (default: 80)
            logger: Optional logger instance
        """
        self.size = size
        self.quality = quality
        self.logger = logger or logging.getLogger(__name__)

    def generate(self, image_data: bytes, fmt: str) -> bytes:
        """
        Generate a thumbnail from image data.

        Args:
            image_data: Original image as bytes
            fmt: MIME type ('image/png') or short name ('png', '.jpg')

        Returns:
            JPEG bytes of a size x size thumbnail
        """
        decoder = self._decoder_for(fmt)
        try:
            img = Image.open(io.BytesIO(image_data), formats=[decoder])
            img.load()
        except (UnidentifiedImageError, OSError, SyntaxError, Image.DecompressionBombError) as e:
            self.logger.error(f"Error decoding {decoder} image: {e}")
            raise DecodeFailure(f"Image data is not valid {decoder.lower()}")

        img = self._convert_color_mode(img)
        width, height = img.size
        if width == 0 or height == 0:
            raise DecodeFailure("Image has no pixels")

        new_width, new_height = self.fit(width, height)
        resized = img.resize((new_width, new_height), Image.Resampling.LANCZOS)

        canvas = Image.new('RGB', (self.size, self.size), self.BACKGROUND)
        offset = ((self.size - new_width) // 2, (self.size - new_height) // 2)
        canvas.paste(resized, offset)

        output = io.BytesIO()
        canvas.save(output, format='JPEG', quality=self.quality)
        return output.getvalue()

    def fit(self, width: int, height: int) -> Tuple[int, int]:
        """Scaled dimensions that fit a size x size square without distortion."""
        # integer arithmetic: floor(dim * size / longest) without float error
        if width >= height:
            return self.size, max(1, height * self.size // width)
        return max(1, width * self.size // height), self.size

    def probe(self, image_data: bytes) -> Tuple[Optional[str], int, int]:
        """
        Detect the real format and pixel dimensions without a full decode.

        Returns:
            Tuple of (content_type, width, height); content_type is None
            when Pillow does not recognise the data.
        """
        try:
            with Image.open(io.BytesIO(image_data)) as img:
                return Image.MIME.get(img.format), img.size[0], img.size[1]
        except (UnidentifiedImageError, OSError, SyntaxError, Image.DecompressionBombError):
            return None, 0, 0

    def _decoder_for(self, fmt: str) -> str:
        content_type = self._normalize(fmt)
        if content_type not in self.DECODERS:
            raise UnsupportedFormat(f"Unsupported image type for thumbnails: {fmt}")
        return self.DECODERS[content_type]

    def _normalize(self, fmt: str) -> str:
        fmt = (fmt or '').strip().lower()
        return self.ALIASES.get(fmt.lstrip('.'), fmt)

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Flatten transparency onto the background and convert to RGB."""
        if img.mode == 'P':
            img = img.convert('RGBA')
        if img.mode in ('RGBA', 'LA', 'PA'):
            img = img.convert('RGBA')
            background = Image.new('RGB', img.size, self.BACKGROUND)
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode != 'RGB':
            return img.convert('RGB')
        return img
