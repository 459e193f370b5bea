import asyncio
import base64
import io
import logging
import warnings
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from utils.pipeline_errors import (
    CanvasUnavailable,
    CompressedImageTooLarge,
    FileTooLarge,
    InvalidFileType,
)

logger = logging.getLogger("image_normalizer")


@dataclass(frozen=True)
class NormalizedImage:
    """JPEG data-URI produced by ImageNormalizer. Never longer than MAX_ENCODED_CHARS."""
    data_uri: str
    width: int
    height: int

    def __len__(self) -> int:
        return len(self.data_uri)

    @property
    def size_kb(self) -> int:
        return round(len(self.data_uri) / 1024)


@dataclass
class ImageSource:
    """In-memory stand-in for an UploadFile (same content_type / filename / read())."""
    data: bytes
    content_type: Optional[str] = None
    filename: Optional[str] = None

    async def read(self) -> bytes:
        return self.data


class ImageNormalizer:
    MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB
    MAX_EDGE = 800
    JPEG_QUALITY = 70  # factor 0.7
    MAX_ENCODED_CHARS = 900_000

    def _validate_type(self, source) -> None:
        content_type = (getattr(source, "content_type", None) or "").lower()
        if not content_type.startswith("image/"):
            raise InvalidFileType(
                f"Invalid file type '{content_type or 'unknown'}'. Please choose an image file."
            )

    def _validate_size(self, raw: bytes) -> None:
        if len(raw) > self.MAX_FILE_SIZE:
            raise FileTooLarge(
                f"Image is {round(len(raw) / (1024 * 1024), 1)} MB; the limit is 5 MB."
            )

    @classmethod
    def target_size(cls, width: int, height: int) -> Tuple[int, int]:
        """Cap the longer edge at MAX_EDGE keeping the aspect ratio. Never upscales."""
        if width >= height and width > cls.MAX_EDGE:
            return cls.MAX_EDGE, max(1, round(height * cls.MAX_EDGE / width))
        if height > cls.MAX_EDGE:
            return max(1, round(width * cls.MAX_EDGE / height)), cls.MAX_EDGE
        return width, height

    def _decode(self, raw: bytes) -> Image.Image:
        with warnings.catch_warnings():
            # Oversized rasters must fail here, not only emit a warning
            warnings.simplefilter("error", Image.DecompressionBombWarning)
            try:
                img = Image.open(io.BytesIO(raw))
            except (Image.DecompressionBombError, Image.DecompressionBombWarning) as e:
                raise CanvasUnavailable(f"Image has too many pixels to decode: {str(e)}")
            except (UnidentifiedImageError, OSError) as e:
                raise InvalidFileType(f"Could not decode image: {str(e)}")

        try:
            img.load()
        except OSError as e:
            img.close()
            raise InvalidFileType(f"Could not decode image: {str(e)}")
        except BaseException:
            img.close()
            raise
        return img

    def _resample(self, img: Image.Image, size: Tuple[int, int]) -> Image.Image:
        try:
            canvas = Image.new("RGB", size, (255, 255, 255))
        except (MemoryError, ValueError) as e:
            raise CanvasUnavailable(f"Could not allocate a {size[0]}x{size[1]} raster: {str(e)}")

        source = img
        if img.mode in ("RGBA", "LA", "P"):
            source = img.convert("RGBA")
        try:
            resized = source.resize(size, Image.LANCZOS) if source.size != size else source.copy()
            try:
                if resized.mode == "RGBA":
                    canvas.paste(resized, (0, 0), resized)
                else:
                    canvas.paste(resized.convert("RGB"), (0, 0))
            finally:
                resized.close()
        except BaseException:
            canvas.close()
            raise
        finally:
            if source is not img:
                source.close()
        return canvas

    def _encode(self, canvas: Image.Image) -> str:
        buf = io.BytesIO()
        canvas.save(buf, format="JPEG", quality=self.JPEG_QUALITY)
        return "data:image/jpeg;base64," + base64.b64encode(buf.getvalue()).decode("ascii")

    async def normalize(self, source) -> NormalizedImage:
        """
        Decode, downscale and re-encode a picked image.

        Args:
            source: object exposing content_type, filename and an awaitable read()
                (fastapi.UploadFile or ImageSource)

        Returns:
            NormalizedImage: JPEG data-URI at quality 0.7, longer edge <= 800 px

        Raises:
            InvalidFileType, FileTooLarge, CanvasUnavailable, CompressedImageTooLarge
        """
        self._validate_type(source)
        raw = await source.read()
        self._validate_size(raw)

        img = self._decode(raw)
        try:
            await asyncio.sleep(0)
            width, height = img.size
            size = self.target_size(width, height)
            canvas = self._resample(img, size)
        finally:
            img.close()

        try:
            await asyncio.sleep(0)
            encoded = self._encode(canvas)
        finally:
            canvas.close()
        await asyncio.sleep(0)

        # Single pass: no retry with lower quality
        if len(encoded) > self.MAX_ENCODED_CHARS:
            logger.warning(f"Imagen comprimida demasiado grande: {len(encoded)} caracteres")
            raise CompressedImageTooLarge(len(encoded))

        logger.info(
            f"Imagen normalizada {getattr(source, 'filename', None) or '<memoria>'}: "
            f"{width}x{height} -> {size[0]}x{size[1]}, {round(len(encoded) / 1024)} KB"
        )
        return NormalizedImage(data_uri=encoded, width=size[0], height=size[1])


image_normalizer = ImageNormalizer()
