import base64
import io

import pytest
from PIL import Image

from conftest import DARK, encode_image
from imagemanip.models.color import Color, ImageFormat, PixelFormat
from imagemanip.models.errors import (
    ImageDecodeError,
    ImageFileNotFoundError,
    UnsupportedFormatError,
)
from imagemanip.models.image_buffer import ImageBuffer
from imagemanip.services.codec_service import ImageCodec, pil_pixel_to_color
from imagemanip.services.image_service import ImageService


class TestImageCodec:

    @pytest.fixture(scope="class")
    def codec(self):
        return ImageCodec()

    def test_decode_png_converts_opacity_to_transparency(self, codec):
        """PIL opacity 255 becomes alpha 0, opacity 0 becomes alpha 255."""
        image = Image.new("RGBA", (2, 1))
        image.putpixel((0, 0), (10, 20, 30, 255))
        image.putpixel((1, 0), (40, 50, 60, 0))
        buffer, fmt = codec.decode(encode_image(image, "PNG"))
        assert fmt is ImageFormat.PNG
        assert buffer.pixel_format is PixelFormat.RGBA
        assert buffer.get(0, 0) == Color(10, 20, 30, 0)
        assert buffer.get(1, 0).alpha == 255

    def test_decode_jpeg_and_gif_have_no_alpha(self, codec, small_jpeg, small_gif):
        jpeg, jpeg_fmt = codec.decode(small_jpeg)
        gif, gif_fmt = codec.decode(small_gif)
        assert (jpeg_fmt, gif_fmt) == (ImageFormat.JPEG, ImageFormat.GIF)
        assert jpeg.pixel_format is PixelFormat.RGB
        assert (jpeg.width(), jpeg.height()) == (8, 5)
        assert gif.get(0, 0) == Color(255, 0, 0, 0)

    def test_opaque_rgb_png_decodes_as_rgba(self, codec, rgb_png):
        buffer, fmt = codec.decode(rgb_png)
        assert fmt is ImageFormat.PNG
        assert buffer.pixel_format is PixelFormat.RGBA
        assert buffer.get(5, 3) == Color(120, 60, 30, 0)

    def test_camera_jpeg_with_mpf_header_is_jpeg(self, codec):
        """JPEG with an embedded preview (MPF) decodes as its first picture."""
        main = Image.new("RGB", (8, 6), (90, 140, 200))
        preview = Image.new("RGB", (4, 3), (0, 0, 0))
        out = io.BytesIO()
        main.save(out, format="MPO", save_all=True, append_images=[preview])
        data = out.getvalue()
        assert data[:3] == b"\xff\xd8\xff"

        buffer, fmt = codec.decode(data)
        assert fmt is ImageFormat.JPEG
        assert buffer.pixel_format is PixelFormat.RGB
        assert (buffer.width(), buffer.height()) == (8, 6)

    @pytest.mark.parametrize("pixel,mode,expected", [
        ((10, 20, 30, 255), "RGBA", Color(10, 20, 30, 0)),
        ((10, 20, 30, 55), "RGBA", Color(10, 20, 30, 200)),
        ((10, 20, 30), "RGB", Color(10, 20, 30, 0)),
        (77, "L", Color(77, 77, 77, 0)),
    ])
    def test_pil_pixel_to_color(self, pixel, mode, expected):
        """PIL opacity is reported as model transparency."""
        assert pil_pixel_to_color(pixel, mode) == expected

    def test_unsupported_format(self, codec, bmp_bytes):
        with pytest.raises(UnsupportedFormatError):
            codec.decode(bmp_bytes)

    def test_garbage_bytes(self, codec):
        with pytest.raises(ImageDecodeError):
            codec.decode(b"definitely not an image")

    def test_png_roundtrip_is_exact(self, codec, checker_png):
        buffer, fmt = codec.decode(checker_png)
        buffer.set(1, 1, Color(1, 2, 3, 77))
        decoded, _ = codec.decode(codec.encode(buffer, fmt))
        assert decoded == buffer

    def test_encode_rejects_unknown_format(self, codec):
        with pytest.raises(UnsupportedFormatError):
            codec.encode(ImageBuffer.blank(1, 1, PixelFormat.RGB), "image/tiff")

    @pytest.mark.parametrize("fmt,magic", [
        (ImageFormat.PNG, b"\x89PNG"),
        (ImageFormat.JPEG, b"\xff\xd8"),
        (ImageFormat.GIF, b"GIF8"),
    ])
    def test_data_uri(self, codec, fmt, magic):
        buffer = ImageBuffer.blank(3, 3, fmt.pixel_format, Color(*DARK))
        uri = codec.to_data_uri(buffer, fmt)
        prefix = f"data:{fmt.mime_type};base64,"
        assert uri.startswith(prefix)
        assert base64.b64decode(uri[len(prefix):]).startswith(magic)


class TestImageService:

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImageFileNotFoundError):
            ImageService().load_image(tmp_path / "nope.png")
        # also a plain FileNotFoundError for callers that catch builtins
        with pytest.raises(FileNotFoundError):
            ImageService().load_image(tmp_path)

    def test_empty_bytes(self):
        with pytest.raises(ImageFileNotFoundError):
            ImageService().load_bytes(b"")

    def test_load_and_save(self, tmp_path, checker_png):
        source = tmp_path / "checker.png"
        source.write_bytes(checker_png)
        service = ImageService()
        data = service.load_image(source)
        assert data.path == source
        assert data.size_bytes == len(checker_png)
        assert (data.width, data.height) == (4, 4)
        assert data.image_format is ImageFormat.PNG

        target = service.save_image(data.buffer, data.image_format, tmp_path / "copy.png")
        assert service.load_image(target).buffer == data.buffer
        assert Image.open(io.BytesIO(target.read_bytes())).format == "PNG"
