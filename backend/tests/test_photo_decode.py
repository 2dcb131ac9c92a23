from io import BytesIO

import pytest
from PIL import Image

from services import photo_decode


def test_fast_decode_png(red_png):
    img = photo_decode.decode_photo_fast(red_png)
    assert img.mode == "RGBA"
    assert img.size == (40, 40)


def test_fast_decode_converts_rgb_jpeg():
    buf = BytesIO()
    Image.new("RGB", (16, 12), (0, 200, 0)).save(buf, format="JPEG")
    img = photo_decode.decode_photo_fast(buf.getvalue())
    assert img.mode == "RGBA"
    assert img.size == (16, 12)


def test_fast_decode_honours_exif_orientation():
    img = Image.new("RGB", (40, 20), (0, 0, 255))
    exif = Image.Exif()
    exif[0x0112] = 6  # rotate 90 CW on display
    buf = BytesIO()
    img.save(buf, format="JPEG", exif=exif.tobytes())
    decoded = photo_decode.decode_photo_fast(buf.getvalue())
    assert decoded.size == (20, 40)


@pytest.mark.parametrize("data", [b"", b"garbage bytes", b"\x89PNG\r\n\x1a\n truncated"])
def test_fast_decode_rejects_bad_data(data):
    with pytest.raises(photo_decode.PhotoDecodeError):
        photo_decode.decode_photo_fast(data)


def test_slow_decode_rejects_empty():
    with pytest.raises(photo_decode.PhotoDecodeError):
        photo_decode.decode_photo_slow(b"")


def test_decode_error_is_value_error():
    assert issubclass(photo_decode.PhotoDecodeError, ValueError)


def test_register_heif_opener_is_idempotent():
    first = photo_decode.register_heif_opener()
    second = photo_decode.register_heif_opener()
    assert isinstance(first, bool)
    assert first == second


def test_slow_decode_png_through_imagemagick(red_png):
    pytest.importorskip("wand.image")
    img = photo_decode.decode_photo_slow(red_png)
    assert img.mode == "RGBA"
    assert img.size == (40, 40)
    assert img.getpixel((20, 20)) == (255, 0, 0, 255)
