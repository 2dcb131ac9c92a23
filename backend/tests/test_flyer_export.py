from io import BytesIO
from unittest.mock import MagicMock

from PIL import Image

from domain.models import ShareMethod
from flyer_renderer.canvas import Canvas
from services import flyer_export


def _canvas():
    return Canvas(120, 63, background=(249, 115, 22, 255))


def test_encode_jpeg_produces_rgb_jpeg():
    data = flyer_export.encode_jpeg(_canvas(), quality=0.92)
    assert data[:2] == b"\xff\xd8"
    img = Image.open(BytesIO(data))
    assert img.format == "JPEG"
    assert img.mode == "RGB"
    assert img.size == (120, 63)


def test_higher_quality_is_not_smaller():
    canvas = Canvas(64, 64)
    canvas.fill_linear_gradient((0, 0), (64, 64), (255, 0, 0, 255), (0, 0, 255, 255))
    low = flyer_export.encode_jpeg(canvas, quality=0.2)
    high = flyer_export.encode_jpeg(canvas, quality=0.92)
    assert len(high) >= len(low)


def test_save_download_writes_flyer_jpg(tmp_path):
    path = flyer_export.save_download(_canvas(), tmp_path / "out")
    assert path == tmp_path / "out" / "flyer.jpg"
    assert Image.open(path).format == "JPEG"


def test_whatsapp_url_matches_encode_uri_component():
    url = flyer_export.whatsapp_share_url("https://example.com/flyer?ref=a b")
    assert url == (
        "https://wa.me/?text=I%20just%20made%20my%20flyer!%20Make%20yours%3A%20"
        "https%3A%2F%2Fexample.com%2Fflyer%3Fref%3Da%20b"
    )


def test_share_falls_back_to_link_without_native_share():
    opener = MagicMock(return_value=True)
    result = flyer_export.share_flyer(b"jpeg", page_url="https://example.com/", opener=opener)
    assert result.method == ShareMethod.URL
    assert result.url.startswith("https://wa.me/?text=")
    assert "https%3A%2F%2Fexample.com%2F" in result.url
    assert result.opened
    opener.assert_called_once_with(result.url, new=2)


def test_share_uses_native_sharer_when_it_can_share_files():
    sharer = MagicMock()
    sharer.can_share.return_value = True
    opener = MagicMock()
    result = flyer_export.share_flyer(b"jpeg", page_url="https://example.com/", sharer=sharer, opener=opener)

    assert result.method == ShareMethod.NATIVE
    opener.assert_not_called()
    kwargs = sharer.share.call_args.kwargs
    assert kwargs["text"] == "Make yours here:"
    assert kwargs["url"] == "https://example.com/"
    shared = kwargs["files"][0]
    assert shared.name == "flyer.jpg"
    assert shared.mime == "image/jpeg"
    assert shared.data == b"jpeg"


def test_share_falls_back_when_sharer_declines_files():
    sharer = MagicMock()
    sharer.can_share.return_value = False
    opener = MagicMock(return_value=True)
    result = flyer_export.share_flyer(b"jpeg", page_url="https://example.com/", sharer=sharer, opener=opener)
    assert result.method == ShareMethod.URL
    sharer.share.assert_not_called()


def test_share_falls_back_when_native_share_fails():
    sharer = MagicMock()
    sharer.can_share.return_value = True
    sharer.share.side_effect = RuntimeError("share sheet dismissed")
    opener = MagicMock(return_value=False)
    result = flyer_export.share_flyer(b"jpeg", page_url="https://example.com/", sharer=sharer, opener=opener)
    assert result.method == ShareMethod.URL
    assert result.opened is False
