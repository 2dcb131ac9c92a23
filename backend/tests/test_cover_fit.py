from unittest.mock import MagicMock

from PIL import Image

from flyer_renderer import engine
from flyer_renderer.canvas import Canvas

EPS = 1e-6


def test_cover_rect_always_covers_target():
    targets = [(0, 0, 220, 220), (10, 20, 1200, 630), (5, 5, 1080, 1080), (0, 0, 37, 500)]
    sources = [(1, 1), (400, 100), (100, 400), (4032, 3024), (3024, 4032), (1200, 630), (7, 999)]
    for x, y, w, h in targets:
        for iw, ih in sources:
            nx, ny, nw, nh = engine.cover_rect(x, y, w, h, iw, ih)
            assert nw >= w - EPS
            assert nh >= h - EPS
            assert nx <= x + EPS
            assert ny <= y + EPS
            # Overflow is split evenly on both sides
            assert abs((x - nx) - ((nx + nw) - (x + w))) < 1e-6
            assert abs((y - ny) - ((ny + nh) - (y + h))) < 1e-6
            # Aspect ratio kept, one side exactly matches
            assert abs(nw / nh - iw / ih) < 1e-6
            assert abs(nw - w) < 1e-6 or abs(nh - h) < 1e-6


def test_cover_rect_unknown_size_returns_none():
    assert engine.cover_rect(0, 0, 100, 100, 0, 50) is None
    assert engine.cover_rect(0, 0, 100, 100, 50, 0) is None
    assert engine.cover_rect(0, 0, 100, 100, None, None) is None


def test_draw_image_cover_crops_center_of_wide_image():
    # 300x100: red | green | blue thirds; covering a square keeps the green middle
    src = Image.new("RGBA", (300, 100), (255, 0, 0, 255))
    src.paste((0, 255, 0, 255), (100, 0, 200, 100))
    src.paste((0, 0, 255, 255), (200, 0, 300, 100))

    canvas = Canvas(100, 100, background=(0, 0, 0, 255))
    engine.draw_image_cover(canvas, src, 0, 0, 100, 100)

    for px in [(2, 2), (50, 50), (97, 97)]:
        r, g, b, a = canvas.image.getpixel(px)
        assert g > 240 and r < 15 and b < 15


def test_draw_image_cover_without_clip_overflows_target_rect():
    src = Image.new("RGBA", (200, 100), (255, 0, 0, 255))
    canvas = Canvas(200, 100, background=(0, 0, 0, 255))
    engine.draw_image_cover(canvas, src, 75, 25, 50, 50)
    # Scaled to 100x50 centred on the rect: spills 25px left and right
    assert canvas.image.getpixel((55, 50))[0] > 240
    assert canvas.image.getpixel((40, 50)) == (0, 0, 0, 255)
    assert canvas.image.getpixel((100, 10)) == (0, 0, 0, 255)


def test_unknown_intrinsic_size_stretches_into_rect():
    canvas = MagicMock()
    image = object()
    engine.draw_image_cover(canvas, image, 1, 2, 30, 40)
    canvas.draw_image.assert_called_once_with(image, 1, 2, 30, 40)


def test_zero_area_image_is_skipped():
    canvas = Canvas(20, 20, background=(9, 9, 9, 255))
    engine.draw_image_cover(canvas, Image.new("RGBA", (0, 0)), 0, 0, 20, 20)
    assert canvas.image.getextrema()[0] == (9, 9)
