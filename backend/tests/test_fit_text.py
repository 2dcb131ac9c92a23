from domain.models import FontSpec
from flyer_renderer import engine
from flyer_renderer.canvas import Canvas


class FakeCanvas:
    """Width grows linearly with font size; records measure and paint calls."""

    def __init__(self, per_char=0.6):
        self.per_char = per_char
        self.measured = []
        self.painted = []

    def measure_text(self, text, font):
        self.measured.append(font.size_px)
        return len(text) * font.size_px * self.per_char

    def fill_text(self, text, x, y, font, color, shadow=None):
        self.painted.append((text, x, y, font, color, shadow))


def test_text_that_fits_keeps_initial_size():
    canvas = FakeCanvas()
    font = FontSpec.parse("700 34px Arial")
    size = engine.fit_text(canvas, "short", 10, 20, 500, font)
    assert size == 34
    assert canvas.measured == [34]
    text, x, y, used, _, _ = canvas.painted[0]
    assert (text, x, y) == ("short", 10, 20)
    assert used == font


def test_shrinks_to_largest_fitting_size():
    canvas = FakeCanvas()
    font = FontSpec.parse("600 28px Arial")
    text = "x" * 50  # width = 30 * size
    size = engine.fit_text(canvas, text, 0, 0, 600, font)
    assert size == 20
    assert len(text) * size * 0.6 <= 600
    assert len(text) * (size + 1) * 0.6 > 600
    painted_font = canvas.painted[0][3]
    assert painted_font.size_px == 20
    assert painted_font.weight == "600"
    assert painted_font.family == "Arial"


def test_sizes_stay_within_bounds_and_loop_is_bounded():
    for max_width in [0, 5, 50, 200, 400, 1000, 10_000]:
        canvas = FakeCanvas()
        font = FontSpec.parse("italic 26px Arial")
        size = engine.fit_text(canvas, "Ifo Lokan, Ifo lo ma se", 0, 0, max_width, font, min_size=12)
        assert 12 <= size <= 26
        # one measurement per iteration plus the initial one
        assert len(canvas.measured) <= (26 - 12) + 1
        assert canvas.measured == sorted(canvas.measured, reverse=True)
        fits = len("Ifo Lokan, Ifo lo ma se") * size * 0.6 <= max_width
        assert fits or size == 12
        assert len(canvas.painted) == 1


def test_overflow_at_floor_is_painted_anyway():
    canvas = FakeCanvas()
    text = "I, Bartholomew Featherstonehaugh-Cholmondeley, support ADJ"
    size = engine.fit_text(canvas, text, 5, 6, 10, FontSpec.parse("700 34px Arial"), min_size=12)
    assert size == 12
    assert canvas.painted[0][0] == text


def test_initial_size_below_floor_is_not_changed():
    canvas = FakeCanvas()
    size = engine.fit_text(canvas, "long text here", 0, 0, 1, FontSpec.parse("10px Arial"), min_size=12)
    assert size == 10
    assert canvas.measured == [10]


def test_fit_text_paints_on_real_canvas():
    canvas = Canvas(400, 80, background=(255, 255, 255, 255))
    size = engine.fit_text(canvas, "I, Ada, support ADJ", 10, 50, 380, FontSpec.parse("700 34px Arial"),
                           color=(0, 0, 0, 255))
    assert 12 <= size <= 34
    assert canvas.measure_text("I, Ada, support ADJ", FontSpec.parse(f"700 {size}px Arial")) <= 380 or size == 12
    # Ink lands above the baseline, starting near x=10
    bbox = canvas.image.convert("L").point(lambda p: 255 if p < 128 else 0).getbbox()
    assert bbox is not None
    assert bbox[0] >= 8
    assert bbox[3] <= 60
