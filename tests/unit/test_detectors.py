"""Unit tests for the feature detectors on synthetic glyphs."""

import pytest

from glyphanatomy.core.analysis import DetectionContext
from glyphanatomy.core.detectors import DETECTORS
from glyphanatomy.core.detectors._common import band_levels, find_stems
from glyphanatomy.core.detectors._registry import detector
from glyphanatomy.domain import (
    BBox,
    CircleShape,
    FeatureName,
    FeatureResult,
    GlyphOutline,
    Metrics,
    PathCommand,
    PolylineShape,
)

PLUS = [
    (200, 0), (300, 0), (300, 400), (450, 400), (450, 480), (300, 480),
    (300, 700), (200, 700), (200, 480), (50, 480), (50, 400), (200, 400),
]


def run(feature: FeatureName, outline: GlyphOutline, metrics: Metrics):
    return DETECTORS[feature](DetectionContext.create(outline, metrics))


class TestRegistry:
    """Tests for the detector registry."""

    def test_every_feature_registered(self) -> None:
        """Test each feature has exactly one detector."""
        assert set(DETECTORS) == set(FeatureName)

    def test_duplicate_registration_rejected(self) -> None:
        """Test registering a second detector for a feature raises ValueError."""
        with pytest.raises(ValueError, match="Duplicate"):
            detector(FeatureName.STEM)(lambda ctx: False)

    @pytest.mark.parametrize("feature", list(FeatureName))
    def test_unusable_outline_not_found(self, feature: FeatureName, metrics: Metrics) -> None:
        """Test every detector reports nothing for an empty outline."""
        assert not run(feature, GlyphOutline(bbox=None), metrics)


class TestHelpers:
    """Tests for shared probing helpers."""

    def test_band_levels_strictly_inside(self) -> None:
        """Test levels avoid both limits."""
        assert band_levels(0, 100, 3) == [25.0, 50.0, 75.0]
        assert band_levels(100, 0, 3) == []

    def test_find_stems_h(self, h_glyph: GlyphOutline, metrics: Metrics) -> None:
        """Test both uprights of an H are found above and below the bar."""
        stems = find_stems(DetectionContext.create(h_glyph, metrics))
        assert sorted({round(s.center) for s in stems}) == [50, 450]
        assert all(s.width == pytest.approx(100.0) for s in stems)


class TestStems:
    """Tests for stem, bar, cross stroke, serif and foot."""

    def test_rectangle_is_stem(self, rectangle: GlyphOutline, metrics: Metrics) -> None:
        """Test a tall rectangle has a stem standing on the baseline."""
        assert run(FeatureName.STEM, rectangle, metrics)
        assert run(FeatureName.FOOT, rectangle, metrics)

    def test_rectangle_has_no_serif(self, rectangle: GlyphOutline, metrics: Metrics) -> None:
        """Test a plain rectangle has no serif, bracket or bar."""
        assert not run(FeatureName.SERIF, rectangle, metrics)
        assert not run(FeatureName.BRACKET, rectangle, metrics)
        assert not run(FeatureName.BAR, rectangle, metrics)

    def test_slab_serif(self, slab_glyph: GlyphOutline, metrics: Metrics) -> None:
        """Test a stem on a wide straight foot has a serif but no bracket."""
        assert run(FeatureName.SERIF, slab_glyph, metrics)
        assert not run(FeatureName.BRACKET, slab_glyph, metrics)

    def test_h_bar(self, h_glyph: GlyphOutline, metrics: Metrics) -> None:
        """Test the crossbar of an H."""
        assert run(FeatureName.BAR, h_glyph, metrics)
        assert run(FeatureName.STEM, h_glyph, metrics)

    def test_cross_stroke(self, outline_factory, metrics: Metrics) -> None:
        """Test a stroke crossing a single stem is a cross stroke."""
        assert run(FeatureName.CROSS_STROKE, outline_factory(PLUS), metrics)

    def test_h_bar_is_not_cross_stroke(self, h_glyph: GlyphOutline, metrics: Metrics) -> None:
        """Test a bar joining two stems does not cross a single stem."""
        assert not run(FeatureName.CROSS_STROKE, h_glyph, metrics)


class TestCavities:
    """Tests for counter, bowl and aperture."""

    def test_ring_counter(self, ring: GlyphOutline, metrics: Metrics) -> None:
        """Test the counter of a ring is traced around a seed in the hole."""
        result = run(FeatureName.COUNTER, ring, metrics)
        assert isinstance(result, FeatureResult)
        assert result.found
        assert result.location.x == pytest.approx(300.0)
        assert result.location.y == pytest.approx(250.0)
        assert isinstance(result.shape, PolylineShape)
        assert len(result.shape.points) == 60

    def test_counter_points_stay_in_hole(self, ring: GlyphOutline, metrics: Metrics) -> None:
        """Test the traced counter never leaves the hole."""
        result = run(FeatureName.COUNTER, ring, metrics)
        for p in result.shape.points:
            assert 199.0 <= p.x <= 401.0
            assert 99.0 <= p.y <= 401.0

    def test_rectangle_has_no_counter(self, rectangle: GlyphOutline, metrics: Metrics) -> None:
        """Test solid ink has neither counter nor bowl."""
        assert not run(FeatureName.COUNTER, rectangle, metrics)
        assert not run(FeatureName.BOWL, rectangle, metrics)

    def test_ring_bowl(self, ring: GlyphOutline, metrics: Metrics) -> None:
        """Test a ring with a hole has a bowl."""
        assert run(FeatureName.BOWL, ring, metrics)

    def test_round_bowl(self, round_o: GlyphOutline, metrics: Metrics) -> None:
        """Test a curved ring has a bowl traced along its outside."""
        result = run(FeatureName.BOWL, round_o, metrics)
        assert result.found
        assert isinstance(result.shape, PolylineShape)

    def test_c_aperture(
        self, c_glyph: GlyphOutline, rectangle: GlyphOutline, metrics: Metrics
    ) -> None:
        """Test the side opening of a C is an aperture and a stem has none."""
        assert run(FeatureName.APERTURE, c_glyph, metrics)
        assert not run(FeatureName.APERTURE, rectangle, metrics)


class TestConvergence:
    """Tests for apex, vertex and crotch."""

    def test_lambda_apex(self, lambda_glyph: GlyphOutline, metrics: Metrics) -> None:
        """Test two strokes meeting at the top form an apex."""
        result = run(FeatureName.APEX, lambda_glyph, metrics)
        assert result.found
        assert result.label == "ridge"

    def test_rectangle_has_no_apex(self, rectangle: GlyphOutline, metrics: Metrics) -> None:
        """Test a flat top is not an apex."""
        assert not run(FeatureName.APEX, rectangle, metrics)

    def test_v_crotch(self, v_glyph: GlyphOutline, metrics: Metrics) -> None:
        """Test the inner angle of a V is a crotch."""
        assert run(FeatureName.CROTCH, v_glyph, metrics)


class TestMarksAndEnds:
    """Tests for tittle, ear, terminal and finial."""

    def test_tittle(self, dotted_i: GlyphOutline, metrics: Metrics) -> None:
        """Test the dot of an i is returned as a circle."""
        result = run(FeatureName.TITTLE, dotted_i, metrics)
        assert result.found
        assert isinstance(result.shape, CircleShape)
        assert result.shape.r == pytest.approx(50.0, abs=1.0)
        assert result.shape.cx == pytest.approx(150.0, abs=1.0)
        assert result.shape.cy == pytest.approx(650.0, abs=1.0)

    def test_no_tittle_on_stem(self, rectangle: GlyphOutline, metrics: Metrics) -> None:
        """Test an ascender is not mistaken for a dot."""
        assert not run(FeatureName.TITTLE, rectangle, metrics)

    def test_ear(self, ear_box: GlyphOutline, ring: GlyphOutline, metrics: Metrics) -> None:
        """Test ink in the top-right wedge reads as an ear and a low glyph has none."""
        assert run(FeatureName.EAR, ear_box, metrics)
        assert not run(FeatureName.EAR, ring, metrics)

    def test_clean_terminal(self, c_glyph: GlyphOutline, metrics: Metrics) -> None:
        """Test the square arm ends of a C are clean terminals."""
        result = run(FeatureName.TERMINAL, c_glyph, metrics)
        assert result.found
        assert result.label == "clean"

    def test_finial(
        self, c_glyph: GlyphOutline, tapered_c: GlyphOutline, metrics: Metrics
    ) -> None:
        """Test only the tapering arm counts as a finial."""
        assert run(FeatureName.FINIAL, tapered_c, metrics)
        assert not run(FeatureName.FINIAL, c_glyph, metrics)


DESCENDING_STEM = [(100, -200), (200, -200), (200, 500), (100, 500)]
F_SHAPE = [
    (0, 0), (100, 0), (100, 400), (300, 400), (300, 480), (100, 480),
    (100, 620), (400, 620), (400, 700), (0, 700),
]


class TestStrokes:
    """Tests for directional stroke detectors."""

    def test_descender_tail(self, outline_factory, metrics: Metrics) -> None:
        """Test a stem dropping below the baseline has a tail."""
        assert run(FeatureName.TAIL, outline_factory(DESCENDING_STEM), metrics)

    def test_rectangle_has_no_tail(self, rectangle: GlyphOutline, metrics: Metrics) -> None:
        """Test ink sitting on the baseline has no tail."""
        assert not run(FeatureName.TAIL, rectangle, metrics)

    def test_f_arm(self, outline_factory, metrics: Metrics) -> None:
        """Test the top stroke of an F reaching right from the stem is an arm."""
        assert run(FeatureName.ARM, outline_factory(F_SHAPE), metrics)

    def test_rectangle_has_no_arm(self, rectangle: GlyphOutline, metrics: Metrics) -> None:
        """Test a plain upright has no arm."""
        assert not run(FeatureName.ARM, rectangle, metrics)

    def test_polygon_has_no_curved_strokes(self, h_glyph: GlyphOutline, metrics: Metrics) -> None:
        """Test straight-sided H has no hook, arc or shoulder."""
        for feature in (FeatureName.HOOK, FeatureName.ARC, FeatureName.SHOULDER):
            assert not run(feature, h_glyph, metrics)

    def test_beak(self, outline_factory, metrics: Metrics) -> None:
        """Test an arm whose free end drops into a thick block has a beak."""
        assert run(FeatureName.BEAK, outline_factory(BEAKED_ARM), metrics)
        assert not run(FeatureName.BEAK, outline_factory(F_SHAPE), metrics)

    def test_k_leg(self, outline_factory, rectangle: GlyphOutline, metrics: Metrics) -> None:
        """Test the lower diagonal of a K drifts right and reads as a leg."""
        assert run(FeatureName.LEG, outline_factory(K_SHAPE), metrics)
        assert not run(FeatureName.LEG, rectangle, metrics)


BEAKED_ARM = [
    (0, 0), (100, 0), (100, 600), (300, 600), (300, 500), (400, 500), (400, 700), (0, 700),
]
K_SHAPE = [
    (0, 0), (100, 0), (100, 280), (380, 0), (500, 0), (200, 360),
    (500, 700), (400, 700), (100, 400), (100, 700), (0, 700),
]
E_SHAPE = [(0, 0), (400, 0), (400, 100), (100, 100), (100, 260), (400, 260), (400, 500), (0, 500)]
E_EYE = [(100, 330), (100, 430), (300, 430), (300, 330)]
G_SHAPE = [
    (0, -250), (400, -250), (400, -50), (250, -50), (250, 150), (400, 150),
    (400, 500), (0, 500), (0, 150), (150, 150), (150, -50), (0, -50),
]
DESCENDER_RING = [(100, -250), (400, -250), (400, -20), (100, -20)]
DESCENDER_HOLE = [(200, -200), (200, -70), (300, -70), (300, -200)]
DEEP_STEM = [(100, -300), (200, -300), (200, 500), (100, 500)]
TEARDROP_C = [
    (0, 0), (400, 0), (400, 100), (100, 100), (100, 400),
    (280, 400), (280, 350), (400, 350), (400, 500), (0, 500),
]


def path_outline(*steps: tuple[float, ...], bbox: BBox, name: str | None = None) -> GlyphOutline:
    """Single closed contour; two-value steps are lines, six-value steps cubics."""
    (x, y), *rest = steps
    commands = [PathCommand.move(x, y)]
    for step in rest:
        if len(step) == 6:
            commands.append(PathCommand.cubic(*step))
        else:
            commands.append(PathCommand.line(*step))
    commands.append(PathCommand.close())
    return GlyphOutline(bbox=bbox, commands=commands, name=name)


@pytest.fixture
def hooked_stem() -> GlyphOutline:
    """Stem with a top stroke reaching right under a slightly bulging curve."""
    return path_outline(
        (100, 0), (200, 0), (200, 600), (400, 600), (400, 700),
        (300, 720, 200, 720, 100, 700),
        bbox=BBox(100, 0, 400, 715),
        name="f",
    )


@pytest.fixture
def u_glyph() -> GlyphOutline:
    """Two uprights joined by a curved bottom stroke."""
    return path_outline(
        (0, 500), (0, 50),
        (400 / 3, -50 / 3, 800 / 3, -50 / 3, 400, 50),
        (400, 500), (300, 500), (300, 120), (100, 120), (100, 500),
        bbox=BBox(0, 0, 400, 500),
        name="u",
    )


@pytest.fixture
def n_glyph() -> GlyphOutline:
    """Two uprights joined by a curved arch."""
    return path_outline(
        (0, 0), (100, 0), (100, 380), (300, 380), (300, 0), (400, 0), (400, 450),
        (800 / 3, 1550 / 3, 400 / 3, 1550 / 3, 0, 450),
        bbox=BBox(0, 0, 400, 500),
        name="n",
    )


@pytest.fixture
def s_glyph() -> GlyphOutline:
    """Upper half open to the right, lower half open to the left, curved top."""
    return path_outline(
        (0, 0), (400, 0), (400, 340), (100, 340), (100, 500), (400, 500), (400, 600),
        (800 / 3, 1820 / 3, 400 / 3, 1820 / 3, 0, 600),
        (0, 240), (300, 240), (300, 100), (0, 100),
        bbox=BBox(0, 0, 400, 605),
        name="S",
    )


class TestCurvedStrokes:
    """Tests for stroke detectors that need curved outlines."""

    def test_hook(self, hooked_stem: GlyphOutline, metrics: Metrics) -> None:
        """Test a curved top stroke leaving a stem on one side is a hook."""
        assert run(FeatureName.HOOK, hooked_stem, metrics)

    def test_arc(self, u_glyph: GlyphOutline, metrics: Metrics) -> None:
        """Test the curved bottom of a u is an arc."""
        assert run(FeatureName.ARC, u_glyph, metrics)
        assert not run(FeatureName.SHOULDER, u_glyph, metrics)

    def test_shoulder(self, n_glyph: GlyphOutline, metrics: Metrics) -> None:
        """Test the curved arch of an n is a shoulder."""
        assert run(FeatureName.SHOULDER, n_glyph, metrics)
        assert not run(FeatureName.ARC, n_glyph, metrics)

    def test_spine(
        self, s_glyph: GlyphOutline, c_glyph: GlyphOutline, metrics: Metrics
    ) -> None:
        """Test openings on opposite sides joined by one stroke form a spine."""
        assert run(FeatureName.SPINE, s_glyph, metrics)
        assert not run(FeatureName.SPINE, c_glyph, metrics)


class TestEnclosures:
    """Tests for loop, link, neck and eye on purpose-built outlines."""

    def test_loop_below_baseline(self, outline_factory, metrics: Metrics) -> None:
        """Test a ring hanging under the baseline is a loop."""
        outline = outline_factory(DESCENDER_RING, DESCENDER_HOLE)
        assert run(FeatureName.LOOP, outline, metrics)
        assert not run(FeatureName.TAIL, outline, metrics)

    def test_open_descender_is_not_loop(self, outline_factory, metrics: Metrics) -> None:
        """Test a plain descending stem has no loop."""
        assert not run(FeatureName.LOOP, outline_factory(DESCENDING_STEM), metrics)

    def test_link(
        self, outline_factory, rectangle: GlyphOutline, metrics: Metrics
    ) -> None:
        """Test a narrow stroke joining an upper block to a descender block is a link."""
        assert run(FeatureName.LINK, outline_factory(G_SHAPE), metrics)
        assert not run(FeatureName.LINK, rectangle, metrics)

    def test_neck(self, outline_factory, h_glyph: GlyphOutline, metrics: Metrics) -> None:
        """Test the pinch where the K diagonals meet the stem is a neck, an H bar is not."""
        assert run(FeatureName.NECK, outline_factory(K_SHAPE), metrics)
        assert not run(FeatureName.NECK, h_glyph, metrics)

    def test_eye(self, outline_factory, c_glyph: GlyphOutline, metrics: Metrics) -> None:
        """Test the closed upper counter of an e is its eye."""
        result = run(FeatureName.EYE, outline_factory(E_SHAPE, E_EYE), metrics)
        assert result.found
        assert isinstance(result.shape, PolylineShape)
        assert result.location.x == pytest.approx(200.0)
        assert result.location.y == pytest.approx(380.0)
        assert not run(FeatureName.EYE, c_glyph, metrics)

    def test_centred_hole_is_not_eye(self, ring: GlyphOutline, metrics: Metrics) -> None:
        """Test a hole sitting on the bbox centre line is not an eye."""
        assert not run(FeatureName.EYE, ring, metrics)


class TestWedgesAndEnds:
    """Tests for spur, vertex, small tittles and terminal labels."""

    def test_spur(self, outline_factory, metrics: Metrics) -> None:
        """Test ink crossing the low-left wedge is a spur."""
        assert run(FeatureName.SPUR, outline_factory(DEEP_STEM), metrics)
        assert not run(FeatureName.SPUR, outline_factory(DESCENDING_STEM), metrics)

    def test_v_vertex(
        self, v_glyph: GlyphOutline, lambda_glyph: GlyphOutline, metrics: Metrics
    ) -> None:
        """Test the strokes of a V meet at a bottom vertex, a Lambda has none."""
        assert run(FeatureName.VERTEX, v_glyph, metrics).found
        assert not run(FeatureName.VERTEX, lambda_glyph, metrics)

    def test_small_tittle(self, small_dotted_i: GlyphOutline, metrics: Metrics) -> None:
        """Test a dot much narrower than the glyph keeps its own radius."""
        result = run(FeatureName.TITTLE, small_dotted_i, metrics)
        assert result.found
        assert result.shape.r == pytest.approx(40.0, abs=1.0)
        assert result.shape.cx == pytest.approx(300.0, abs=1.0)
        assert result.shape.cy == pytest.approx(620.0, abs=1.0)

    def test_ball_terminal(self, ball_c: GlyphOutline, metrics: Metrics) -> None:
        """Test a round blob at the arm end is a ball terminal."""
        result = run(FeatureName.TERMINAL, ball_c, metrics)
        assert result.found
        assert result.label == "ball"
        assert isinstance(result.shape, CircleShape)
        assert result.shape.r == pytest.approx(60.0, abs=1.0)
        assert result.location.y == pytest.approx(530.0, abs=1.0)

    def test_teardrop_terminal(self, outline_factory, metrics: Metrics) -> None:
        """Test an arm end much thicker than the arm is a teardrop."""
        result = run(FeatureName.TERMINAL, outline_factory(TEARDROP_C), metrics)
        assert result.found
        assert result.label == "teardrop"
        assert result.shape.r == pytest.approx(75.0)
