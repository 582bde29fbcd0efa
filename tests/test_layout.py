import pytest

from plannerate.layout.capacity_packer import CapacityCandidate, CapacityPacker
from plannerate.layout.hole_grid import HoleGrid, compute_holes
from plannerate.layout.shelf_distributor import ShelfDistributor, round_half_up
from plannerate.layout.spacing_validator import validate_spacing
from plannerate.utils.constants import SHELF_FULL_MESSAGE
from plannerate.utils.error_handler import CapacityExceeded, InvalidGeometry
from tests.conftest import make_segment


class TestHoleGrid:

    def test_standard_gondola(self):
        holes = compute_holes(1200, 17, 4, 25, 1)
        assert len(holes) == 39
        assert holes[0] == 1102
        assert holes[-1] == 0

    def test_holes_are_descending_by_pitch(self):
        holes = compute_holes(1200, 17, 4, 25, 1)
        assert all(a - b == pytest.approx(29) for a, b in zip(holes, holes[1:]))

    def test_scale_factor_scales_offsets(self):
        holes = compute_holes(1200, 17, 4, 25, 2)
        assert len(holes) == 39
        assert holes[0] == 2204

    @pytest.mark.parametrize('scale', [0, -1, None])
    def test_non_positive_scale_rejected(self, scale):
        with pytest.raises(InvalidGeometry):
            compute_holes(1200, 17, 4, 25, scale)

    def test_negative_dimension_rejected(self):
        with pytest.raises(InvalidGeometry):
            compute_holes(1200, -1, 4, 25, 1)

    def test_zero_pitch_rejected(self):
        with pytest.raises(InvalidGeometry):
            compute_holes(1200, 17, 0, 0, 1)

    def test_fixture_too_short_has_no_holes(self):
        assert compute_holes(40, 17, 4, 25, 1) == []

    def test_positions_in_units_start_at_base(self, fixture):
        positions = HoleGrid.from_fixture(fixture).positions_in_units()
        assert positions[-1] == 17
        assert positions[0] == 1119
        assert positions[0] <= fixture.max_shelf_position

    def test_positions_in_units_ignore_scale(self, fixture):
        unscaled = HoleGrid.from_fixture(fixture).positions_in_units()
        fixture.scale_factor = 1.3
        assert HoleGrid.from_fixture(fixture).positions_in_units() == unscaled

    def test_nearest(self, fixture):
        grid = HoleGrid.from_fixture(fixture)
        assert grid.nearest(140) == 133
        assert grid.nearest(-50) == 17
        assert grid.nearest(5000) == 1119

    def test_nearest_tie_goes_to_higher_hole(self, fixture):
        grid = HoleGrid.from_fixture(fixture)
        assert grid.nearest(147.5) == 162

    def test_nearest_without_holes(self):
        grid = HoleGrid(fixture_height=40, base_height=17, shelf_height=4, hole_spacing=25, scale_factor=1)
        assert grid.nearest(20) is None
        assert len(grid) == 0


class TestShelfDistributor:

    holes = [0, 10, 20, 30, 40]

    def test_round_half_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2

    def test_nothing_to_distribute(self):
        distributor = ShelfDistributor()
        assert distributor.distribute(self.holes, 0) == []
        assert distributor.distribute([], 3) == []

    def test_single_shelf_takes_middle_hole(self):
        assert ShelfDistributor().distribute(self.holes, 1) == [20]

    def test_three_shelves(self):
        assert ShelfDistributor().distribute(self.holes, 3) == [0, 20, 40]

    def test_input_order_is_irrelevant(self):
        assert ShelfDistributor().distribute([40, 0, 30, 10, 20, 20], 3) == [0, 20, 40]

    def test_more_shelves_than_holes_deduplicates(self):
        assert ShelfDistributor().distribute(self.holes, 10) == [0, 10, 20, 30, 40]

    def test_minimum_base_height(self):
        distributor = ShelfDistributor(min_base_height=5)
        assert distributor.usable_holes(self.holes) == [10, 20, 30, 40]
        assert ShelfDistributor(min_base_height=100).distribute(self.holes, 2) == []


class TestSpacingValidator:

    def test_valid(self):
        assert validate_spacing([0, 5, 12], 5) is True

    def test_too_close(self):
        assert validate_spacing([0, 3, 12], 5) is False

    def test_compares_in_array_order(self):
        assert validate_spacing([12, 0], 5) is False

    def test_trivial_inputs(self):
        assert validate_spacing([], 5) is True
        assert validate_spacing([7], 5) is True


class TestCapacityPacker:

    def setup_method(self):
        self.packer = CapacityPacker()
        self.segments = [make_segment('P-1', 20), make_segment('P-2', 20)]

    def test_candidate_fits(self):
        assert self.packer.fits(self.segments, 100, CapacityCandidate(product_width=30))

    def test_candidate_exceeds(self):
        assert not self.packer.fits(self.segments, 100, CapacityCandidate(product_width=50))
        assert self.packer.capacity_shortfall(self.segments, 100, CapacityCandidate(product_width=50)) == SHELF_FULL_MESSAGE

    def test_exact_fit_is_accepted(self):
        result = self.packer.measure(self.segments, 100, CapacityCandidate(product_width=40))
        assert result.occupied == result.available == 80
        assert not result.over_capacity

    def test_empty_shelf_accepts_anything(self):
        assert self.packer.fits([], 100, CapacityCandidate(product_width=500))

    def test_margin_is_last_segment_iterated(self):
        candidate = CapacityCandidate(product_width=15)
        narrow_last = [make_segment('P-1', 40), make_segment('P-2', 10)]
        wide_last = [make_segment('P-2', 10), make_segment('P-1', 40)]
        assert self.packer.fits(narrow_last, 100, candidate)
        assert not self.packer.fits(wide_last, 100, candidate)

    def test_layer_spacing_counts(self):
        segments = [make_segment('P-1', 20, quantity=2, spacing=5)]
        assert self.packer.occupied_width(segments, 100) == 45

    def test_resize_replaces_quantity(self):
        segment = make_segment('P-1', 20, quantity=2)
        packer = self.packer
        assert packer.fits([segment], 100, CapacityCandidate.from_segment(segment, quantity=4, resize=True))
        assert not packer.fits([segment], 100, CapacityCandidate.from_segment(segment, quantity=5, resize=True))

    def test_ensure_fits_raises_with_figures(self):
        with pytest.raises(CapacityExceeded) as excinfo:
            self.packer.ensure_fits(self.segments, 100, CapacityCandidate(product_width=50))
        assert excinfo.value.occupied == 90
        assert excinfo.value.available == 80

    def test_utilization(self):
        assert self.packer.measure(self.segments, 100).utilization == pytest.approx(40.0)
