import numpy as np
import pytest

from refill.masks import MaskBuilder


def test_rectangle_covers_exact_box():
    mask = MaskBuilder(20, 20).add_rectangle(8, 8, 4, 4).build()
    assert mask.dtype == bool
    assert mask.sum() == 16
    assert mask[8:12, 8:12].all()


def test_rectangle_is_clipped_to_image():
    mask = MaskBuilder(10, 10).add_rectangle(-5, 7, 8, 10).build()
    assert mask.sum() == 3 * 3
    assert mask[7:10, 0:3].all()


def test_degenerate_shapes_draw_nothing():
    builder = MaskBuilder(10, 10)
    builder.add_rectangle(2, 2, 0, 5).add_ellipse(1, 1, -3, 4).add_polygon([(0, 0), (5, 5)])
    builder.add_stroke([])
    assert not builder.build().any()


def test_ellipse_stays_inside_bounding_box():
    mask = MaskBuilder(40, 30).add_ellipse(10, 5, 20, 16).build()
    ys, xs = np.nonzero(mask)
    assert mask[13, 20]
    assert ys.min() >= 5 and ys.max() <= 21
    assert xs.min() >= 10 and xs.max() <= 30
    assert not mask[5, 10]


def test_polygon_fills_triangle():
    mask = MaskBuilder(20, 20).add_polygon([(0, 0), (19, 0), (0, 19)]).build()
    assert mask[1, 1]
    assert not mask[18, 18]


def test_stroke_covers_endpoints_with_brush_width():
    mask = MaskBuilder(50, 20).add_stroke([(5, 10), (45, 10)], width=6).build()
    assert mask[10, 5] and mask[10, 45] and mask[10, 25]
    assert mask[8, 25] and mask[12, 25]
    assert not mask[0, 25]


def test_regions_are_grown_before_filling():
    mask = MaskBuilder(60, 60).add_regions([(20, 20, 10, 10)]).build()
    # 10 % of 10 px is below the 5 px minimum
    assert mask.sum() == 20 * 20
    assert mask[15, 15] and mask[34, 34]
    assert not mask[14, 15]


def test_large_regions_grow_by_ten_percent():
    mask = MaskBuilder(200, 200).add_regions([(50, 50, 100, 60)]).build()
    ys, xs = np.nonzero(mask)
    assert xs.min() == 40 and xs.max() == 159
    assert ys.min() == 44 and ys.max() == 115


def test_dilate_and_union():
    base = np.zeros((15, 15), dtype=np.uint8)
    base[7, 7] = 255
    mask = MaskBuilder(15, 15).add_mask(base).dilate(2).build()
    assert mask[7, 7] and mask[7, 9] and mask[5, 7]
    assert not mask[0, 0]


def test_add_mask_rejects_wrong_size():
    with pytest.raises(ValueError):
        MaskBuilder(10, 10).add_mask(np.zeros((5, 5), dtype=bool))


def test_like_matches_image_size():
    builder = MaskBuilder.like(np.zeros((12, 34, 4), dtype=np.uint8))
    assert builder.build().shape == (12, 34)


def test_clear_resets():
    builder = MaskBuilder(5, 5).add_rectangle(0, 0, 5, 5)
    assert not builder.clear().build().any()


def test_rejects_empty_size():
    with pytest.raises(ValueError):
        MaskBuilder(0, 10)


def test_add_mask_rejects_zero_one_masks():
    with pytest.raises(ValueError, match="0/255"):
        MaskBuilder(4, 4).add_mask(np.eye(4, dtype=np.uint8))
