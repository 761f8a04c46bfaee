import numpy as np

from refill import inpaint
from refill.inpainters.diffusion import smooth
from refill.inpainters.hybrid import hybrid_fill
from refill.inpainters.texture import synthesize


def test_zero_passes_matches_texture(stripes, blot_mask):
    texture = inpaint(stripes, blot_mask, "texture", patch_size=5, seed=11)
    hybrid = inpaint(stripes, blot_mask, "hybrid", patch_size=5, passes=0, seed=11)
    assert np.array_equal(texture.image, hybrid.image)


def test_smoothing_runs_over_original_mask_after_synthesis(stripes, blot_mask):
    expected = stripes.copy()
    synthesize(expected, blot_mask.copy(), patch_size=5, seed=3)
    smooth(expected, blot_mask, passes=4)

    result = inpaint(stripes, blot_mask, "hybrid", patch_size=5, passes=4, seed=3)
    assert np.array_equal(result.image, expected)


def test_hybrid_fill_leaves_caller_mask_and_empties_working_copy(stripes, blot_mask):
    image = stripes.copy()
    mask = blot_mask.copy()
    work_mask = hybrid_fill(image, mask, patch_size=5, passes=2, seed=0)
    assert np.array_equal(mask, blot_mask)
    assert not work_mask.any()
    assert (image[blot_mask][:, 3] == 255).all()


def test_result_reports_cleared_working_mask(stripes, blot_mask):
    result = inpaint(stripes, blot_mask, "hybrid", patch_size=5, passes=2, seed=0)
    assert result.completed
    assert result.remaining == 0
    assert result.filled == int(blot_mask.sum())
