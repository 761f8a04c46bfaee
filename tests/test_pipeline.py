import numpy as np
import pytest

from refill.batch import inpaint_batch
from refill.errors import DimensionMismatchError
from refill.inpainters import DiffusionInpainter, HybridInpainter
from refill.pipeline import Pipeline, compare
from refill.utils import list_images, load_image, load_mask, save_image

from conftest import RED, solid


@pytest.fixture
def red_files(tmp_path, red_image, center_mask):
    image_path = tmp_path / "input.png"
    mask_path = tmp_path / "mask.png"
    damaged = red_image.copy()
    damaged[center_mask] = (0, 0, 0, 255)
    save_image(damaged, image_path)
    save_image(center_mask, mask_path)
    return image_path, mask_path


def test_image_and_mask_round_trip(red_files, center_mask):
    image_path, mask_path = red_files
    image = load_image(image_path)
    assert image.shape == (20, 20, 4)
    assert np.array_equal(load_mask(mask_path), center_mask)


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_image(tmp_path / "nope.png")
    with pytest.raises(FileNotFoundError):
        load_mask(tmp_path / "nope.png")


def test_jpeg_output_drops_alpha(tmp_path, red_image):
    path = tmp_path / "out.jpg"
    save_image(red_image, path)
    assert load_image(path).shape == (20, 20, 4)


def test_pipeline_run_writes_repaired_image(red_files, tmp_path, capsys):
    image_path, mask_path = red_files
    out = tmp_path / "out" / "result.png"
    pipeline = Pipeline(inpainter="diffusion", inpainter_kwargs={"passes": 200})
    result = pipeline.run(image_path, mask_path, out)
    assert out.exists()
    assert np.array_equal(load_image(out), result)
    assert np.abs(result[8:12, 8:12, 0].astype(int) - 255).max() <= 2
    assert "Inpainting with diffusion(passes=200)" in capsys.readouterr().out


def test_pipeline_skips_empty_mask(red_files, tmp_path, capsys):
    image_path, _ = red_files
    out = tmp_path / "copy.png"
    pipeline = Pipeline(inpainter=HybridInpainter(patch_size=5, passes=1, seed=0))
    result = pipeline.run(image_path, np.zeros((20, 20), dtype=bool), out)
    assert np.array_equal(result, load_image(image_path))
    assert "Nothing to fill" in capsys.readouterr().out


def test_pipeline_inpaint_reports_progress(red_files):
    image_path, mask_path = red_files
    phases = []
    pipeline = Pipeline(
        inpainter="texture",
        inpainter_kwargs={"patch_size": 5, "seed": 0},
        progress=lambda pct, phase: phases.append(phase.value),
    )
    result = pipeline.inpaint(image_path, mask_path)
    assert result.completed
    assert (result.image == RED).all()
    assert phases[0] == "detect"
    assert phases[-1] == "finalize"


def test_pipeline_rejects_mismatched_mask(red_files):
    image_path, _ = red_files
    with pytest.raises(DimensionMismatchError):
        Pipeline(inpainter="diffusion").run(image_path, np.ones((5, 5), dtype=bool))


def test_compare_writes_every_algorithm(red_files, tmp_path):
    image_path, mask_path = red_files
    out_dir = tmp_path / "cmp"
    results = compare(
        image_path,
        mask_path,
        out_dir,
        inpainter_kwargs={
            "texture": {"patch_size": 5, "seed": 0},
            "hybrid": {"patch_size": 5, "passes": 2, "seed": 0},
            "diffusion": {"passes": 3},
        },
    )
    assert len(results) == 3
    for name in ("texture", "diffusion", "hybrid"):
        assert (out_dir / f"result_{name}.png").exists()
    grid = load_image(out_dir / "comparison.png")
    # original, mask, three results -> two rows of three panels
    assert grid.shape[0] == 2 * (20 + 30)
    assert grid.shape[1] == 3 * 20


def test_batch_applies_shared_mask_and_skips_mismatches(tmp_path, red_image, center_mask, capsys):
    in_dir = tmp_path / "in"
    out_dir = tmp_path / "out"
    for name in ("a.png", "b.png"):
        damaged = red_image.copy()
        damaged[center_mask] = (0, 0, 0, 255)
        save_image(damaged, in_dir / name)
    save_image(solid(10, 10), in_dir / "small.png")
    (in_dir / "notes.txt").write_text("not an image")

    written = inpaint_batch(in_dir, out_dir, center_mask, DiffusionInpainter(passes=5))
    assert [p.name for p in written] == ["a.png", "b.png"]
    assert [p.name for p in list_images(out_dir)] == ["a.png", "b.png"]
    assert "small.png skipped" in capsys.readouterr().err


def test_batch_with_empty_mask_copies(tmp_path, red_image):
    in_dir = tmp_path / "in"
    save_image(red_image, in_dir / "a.png")
    written = inpaint_batch(
        in_dir, tmp_path / "out", np.zeros((20, 20), dtype=bool), DiffusionInpainter()
    )
    assert np.array_equal(load_image(written[0]), red_image)


def test_batch_requires_images(tmp_path):
    (tmp_path / "empty").mkdir()
    with pytest.raises(FileNotFoundError):
        inpaint_batch(tmp_path / "empty", tmp_path / "out", np.zeros((2, 2), bool), DiffusionInpainter())
