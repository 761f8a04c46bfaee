import numpy as np
import pytest

from refill.cli import main
from refill.utils import load_image, load_mask, save_image

from conftest import RED


@pytest.fixture
def damaged_path(tmp_path, red_image, center_mask):
    path = tmp_path / "input.png"
    damaged = red_image.copy()
    damaged[center_mask] = (0, 0, 0, 255)
    save_image(damaged, path)
    return path


def test_mask_command_rasterizes_shapes(tmp_path, damaged_path):
    out = tmp_path / "mask.png"
    main(["mask", str(damaged_path), str(out), "--rect", "8,8,4,4", "--ellipse", "0,0,4,4"])
    mask = load_mask(out)
    assert mask.shape == (20, 20)
    assert mask[8:12, 8:12].all()
    assert mask[2, 2]


def test_inpaint_command_diffusion(tmp_path, damaged_path, center_mask):
    mask_path = tmp_path / "mask.png"
    save_image(center_mask, mask_path)
    out = tmp_path / "out.png"
    main([
        "inpaint", str(damaged_path), str(out), "-m", str(mask_path),
        "--algorithm", "diffusion", "--passes", "300",
    ])
    result = load_image(out)
    assert np.abs(result[..., :3].astype(int) - np.array(RED[:3])).max() <= 2


def test_inpaint_command_texture_on_directory(tmp_path, damaged_path, center_mask):
    mask_path = tmp_path / "mask.png"
    save_image(center_mask, mask_path)
    in_dir = tmp_path / "batch"
    in_dir.mkdir()
    damaged_path.rename(in_dir / "page.png")
    out_dir = tmp_path / "batch_out"
    main([
        "inpaint", str(in_dir), str(out_dir), "-m", str(mask_path),
        "-a", "texture", "--patch-size", "5", "--samples", "100", "--seed", "1",
    ])
    assert (load_image(out_dir / "page.png") == RED).all()


def test_missing_input_exits_with_error(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["inpaint", str(tmp_path / "missing.png"), str(tmp_path / "o.png"), "-m", "m.png"])
    assert excinfo.value.code == 1
    assert "Input not found" in capsys.readouterr().err


def test_even_patch_size_exits_with_error(tmp_path, damaged_path, center_mask):
    mask_path = tmp_path / "mask.png"
    save_image(center_mask, mask_path)
    with pytest.raises(SystemExit) as excinfo:
        main([
            "inpaint", str(damaged_path), str(tmp_path / "o.png"), "-m", str(mask_path),
            "--patch-size", "4",
        ])
    assert excinfo.value.code == 1


def test_bad_box_is_rejected_by_argparse(tmp_path, damaged_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["mask", str(damaged_path), str(tmp_path / "m.png"), "--rect", "1,2,3"])
    assert excinfo.value.code == 2
