import argparse
import shutil
import sys
from pathlib import Path

from refill.inpainters.diffusion import DEFAULT_PASSES
from refill.inpainters.texture import DEFAULT_PATCH_SIZE, DEFAULT_SAMPLES
from refill.state import Algorithm


def _formatter(prog: str) -> argparse.HelpFormatter:
    width = shutil.get_terminal_size().columns
    return argparse.HelpFormatter(prog, max_help_position=40, width=width)


def _require_exists(path: Path, label: str = "Input") -> None:
    if not path.exists():
        print(f"Error: {label} not found: {path}", file=sys.stderr)
        sys.exit(1)


def _numbers(text: str) -> list[float]:
    try:
        return [float(v) for v in text.split(",")]
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Expected comma-separated numbers, got '{text}'"
        ) from None


def _box(text: str) -> tuple[float, float, float, float]:
    values = _numbers(text)
    if len(values) != 4:
        raise argparse.ArgumentTypeError(f"Expected x,y,w,h, got '{text}'")
    return tuple(values)


def _points(text: str) -> list[tuple[float, float]]:
    values = _numbers(text)
    if len(values) < 6 or len(values) % 2:
        raise argparse.ArgumentTypeError(
            f"Expected at least three x,y pairs, got '{text}'"
        )
    return list(zip(values[::2], values[1::2]))


def _add_engine_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-m", "--mask", required=True, help="Mask image (white = fill)."
    )
    parser.add_argument(
        "--patch-size",
        type=int,
        default=DEFAULT_PATCH_SIZE,
        help=f"Odd patch side for texture/hybrid (default: {DEFAULT_PATCH_SIZE}).",
    )
    parser.add_argument(
        "--passes",
        type=int,
        default=DEFAULT_PASSES,
        help=f"Diffusion sweeps for diffusion/hybrid (default: {DEFAULT_PASSES}).",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLES,
        help=f"Candidate patches per pixel (default: {DEFAULT_SAMPLES}).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible texture synthesis.",
    )


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog="refill",
        description="Mask-driven image inpainting.",
        formatter_class=_formatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_inp = sub.add_parser(
        "inpaint",
        help="Fill the masked region of an image or directory.",
        usage="%(prog)s [OPTIONS] -m MASK input output",
        formatter_class=_formatter,
    )
    p_inp.add_argument("input", help="Image or directory.")
    p_inp.add_argument("output", help="Output image or directory.")
    p_inp.add_argument(
        "-a",
        "--algorithm",
        choices=[a.value for a in Algorithm],
        default=Algorithm.HYBRID.value,
        help="Fill algorithm (default: hybrid).",
    )
    _add_engine_options(p_inp)
    p_inp._positionals.title = "arguments"

    p_mask = sub.add_parser(
        "mask",
        help="Rasterize shapes into a mask sized to an image.",
        usage="%(prog)s [OPTIONS] input output",
        formatter_class=_formatter,
    )
    p_mask.add_argument("input", help="Image whose size the mask takes.")
    p_mask.add_argument("output", help="Mask output path.")
    p_mask.add_argument("--rect", type=_box, action="append", default=[], metavar="X,Y,W,H")
    p_mask.add_argument("--ellipse", type=_box, action="append", default=[], metavar="X,Y,W,H")
    p_mask.add_argument(
        "--polygon", type=_points, action="append", default=[], metavar="X1,Y1,X2,Y2,..."
    )
    p_mask.add_argument(
        "--region",
        type=_box,
        action="append",
        default=[],
        metavar="X,Y,W,H",
        help="Externally proposed box, grown by 10%% (min 5 px) per side.",
    )
    p_mask.add_argument(
        "--dilate", type=int, default=0, metavar="PX", help="Grow the mask by PX pixels."
    )
    p_mask._positionals.title = "arguments"

    p_cmp = sub.add_parser(
        "compare",
        help="Run every algorithm and save a comparison grid.",
        usage="%(prog)s [OPTIONS] -m MASK input output_dir",
        formatter_class=_formatter,
    )
    p_cmp.add_argument("input", help="Image file.")
    p_cmp.add_argument("output", help="Output directory.")
    _add_engine_options(p_cmp)
    p_cmp._positionals.title = "arguments"

    args = parser.parse_args(argv)

    if args.command == "inpaint":
        _cmd_inpaint(args)
    elif args.command == "mask":
        _cmd_mask(args)
    elif args.command == "compare":
        _cmd_compare(args)


def _engine_kwargs(args, algorithm: Algorithm) -> dict:
    from refill.engine import inpainter_kwargs

    return inpainter_kwargs(
        algorithm, args.patch_size, args.passes, args.seed, {"samples": args.samples}
    )


def _make_inpainter(args):
    from refill.inpainters import get_inpainter

    algorithm = Algorithm(args.algorithm)
    try:
        return get_inpainter(algorithm, **_engine_kwargs(args, algorithm))
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


def _cmd_inpaint(args):
    from refill.errors import DimensionMismatchError
    from refill.utils import load_mask

    input_path = Path(args.input)
    mask_path = Path(args.mask)
    output_path = Path(args.output)

    _require_exists(input_path, "Input")
    _require_exists(mask_path, "Mask file")

    print(f"Input:  {input_path}")
    print(f"Mask:   {mask_path}")
    print(f"Output: {output_path}")

    inpainter = _make_inpainter(args)
    mask = load_mask(mask_path)

    if input_path.is_dir():
        from refill.batch import inpaint_batch

        inpaint_batch(
            input_dir=input_path,
            output_dir=output_path,
            mask=mask,
            inpainter=inpainter,
        )
    else:
        from refill.pipeline import Pipeline

        pipeline = Pipeline(inpainter=inpainter)
        try:
            pipeline.run(input_path, mask, output_path)
        except DimensionMismatchError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)

    print("Done.")


def _cmd_mask(args):
    from refill.masks import MaskBuilder
    from refill.raster import mask_stats
    from refill.utils import load_image, save_image

    input_path = Path(args.input)
    _require_exists(input_path)

    builder = MaskBuilder.like(load_image(input_path))
    for box in args.rect:
        builder.add_rectangle(*box)
    for box in args.ellipse:
        builder.add_ellipse(*box)
    for points in args.polygon:
        builder.add_polygon(points)
    builder.add_regions(args.region)
    builder.dilate(args.dilate)

    mask = builder.build()
    _, _, pct = mask_stats(mask)
    save_image(mask, args.output)
    print(f"Mask saved to {args.output} ({pct:.1f}% of image)")


def _cmd_compare(args):
    from refill.pipeline import compare

    input_path = Path(args.input)
    mask_path = Path(args.mask)
    _require_exists(input_path, "Input")
    _require_exists(mask_path, "Mask file")

    compare(
        input_path,
        mask_path,
        args.output,
        inpainter_kwargs={a.value: _engine_kwargs(args, a) for a in Algorithm},
    )
    print("Done.")


if __name__ == "__main__":
    main()
