import json
import argparse
import logging
import os
import sys

from coverage_core.config import load_settings
from coverage_core.errors import CoverageError
from coverage_core.api.service import parse_request, run_estimate


def cmd_estimate(args) -> int:
    settings = load_settings(args.config).with_overrides(
        simulations=args.simulations,
        seed=args.seed,
        workers=args.workers,
        executor=args.executor,
    )

    try:
        with open(args.input_file, 'r', encoding='utf-8') as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        print(f"Error: {args.input_file} is not valid JSON: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: cannot read {args.input_file}: {e}", file=sys.stderr)
        return 1

    try:
        request = parse_request(payload)
        response = run_estimate(request, settings)
    except CoverageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = response.model_dump(mode='json')
    text = json.dumps(result, indent=2 if args.pretty else None)
    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(text)
        print(f"Wrote {args.output}")
    else:
        print(text)

    if args.debug_maps:
        export_debug_maps(request, result, args.debug_maps)

    return 0


def export_debug_maps(request, result, out_dir: str) -> None:
    """Write probability / entropy PNGs for a finished estimate."""
    import matplotlib
    matplotlib.use("Agg")
    import numpy as np
    from coverage_core.heatmaps.grid import Grid
    from coverage_core.heatmaps.visualize import ColorMap, export_heatmap_png, export_estimate_debug

    os.makedirs(out_dir, exist_ok=True)
    mask = request.mask.to_grid()
    probabilities = Grid(data=np.array([[v for v, _ in row] for row in result['probabilities']['data']],
                                       dtype=np.float64).reshape(mask.shape))
    entropy = Grid(data=np.array([[v for v, _ in row] for row in result['entropy']['data']],
                                 dtype=np.float64).reshape(mask.shape))

    paths = [
        export_heatmap_png(probabilities, os.path.join(out_dir, "probabilities.png"),
                           "Coverage probability", ColorMap.VIRIDIS, mask),
        export_heatmap_png(entropy, os.path.join(out_dir, "entropy.png"),
                           "Entropy (bits)", ColorMap.MAGMA, mask),
        export_estimate_debug(mask, probabilities, entropy, os.path.join(out_dir, "combined.png")),
    ]
    for path in paths:
        print(f"  Debug map: {path}")


def cmd_serve(args) -> int:
    import uvicorn

    if args.config:
        os.environ["COVERAGE_CONFIG"] = args.config
    uvicorn.run("coverage_core.api.main:app", host=args.host, port=args.port, reload=False)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Monte-Carlo rectangle coverage estimator")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", help="YAML settings file")
    sub = parser.add_subparsers(dest="command", required=True)

    est = sub.add_parser("estimate", help="Estimate coverage for a JSON request file")
    est.add_argument("input_file", help="Path to request JSON ({mask, rectangles})")
    est.add_argument("--simulations", type=int, help="Number of placement trials")
    est.add_argument("--seed", type=int, help="Seed for reproducible runs")
    est.add_argument("--workers", type=int, help="Worker count (0 = one per CPU)")
    est.add_argument("--executor", choices=['process', 'thread', 'serial'])
    est.add_argument("--output", "-o", help="Write response JSON here instead of stdout")
    est.add_argument("--pretty", action="store_true", help="Indent JSON output")
    est.add_argument("--debug-maps", metavar="DIR", help="Export heatmap PNG images to DIR")
    est.set_defaults(func=cmd_estimate)

    srv = sub.add_parser("serve", help="Run the HTTP API")
    srv.add_argument("--host", default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.set_defaults(func=cmd_serve)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
