"""Command-line interface for the portal branding pipeline."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Iterable, List

from tqdm import tqdm

from .config import PipelineConfig
from .hashing import normalize_domain
from .images.gradient import GradientImageWriter
from .images.loader import ImageLoader
from .io.models import BrandSignals
from .io.outputs import summary_row, write_portal_json, write_summary_table
from .pipeline import build_portal

DEFAULT_OUT_DIR = Path("out")


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the portal pipeline."""
    parser = argparse.ArgumentParser(
        description="Derive portal branding (colors, name, images, welcome text) from scraped site signals."
    )
    parser.add_argument(
        "--signals",
        required=True,
        nargs="+",
        help="JSON files with scraped signals: one object, a list of objects, or JSON lines.",
    )
    parser.add_argument(
        "--out",
        default=str(DEFAULT_OUT_DIR),
        help="Directory where portal JSON, gradients and the summary table are written.",
    )
    parser.add_argument(
        "--assets",
        default=None,
        help="Curated login-hero library root (one folder per discipline).",
    )
    parser.add_argument(
        "--allow-generic-library",
        action="store_true",
        help="Let low-confidence generic sites use the curated generic library.",
    )
    parser.add_argument(
        "--no-gradient",
        action="store_true",
        help="Skip gradient rendering; slots fall through to the static image.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Log pipeline decisions.")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Only log errors.")
    return parser.parse_args(list(argv) if argv is not None else None)


def read_signals(path: Path) -> List[BrandSignals]:
    """Read scraped signals from *path*; raises on missing files or bad JSON."""
    if not path.exists():
        raise FileNotFoundError(f"Signals file does not exist: {path}")
    text = path.read_text(encoding="utf-8-sig").strip()
    if not text:
        return []
    try:
        payload: Any = json.loads(text)
    except json.JSONDecodeError:
        payload = [json.loads(line) for line in text.splitlines() if line.strip()]
    items = payload if isinstance(payload, list) else [payload]
    return [BrandSignals.from_mapping(item) for item in items]


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def main(argv: Iterable[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    config = PipelineConfig.from_env()
    if args.allow_generic_library:
        config.allow_generic_library = True
    if args.no_gradient:
        config.gradient_enabled = False
    if args.assets:
        config.hero_assets_dir = Path(args.assets)

    sites: List[BrandSignals] = []
    for name in args.signals:
        sites.extend(read_signals(Path(name)))
    print(f"[input] {len(sites)} site(s) from {len(args.signals)} file(s)")

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    writer = GradientImageWriter(out_dir / "gradients")

    rows = []
    for signals in tqdm(sites, desc="Building portals", unit="site", disable=args.quiet):
        domain = normalize_domain(signals.url)
        loader = ImageLoader(timeout=config.fetch_timeout)
        result = build_portal(signals, config=config, loader=loader, gradient_generator=writer)
        path = write_portal_json(out_dir, domain, result)
        rows.append(summary_row(domain, result))
        tqdm.write(f"[saved] {domain}: {path}")

    if rows:
        summary_path = write_summary_table(out_dir / "summary.parquet", rows)
        print(f"[summary] wrote {len(rows)} rows to {summary_path}")
    else:
        print("[summary] no sites to summarise")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
