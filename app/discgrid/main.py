from __future__ import annotations

from pathlib import Path
import argparse
import json
import sys

from app.discgrid.catalog.io import CatalogError, dump_json, load_json, load_year_groups
from app.discgrid.catalog.merge import run_merge
from app.discgrid.catalog.split import write_static_files
from app.discgrid.covers.atlas import build_atlas, save_atlas
from app.discgrid.covers.process import process_covers
from app.discgrid.layout.grid import DEFAULT_GRID_CONFIG, GridConfig, GridLayout, compute_grid_layout


def config_from_args(args: argparse.Namespace) -> GridConfig:
    return GridConfig(
        cell_unit=args.cell_unit,
        min_cols=args.min_cols,
        spacer_rate=args.spacer_rate,
        padding=args.padding,
    )


def run_layout(args: argparse.Namespace) -> GridLayout:
    credits = load_json(args.credits) if args.credits else None
    groups = load_year_groups(args.catalog, credits=credits, artist_id=args.artist)

    layout = compute_grid_layout(groups, args.viewport_width, config=config_from_args(args))
    if args.output:
        dump_json(layout.to_dict(), args.output)
        print(f"Layout written to: {Path(args.output).resolve()}")
    else:
        json.dump(layout.to_dict(), sys.stdout, ensure_ascii=False)
        sys.stdout.write("\n")

    print(
        f"Years: {len(groups)}  Cells: {len(layout.cells)}  Columns: {layout.cols}  "
        f"Cell size: {layout.cell_size:.1f}px  Height: {layout.total_height:.0f}px",
        file=sys.stderr,
    )
    return layout


def run_merge_cmd(args: argparse.Namespace) -> None:
    static = Path(args.static_dir)
    dataset = run_merge(
        args.data_dir,
        args.output,
        covers_dir=static / "covers",
        artists_dir=static / "artists",
    )
    totals = dataset["meta"]["totals"]
    print("Summary:")
    print(f"  Albums: {totals['albums']}")
    print(f"  Artists: {totals['artists']}")
    print(f"  Credits: {totals['credits']}")
    print(f"  Albums with cover art: {totals['albumsWithCover']}")
    print(f"  Albums with reviews: {totals['albumsWithReview']}")
    print(f"  Artists with images: {totals['artistsWithImage']}")
    print(f"Saved to: {args.output}")


def run_split(args: argparse.Namespace) -> None:
    catalog = load_json(args.catalog)
    sizes = write_static_files(catalog, Path(args.static_dir) / "data")
    for name, size in sizes.items():
        print(f"  {name}: {size / 1024:.1f} KB")
    print(f"  Total: {sum(sizes.values()) / 1024:.1f} KB")


def run_covers(args: argparse.Namespace) -> None:
    catalog = load_json(args.catalog)
    print(f"Processing covers: {args.size}px, WebP q{args.quality}")
    stats = process_covers(
        catalog,
        args.originals_dir,
        Path(args.static_dir) / "covers",
        size=args.size,
        quality=args.quality,
        force=args.force,
    )
    for err in stats.errors:
        print(f"  Error processing {err}", file=sys.stderr)
    dump_json(catalog, args.catalog, indent=2)
    print(f"Processed: {stats.processed}, Skipped: {stats.skipped}, Failed: {stats.failed}")
    if stats.cleared:
        print(f"Cleared stale refs: {stats.cleared}")


def run_atlas(args: argparse.Namespace) -> None:
    index = load_json(args.catalog)
    albums = index.get("albums", []) if isinstance(index, dict) else index
    static = Path(args.static_dir)
    atlas, uv_map, skipped = build_atlas(
        albums, static / "covers", tile_size=args.tile_size, atlas_size=args.atlas_size
    )
    for album_id in skipped:
        print(f"  Skipping {album_id}: unreadable cover", file=sys.stderr)
    save_atlas(atlas, uv_map, static / "covers" / "atlas.webp", static / "data" / "atlas-uv-map.json")
    print(f"Atlas saved: {static / 'covers' / 'atlas.webp'} ({len(uv_map)} tiles)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Discography catalog pipeline and grid layout")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("layout", help="Compute the year grid layout for a viewport width")
    p.add_argument("--catalog", default="static/data/catalog-index.json", help="Catalog index JSON")
    p.add_argument("--credits", default=None, help="Credits JSON (needed with --artist)")
    p.add_argument("--artist", default=None, help="Only albums credited to this artist id")
    p.add_argument("--viewport-width", type=float, default=1280)
    p.add_argument("--cell-unit", type=int, default=DEFAULT_GRID_CONFIG.cell_unit)
    p.add_argument("--min-cols", type=int, default=DEFAULT_GRID_CONFIG.min_cols)
    p.add_argument("--spacer-rate", type=float, default=DEFAULT_GRID_CONFIG.spacer_rate)
    p.add_argument("--padding", type=float, default=DEFAULT_GRID_CONFIG.padding)
    p.add_argument("--output", default=None, help="Write layout JSON here instead of stdout")
    p.set_defaults(func=run_layout)

    p = sub.add_parser("merge", help="Merge review, discography and preview data")
    p.add_argument("--data-dir", default="data", help="Directory holding ecm-catalog-reviews.json and raw/")
    p.add_argument("--static-dir", default="static")
    p.add_argument("--output", default="data/ecm-catalog.json")
    p.set_defaults(func=run_merge_cmd)

    p = sub.add_parser("split", help="Split the merged catalog into static data files")
    p.add_argument("--catalog", default="data/ecm-catalog.json")
    p.add_argument("--static-dir", default="static")
    p.set_defaults(func=run_split)

    p = sub.add_parser("covers", help="Render square WebP cover thumbnails")
    p.add_argument("--catalog", default="data/ecm-catalog.json")
    p.add_argument("--originals-dir", default="data/covers-original")
    p.add_argument("--static-dir", default="static")
    p.add_argument("--size", type=int, default=500)
    p.add_argument("--quality", type=int, default=90)
    p.add_argument("--force", action="store_true", help="Re-render covers that already exist")
    p.set_defaults(func=run_covers)

    p = sub.add_parser("atlas", help="Pack cover thumbnails into one texture atlas")
    p.add_argument("--catalog", default="static/data/catalog-index.json")
    p.add_argument("--static-dir", default="static")
    p.add_argument("--tile-size", type=int, default=64)
    p.add_argument("--atlas-size", type=int, default=4096)
    p.set_defaults(func=run_atlas)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        args.func(args)
    except (CatalogError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
