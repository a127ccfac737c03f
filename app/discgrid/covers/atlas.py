"""Cover atlas: every album thumbnail packed into one square texture.

Tiles are laid out row-major in catalog order, skipping albums without a
cover. The UV map gives each album's normalized top-left corner.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from PIL import Image, ImageOps

from app.discgrid.catalog.io import CatalogError, dump_json


def build_atlas(
    albums: Iterable[dict],
    covers_dir: str | Path,
    *,
    tile_size: int = 64,
    atlas_size: int = 4096,
    background: Tuple[int, int, int] = (242, 242, 242),
) -> Tuple[Image.Image, Dict[str, dict], List[str]]:
    """Return (atlas, uv_map, skipped); skipped lists albums whose cover file
    exists but could not be read.
    """
    if tile_size <= 0 or atlas_size <= 0:
        raise ValueError("tile_size and atlas_size must be > 0")
    if atlas_size % tile_size != 0:
        raise ValueError("atlas_size must be a multiple of tile_size")

    albums = list(albums)
    per_row = atlas_size // tile_size
    max_tiles = per_row * per_row
    if len(albums) > max_tiles:
        raise CatalogError(f"Too many albums ({len(albums)}) for atlas size (max {max_tiles})")

    atlas = Image.new("RGB", (atlas_size, atlas_size), background)
    uv_map: Dict[str, dict] = {}
    skipped: List[str] = []
    placed = 0
    root = Path(covers_dir)

    for album in albums:
        album_id = album.get("id")
        cover = root / f"{album_id}.webp"
        if not cover.exists():
            continue

        col = placed % per_row
        row = placed // per_row
        try:
            with Image.open(cover) as img:
                tile = ImageOps.fit(img.convert("RGB"), (tile_size, tile_size), Image.Resampling.LANCZOS)
        except OSError:
            # Unreadable cover: leave the slot to the next album.
            skipped.append(album_id)
            continue

        atlas.paste(tile, (col * tile_size, row * tile_size))
        uv_map[album_id] = {"u": col / per_row, "v": row / per_row, "index": placed}
        placed += 1

    return atlas, uv_map, skipped


def save_atlas(
    atlas: Image.Image,
    uv_map: Dict[str, dict],
    atlas_path: str | Path,
    uv_map_path: str | Path,
    *,
    quality: int = 75,
) -> None:
    Path(atlas_path).parent.mkdir(parents=True, exist_ok=True)
    atlas.save(atlas_path, format="WEBP", quality=quality)
    dump_json(uv_map, uv_map_path)
