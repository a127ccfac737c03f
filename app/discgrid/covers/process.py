from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from PIL import Image, ImageOps

ORIGINAL_SUFFIXES = (".jpg", ".jpeg", ".png")


@dataclass
class CoverStats:
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    cleared: int = 0
    errors: List[str] = field(default_factory=list)


def index_originals(originals_dir: str | Path) -> Dict[str, Path]:
    """Map album id -> original cover file (by file stem)."""
    found: Dict[str, Path] = {}
    root = Path(originals_dir)
    if not root.is_dir():
        return found
    for p in sorted(root.iterdir()):
        if p.is_file() and p.suffix.lower() in ORIGINAL_SUFFIXES:
            found[p.stem] = p
    return found


def render_cover(src: str | Path, dest: str | Path, *, size: int, quality: int) -> None:
    """Centre-crop src to a size x size square and save it as WebP.

    The file is written next to dest and moved into place only once it is
    complete, so a failed render never leaves a partial dest behind.
    """
    dest = Path(dest)
    tmp = dest.with_name(dest.name + ".tmp")
    try:
        with Image.open(src) as img:
            if img.mode not in ("RGB", "RGBA"):
                img = img.convert("RGB")
            square = ImageOps.fit(img, (size, size), Image.Resampling.LANCZOS)
            square.save(tmp, format="WEBP", quality=quality)
        tmp.replace(dest)
    finally:
        tmp.unlink(missing_ok=True)


def process_covers(
    catalog: dict,
    originals_dir: str | Path,
    output_dir: str | Path,
    *,
    size: int = 500,
    quality: int = 90,
    force: bool = False,
) -> CoverStats:
    """Render square WebP thumbnails and point albums at them.

    Updates ``localThumb`` on the catalog's albums in place. A broken
    original is counted in ``failed`` and does not stop the run.
    """

    if size <= 0:
        raise ValueError("size must be > 0")
    if not 0 < quality <= 100:
        raise ValueError("quality must be in 1..100")

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    originals = index_originals(originals_dir)
    stats = CoverStats()

    for album in catalog.get("albums", []):
        album_id = album.get("id")
        src = originals.get(album_id)
        if src is None:
            continue

        name = f"{album_id}.webp"
        dest = out / name
        if dest.exists() and not force:
            album["localThumb"] = f"/covers/{name}"
            stats.skipped += 1
            continue

        try:
            render_cover(src, dest, size=size, quality=quality)
        except (OSError, ValueError) as e:
            stats.failed += 1
            stats.errors.append(f"{album_id}: {e}")
            continue
        album["localThumb"] = f"/covers/{name}"
        stats.processed += 1

    # Drop references to thumbnails that no longer exist anywhere.
    for album in catalog.get("albums", []):
        album_id = album.get("id")
        if album.get("localThumb") and album_id not in originals:
            if not (out / f"{album_id}.webp").exists():
                album["localThumb"] = None
                stats.cleared += 1

    return stats
