from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

from app.discgrid.catalog.grouping import group_albums_by_year
from app.discgrid.layout.grid import YearGroup


class CatalogError(Exception):
    """Raised when a catalog input file is missing or unreadable."""


def load_json(path: str | Path, *, required: bool = True, default: Any = None) -> Any:
    """Read a JSON file.

    Optional inputs (required=False) return ``default`` when the file does
    not exist. Unreadable files and invalid JSON raise CatalogError.
    """
    p = Path(path)
    if not p.exists():
        if required:
            raise CatalogError(f"Required file not found: {p}")
        return default
    try:
        with open(p, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Invalid JSON in {p}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogError(f"Cannot read {p}: {e}") from e


def dump_json(data: Any, path: str | Path, *, indent: int | None = None) -> int:
    """Write JSON (UTF-8, non-ASCII kept) and return the number of bytes written."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    if indent is None:
        text = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    else:
        text = json.dumps(data, ensure_ascii=False, indent=indent)
    payload = text.encode("utf-8")
    p.write_bytes(payload)
    return len(payload)


def load_year_groups(
    path: str | Path,
    *,
    credits: Optional[list] = None,
    artist_id: Optional[str] = None,
) -> List[YearGroup]:
    """Load a catalog index (or a bare album list) grouped by year.

    Credits embedded in the file are used unless credits is given.
    """
    data = load_json(path)
    if isinstance(data, dict):
        albums = data.get("albums")
        credits = credits if credits is not None else data.get("credits")
    else:
        albums = data
    if not isinstance(albums, list):
        raise CatalogError(f"No album list in {path}")
    return group_albums_by_year(albums, credits=credits, artist_id=artist_id)
