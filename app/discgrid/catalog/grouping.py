"""Build the grid's year groups from a flat album list.

The grid itself never filters or sorts; everything that decides *which*
albums appear and in *what order* lives here.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from app.discgrid.layout.grid import UNKNOWN_YEAR, YearGroup


def _year_key(year: Any) -> tuple:
    # Newest first, then any non-numeric labels, Unknown last.
    if year == UNKNOWN_YEAR:
        return (2, 0, "")
    if isinstance(year, str) and year.strip().isdigit():
        year = int(year)
    if isinstance(year, (int, float)):
        return (0, -year, "")
    return (1, 0, str(year))


def _albums_for_artist(credits: Iterable[dict], artist_id: str) -> set:
    return {c.get("albumId") for c in credits if c.get("artistId") == artist_id}


def group_albums_by_year(
    albums: Iterable[dict],
    *,
    credits: Optional[Iterable[dict]] = None,
    artist_id: Optional[str] = None,
) -> List[YearGroup]:
    """Group albums by release year.

    If artist_id is given, only albums credited to that artist are kept
    (requires credits). Albums without a year fall into "Unknown".
    Years are ordered newest first with "Unknown" last; albums inside a
    year are ordered by catalog number.
    """

    selected = list(albums or [])
    if artist_id is not None:
        wanted = _albums_for_artist(credits or [], artist_id)
        selected = [a for a in selected if a.get("id") in wanted]

    by_year: Dict[Any, List[dict]] = {}
    for album in selected:
        year = album.get("year") or UNKNOWN_YEAR
        by_year.setdefault(year, []).append(album)

    groups = []
    for year in sorted(by_year, key=_year_key):
        items = sorted(by_year[year], key=lambda a: a.get("catalogNumber") or "")
        groups.append(YearGroup(year=year, albums=items))
    return groups


def year_counts(groups: Iterable[YearGroup]) -> List[dict]:
    return [{"year": g.year, "count": len(g.albums)} for g in groups]


def year_histogram(albums: Iterable[dict]) -> List[dict]:
    """Album counts for every known year, newest first (unfiltered view)."""
    counts: Dict[Any, int] = {}
    for album in albums or []:
        year = album.get("year")
        if not year or year == UNKNOWN_YEAR:
            continue
        counts[year] = counts.get(year, 0) + 1
    return [{"year": y, "count": counts[y]} for y in sorted(counts, key=_year_key)]


def artists_by_album_count(artists_index: Iterable[dict], credits: Iterable[dict]) -> List[dict]:
    """Artists annotated with their distinct album count, busiest first."""
    albums_per_artist: Dict[str, set] = {}
    for credit in credits or []:
        albums_per_artist.setdefault(credit.get("artistId"), set()).add(credit.get("albumId"))

    ranked = []
    for artist in artists_index or []:
        count = len(albums_per_artist.get(artist.get("id"), ()))
        if count > 0:
            ranked.append({**artist, "albumCount": count})
    # sorted() is stable, so equal counts keep index order.
    ranked.sort(key=lambda a: a["albumCount"], reverse=True)
    return ranked
