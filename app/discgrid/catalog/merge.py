"""Merge the review catalog with discography and preview-match data.

Inputs (all JSON, produced by separate fetch steps):
- review catalog: ``{"entries": [...], "meta": {...}}`` (required)
- discography enrichment keyed by catalog number (optional)
- artist profiles keyed by discography artist id (optional)
- streaming-preview matches keyed by catalog number (optional)

Output is a single dataset ``{"albums", "artists", "credits", "meta"}``.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from app.discgrid.catalog.io import dump_json, load_json

NON_MUSICAL_TERMS = (
    "producer", "engineer", "mixed", "mastered", "design", "cover",
    "photography", "photo", "artwork", "liner notes", "written-by",
    "composed", "arranged", "executive", "coordinator", "supervisor",
    "lacquer", "cut", "pressed", "manufactured", "copyright", "published",
    "recorded at", "studio", "management", "a&r",
)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    return _NON_ALNUM.sub("-", (text or "").lower()).strip("-")


def is_non_musical_role(role: str) -> bool:
    lower = (role or "").lower()
    return any(term in lower for term in NON_MUSICAL_TERMS)


def discogs_url(discogs_id: Any, discogs_type: Optional[str]) -> str:
    kind = "master" if discogs_type == "master" else "release"
    return f"https://www.discogs.com/{kind}/{discogs_id}"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def merge_catalog(
    reviews: dict,
    enriched: Optional[Dict[str, dict]] = None,
    artist_details: Optional[Dict[str, dict]] = None,
    deezer_matches: Optional[Dict[str, dict]] = None,
    *,
    covers_dir: str | Path | None = None,
    artists_dir: str | Path | None = None,
) -> dict:
    """Build the merged dataset.

    Album ids are ``album-<slug(catalogNumber)>``; artist ids are
    ``artist-<discogs artist id>``. Local image paths are only filled in
    when the matching ``.webp`` exists in covers_dir / artists_dir.
    """

    enriched = enriched or {}
    artist_details = artist_details or {}
    deezer_matches = deezer_matches or {}

    albums = []
    artists: Dict[str, dict] = {}
    instruments: Dict[str, set] = {}
    credits = []

    for entry in reviews.get("entries", []):
        cat_no = entry.get("catalogNumber") or ""
        album_id = f"album-{slugify(cat_no)}"
        cover_file = f"{album_id}.webp"
        has_cover = covers_dir is not None and (Path(covers_dir) / cover_file).exists()
        match = deezer_matches.get(cat_no) or {}

        album = {
            "id": album_id,
            "catalogNumber": cat_no,
            "series": entry.get("series"),
            "artist": entry.get("artist"),
            "title": entry.get("title"),
            "recordingDate": entry.get("recordingDate") or None,
            "review": entry.get("review") or None,
            "reviewUrl": entry.get("reviewUrl") or None,
            "localThumb": f"/covers/{cover_file}" if has_cover else None,
            "year": None,
            "coverUrl": None,
            "thumbUrl": None,
            "genres": [],
            "styles": [],
            "discogsId": None,
            "discogsUrl": None,
            "deezerId": match.get("deezerId") or None,
        }

        data = enriched.get(cat_no)
        if data and data.get("found"):
            album.update(
                year=data.get("year"),
                coverUrl=data.get("coverUrl"),
                thumbUrl=data.get("thumbUrl"),
                genres=data.get("genres") or [],
                styles=data.get("styles") or [],
                discogsId=data.get("discogsId"),
                discogsUrl=discogs_url(data.get("discogsId"), data.get("discogsType")),
                community=data.get("community") or None,
                tracklist=data.get("tracklist") or [],
            )

            for credit in data.get("credits") or []:
                discogs_artist = credit.get("artistId")
                artist_id = f"artist-{discogs_artist}"
                if artist_id not in artists:
                    details = artist_details.get(str(discogs_artist)) or {}
                    image_file = f"{artist_id}.webp"
                    has_image = artists_dir is not None and (Path(artists_dir) / image_file).exists()
                    artists[artist_id] = {
                        "id": artist_id,
                        "discogsId": discogs_artist,
                        "name": credit.get("artistName"),
                        "realName": details.get("realName") or None,
                        "imageUrl": details.get("imageUrl") or None,
                        "thumbUrl": details.get("thumbUrl") or None,
                        "localImage": f"/artists/{image_file}" if has_image else None,
                        "profile": details.get("profile") or None,
                    }
                    instruments[artist_id] = set()

                role = credit.get("role") or ""
                for part in role.split(","):
                    part = part.strip()
                    if part and not is_non_musical_role(part):
                        instruments[artist_id].add(part)

                credits.append({"albumId": album_id, "artistId": artist_id, "role": role})

        albums.append(album)

    artist_list = [
        {**artist, "instruments": sorted(instruments[artist_id])}
        for artist_id, artist in artists.items()
    ]

    review_meta = reviews.get("meta") or {}
    return {
        "albums": albums,
        "artists": artist_list,
        "credits": credits,
        "meta": {
            "generatedAt": _now_iso(),
            "sources": {
                "ecmreviews": {
                    "fetchedAt": review_meta.get("fetchedAt"),
                    "totalAlbums": review_meta.get("totalEntries"),
                    "albumsWithReviews": review_meta.get("entriesWithReviews"),
                },
                "discogs": {
                    "enrichedAlbums": sum(1 for e in enriched.values() if e.get("found")),
                },
                "deezer": {
                    "matchedAlbums": sum(1 for m in deezer_matches.values() if m.get("deezerId")),
                },
            },
            "totals": {
                "albums": len(albums),
                "artists": len(artist_list),
                "credits": len(credits),
                "albumsWithCover": sum(1 for a in albums if a["coverUrl"]),
                "albumsWithReview": sum(1 for a in albums if a["review"]),
                "artistsWithImage": sum(1 for a in artist_list if a["imageUrl"]),
            },
        },
    }


def run_merge(
    raw_data_dir: str | Path,
    output_path: str | Path,
    *,
    covers_dir: str | Path | None = None,
    artists_dir: str | Path | None = None,
) -> dict:
    """Load source files from raw_data_dir, merge, and write the dataset.

    ``ecm-catalog-reviews.json`` must exist in raw_data_dir; the
    enrichment files under ``raw/`` are optional.
    """
    base = Path(raw_data_dir)
    raw = base / "raw"
    reviews = load_json(base / "ecm-catalog-reviews.json")
    dataset = merge_catalog(
        reviews,
        enriched=load_json(raw / "discogs-enriched.json", required=False, default={}),
        artist_details=load_json(raw / "discogs-artists.json", required=False, default={}),
        deezer_matches=load_json(raw / "deezer-matches.json", required=False, default={}),
        covers_dir=covers_dir,
        artists_dir=artists_dir,
    )
    dump_json(dataset, output_path, indent=2)
    return dataset
