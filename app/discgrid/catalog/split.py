"""Split the merged dataset into the static files the front-end loads.

The grid only needs the small index files at startup; detail files are
fetched lazily.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

from app.discgrid.catalog.io import dump_json

INDEX_FIELDS = (
    "id", "catalogNumber", "series", "artist", "title", "year",
)


def _album_count(credits: List[dict]) -> Dict[str, int]:
    seen: Dict[str, set] = {}
    for c in credits:
        seen.setdefault(c["artistId"], set()).add(c["albumId"])
    return {artist_id: len(ids) for artist_id, ids in seen.items()}


def build_catalog_index(catalog: dict) -> dict:
    albums = []
    for album in catalog["albums"]:
        row = {k: album.get(k) for k in INDEX_FIELDS}
        row.update(
            localThumb=album.get("localThumb") or None,
            genres=album.get("genres") or [],
            styles=album.get("styles") or [],
            community=album.get("community") or None,
            reviewUrl=album.get("reviewUrl") or None,
            discogsUrl=album.get("discogsUrl") or None,
            deezerId=album.get("deezerId") or None,
        )
        albums.append(row)
    return {
        "albums": albums,
        "meta": {
            "totalAlbums": len(catalog["albums"]),
            "totalArtists": len(catalog.get("artists", [])),
            "generatedAt": datetime.now(timezone.utc).isoformat(),
        },
    }


def build_albums_detail(catalog: dict) -> Dict[str, dict]:
    by_album: Dict[str, list] = {}
    for c in catalog.get("credits", []):
        by_album.setdefault(c["albumId"], []).append({"artistId": c["artistId"], "role": c["role"]})

    return {
        album["id"]: {
            **album,
            "tracklist": album.get("tracklist") or [],
            "credits": by_album.get(album["id"], []),
        }
        for album in catalog["albums"]
    }


def build_artists_detail(catalog: dict) -> Dict[str, dict]:
    by_artist: Dict[str, list] = {}
    for c in catalog.get("credits", []):
        by_artist.setdefault(c["artistId"], []).append(c)

    detail = {}
    for artist in catalog.get("artists", []):
        rows = by_artist.get(artist["id"], [])
        detail[artist["id"]] = {
            **artist,
            "albumCount": len({c["albumId"] for c in rows}),
            "albums": [{"albumId": c["albumId"], "role": c["role"]} for c in rows],
        }
    return detail


def build_graph_data(catalog: dict) -> dict:
    credits = catalog.get("credits", [])
    counts = _album_count(credits)
    nodes = [
        {
            "id": album["id"],
            "type": "album",
            "label": album.get("title"),
            "artist": album.get("artist"),
            "year": album.get("year"),
            "series": album.get("series"),
            "localThumb": album.get("localThumb") or None,
        }
        for album in catalog["albums"]
    ]
    nodes.extend(
        {
            "id": artist["id"],
            "type": "artist",
            "label": artist.get("name"),
            "localImage": artist.get("localImage") or None,
            "albumCount": counts.get(artist["id"], 0),
        }
        for artist in catalog.get("artists", [])
    )
    return {
        "nodes": nodes,
        "edges": [
            {"source": c["albumId"], "target": c["artistId"], "role": c["role"]}
            for c in credits
        ],
        "meta": {"nodeCount": len(nodes), "edgeCount": len(credits)},
    }


def build_artists_index(catalog: dict) -> List[dict]:
    counts = _album_count(catalog.get("credits", []))
    return [
        {
            "id": artist["id"],
            "name": artist.get("name"),
            "localImage": artist.get("localImage") or None,
            "albumCount": counts.get(artist["id"], 0),
        }
        for artist in catalog.get("artists", [])
    ]


def build_credits(catalog: dict) -> List[dict]:
    return [
        {"albumId": c["albumId"], "artistId": c["artistId"], "role": c["role"]}
        for c in catalog.get("credits", [])
    ]


def write_static_files(catalog: dict, static_dir: str | Path) -> Dict[str, int]:
    """Write every split file into static_dir; return bytes written per file."""
    out = Path(static_dir)
    files = {
        "catalog-index.json": build_catalog_index(catalog),
        "albums-detail.json": build_albums_detail(catalog),
        "artists-detail.json": build_artists_detail(catalog),
        "artists-index.json": build_artists_index(catalog),
        "graph-data.json": build_graph_data(catalog),
        "credits.json": build_credits(catalog),
    }
    return {name: dump_json(data, out / name) for name, data in files.items()}
