"""
Catalog Loader for Marker Jukebox.

Loads the static deployment catalog: the configured symbols and the
combo-key playlist table.

File format (JSON):

    {
        "symbols": [{"id": 0, "name": "😄", "label": "Happy"}, ...],
        "playlists": {
            "😄|😈": [{"title": "...", "artist": "...", "source": "..."}],
            "DEFAULT": [...]
        }
    }
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from jukebox.perception.observation import Symbol, SymbolRegistry
from jukebox.playback.combo_key import DEFAULT_KEY
from jukebox.playback.track import Track

logger = logging.getLogger(__name__)


@dataclass
class Catalog:
    """Symbols and playlists for one deployment."""
    symbols: SymbolRegistry = field(default_factory=SymbolRegistry)
    playlists: Dict[str, List[Track]] = field(default_factory=dict)


def _parse_track(raw: Any, key: str, index: int) -> Track:
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid track {index} in playlist {key!r} (must be an object)")

    # "src" is accepted for catalogs exported from the web player
    source = raw.get("source", raw.get("src"))
    if not isinstance(source, str) or not source:
        raise ValueError(f"Invalid track {index} in playlist {key!r}: missing source")

    return Track(
        title=str(raw.get("title") or ""),
        artist=str(raw.get("artist") or ""),
        source=source,
    )


def _parse_symbol(raw: Any, index: int) -> Symbol:
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid symbol {index} (must be an object)")

    symbol_id = raw.get("id")
    name = raw.get("name")
    if isinstance(symbol_id, bool) or not isinstance(symbol_id, int):
        raise ValueError(f"Invalid symbol {index}: id must be an integer")
    if not isinstance(name, str) or not name:
        raise ValueError(f"Invalid symbol {index}: name must be a non-empty string")

    return Symbol(id=symbol_id, name=name, label=str(raw.get("label") or ""))


def parse_catalog(data: Any) -> Catalog:
    """
    Build a Catalog from decoded JSON.

    Raises:
        ValueError: If the structure is invalid or DEFAULT is missing
    """
    if not isinstance(data, dict):
        raise ValueError("Catalog must be a JSON object")

    raw_playlists = data.get("playlists")
    if not isinstance(raw_playlists, dict):
        raise ValueError("Catalog must contain a 'playlists' object")
    if DEFAULT_KEY not in raw_playlists:
        raise ValueError(f"Catalog must contain a {DEFAULT_KEY!r} playlist")

    playlists: Dict[str, List[Track]] = {}
    for key, raw_tracks in raw_playlists.items():
        if not isinstance(raw_tracks, list):
            raise ValueError(f"Playlist {key!r} must be a list")
        playlists[key] = [_parse_track(raw, key, i) for i, raw in enumerate(raw_tracks)]

    raw_symbols = data.get("symbols", [])
    if not isinstance(raw_symbols, list):
        raise ValueError("Catalog 'symbols' must be a list")
    registry = SymbolRegistry(_parse_symbol(raw, i) for i, raw in enumerate(raw_symbols))

    return Catalog(symbols=registry, playlists=playlists)


def load_catalog(path: Union[str, Path]) -> Catalog:
    """
    Load a catalog file.

    Args:
        path: Path to the JSON catalog

    Returns:
        Parsed Catalog

    Raises:
        ValueError: If the file cannot be read or is invalid
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ValueError(f"Cannot read catalog {path}: {e}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid catalog JSON in {path}: {e}")

    catalog = parse_catalog(data)
    empty = [key for key, tracks in catalog.playlists.items() if not tracks]
    logger.info(
        f"Catalog loaded from {path}: {len(catalog.symbols)} symbols, "
        f"{len(catalog.playlists)} playlists"
        + (f" ({len(empty)} empty)" if empty else "")
    )
    return catalog
