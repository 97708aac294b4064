from typing import Any

from .constants import (
    COVER_SIZE,
    LISTING_FIELDS,
    LISTING_FILTER,
    LISTING_SORT,
    NO_DESCRIPTION,
    NO_SUMMARY,
    PLACEHOLDER_COVER_URL,
    THUMBNAIL_SIZE,
)
from .models import GameRecord, RemoteGame


def normalize_image_url(url: str | None, size: str = COVER_SIZE) -> str | None:
    """
    Rewrites an upstream image URL for display: swaps the thumbnail size token
    for `size` and adds the https scheme to scheme-relative URLs.
    Safe to apply more than once.
    """
    if not url:
        return None
    url = url.strip()
    if url.startswith("//"):
        url = "https:" + url
    return url.replace(f"/{THUMBNAIL_SIZE}/", f"/{size}/")


def build_listing_query(limit: int) -> str:
    return f"fields {LISTING_FIELDS}; where {LISTING_FILTER}; sort {LISTING_SORT}; limit {limit};"


def build_screenshots_query(remote_id: str | int) -> str:
    return f"fields url; where game = {int(remote_id)};"


def build_video_query(remote_id: str | int) -> str:
    return f"fields videos.video_id; where id = {int(remote_id)}; limit 1;"


def _require_list(data: Any) -> list[Any]:
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array, got {type(data).__name__}")
    return data


def _optional_str(item: dict, key: str) -> str | None:
    value = item.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{key} is not a string: {value!r}")
    return value


def parse_games(data: Any) -> list[RemoteGame]:
    """Parses a games listing response. Raises ValueError on an unexpected shape."""
    games = []
    for item in _require_list(data):
        if not isinstance(item, dict) or isinstance(item.get("id"), bool) or not isinstance(item.get("id"), int):
            raise ValueError(f"game entry without a numeric id: {item!r}")

        cover = item.get("cover") or {}
        videos = _require_list(item.get("videos") or [])
        games.append(
            RemoteGame(
                remote_id=item["id"],
                name=_optional_str(item, "name") or "",
                cover_url=_optional_str(cover, "url") if isinstance(cover, dict) else None,
                summary=_optional_str(item, "summary"),
                storyline=_optional_str(item, "storyline"),
                video_ids=[_optional_str(v, "video_id") for v in videos if isinstance(v, dict) and v.get("video_id")],
            )
        )
    return games


def parse_screenshot_urls(data: Any) -> list[str]:
    """
    Accepts both the screenshots endpoint shape ([{id, url}]) and the games
    projection shape ([{id, screenshots: [{id, url}]}]).
    """
    urls = []
    for item in _require_list(data):
        if not isinstance(item, dict):
            raise ValueError(f"screenshot entry is not an object: {item!r}")
        if "screenshots" in item:
            shots = _require_list(item["screenshots"] or [])
            urls.extend(_optional_str(s, "url") for s in shots if isinstance(s, dict) and s.get("url"))
        elif item.get("url"):
            urls.append(_optional_str(item, "url"))
    return urls


def parse_video_id(data: Any) -> str | None:
    for game in parse_games(data):
        if game.video_ids:
            return game.video_ids[0]
    return None


def to_game_record(game: RemoteGame) -> GameRecord:
    return GameRecord(
        remote_id=str(game.remote_id),
        name=game.name,
        image_url=normalize_image_url(game.cover_url, COVER_SIZE) or PLACEHOLDER_COVER_URL,
        summary=game.summary or NO_SUMMARY,
        description=game.storyline or NO_DESCRIPTION,
    )
