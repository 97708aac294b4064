import pytest

from catalog_core.constants import NO_DESCRIPTION, NO_SUMMARY, PLACEHOLDER_COVER_URL, SCREENSHOT_SIZE
from catalog_core.models import RemoteGame
from catalog_core.parser import (
    build_listing_query,
    normalize_image_url,
    parse_games,
    parse_screenshot_urls,
    parse_video_id,
    to_game_record,
)

THUMB = "//images.igdb.com/igdb/image/upload/t_thumb/co1wyy.jpg"
COVER = "https://images.igdb.com/igdb/image/upload/t_cover_big/co1wyy.jpg"


def test_normalize_adds_scheme_and_size():
    assert normalize_image_url(THUMB) == COVER
    assert normalize_image_url(THUMB, SCREENSHOT_SIZE) == (
        "https://images.igdb.com/igdb/image/upload/t_screenshot_med/co1wyy.jpg"
    )


def test_normalize_is_idempotent():
    once = normalize_image_url(THUMB)
    twice = normalize_image_url(once)
    assert twice == once
    assert twice.count("https:") == 1


def test_normalize_without_size_token():
    url = "https://example.com/images/cover.png"
    assert normalize_image_url(url) == url


@pytest.mark.parametrize("value", [None, ""])
def test_normalize_missing_url(value):
    assert normalize_image_url(value) is None


def test_record_defaults_when_summary_missing():
    record = to_game_record(RemoteGame(remote_id=42, name="Mystery"))

    assert record.remote_id == "42"
    assert record.summary == NO_SUMMARY == "No summary available"
    assert record.description == NO_DESCRIPTION == "No description available"
    assert record.image_url == PLACEHOLDER_COVER_URL
    assert record.surrogate_id is None


def test_record_uses_cover_and_storyline():
    record = to_game_record(RemoteGame(remote_id=1, name="Portal", cover_url=THUMB, summary="Puzzles.", storyline="GLaDOS."))

    assert record.image_url == COVER
    assert record.summary == "Puzzles."
    assert record.description == "GLaDOS."


def test_build_listing_query():
    assert build_listing_query(5) == (
        "fields name, cover.url, summary, storyline; "
        "where category = 0 & version_parent = null; "
        "sort rating desc; limit 5;"
    )


def test_parse_games_collects_video_ids():
    games = parse_games([{"id": 3, "name": "X", "videos": [{"id": 1, "video_id": "a"}, {"id": 2}]}])
    assert games[0].video_ids == ["a"]


def test_parse_screenshot_urls_both_shapes():
    assert parse_screenshot_urls([{"id": 1, "url": "//a.jpg"}]) == ["//a.jpg"]
    assert parse_screenshot_urls([{"id": 9, "screenshots": [{"id": 1, "url": "//b.jpg"}]}]) == ["//b.jpg"]
    assert parse_screenshot_urls([{"id": 9}]) == []


def test_parse_rejects_non_list():
    with pytest.raises(ValueError):
        parse_screenshot_urls({"error": "bad"})


def test_parse_video_id_none():
    assert parse_video_id([]) is None


@pytest.mark.parametrize(
    "payload",
    [
        [{"id": None}],
        [{"id": "12"}],
        [{"id": True}],
        [{"id": 1, "videos": 5}],
        [{"id": 1, "cover": {"url": 5}}],
        [{"id": 1, "name": 3}],
    ],
)
def test_parse_games_rejects_malformed_entries(payload):
    with pytest.raises(ValueError):
        parse_games(payload)


@pytest.mark.parametrize(
    "payload",
    [
        [{"id": 1, "screenshots": 7}],
        [{"id": 1, "url": 5}],
        ["not an object"],
    ],
)
def test_parse_screenshot_urls_rejects_malformed_entries(payload):
    with pytest.raises(ValueError):
        parse_screenshot_urls(payload)
