from enum import Enum

TOKEN_URL = "https://id.twitch.tv/oauth2/token"
API_BASE_URL = "https://api.igdb.com/v4"
GAMES_ENDPOINT = f"{API_BASE_URL}/games"
SCREENSHOTS_ENDPOINT = f"{API_BASE_URL}/screenshots"

DEFAULT_LISTING_LIMIT = 100
DEFAULT_TOKEN_NAMESPACE = "igdb"

# Listing query: base games only (category 0), no parent version, best rated first
LISTING_FIELDS = "name, cover.url, summary, storyline"
LISTING_FILTER = "category = 0 & version_parent = null"
LISTING_SORT = "rating desc"

THUMBNAIL_SIZE = "t_thumb"
COVER_SIZE = "t_cover_big"
SCREENSHOT_SIZE = "t_screenshot_med"

PLACEHOLDER_COVER_URL = "https://images.igdb.com/igdb/image/upload/t_cover_big/nocover.png"
NO_SUMMARY = "No summary available"
NO_DESCRIPTION = "No description available"

TRAILER_URL_TEMPLATE = "https://www.youtube.com/watch?v={video_id}"


class SyncState(Enum):
    IDLE = "idle"
    TOKEN_READY = "token_ready"
    FETCHED = "fetched"
    MAPPED = "mapped"
    PUBLISHED = "published"
    FAILED = "failed"
