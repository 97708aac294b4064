from dataclasses import dataclass, field

from .constants import TRAILER_URL_TEMPLATE
from .exceptions import CatalogError


@dataclass(frozen=True)
class Credential:
    token: str
    expires_at_epoch_millis: int

    @classmethod
    def empty(cls) -> "Credential":
        return cls(token="", expires_at_epoch_millis=0)

    def is_valid(self, now_millis: int) -> bool:
        # An empty token is expired whatever the timestamp says
        return bool(self.token) and now_millis < self.expires_at_epoch_millis


@dataclass(frozen=True)
class RemoteGame:
    remote_id: int
    name: str
    cover_url: str | None = None
    summary: str | None = None
    storyline: str | None = None
    video_ids: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class GameRecord:
    remote_id: str
    name: str
    image_url: str
    summary: str
    description: str
    surrogate_id: int | None = None


@dataclass
class GameDetails:
    record: GameRecord
    screenshots: list[str] = field(default_factory=list)
    video_id: str | None = None
    errors: list[CatalogError] = field(default_factory=list)

    @property
    def trailer_url(self) -> str | None:
        if not self.video_id:
            return None
        return TRAILER_URL_TEMPLATE.format(video_id=self.video_id)
