"""Result shapes shared by every strategy and the orchestrator.

Strategies never raise across their boundary; each run ends in exactly one
RetrievalOutcome. The Strategy protocol is the single seam the orchestrator
knows about, so tests can inject fakes without touching a browser or network.
"""
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .config import TargetConfig

NO_CAPTION = "No caption"
CAPTION_UNAVAILABLE = "Caption not available via direct HTML parsing"


class CaptionStatus(Enum):
    """Whether the caption text is real, absent on the post, or unreadable."""
    PRESENT = "present"           # caption text extracted
    ABSENT = "absent"             # post has no caption
    UNAVAILABLE = "unavailable"   # extraction path cannot read captions


@dataclass
class PostRecord:
    caption: str
    image_url: str
    id: str | None = None
    timestamp: str | None = None
    like_count: int | None = None
    post_url: str | None = None
    caption_status: CaptionStatus = CaptionStatus.PRESENT
    source: str = ""

    def __post_init__(self):
        if not self.caption:
            self.caption = NO_CAPTION
            self.caption_status = CaptionStatus.ABSENT
        if self.like_count is not None and self.like_count < 0:
            self.like_count = None

    @property
    def caption_available(self) -> bool:
        return self.caption_status is CaptionStatus.PRESENT

    def to_dict(self) -> dict:
        """Wire shape for the HTTP/social-posting collaborators (camelCase)."""
        data = {
            "id": self.id,
            "caption": self.caption,
            "imageUrl": self.image_url,
            "timestamp": self.timestamp,
            "likes": self.like_count,
            "postUrl": self.post_url,
        }
        out = {k: v for k, v in data.items() if v is not None}
        out["captionStatus"] = self.caption_status.value
        if self.source:
            out["source"] = self.source
        return out


@dataclass(frozen=True)
class RetrievalOutcome:
    """Tagged success/failure. Build through ``success()`` / ``failure()``."""
    post: PostRecord | None = None
    error: str | None = None

    def __post_init__(self):
        if (self.post is None) == (self.error is None):
            raise ValueError("RetrievalOutcome needs exactly one of post or error")

    @classmethod
    def success(cls, post: PostRecord) -> "RetrievalOutcome":
        return cls(post=post)

    @classmethod
    def failure(cls, reason: str) -> "RetrievalOutcome":
        return cls(error=reason or "unknown error")

    @property
    def ok(self) -> bool:
        return self.post is not None

    def to_dict(self) -> dict:
        if self.ok:
            return {"success": True, "data": self.post.to_dict()}
        return {"success": False, "error": self.error}


@runtime_checkable
class Strategy(Protocol):
    """One self-contained way of acquiring the latest post.

    Implementations own their retries and fallbacks and must convert every
    internal fault into ``RetrievalOutcome.failure``.
    """

    name: str                    # "browser", "static", "api"
    requires_credential: bool    # skipped by the orchestrator without a token

    def run(self, target: "TargetConfig") -> RetrievalOutcome:
        """Fetch the latest post for ``target.identifier``."""
        ...
