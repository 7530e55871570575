"""Video data models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class VideoSummary(BaseModel):
    """A single YouTube search hit as shown to the client and the model."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    description: str = ""
    thumbnail_url: str | None = Field(None, alias="thumbnailUrl")
    channel_name: str | None = Field(None, alias="channelName")

    @property
    def url(self) -> str:
        """Watch URL for the video."""
        return f"https://www.youtube.com/watch?v={self.id}"

    def to_payload(self) -> dict[str, Any]:
        """Serialize with the camelCase keys the client expects."""
        return self.model_dump(by_alias=True)


class PlaylistInsertResult(BaseModel):
    """Outcome of adding a video to a playlist."""

    playlist_id: str
    video_id: str
    item: dict[str, Any] = Field(default_factory=dict)
