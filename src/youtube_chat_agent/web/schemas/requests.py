"""Request and response schemas for the API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChatRequest(BaseModel):
    """Request body for the chat endpoint."""

    message: str = Field(
        ...,
        description="Natural language message for the agent",
    )

    model_config = ConfigDict(strict=True)


class ChatReply(BaseModel):
    """Response body for the chat endpoint."""

    reply: str
    videos: list[dict[str, Any]] = Field(default_factory=list)


class VideoActionRequest(BaseModel):
    """Request body for actions on a single video."""

    model_config = ConfigDict(populate_by_name=True)

    video_id: str = Field(..., alias="videoId", min_length=1)

    @field_validator("video_id")
    @classmethod
    def validate_video_id(cls, v: str) -> str:
        """Reject blank video ids."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("videoId cannot be blank")
        return stripped


class PlaylistAddRequest(VideoActionRequest):
    """Request body for adding a video to a given playlist."""

    playlist_id: str = Field(..., alias="playlistId", min_length=1)
