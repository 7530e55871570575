"""Entry point for the YouTube chat agent server."""

import logging

import uvicorn

from youtube_chat_agent.config.settings import get_settings
from youtube_chat_agent.web.app import create_app

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.api_debug else logging.INFO,
    format="%(asctime)s - youtube-chat-agent - %(name)s - %(levelname)s - %(message)s",
)
# discovery client logs every cache miss at INFO
logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)

app = create_app()


def main() -> None:
    """Run the API server."""
    uvicorn.run(
        "youtube_chat_agent.web.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
        log_level="debug" if settings.api_debug else "info",
    )


if __name__ == "__main__":
    main()
