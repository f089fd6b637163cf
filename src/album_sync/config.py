"""Configuration management for the album-sync application."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from config directory or project root
config_env = Path(__file__).parent.parent.parent / "config" / ".env"
if config_env.exists():
    load_dotenv(config_env)
else:
    # Fallback to .env in the working directory
    load_dotenv()


class Config:
    """Application configuration."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Directory holding one folder per album
        self.root = Path(os.getenv("ALBUM_SYNC_ROOT", str(Path.cwd())))

        # Track files
        self.audio_format = (
            os.getenv("ALBUM_SYNC_AUDIO_FORMAT", "mp3").lower().replace(".", "")
        )

        # State record written into every album folder
        self.state_filename = os.getenv("ALBUM_SYNC_STATE_FILENAME", ".album")

        # Fetch settings
        self.staging_dirname = os.getenv("ALBUM_SYNC_STAGING_DIRNAME", ".sniff")
        self.fetch_timeout = int(os.getenv("ALBUM_SYNC_FETCH_TIMEOUT", "600"))
        self.yt_dlp_bin = os.getenv("ALBUM_SYNC_YT_DLP_BIN", "yt-dlp")
        self.source_template = os.getenv("ALBUM_SYNC_SOURCE_TEMPLATE", "{ident}")

    @property
    def media_extension(self) -> str:
        """File extension of track files, including the dot."""
        return f".{self.audio_format}"

    @property
    def staging_directory(self) -> Path:
        """Folder where the fetcher stages downloads before moving them."""
        return self.root / self.staging_dirname


def get_config() -> Config:
    """Get application configuration."""
    return Config()
