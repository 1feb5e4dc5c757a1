"""Configuration for the local file source."""

from pathlib import Path

from pydantic import BaseModel


class FileSourceConfig(BaseModel):
    """Configuration for the local file source."""

    path: Path
