from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import ArgumentError


class TagSettings(BaseModel):
    extension: str = ".mp3"
    description: str = "Cover"
    picture_type: int = Field(default=3, ge=0, le=20)

    @field_validator("extension")
    @classmethod
    def _dotted_lower(cls, value: str) -> str:
        value = value.strip().lower()
        if not value.startswith("."):
            value = f".{value}"
        return value


class ImageSettings(BaseModel):
    size: int = Field(default=300, gt=0)
    search_steps: int = Field(default=32, gt=0)


class ManifestSettings(BaseModel):
    album_column: str = "Album"
    art_column: str = "Art"
    delimiter: str = Field(default=",", min_length=1, max_length=1)
    encoding: str = "utf-8-sig"


class Settings(BaseModel):
    tags: TagSettings = TagSettings()
    image: ImageSettings = ImageSettings()
    manifest: ManifestSettings = ManifestSettings()

    @classmethod
    def load(cls, path: Path) -> "Settings":
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
        return cls.model_validate(raw)


class RunMode(str, Enum):
    FOLDER = "folder"
    NORMALIZE = "normalize"
    MANIFEST = "manifest"


class RunConfig(BaseModel):
    """Everything one run needs, validated before any file is touched."""

    model_config = ConfigDict(frozen=True)

    mode: RunMode
    folder: Optional[Path] = None
    image: Optional[Path] = None
    manifest: Optional[Path] = None
    settings: Settings = Settings()

    @field_validator("folder", "image", "manifest", mode="before")
    @classmethod
    def _expand_path(cls, value: Optional[str | Path]) -> Optional[Path]:
        if value is None or str(value).strip() == "":
            return None
        return Path(value).expanduser().resolve()

    @model_validator(mode="after")
    def _require_mode_paths(self) -> "RunConfig":
        if self.mode is RunMode.MANIFEST:
            if self.manifest is None:
                raise ValueError("manifest mode requires a manifest path")
        elif self.folder is None or self.image is None:
            raise ValueError(f"{self.mode.value} mode requires an MP3 folder and an art image")
        return self

    @property
    def normalize(self) -> bool:
        return self.mode is not RunMode.FOLDER

    @classmethod
    def build(cls, **values: object) -> "RunConfig":
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            messages = "; ".join(err["msg"] for err in exc.errors())
            raise ArgumentError(messages) from exc


def load_settings(explicit_path: Optional[Path]) -> Settings:
    if explicit_path is None:
        return Settings()
    if not explicit_path.exists():
        raise ArgumentError(f"Config file '{explicit_path}' does not exist", explicit_path)
    try:
        return Settings.load(explicit_path)
    except (yaml.YAMLError, ValidationError) as exc:
        raise ArgumentError(f"Invalid config file '{explicit_path}': {exc}", explicit_path) from exc
