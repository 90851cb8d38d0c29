"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field

from podthread.core.models import ThreadOptions


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "PODTHREAD_"


class Settings(BaseModel):
    app_name:       str = "pod2thread"
    contents:       bool = Field(default=False, description="Emit a table of contents")
    navbar:         bool = Field(default=False, description="Emit a navigation bar")
    style:          str = Field(default="", description="Style sheet for the \\heading macro")
    title:          Optional[str] = Field(default=None, description="Page title overriding NAME")
    id:             Optional[str] = Field(default=None, description="Document identifier for \\id[]")
    prescan:        bool = Field(default=False, description="Pre-scan headings so links can point forward")
    accept_targets: list[str] = Field(default_factory=lambda: ["thread"], description="=begin/=for targets passed through")
    log_level:      str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    def thread_options(self) -> ThreadOptions:
        return ThreadOptions(
            contents=self.contents, navbar=self.navbar, style=self.style, title=self.title, id=self.id,
        )


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then PODTHREAD_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val.split(",") if name == "accept_targets" else val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except ValueError as e:
        raise ValueError(f"Invalid settings: {e}") from e
