"""Settings and base-schema loading."""

import json
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

from annodoc.errors import BaseSchemaError, ConfigError

DEFAULT_LANGUAGE_TABS = {
    "bash": "Bash",
    "javascript": "Javascript",
    "python": "Python",
}


class DocSettings(BaseModel):
    """Document metadata and generation options."""

    title: str = "API Reference"
    version: str = "1.0.0"
    description: str = ""
    terms_of_service: str = ""
    license: dict | None = None
    contact: dict | None = None
    logo: str = ""
    color: str = "#FFFFFF"
    servers: list[dict] = [{"url": "http://localhost"}]
    security: dict = {}  # securitySchemes
    tag_groups: list[dict] = []
    base_schema: Path | None = None
    language_tabs: dict[str, str] = DEFAULT_LANGUAGE_TABS
    schema_groups: list[str] = []  # groups whose body parameters become component schemas
    default_group: str = "general"
    output: Path = Path("docs")

    @property
    def base_url(self) -> str:
        if self.servers and self.servers[0].get("url"):
            return str(self.servers[0]["url"]).rstrip("/")
        return "http://localhost"


def load_settings(file_path: Path | None = None) -> DocSettings:
    """Load settings from a YAML (or JSON) file.

    A relative base_schema path is resolved against the settings file.
    """
    if file_path is None:
        return DocSettings()

    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot read settings {file_path}: {e}")
    if not isinstance(data, dict):
        raise ConfigError(f"settings {file_path} must be a mapping")

    try:
        settings = DocSettings(**data)
    except ValidationError as e:
        raise ConfigError(f"invalid settings {file_path}: {e}")

    if settings.base_schema is not None and not settings.base_schema.is_absolute():
        settings.base_schema = file_path.parent / settings.base_schema
    return settings


def load_base_schema(file_path: Path) -> dict:
    """Read the user-supplied document that overrides generated output."""
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise BaseSchemaError(f"cannot read base schema {file_path}: {e}")

    try:
        if file_path.suffix in (".yml", ".yaml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise BaseSchemaError(f"invalid base schema {file_path}: {e}")

    if not isinstance(data, dict):
        raise BaseSchemaError(f"base schema {file_path} must be a mapping")
    return data
