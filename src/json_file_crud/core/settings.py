import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables from .env if present.
load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Process-wide defaults loaded from environment variables."""

    id_field: str
    auto_id: bool
    unique_fields: list[str]
    json_indent: int


def _parse_csv(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def _parse_bool(value: str, default: bool) -> bool:
    value = value.strip().lower()
    if not value:
        return default
    return value not in ("0", "false", "no", "off")


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return strongly-typed settings for new stores."""
    id_field = os.getenv("JSON_CRUD_ID_FIELD", "id")
    auto_id = os.getenv("JSON_CRUD_AUTO_ID", "true")
    unique = os.getenv("JSON_CRUD_UNIQUE_FIELDS", "")
    indent = int(os.getenv("JSON_CRUD_INDENT", "2"))
    return Settings(
        id_field=id_field.strip() or "id",
        auto_id=_parse_bool(auto_id, default=True),
        unique_fields=_parse_csv(unique),
        json_indent=indent,
    )
