from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from ygodeck.models.formats import DeckFormat

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="YGODECK_")

    app_name: str = "ygodeck"
    debug: bool = False

    data_dir: Path = DEFAULT_DATA_DIR

    card_api_url: str = "https://ygocdb.com/api/v0/"
    card_api_timeout: float = 15.0

    # Base URL the download job pulls reference JSON files from.
    # Empty disables the download; the service then only reloads local files.
    reference_data_url: str = ""

    default_format: DeckFormat = DeckFormat.OCG

    # When True, restriction lookups stop after exact key matches
    # and never fall back to substring matching on card names.
    strict_restriction_matching: bool = False

    ydk_comment: str = "#created by ygodeck"


settings = Settings()
