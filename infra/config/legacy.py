import os
from pathlib import Path
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv

load_dotenv()

class FolioConfig(BaseModel):
    amazon_email: str = Field(
        default="",
        description="Reader account email (required for extraction)"
    )

    amazon_password: str = Field(
        default="",
        description="Reader account password (required for extraction)"
    )

    ollama_host: str = Field(
        default="http://127.0.0.1:11434",
        description="Ollama server for local transcription"
    )

    ollama_model: str = Field(
        default="llava:13b",
        description="Vision model served by Ollama"
    )

    openrouter_api_key: str = Field(
        default="",
        description="OpenRouter API key (optional, for hosted transcription)"
    )

    book_storage_root: Path = Field(
        default=Path.home() / "Documents" / "folio",
        description="Root directory for extracted books"
    )

    @field_validator('amazon_email', 'amazon_password', 'openrouter_api_key')
    @classmethod
    def strip_secret(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator('book_storage_root')
    @classmethod
    def validate_storage_root(cls, v: Path) -> Path:
        return Path(v).expanduser().resolve()

    @property
    def has_credentials(self) -> bool:
        return bool(self.amazon_email and self.amazon_password)

    model_config = {
        "frozen": True,
        "validate_assignment": True
    }


def _load_config() -> FolioConfig:
    return FolioConfig(
        amazon_email=os.getenv('AMAZON_EMAIL', ''),
        amazon_password=os.getenv('AMAZON_PASSWORD', ''),
        ollama_host=os.getenv('OLLAMA_HOST', 'http://127.0.0.1:11434'),
        ollama_model=os.getenv('OLLAMA_MODEL', 'llava:13b'),
        openrouter_api_key=os.getenv('OPENROUTER_API_KEY', ''),
        book_storage_root=Path(os.getenv('FOLIO_STORAGE_ROOT', '~/Documents/folio')),
    )

Config = _load_config()
