from __future__ import annotations
from typing import Any, Dict, List, Optional
from pathlib import Path

import yaml
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Annotated
from pydantic import Field
from dotenv import load_dotenv

load_dotenv()


class AuthConfig(BaseModel):
    jwt_secret: Annotated[str, Field(default="change-this-secret-key")]
    jwt_algorithm: Annotated[str, Field(default="HS256")]
    token_expire_hours: Annotated[int, Field(default=24)]
    password_min_length: Annotated[int, Field(default=6)]
    bcrypt_rounds: Annotated[int, Field(default=10)]


class UploadConfig(BaseModel):
    """Uploaded paper storage"""
    upload_dir: Annotated[str, Field(default="uploads/papers")]
    public_prefix: Annotated[str, Field(default="/uploads/papers")]
    max_size_mb: Annotated[int, Field(default=50)]

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_mb * 1024 * 1024


class LLMConfig(BaseModel):
    """Optional LiteLLM settings for recommendation explanations"""
    enabled: Annotated[bool, Field(default=False)]
    model: Annotated[str, Field(default="gpt-4o-mini")]
    api_key: Annotated[Optional[str], Field(default=None)]
    api_base: Annotated[Optional[str], Field(default=None)]
    timeout: Annotated[int, Field(default=30)]


class Settings(BaseSettings):
    app_name: Annotated[str, Field(default="PaperTrove API")]
    env: Annotated[str, Field(default="development")]

    database_url: Annotated[str, Field(default="sqlite:///./papertrove.db")]
    database_echo: Annotated[bool, Field(default=False)]

    cors_origins: Annotated[List[str], Field(default=["http://localhost:5173", "http://127.0.0.1:5173"])]

    log_level: Annotated[str, Field(default="INFO")]
    log_dir: Annotated[str, Field(default="logs")]
    log_file: Annotated[str, Field(default="papertrove.log")]

    default_page_size: Annotated[int, Field(default=20)]

    auth: AuthConfig = Field(default_factory=AuthConfig)
    upload: UploadConfig = Field(default_factory=UploadConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @property
    def is_dev(self) -> bool:
        return self.env == "development"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        def yaml_settings() -> Dict[str, Any]:
            path = Path("settings.yaml")
            if not path.exists():
                return {}
            return yaml.safe_load(path.read_text(encoding="utf-8")) or {}

        return (
            init_settings,
            env_settings,
            dotenv_settings,
            yaml_settings,
            file_secret_settings,
        )


Config = Settings()
