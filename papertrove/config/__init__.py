from .config import Config, Settings, AuthConfig, UploadConfig, LLMConfig

__all__ = [
    "Config",
    "Settings",
    "AuthConfig",
    "UploadConfig",
    "LLMConfig",
]
