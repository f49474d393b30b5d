# src/pageglot/model.py (App Layer)
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from overlay.translation.languages import is_supported, normalize_language, supported_languages
from retriever.utils.url_utils import UrlUtils


def _validate_http_url(v: Any) -> str:
    if not isinstance(v, str) or not UrlUtils.is_http_url(v):
        raise ValueError("Please enter a valid URL")
    return v.strip()


def _validate_language(v: Any) -> str:
    if not isinstance(v, str) or not is_supported(v):
        raise ValueError(f"Unsupported language. Choose from: {', '.join(supported_languages())}")
    return normalize_language(v)


class UserPreferences(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int = 1
    translation_percentage: int = Field(default=30, ge=0, le=100, alias="translationPercentage")
    last_url: Optional[str] = Field(default=None, alias="lastUrl")
    language: str = "swedish"


class PreferencesUpdate(BaseModel):
    """Partial preferences record; unset fields keep their stored value."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    translation_percentage: Optional[int] = Field(default=None, ge=0, le=100, alias="translationPercentage")
    last_url: Optional[str] = Field(default=None, alias="lastUrl")
    language: Optional[str] = None

    @field_validator("translation_percentage", mode="before")
    @classmethod
    def _check_percentage(cls, v: Any) -> Any:
        # Only lastUrl may be cleared; an omitted field keeps its stored value
        if v is None:
            raise ValueError("translationPercentage cannot be null")
        return v

    @field_validator("last_url", mode="before")
    @classmethod
    def _check_url(cls, v: Any) -> Optional[str]:
        return None if v is None else _validate_http_url(v)

    @field_validator("language", mode="before")
    @classmethod
    def _check_language(cls, v: Any) -> str:
        if v is None:
            raise ValueError("language cannot be null")
        return _validate_language(v)


class TranslationRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = None
    original_text: str = Field(alias="originalText")
    translated_text: str = Field(alias="translatedText")
    url: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="createdAt")


class TranslateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    translation_percentage: int = Field(ge=0, le=100, alias="translationPercentage")
    language: str

    @field_validator("url", mode="before")
    @classmethod
    def _check_url(cls, v: Any) -> str:
        return _validate_http_url(v)

    @field_validator("language", mode="before")
    @classmethod
    def _check_language(cls, v: Any) -> str:
        return _validate_language(v)


class PipelineOutcome(BaseModel):
    html: str
    set_cookies: List[str] = Field(default_factory=list)
    stats: Dict[str, Any] = Field(default_factory=dict)
