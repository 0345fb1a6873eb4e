"""
Settings models - the Echo personality record and the account profile.

EchoSettingsInput is the full desired record sent on every save: any
field the client leaves out is stored as null.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from echora.core.validators import clean_optional_text, parse_tones


class EchoSettingsInput(BaseModel):
    """
    Request body for PUT /settings.

    Attributes:
        tones: Tone descriptors, as a list or a comma-separated string
        boundaries: Topics and behaviours the Echo must avoid
        base_prompt: The Echo's philosophy / base personality prompt
        safety_rules: Extra safety instructions
        default_reply_style: How replies should be structured
        auto_reply_enabled: Whether the Echo may answer without approval
    """
    tones: Optional[List[str]] = Field(
        default=None,
        description="Tone descriptors, e.g. ['calm', 'direct']",
        examples=[["calm", "direct", "kind"]]
    )
    boundaries: Optional[str] = Field(default=None, max_length=4000)
    base_prompt: Optional[str] = Field(
        default=None,
        max_length=8000,
        description="Philosophy / base personality prompt"
    )
    safety_rules: Optional[str] = Field(default=None, max_length=4000)
    default_reply_style: Optional[str] = Field(default=None, max_length=2000)
    auto_reply_enabled: Optional[bool] = None

    @field_validator("tones", mode="before")
    @classmethod
    def _split_tones(cls, value):
        return parse_tones(value)

    @field_validator("boundaries", "base_prompt", "safety_rules", "default_reply_style", mode="before")
    @classmethod
    def _strip_text(cls, value):
        if isinstance(value, str):
            return clean_optional_text(value)
        return value


class EchoSettings(EchoSettingsInput):
    """A stored settings record."""
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    updated_at: Optional[datetime] = None

    @property
    def tones_label(self) -> str:
        return ", ".join(self.tones or []) or "Not set"


class DashboardResponse(BaseModel):
    """
    Dashboard status.

    configured=False is the normal state of a new account, not an error.
    """
    configured: bool
    tones: List[str] = Field(default_factory=list)
    auto_reply_enabled: bool = False
    has_api_key: bool = False
    memory_count: int = 0


class ApiKeyInput(BaseModel):
    """Request body for PUT /account/api-key."""
    api_key: str = Field(..., min_length=8, max_length=500)

    @field_validator("api_key", mode="before")
    @classmethod
    def _strip_key(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("api_key")
    @classmethod
    def _groq_key_only(cls, value: str) -> str:
        # Completion calls only go to Groq
        if value.startswith("sk-"):
            raise ValueError(
                "This looks like an OpenAI key. ECHORA runs on Groq: paste a Groq API key (it starts with gsk_)."
            )
        return value


class AccountResponse(BaseModel):
    """Account status; the key itself is never returned."""
    email: str
    has_api_key: bool
    api_key_hint: Optional[str] = None
