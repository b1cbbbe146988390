from functools import lru_cache

from pydantic import PositiveInt, RedisDsn, constr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GREETING = "Hello! You can ask your questions here."


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="allow",
    )

    # Telegram settings
    telegram_api_id: PositiveInt
    telegram_api_hash: constr(min_length=1)
    telegram_bot_token: constr(min_length=1)
    session_name: constr(min_length=1) = "topicrelay"

    # Redis settings
    redis_url: RedisDsn = "redis://localhost:6379/0"
    kv_prefix: constr(min_length=1) = "kvstore:"

    # Handler settings
    default_greeting: constr(min_length=1) = DEFAULT_GREETING
    topic_title_template: constr(min_length=1) = "{name}"

    log_level: constr(min_length=1) = "INFO"

    @field_validator("telegram_api_id", mode="before")
    def convert_to_int(cls, v):  # noqa: N805
        if isinstance(v, str):
            # Remove any comments and whitespace
            v = v.split("#")[0].strip()
            return int(v)
        return v

    @field_validator(
        "telegram_api_hash",
        "telegram_bot_token",
        "session_name",
        "kv_prefix",
        "topic_title_template",
        mode="before",
    )
    def clean_string(cls, v):  # noqa: N805
        if isinstance(v, str):
            return v.split("#")[0].strip()
        return v

    @field_validator("topic_title_template")
    def check_title_template(cls, v):  # noqa: N805
        try:
            v.format(name="x", id=0)
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(
                f"topic_title_template may only use {{name}} and {{id}}: {e!r}"
            ) from e
        return v

    @field_validator("log_level", mode="before")
    def normalize_level(cls, v):  # noqa: N805
        if isinstance(v, str):
            return v.split("#")[0].strip().upper()
        return v


def render_topic_title(template: str, name: str | None, user_chat_id: int) -> str:
    """Fill a topic title template, falling back to the user's chat id."""
    title = template.format(name=name or str(user_chat_id), id=user_chat_id).strip()
    # Telegram caps topic titles at 128 characters
    return title[:128] or str(user_chat_id)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
