from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = Field(default="sqlite+pysqlite:///./dev.db", validation_alias="DATABASE_URL")
    db_auto_create: bool = Field(default=True, validation_alias="DB_AUTO_CREATE")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, validation_alias="LOG_FILE")

    notifications_enabled: bool = Field(default=True, validation_alias="NOTIFICATIONS_ENABLED")

    creator_roles: list[str] = Field(default=["creator", "admin"], validation_alias="CREATOR_ROLES")
    moderator_roles: list[str] = Field(default=["admin", "moderator"], validation_alias="MODERATOR_ROLES")
    admin_role: str = Field(default="admin", validation_alias="ADMIN_ROLE")

    default_author_name: str = Field(default="creator", validation_alias="DEFAULT_AUTHOR_NAME")
    default_ending_title: str = Field(default="The End", validation_alias="DEFAULT_ENDING_TITLE")

    @property
    def DATABASE_URL(self) -> str:  # pragma: no cover
        return self.database_url

    @property
    def DB_AUTO_CREATE(self) -> bool:  # pragma: no cover
        return self.db_auto_create


settings = Settings()
