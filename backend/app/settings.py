from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
	# Partition files live at <data_dir>/<module>/lvl<n>.json
	data_dir: Path = Field(default=Path("./data"), validation_alias="DATA_DIR")
	# CEFR reference lists (a1.json .. b2.json); defaults to <data_dir>/wordlists/cefr
	wordlist_dir: Path | None = Field(default=None, validation_alias="WORDLIST_DIR")
	default_level: int = Field(default=1, ge=1, le=4, validation_alias="DEFAULT_LEVEL")
	max_level: int = Field(default=4, ge=1, le=4, validation_alias="MAX_LEVEL")

	# Auth configuration; admin endpoints are open while no admin user is set
	jwt_secret_key: str = Field(default="change-me", validation_alias="JWT_SECRET_KEY")
	jwt_algorithm: str = Field(default="HS256", validation_alias="JWT_ALGORITHM")
	access_token_expire_minutes: int = Field(default=120, validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES")
	admin_username: str | None = Field(default=None, validation_alias="ADMIN_USERNAME")
	admin_password: str | None = Field(default=None, validation_alias="ADMIN_PASSWORD")

	# Database (import history and auth sessions)
	database_url: str | None = Field(default=None, validation_alias="DATABASE_URL")
	import_history_days: int = Field(default=7, validation_alias="IMPORT_HISTORY_DAYS")

	log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

	# pydantic-settings v2 style config
	model_config = SettingsConfigDict(env_file=".env", extra="ignore")

	@property
	def resolved_wordlist_dir(self) -> Path:
		return self.wordlist_dir or self.data_dir / "wordlists" / "cefr"

	@property
	def admin_auth_enabled(self) -> bool:
		return bool(self.admin_username and self.admin_password)

settings = Settings()
