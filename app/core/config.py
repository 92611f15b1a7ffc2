from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    DATABASE_URL: str = "sqlite:///./inventory.db"
    ERROR_REPORT_DIR: str = "tmp/error_reports"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"  # plain | json
    AUTO_CREATE_TABLES: bool = True

settings = Settings()
