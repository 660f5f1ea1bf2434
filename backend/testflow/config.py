from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_env: str = "dev"
    log_level: str = "INFO"

    default_content_type: str = "application/json"
    default_test_name: str = "Playwright Test"
    default_application_name: str = "Web Application"

    swagger_fetch_timeout: float = 30.0

    api_host: str = "127.0.0.1"
    api_port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
