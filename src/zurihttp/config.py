from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    LOG_LEVEL: str = "WARNING"

    class Config:
        env_prefix = "ZURIHTTP_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

settings = Settings()
