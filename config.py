from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PORT: int = 3000
    MONGODB_URI: str = "mongodb://localhost:27017/artemia-shop"
    DATABASE_NAME: str = "artemia-shop"

    UPLOAD_DIR: str = "uploads"
    PUBLIC_DIR: str = "public"

    # Admin gate credentials; an empty password keeps /admin closed
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = ""

    TRACKING_API_URL: str = "https://donhang.ghn.vn/api/v1/tracking"
    TRACKING_API_TOKEN: str = ""

    FETCH_TIMEOUT: float = 10.0
    MAX_FETCH_BYTES: int = 5 * 1024 * 1024

    LOG_LEVEL: str = "INFO"


settings = Settings()
