import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    def __init__(self):
        # Database
        self.POSTGRES_CONNECTION_STRING: str = os.getenv("POSTGRES_CONNECTION_STRING", "")
        self.CREATE_TABLES: bool = os.getenv("CREATE_TABLES", "true").lower() in ("1", "true", "yes")

        # Object storage
        self.STORAGE_URL: str = os.getenv("STORAGE_URL", "").rstrip("/")
        self.STORAGE_KEY: str = os.getenv("STORAGE_KEY", "")
        self.PROFILE_IMAGES_BUCKET: str = os.getenv("PROFILE_IMAGES_BUCKET", "profile-images")

        # Uploads
        self.UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", os.path.join("uploads", "profile_images"))
        self.MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))

        # Logging
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def DATABASE_URL(self) -> str:
        """Async URL for the application"""
        url = self.POSTGRES_CONNECTION_STRING
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url
