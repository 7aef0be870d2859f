# quickcourt/config.py

from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./quickcourt.db"

    # Identity provider
    IDP_JWKS_URL: Optional[str] = None
    IDP_JWT_SECRET: str = "change-me-in-production"
    IDP_JWT_ALGORITHMS: str = "HS256"
    IDP_AUDIENCE: Optional[str] = None
    IDP_ISSUER: Optional[str] = None

    # Supabase storage
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_KEY: Optional[str] = None
    SUPABASE_BUCKET: str = "quickcourt"
    MAX_IMAGE_SIZE_MB: int = 5

    # Outbound calls
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0
    UPSTREAM_MAX_RETRIES: int = 3
    UPSTREAM_RETRY_DELAY_SECONDS: float = 0.5

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    FRONTEND_URLS: str = "http://localhost:5173,http://localhost:3000"

    @property
    def allowed_origins(self) -> List[str]:
        urls = self.FRONTEND_URLS.split(",")
        all_urls = []
        for url in urls:
            url = url.strip()
            if url:
                all_urls.append(url)
                if url.startswith("http://") and not url.startswith("http://localhost"):
                    all_urls.append(url.replace("http://", "https://"))
        return all_urls

    @property
    def jwt_algorithms(self) -> List[str]:
        return [alg.strip() for alg in self.IDP_JWT_ALGORITHMS.split(",") if alg.strip()]

    class Config:
        env_file = ".env"

settings = Settings()
