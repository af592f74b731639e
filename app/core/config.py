import os
from dataclasses import dataclass, replace

from dotenv import load_dotenv

DEFAULT_JWT_SECRET = "school-website-jwt-secret"

DEFAULT_ALLOWED_FILE_TYPES = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "application/pdf",
)


def _split(value: str | None, default: tuple) -> tuple:
    if not value:
        return default
    return tuple(v.strip() for v in value.split(",") if v.strip())


def _flag(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Application settings, built once at startup and passed to create_app."""

    environment: str = "development"
    database_url: str = "sqlite:///./school.db"

    # -------- AUTH --------
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # -------- UPLOADS --------
    max_file_size: int = 5 * 1024 * 1024
    allowed_file_types: tuple = DEFAULT_ALLOWED_FILE_TYPES
    storage_backend: str = "local"  # local | cloudinary
    upload_dir: str = "uploads"
    upload_timeout: int = 30

    cloudinary_cloud_name: str | None = None
    cloudinary_api_key: str | None = None
    cloudinary_api_secret: str | None = None
    cloudinary_folder: str = "school-website"

    # -------- HTTP / LOGGING --------
    cors_origins: tuple = ("http://localhost:3000", "http://localhost:5000")
    log_dir: str = "logs"
    log_level: str = "INFO"
    auto_create_tables: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls, env_file: str | None = None) -> "Settings":
        """Read settings from the process environment (and .env if present)."""
        load_dotenv(env_file)

        return cls(
            environment=os.getenv("ENVIRONMENT", "development"),
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            jwt_secret=os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
            access_token_expire_minutes=int(
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24)
            ),
            max_file_size=int(os.getenv("MAX_FILE_SIZE", 5 * 1024 * 1024)),
            allowed_file_types=_split(
                os.getenv("ALLOWED_FILE_TYPES"), DEFAULT_ALLOWED_FILE_TYPES
            ),
            storage_backend=os.getenv("STORAGE_BACKEND", "local").lower(),
            upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
            upload_timeout=int(os.getenv("UPLOAD_TIMEOUT", 30)),
            cloudinary_cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME"),
            cloudinary_api_key=os.getenv("CLOUDINARY_API_KEY"),
            cloudinary_api_secret=os.getenv("CLOUDINARY_API_SECRET"),
            cloudinary_folder=os.getenv("CLOUDINARY_FOLDER", "school-website"),
            cors_origins=_split(os.getenv("CORS_ORIGINS"), cls.cors_origins),
            log_dir=os.getenv("LOG_DIR", "logs"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            auto_create_tables=_flag(os.getenv("AUTO_CREATE_TABLES"), True),
        )

    def with_overrides(self, **changes) -> "Settings":
        return replace(self, **changes)

    def check(self) -> list[str]:
        """
        Validate settings that cannot be fixed at runtime.
        Returns a list of warnings; raises RuntimeError for fatal problems.
        """
        warnings = []

        if not self.database_url:
            raise RuntimeError("DATABASE_URL environment variable not found!")

        if self.storage_backend not in ("local", "cloudinary"):
            raise RuntimeError(
                f"Unknown STORAGE_BACKEND '{self.storage_backend}' (use local or cloudinary)"
            )

        if self.storage_backend == "cloudinary" and not all(
            (self.cloudinary_cloud_name, self.cloudinary_api_key, self.cloudinary_api_secret)
        ):
            raise RuntimeError("Cloudinary storage selected but credentials are missing")

        if self.is_production and self.jwt_secret == DEFAULT_JWT_SECRET:
            warnings.append(
                "Using default JWT secret in production. Please set JWT_SECRET."
            )

        return warnings
