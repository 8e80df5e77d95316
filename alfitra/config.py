"""
Configuration module for the application.
All configuration values are read from environment variables
(a .env file is loaded by the application factory).
"""
import os
import secrets
import warnings


def _env_bool(name: str, default: str = "") -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        # Flask Configuration
        self.SECRET_KEY: str = os.getenv("SECRET_KEY", "")
        self.FLASK_ENV: str = os.getenv("FLASK_ENV", "")
        self.FLASK_DEBUG: bool = _env_bool("FLASK_DEBUG")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Generate a development SECRET_KEY if not set and in development mode
        if not self.SECRET_KEY and self.FLASK_ENV != "production":
            self.SECRET_KEY = secrets.token_urlsafe(32)
            warnings.warn(
                "SECRET_KEY not set. Generated a temporary key for development. "
                "Set SECRET_KEY in your .env file for production!",
                UserWarning
            )

        # Database Configuration
        # DATABASE_URL wins; otherwise the DB_* parts build a MySQL URI
        self.DATABASE_URL: str = os.getenv("DATABASE_URL", "")
        self.DB_USER: str = os.getenv("DB_USER", "")
        self.DB_PASSWORD: str = os.getenv("DB_PASSWORD", "")
        self.DB_HOST: str = os.getenv("DB_HOST", "")
        self.DB_PORT: str = os.getenv("DB_PORT", "3306")
        self.DB_NAME: str = os.getenv("DB_NAME", "")
        self.SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
        self.SQLALCHEMY_ECHO: bool = _env_bool("SQLALCHEMY_ECHO")

        # API Configuration
        self.API_PREFIX: str = os.getenv("API_PREFIX", "/api").rstrip("/")
        self.AUTH_API_PREFIX: str = f"{self.API_PREFIX}/auth"
        self.ADMIN_API_PREFIX: str = f"{self.API_PREFIX}/admin"
        cors_origins = os.getenv("CORS_ORIGINS", "")
        self.CORS_ORIGINS: list[str] = [o.strip() for o in cors_origins.split(",") if o.strip()]

        # Token Configuration
        self.JWT_SECRET: str = os.getenv("JWT_SECRET", "") or self.SECRET_KEY
        self.JWT_ALGORITHM: str = "HS256"
        self.TOKEN_EXPIRY_DAYS: int = int(os.getenv("TOKEN_EXPIRY_DAYS", "7"))

        # Password Configuration
        self.BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "10"))
        self.MIN_PASSWORD_LENGTH: int = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))

        # Object Storage (Cloudinary)
        self.CLOUDINARY_CLOUD_NAME: str = os.getenv("CLOUDINARY_CLOUD_NAME", "")
        self.CLOUDINARY_API_KEY: str = os.getenv("CLOUDINARY_API_KEY", "")
        self.CLOUDINARY_API_SECRET: str = os.getenv("CLOUDINARY_API_SECRET", "")
        self.STORAGE_FOLDER: str = os.getenv("STORAGE_FOLDER", "quiz-references")
        self.STORAGE_DOMAIN: str = os.getenv("STORAGE_DOMAIN", "cloudinary.com")
        self.STORAGE_HTTP_TIMEOUT: int = int(os.getenv("STORAGE_HTTP_TIMEOUT", "30"))

        # File Upload Configuration
        self.MAX_UPLOAD_SIZE: int = int(os.getenv("MAX_UPLOAD_SIZE", "20971520"))  # 20MB

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Database URI: DATABASE_URL, then MySQL from DB_*, then a local SQLite file."""
        uri = self.DATABASE_URL
        if not uri and self.DB_HOST:
            uri = f"mysql+pymysql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        if not uri:
            uri = "sqlite:///alfitra.db"
        if uri.startswith("postgres://"):
            uri = uri.replace("postgres://", "postgresql://", 1)
        return uri

    @property
    def storage_configured(self) -> bool:
        return bool(self.CLOUDINARY_CLOUD_NAME and self.CLOUDINARY_API_KEY and self.CLOUDINARY_API_SECRET)

    def reload(self) -> None:
        """Re-read every value from the environment in place."""
        self.__init__()

    def validate(self) -> None:
        """
        Validate required configuration values.
        Only enforces SECRET_KEY in production environment.
        """
        if not self.SECRET_KEY and self.FLASK_ENV == "production":
            raise ValueError(
                "SECRET_KEY environment variable is required in production. "
                "Set it in your .env file or environment variables."
            )


# Global config instance - re-initialized by create_app() after load_dotenv()
config = Config()
