"""Configuration settings for the memberhub backend.

Wraps environment variables and provides defaults.
"""

from typing import Optional

from pydantic import PostgresDsn, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Pydantic settings class.

    Attributes:
    ----------
        PROJECT_NAME (str): The name of the project.
        LOCAL_DEVELOPMENT (bool): Whether the application is running locally.
        ENVIRONMENT (str): The deployment environment (local, dev, test, prod).
        LOG_LEVEL (str): The logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        AUTH_ENABLED (bool): Whether bearer tokens are verified against Auth0.
        AUTH0_DOMAIN (Optional[str]): The Auth0 tenant domain.
        AUTH0_AUDIENCE (Optional[str]): The API audience tokens are issued for.
        AUTH0_CLIENT_ID (Optional[str]): The Auth0 application client id, used for redirects.
        AUTH0_RULE_NAMESPACE (Optional[str]): Namespace prefix of custom claims.
        AUTH0_CALLBACK_URL (Optional[str]): Where Auth0 sends the user after login.
        AUTH0_LOGOUT_REDIRECT_URL (Optional[str]): Where Auth0 sends the user after logout.
        FIRST_SUPERUSER (str): The email address of the first superuser.
        FIRST_SUPERUSER_USERNAME (str): The username of the first superuser.
        EMAIL_ENCRYPTION_KEY (str): Base64 master key for email hashing and encryption.
        POSTGRES_HOST (str): The PostgreSQL server hostname.
        POSTGRES_DB (str): The PostgreSQL database name.
        POSTGRES_USER (str): The PostgreSQL username.
        POSTGRES_PASSWORD (str): The PostgreSQL password.
        SQLALCHEMY_ASYNC_DATABASE_URI (Optional[PostgresDsn]): The SQLAlchemy async database URI.
        RUN_ALEMBIC_MIGRATIONS (bool): Whether to run the alembic migrations on startup.
        INVITATION_EXPIRY_DAYS (int): Lifetime of a pending invitation.
        ADDITIONAL_CORS_ORIGINS (Optional[list[str]]): Additional CORS origins.
    """

    PROJECT_NAME: str = "memberhub"
    LOCAL_DEVELOPMENT: bool = False
    ENVIRONMENT: str = "local"

    LOG_LEVEL: str = "INFO"

    AUTH_ENABLED: bool = False
    AUTH0_DOMAIN: Optional[str] = None
    AUTH0_AUDIENCE: Optional[str] = None
    AUTH0_CLIENT_ID: Optional[str] = None
    AUTH0_RULE_NAMESPACE: Optional[str] = None
    AUTH0_CALLBACK_URL: Optional[str] = None
    AUTH0_LOGOUT_REDIRECT_URL: Optional[str] = None

    FIRST_SUPERUSER: str
    FIRST_SUPERUSER_USERNAME: str = "superuser"

    EMAIL_ENCRYPTION_KEY: str

    POSTGRES_HOST: str = "localhost"
    POSTGRES_DB: str = "memberhub"
    POSTGRES_USER: str = "memberhub"
    POSTGRES_PASSWORD: str = ""
    SQLALCHEMY_ASYNC_DATABASE_URI: Optional[PostgresDsn] = None

    RUN_ALEMBIC_MIGRATIONS: bool = False

    INVITATION_EXPIRY_DAYS: int = 14

    ADDITIONAL_CORS_ORIGINS: Optional[str] = None

    @model_validator(mode="after")
    def validate_auth0_settings(self) -> "Settings":
        """Require the Auth0 tenant settings when AUTH_ENABLED is True.

        Raises:
        ------
            ValueError: If AUTH_ENABLED is True and a required Auth0 setting is empty.
        """
        if not self.AUTH_ENABLED:
            return self
        for field_name in ("AUTH0_DOMAIN", "AUTH0_AUDIENCE", "AUTH0_CLIENT_ID"):
            if not getattr(self, field_name):
                raise ValueError(f"{field_name} must be set when AUTH_ENABLED is True")
        return self

    @field_validator("SQLALCHEMY_ASYNC_DATABASE_URI", mode="before")
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> PostgresDsn:
        """Build the SQLAlchemy database URI.

        Args:
        ----
            v (Optional[str]): The value of the SQLALCHEMY_ASYNC_DATABASE_URI setting.
            info (ValidationInfo): The validation context containing all field values.

        Returns:
        -------
            PostgresDsn: The assembled SQLAlchemy async database URI.

        """
        if isinstance(v, str):
            return v

        return PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=info.data.get("POSTGRES_USER"),
            password=info.data.get("POSTGRES_PASSWORD"),
            host=info.data.get("POSTGRES_HOST", "localhost"),
            path=f"{info.data.get('POSTGRES_DB') or ''}",
        )

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins, the defaults plus ADDITIONAL_CORS_ORIGINS.

        Returns:
            list[str]: The origins, separated by commas or semicolons in the env var.
        """
        origins = ["http://localhost:5173", "http://localhost:8080", "http://localhost:3000"]
        if not self.ADDITIONAL_CORS_ORIGINS:
            return origins
        separator = ";" if ";" in self.ADDITIONAL_CORS_ORIGINS else ","
        origins.extend(
            origin.strip()
            for origin in self.ADDITIONAL_CORS_ORIGINS.split(separator)
            if origin.strip()
        )
        return origins


settings = Settings()
