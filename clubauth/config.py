"""
Application configuration settings loaded from environment variables.
Uses pydantic_settings for validation and type conversion.
"""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings class with environment variable validation.

    Attributes:
        database_url: SQLAlchemy connection string for the student directory
        secret_key: Secret key for JWT token signing
        algorithm: Algorithm used for JWT signing (typically HS256)
        access_token_expire_minutes: Session token lifetime in minutes
        verification_token_expire_minutes: Email verification link lifetime in minutes

        # Email settings
        email_postback_url: Base URL embedded in verification links
        mail_username: SMTP server username
        mail_password: SMTP server password
        mail_from: Sender email address
        mail_server: SMTP server hostname
        mail_port: SMTP server port
        mail_starttls: Whether to use STARTTLS
        mail_timeout: SMTP connection timeout in seconds
    """
    # Database settings
    database_url: str = "sqlite:///./clubauth.db"

    # JWT settings
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    verification_token_expire_minutes: int = 15

    # Email settings
    email_postback_url: str = "http://localhost:8000"
    mail_username: Optional[str] = None
    mail_password: Optional[str] = None
    mail_from: Optional[str] = None
    mail_server: Optional[str] = None
    mail_port: int = 587
    mail_starttls: bool = True
    mail_timeout: int = 30

    # Configuration for environment variables loading
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)


@lru_cache
def get_settings() -> Settings:
    """
    Settings dependency - returns the process-wide settings instance.

    Cached so the environment is read once; tests override this dependency
    or construct Settings directly.
    """
    return Settings()
