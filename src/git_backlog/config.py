"""Environment-driven settings for the backlog API."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field


# Any origin may call the API unless CORS_ORIGINS narrows it
DEFAULT_CORS_ORIGINS = ["*"]


class Settings(BaseModel):
    """Runtime settings, read from the environment by ``from_env``."""

    environment: str = Field(default="production", description="Deployment mode, e.g. development or production")
    host: str = Field(default="0.0.0.0", description="Interface uvicorn binds to")
    port: int = Field(default=3000, description="Port uvicorn listens on")
    cors_origins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ORIGINS),
        description="Origins allowed by the CORS middleware",
    )

    @property
    def debug(self) -> bool:
        """Whether error responses may include exception detail."""
        return self.environment.lower() == "development"

    @classmethod
    def from_env(cls, env_file: str | Path | None = ".env") -> "Settings":
        """
        Build settings from the environment.

        Variables in ``env_file`` (relative paths resolve against the working
        directory) are loaded first; variables already set in the process
        environment take precedence. A missing file is ignored.
        """
        if env_file is not None:
            load_dotenv(dotenv_path=env_file)

        origins = os.environ.get("CORS_ORIGINS")
        return cls(
            environment=os.environ.get("GIT_BACKLOG_ENV", "production"),
            host=os.environ.get("HOST", "0.0.0.0"),
            port=int(os.environ.get("PORT", "3000")),
            cors_origins=(
                [o.strip() for o in origins.split(",") if o.strip()]
                if origins
                else list(DEFAULT_CORS_ORIGINS)
            ),
        )
