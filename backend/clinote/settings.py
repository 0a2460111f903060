"""
Application Settings Management

Central configuration for the notes workspace: file locations, storage and
generator backends, logging and timeouts.

IMPORTANT:
- Secrets (the OpenAI key) belong in environment variables, never in code
- Create a .env.local file in the project root for local overrides
- Every field can be overridden with a CLINOTE_ prefixed environment variable
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# backend/clinote/settings.py -> backend/clinote/ -> backend/ -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

ENV_FILE = PROJECT_ROOT / ".env.local"

DEFAULT_NOTE_TITLE = "Untitled Note"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==================== Environment ====================
    # "local-dev" | "test" | "production"
    environment: str = "local-dev"
    debug: bool = False

    # ==================== Paths ====================
    # local-dev: {project_root}/clinote-workspace/
    # production: /app/
    workspace_name: str = "clinote-workspace"
    uploads_subdir: str = "uploads"
    logs_subdir: str = "logs"

    # ==================== Logging ====================
    log_max_bytes: int = 20 * 1024 * 1024  # 20MB
    log_backup_count: int = 5

    # ==================== Persistence ====================
    # "memory": in-process only, lost on restart
    # "redis": shared Redis instance
    storage_type: str = "memory"

    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_index: int = 0
    redis_password: str | None = None
    redis_socket_timeout: int = 5
    redis_socket_connect_timeout: int = 5

    # ==================== Template generation ====================
    # "mock": local section skeleton, no network
    # "openai": OpenAI-compatible chat completions endpoint
    generator_type: str = "mock"
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-3.5-turbo"
    generation_timeout: float = 120

    # ==================== Workspace behaviour ====================
    default_folder_name: str = "My Notes"
    max_concurrent_imports: int = 8

    model_config = SettingsConfigDict(
        env_prefix="CLINOTE_",
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==================== Path helpers ====================

    @classmethod
    def get_project_root(cls) -> Path:
        """Absolute path of the project root."""
        return PROJECT_ROOT

    def is_local_dev(self) -> bool:
        """Check if running in local development mode."""
        return self.environment == "local-dev"

    def get_workspace_root(self) -> Path:
        """
        Workspace root directory.

        - local-dev: {project_root}/clinote-workspace/
        - test/production: /app/
        """
        if self.is_local_dev():
            return self.get_project_root() / self.workspace_name
        return Path("/app")

    def get_uploads_root(self) -> Path:
        """Directory holding previously uploaded note files."""
        uploads = Path(self.uploads_subdir)
        if uploads.is_absolute():
            return uploads
        return self.get_workspace_root() / uploads

    def get_logs_root(self) -> Path:
        """Directory for rotating log files."""
        logs = Path(self.logs_subdir)
        if logs.is_absolute():
            return logs
        return self.get_workspace_root() / logs


settings = Settings()
