"""
Centralised application settings loaded from environment variables.
Uses pydantic-settings so every value can be overridden via env vars or a .env file.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration."""

    # ── Credentials (both required at request time) ────────
    github_pat: str = ""
    google_api_key: str = ""

    # ── Inference API (Gemini, OpenAI-compatible endpoint) ──
    llm_model: str = "gemini-1.5-flash-latest"
    llm_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 8192

    # ── GitHub ──────────────────────────────────────────────
    github_api_base: str = "https://api.github.com"
    manifest_path: str = "package.json"

    # ── Context limits ──────────────────────────────────────
    max_dependencies: int = 10

    # ── Server ──────────────────────────────────────────────
    log_level: str = "info"

    model_config = {"env_prefix": "", "env_file": ".env", "env_file_encoding": "utf-8"}

    def missing_credentials(self) -> list[str]:
        """Names of required secrets that are unset or empty."""
        missing = []
        if not self.github_pat:
            missing.append("GITHUB_PAT")
        if not self.google_api_key:
            missing.append("GOOGLE_API_KEY")
        return missing


# Singleton used across the app
settings = Settings()
