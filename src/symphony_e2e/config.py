"""Configuration management using Pydantic settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class HarnessSettings(BaseSettings):
    """Harness settings loaded from SYMPHONY_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SYMPHONY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Where the driven app lives. Empty base_url = serve app_dir ourselves.
    base_url: str = ""
    app_dir: Path = Path("web")

    # Bundled static server
    host: str = "127.0.0.1"
    port: int = 0  # 0 = pick a free port

    # Matrix
    browsers: list[str] = ["chromium", "firefox", "webkit"]
    devices: list[str] = ["desktop", "iphone-12", "pixel-5", "ipad-pro-11"]
    headless: bool = True
    workers: int = 4
    navigation_timeout_ms: int = 30000

    # Results
    results_db: Path = Path("tests/.test-results/results.db")
    report_dir: Path = Path("tests/.test-results/reports")
    screenshot_dir: Path = Path("tests/.test-results/screenshots")


settings = HarnessSettings()
