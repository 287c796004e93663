import os

from regionperf import __version__


class Settings:
    # API Settings
    PROJECT_NAME: str = "Region Performance Dashboard"
    VERSION: str = __version__
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", 8006))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Deployment Settings
    REGION: str = os.getenv("VERCEL_REGION", "development")
    DEPLOYMENT: str = os.getenv("VERCEL_GIT_COMMIT_SHA", "local")

    # Metrics Settings
    METRICS_STORE_KEY: str = os.getenv("METRICS_STORE_KEY", "performance-metrics")
    METRICS_AUTOLOAD: bool = os.getenv("METRICS_AUTOLOAD", "true").lower() == "true"
    METRICS_AUTOSAVE: bool = os.getenv("METRICS_AUTOSAVE", "true").lower() == "true"

    # Probe Settings
    PROBE_TARGET_URL: str = os.getenv("PROBE_TARGET_URL", "http://localhost:3000")
    PROBE_TIMEOUT_S: float = float(os.getenv("PROBE_TIMEOUT_S", 10))


settings = Settings()
