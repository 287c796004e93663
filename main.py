"""
Region Performance Dashboard API Server

Measures latency of page loads, server actions and API routes so the same
deployment can be compared across regions.

Environment Variables:
    VERCEL_REGION: Region label attached to measurements (default: development)
    VERCEL_GIT_COMMIT_SHA: Deployment identifier (default: local)
    DATABASE_URL: SQLAlchemy URL for the metrics store (default: sqlite:///config/regionperf.db)
    METRICS_STORE_KEY: Store key for the saved history (default: performance-metrics)
    METRICS_AUTOLOAD: Restore the saved history on startup (default: true)
    METRICS_AUTOSAVE: Save after every change (default: true)
    PROBE_TARGET_URL: Deployment probed by POST /api/v1/probes/run (default: http://localhost:3000)
    HOST: Server host address (default: 0.0.0.0)
    PORT: Server port (default: 8006)
    DEBUG: Enable debug mode with auto-reload (default: false)

CLI Usage:
    python main.py

    # Tag measurements with a region
    VERCEL_REGION=fra1 python main.py
"""

import uvicorn

from regionperf.core.config import settings

if __name__ == "__main__":
    # Get configuration from settings
    port = settings.PORT
    host = settings.HOST

    print(f"Starting {settings.PROJECT_NAME} on {host}:{port}")
    print(f"Region: {settings.REGION} (deployment {settings.DEPLOYMENT})")

    # If reload is enabled, restrict watch scope to backend code only.
    reload_enabled = bool(settings.DEBUG)
    reload_dirs = None
    if reload_enabled:
        from pathlib import Path

        repo_root = Path(__file__).resolve().parent
        reload_dirs = [str(repo_root / "regionperf")]

    uvicorn.run(
        "regionperf.app:app",
        host=host,
        port=port,
        reload=reload_enabled,
        reload_dirs=reload_dirs,
    )
