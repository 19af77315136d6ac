# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real tokens; keep them in .env (local, gitignored).

This file lists every variable read by taskflow.config.Settings.
"""

ENV_VARS = {
    # App / logging
    "TASKFLOW_APP_NAME": "App display name (default: taskflow).",
    "TASKFLOW_LOG_LEVEL": "Console logging level (default: WARNING). The log file always gets DEBUG.",
    # Task store
    "TASKFLOW_API_URL": (
        "Base URL of the task API (default: http://localhost:8080/api). "
        "Falls back to NEXT_PUBLIC_API_URL when unset."
    ),
    "TASKFLOW_API_TOKEN": "Bearer token sent with every request (or use /login in the console).",
    "TASKFLOW_REQUEST_TIMEOUT_SECONDS": "Per-request timeout in seconds (default: 10, minimum 1).",
    "TASKFLOW_OFFLINE": "Use the in-memory task store instead of the API (true/false).",
    # Paths (gitignored)
    "TASKFLOW_DATA_DIR": "Local data directory for logs (default: .local/taskflow).",
}
