# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKTIMER_APP_NAME": "App name shown in notifications (default: task_timer).",
    "TASKTIMER_LOG_LEVEL": "Console logging level (default: INFO).",
    # Paths
    "TASKTIMER_DATA_DIR": "Local data dir for the database and logs (default: .local/task_timer).",
    "TASKTIMER_DB_PATH": "SQLite file holding tasks and statuses (default: <DATA_DIR>/task_timer.sqlite3).",
    # Countdown
    "TASKTIMER_TICK_SECONDS": "Seconds per countdown tick; one tick = one minute of task time (default: 60).",
    # Notifications
    "TASKTIMER_NOTIFICATIONS_ENABLED": "Desktop notifications on expiry (true/false, default: true).",
    "TASKTIMER_NOTIFY_TIMEOUT": "Seconds a desktop notification stays visible (default: 10).",
}
