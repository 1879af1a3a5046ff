import os

APP_TITLE = os.environ.get("APP_TITLE", "TaskTracker")

# JSON documents (users, tasks, sessions, lastIDs) live here
DATA_DIR = os.environ.get("DATA_DIR", "./data")

SESSION_TTL_HOURS = float(os.environ.get("SESSION_TTL_HOURS", 24))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
LOG_FILE = os.environ.get("LOG_FILE")
