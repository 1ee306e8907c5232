import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    MONGO_URI = data.get("MONGO_URI", "mongodb://localhost:27017")
    MAIN_DB_NAME = data.get("MAIN_DB_NAME", "space_together")
    SCHOOL_DB_PREFIX = data.get("SCHOOL_DB_PREFIX", "school_")
    STORE_TIMEOUT_MS = int(data.get("STORE_TIMEOUT_MS", 5000))
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    SCHOOL_SECRET = data.get("SCHOOL_SECRET", "dev-school-secret-change-in-production")
    SCHOOL_TOKEN_TTL_HOURS = int(data.get("SCHOOL_TOKEN_TTL_HOURS", 24))
    JOIN_REQUEST_TTL_DAYS = int(data.get("JOIN_REQUEST_TTL_DAYS", 7))
    JOIN_REQUEST_TTL_INDEX = bool(data.get("JOIN_REQUEST_TTL_INDEX", False))
    EVENT_QUEUE_SIZE = int(data.get("EVENT_QUEUE_SIZE", 100))
    DEFAULT_PAGE_LIMIT = int(data.get("DEFAULT_PAGE_LIMIT", 50))
