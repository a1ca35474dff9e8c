import os

from dotenv import load_dotenv

load_dotenv()

BOARD_SIZE = int(os.getenv("BOARD_SIZE", "20"))
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "100"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:5174").split(",")
    if o.strip()
]
