import os

# Base directory
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Paths
DATA_DIR = os.path.join(BASE_DIR, "data")
LOG_FILE = os.path.join(BASE_DIR, "launch.log")
QUESTIONS_FILE = os.getenv("QUIZ_QUESTIONS_FILE", os.path.join(DATA_DIR, "questions.json"))
STATE_DIR = os.getenv("QUIZ_STATE_DIR", os.path.join(BASE_DIR, ".quiz_state"))

# Server
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("PORT", "8000"))
SESSION_TTL = 3600  # 1 hour

# Quiz defaults
STORAGE_KEY = "quiz_state_v1"
DEFAULT_TITLE = "Quiz"
DEFAULT_PASS_THRESHOLD = 0.7
TICK_INTERVAL_SEC = 1.0
