import os
from dotenv import load_dotenv
load_dotenv()

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///evalu8.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # empty REDIS_URL disables redis: turn locks are process-local and jobs run inline
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # JSON API only; forms are fed from request bodies
    WTF_CSRF_ENABLED = False

    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    OPENAI_BASE_URL = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-5-mini")
    OPENAI_MAX_TOKENS = int(os.getenv("OPENAI_MAX_TOKENS", "8192"))
    OPENAI_TIMEOUT = float(os.getenv("OPENAI_TIMEOUT", "60"))

    JOB_TIME_LIMIT_MIN = int(os.getenv("JOB_TIME_LIMIT_MIN", "5"))
    JOB_TIME_LIMIT_MAX = int(os.getenv("JOB_TIME_LIMIT_MAX", "120"))
    JOB_NUM_QUESTIONS_MIN = int(os.getenv("JOB_NUM_QUESTIONS_MIN", "1"))
    JOB_NUM_QUESTIONS_MAX = int(os.getenv("JOB_NUM_QUESTIONS_MAX", "20"))

    # seconds a turn lock may be held before redis expires it
    TURN_LOCK_TTL = int(os.getenv("TURN_LOCK_TTL", "180"))
