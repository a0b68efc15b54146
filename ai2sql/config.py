# ai2sql/config.py
# Environment-driven settings shared by the API, auth and access layers
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./ai2sql.db")

SECRET_KEY = os.getenv("SECRET_KEY", "change-me") # set a strong random key in production
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Accounts in this list are treated as superusers regardless of their stored role
SUPERUSER_EMAILS = [
    e.strip().lower()
    for e in os.getenv("SUPERUSER_EMAILS", "admin@ai.ru,admin@example.com").split(",")
    if e.strip()
]

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Defaults for per-user retrieval settings
DEFAULT_RAG_EXAMPLES_COUNT = 3
DEFAULT_DEBUG_MODE = True
DEFAULT_RAG_SIMILARITY_THRESHOLD = 0.40

# sentence-transformers model used to embed example questions for search
EMBEDDING_MODEL_NAME = os.getenv("EMBEDDING_MODEL_NAME", "sentence-transformers/paraphrase-MiniLM-L3-v2")
