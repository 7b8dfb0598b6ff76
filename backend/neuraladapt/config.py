import os
from dotenv import load_dotenv

load_dotenv(override=False)

SQLALCHEMY_DATABASE_URL = os.getenv("SQLALCHEMY_DATABASE_URL", "sqlite:///./neuraladapt.db")

# Single-user app: every record is owned by this id
DEFAULT_USER_ID = os.getenv("DEFAULT_USER_ID", "demo-user")

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")

# LLM Selection Configuration
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai").lower()  # Options: openai, openrouter, ollama
LLM_API_KEY = os.getenv("LLM_API_KEY") or OPENAI_API_KEY
LLM_MODEL = os.getenv("LLM_MODEL")  # Optional override
OLLAMA_URL = os.getenv("OLLAMA_URL", "http://localhost:11434")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.2"))
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "120"))

# Daily spend ceiling for generation calls, in cents
OPENAI_MAX_DAILY_CENTS = int(os.getenv("OPENAI_MAX_DAILY_CENTS", "800"))
ESTIMATED_CALL_CENTS = int(os.getenv("ESTIMATED_CALL_CENTS", "2"))

ARTIFACT_DIR = os.getenv("ARTIFACT_DIR", os.path.join("storage", "artifacts"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LANGFUSE_PUBLIC_KEY = os.getenv("LANGFUSE_PUBLIC_KEY")
LANGFUSE_SECRET_KEY = os.getenv("LANGFUSE_SECRET_KEY")
LANGFUSE_ENABLED = bool(LANGFUSE_PUBLIC_KEY and LANGFUSE_SECRET_KEY)
