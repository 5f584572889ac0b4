"""Application configuration. Loads from environment and .env file."""
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
# Load .env from cwd, then backend/.env, then project root .env
load_dotenv()
load_dotenv(BASE_DIR / ".env")
load_dotenv(BASE_DIR.parent / ".env")

# Server (for uvicorn). "::" listens on IPv6 and, on dual-stack hosts, IPv4 too.
HOST = os.getenv("HOST", "::")
PORT = int(os.getenv("PORT", "8080"))

# Limits (env)
MAX_BODY_SIZE_MB = int(os.getenv("MAX_BODY_SIZE_MB", "100"))
MAX_BODY_SIZE_BYTES = MAX_BODY_SIZE_MB * 1024 * 1024

# Concurrency: transcoding runs on this many worker threads, never on the event loop
MAX_WORKERS = int(os.getenv("MAX_WORKERS", str(min(32, (os.cpu_count() or 4) + 4))))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("converter")
