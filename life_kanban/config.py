import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./kanban.db")

JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
SESSION_TTL_DAYS = int(os.getenv("SESSION_TTL_DAYS", "7"))
SESSION_COOKIE = os.getenv("SESSION_COOKIE", "token")
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() in ("1", "true", "yes")

# never below 10 rounds
BCRYPT_ROUNDS = max(10, int(os.getenv("BCRYPT_ROUNDS", "10")))

CLIENT_ORIGIN = os.getenv("CLIENT_ORIGIN", "http://localhost:5173")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

API_URL = os.getenv("API_URL", "http://localhost:8000")
