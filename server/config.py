import os

# Database connection
MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "blockexam")

# Server
PORT = int(os.getenv("PORT", 3001))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# Listing defaults
DEFAULT_PAGE_LIMIT = 10
RECENT_LIMIT = 20
