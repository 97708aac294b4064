import os

from dotenv import load_dotenv

load_dotenv()

IGDB_CLIENT_ID = os.getenv("IGDB_CLIENT_ID", "")
IGDB_CLIENT_SECRET = os.getenv("IGDB_CLIENT_SECRET", "")
DATABASE_PATH = os.getenv("DATABASE_PATH", "./data/catalog.db")
TOKEN_NAMESPACE = os.getenv("TOKEN_NAMESPACE", "igdb")
LISTING_LIMIT = int(os.getenv("LISTING_LIMIT", "100"))
REQUESTS_PER_SECOND = float(os.getenv("REQUESTS_PER_SECOND", "4"))  # upstream allows 4/s
MAX_RETRIES = int(os.getenv("MAX_RETRIES", "3"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
