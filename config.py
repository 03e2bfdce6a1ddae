import os
from dotenv import load_dotenv

load_dotenv()


class Defaults:
    AUTHOR = "Unknown Author"
    DIFFICULTY = "Intermediate"
    DIFFICULTY_TIERS = ("Beginner", "Intermediate", "Advanced")


CMS_API_URL = os.getenv("CMS_API_URL", "http://localhost:1337/api")
CMS_API_PATH = os.getenv("CMS_API_PATH", "/api")
CMS_MEDIA_ORIGIN = os.getenv("CMS_MEDIA_ORIGIN", "")
CMS_TIMEOUT = float(os.getenv("CMS_TIMEOUT", "30"))

USER_AGENT = "FarmContent/1.0"

PAGE_SIZE = 10
PUBLICATION_STATE = "live"

HEADING_BASE_LEVEL = 2

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
