import os

from dotenv import load_dotenv

load_dotenv()


# Reddit public JSON endpoints (non-official, no OAuth)
REDDIT_BASE_URL = os.getenv("REDDIT_BASE_URL", "https://www.reddit.com").rstrip("/")
REDDIT_USER_AGENT = os.getenv(
    "REDDIT_USER_AGENT",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
)
# Reddit caps a listing page at 100 things
REDDIT_LISTING_LIMIT = int(os.getenv("REDDIT_LISTING_LIMIT", "100"))

# Rate limiting (dispatch interval seconds) and request robustness
MIN_REQUEST_INTERVAL = float(os.getenv("MIN_REQUEST_INTERVAL", "1.0"))
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))
REQUEST_RETRIES = int(os.getenv("REQUEST_RETRIES", "3"))

# Command line defaults
DEFAULT_POSTS = int(os.getenv("DEFAULT_POSTS", "10"))
EBOOK_CONVERT_PATH = os.getenv("EBOOK_CONVERT_PATH", "/usr/bin/ebook-convert")
CONVERTER_ARGS = os.getenv(
    "CONVERTER_ARGS",
    '--chapter "//h:h1" --smarten-punctuation --markdown-extensions meta',
)
# 0 = wait for the converter forever
CONVERTER_TIMEOUT = float(os.getenv("CONVERTER_TIMEOUT", "0"))

MARKDOWN_EXTENSION = ".md"
