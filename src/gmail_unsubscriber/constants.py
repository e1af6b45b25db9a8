"""Constants for Gmail Unsubscriber."""

import os
import re
from pathlib import Path

# --- Config paths ---
CONFIG_DIR = Path(os.environ.get("GMAIL_UNSUBSCRIBER_HOME", Path.home() / ".gmail-unsubscriber"))
CREDENTIALS_PATH = CONFIG_DIR / "credentials.json"
TOKEN_PATH = CONFIG_DIR / "token.json"
TRASH_LOG_PATH = CONFIG_DIR / "trash_log.json"
DATA_DIR = CONFIG_DIR / "data"

# --- Gmail API ---
SCOPES = ["https://www.googleapis.com/auth/gmail.modify"]
BATCH_SIZE = 50  # messages per BatchHttpRequest
PAGE_SIZE = 500  # messages per list page
TRASH_BATCH_SIZE = 1000  # messages per batchModify call

# --- Labels ---
ADMISSION_LABELS = ("UNREAD", "CATEGORY_PROMOTIONS")
DEFAULT_QUERY = "is:unread category:promotions"  # server-side match for ADMISSION_LABELS
SWEEP_LABELS = ("CATEGORY_SOCIAL", "CATEGORY_PROMOTIONS")

# --- Detection ---
LIST_UNSUBSCRIBE_HEADER = "List-Unsubscribe"
HEADER_URL_RE = re.compile(r"<(https?://[^>]+)>", re.IGNORECASE)
HEADER_MAILTO_RE = re.compile(r"<mailto:([^>]+)>", re.IGNORECASE)
UNSUBSCRIBE_KEYWORD_RE = re.compile(r"unsubscribe|optout|opt-out|remove", re.IGNORECASE)
WEB_URL_PREFIXES = ("http://", "https://")

# --- Archive ---
MAX_FILENAME_LENGTH = 120
