"""Centralized constants for the asma engine.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Scheduler (SM-2) ----------
DEFAULT_INTERVAL = 1
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3
LAPSE_INTERVAL_FACTOR = 0.2
# Intervals (days) for the 1st, 2nd and 3rd consecutive correct recall.
GRADUATING_INTERVALS = (1, 3, 7)

# ---------- Stages ----------
LEARNING_THRESHOLD = 2  # consecutive correct needed to leave "learning"
# An item also stays in "learning" until it reaches the last graduating step.
GRADUATED_INTERVAL = GRADUATING_INTERVALS[-1]
MATURE_INTERVAL_DAYS = 21

# ---------- Free-text recall ----------
CORRECT_ANSWER_QUALITY = 4
INCORRECT_ANSWER_QUALITY = 2

# ---------- Session Composer ----------
SECONDS_PER_ITEM = 45
MAX_SESSION_ITEMS = 20
REVIEW_SHARE = 0.7
MAX_NEW_PER_SESSION = 3
REINFORCEMENT_THRESHOLD = 3  # consecutive correct below this is "weak"
REVIEW_BASE_PRIORITY = 8
NEW_PRIORITY = 6
REINFORCEMENT_BASE_PRIORITY = 4
FALLBACK_SECONDS_PER_ITEM = 60
FALLBACK_MAX_ITEMS = 10
DEFAULT_TARGET_DURATION = 900  # 15 minutes

# ---------- Catalog ----------
CATALOG_URL = "https://api.aladhan.com/v1/asmaAlHusna"
REQUEST_TIMEOUT = 10.0
