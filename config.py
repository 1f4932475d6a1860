"""
Settings read from the environment (.env is loaded here once).
"""

import os

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# FLASK
# =============================================================================

SECRET_KEY = os.getenv("SECRET_KEY")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///calendar.db")

# =============================================================================
# CALENDAR
# =============================================================================

# IANA zone name for the local calendar day, e.g. "Asia/Tokyo".
# Empty means the machine's own zone.
CALENDAR_TZ = os.getenv("CALENDAR_TZ", "")

# First column of the month grid. 0: Monday ... 6: Sunday
WEEK_START = int(os.getenv("WEEK_START", "0")) % 7
