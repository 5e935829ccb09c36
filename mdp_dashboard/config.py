from __future__ import annotations

import os
from pathlib import Path


# ----------------------------
# Paths / Config
# ----------------------------
ROOT = Path(__file__).resolve().parent  # this is /mdp_dashboard
DATA_DIR = ROOT.parent / "data"            # this is project-root /data

DATA_FILE = Path(os.environ.get("MDP_DATA_FILE", DATA_DIR / "survey-responses.json"))

LOG_LEVEL = os.environ.get("MDP_LOG_LEVEL", "INFO").upper()

# Submission times are stored in UTC and shown in this zone.
DISPLAY_TIMEZONE = os.environ.get("MDP_DISPLAY_TIMEZONE", "America/Chicago")

STORE_VERSION = "1.0.0"
