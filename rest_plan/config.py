"""
Centralized configuration for rest-plan.

All magic values, default URLs, and constants in one place.
Supports environment variable overrides for deployment flexibility.
"""

from __future__ import annotations

import os
import re

# -----------------------------------------------------------------------------
# Path Templates
# -----------------------------------------------------------------------------

# {token}: non-greedy, no nested braces
PATH_PLACEHOLDER_PATTERN = re.compile(r"\{([^{}]+?)\}")

# -----------------------------------------------------------------------------
# HTTP Configuration
# -----------------------------------------------------------------------------

HTTP_ERROR_THRESHOLD = 400
HTTP_TIMEOUT_SECONDS = float(os.environ.get("REST_PLAN_HTTP_TIMEOUT", "30.0"))

USER_AGENT = os.environ.get("REST_PLAN_USER_AGENT", "rest-plan/0.1.0")

# -----------------------------------------------------------------------------
# Sample API Base URLs
# -----------------------------------------------------------------------------

JSONPLACEHOLDER_BASE_URL = os.environ.get(
    "JSONPLACEHOLDER_BASE_URL",
    "https://jsonplaceholder.typicode.com",
)
