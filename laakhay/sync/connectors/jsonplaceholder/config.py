"""Shared JSONPlaceholder connector constants.

Set JSON_PLACEHOLDER_BASE_URL to sync against a local mock of the API.
"""

import os

PROVIDER_ID = "jsonplaceholder"

BASE_URL = os.environ.get("JSON_PLACEHOLDER_BASE_URL", "https://jsonplaceholder.typicode.com")

# Records requested per page (the "_limit" query parameter)
PAGE_SIZE = int(os.environ.get("JSON_PLACEHOLDER_PAGE_SIZE", "50"))

# Query parameters understood by the API's pagination
PAGE_KEY = "_page"
PAGE_SIZE_KEY = "_limit"

# Path used by fetch_health()
HEALTH_PATH = "/users/1"
