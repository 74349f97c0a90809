"""visitlog — visit-logging web API.

Records every path an authenticated user requests, and exposes
admin endpoints for browsing the history and managing users.
"""

__version__ = "0.1.0"
