"""HTTP middleware: request ID.

Applied in main app. Import and use from membership_api.main.
"""

from membership_api.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
