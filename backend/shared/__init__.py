"""
Shared module for infrastructure used by the REST API and the CLI.

STRUCTURE:
- shared.security: Authentication and abuse protection
  - auth.py: Staff JWTs, tracking credentials, bearer header parsing
  - password.py: Bcrypt hashing
  - rate_limit.py: slowapi limiter and per-endpoint limits

- shared.infrastructure: Database and messaging
  - db.py: SQLAlchemy sessions, safe_commit()
  - correlation.py: X-Request-ID middleware and log filter
  - events/: Redis pub/sub publishing for live order updates

- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging
  - constants.py: Roles, OrderStatus, Limits

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Input validation, SSRF prevention
  - schemas.py: Shared Pydantic schemas

IMPORT EXAMPLES:
    from shared.security.auth import verify_jwt, derive_tracking_credential
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import Roles, OrderStatus
    from shared.utils.exceptions import NotFoundError, ForbiddenError
    from shared.utils.validators import validate_image_url
"""
