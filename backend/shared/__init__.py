"""
Shared module for common utilities used by the POS back-office API.

STRUCTURE:
- shared.security: Token verification, permission checks
  - auth.py: JWT verification, current_user_context, require_permissions

- shared.infrastructure: Database and request plumbing
  - db.py: SQLAlchemy sessions, safe_commit(), atomic()
  - correlation.py: X-Request-ID middleware and logging filter

- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging, maintenance audit events
  - constants.py: Roles, Permissions, system ids

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging

IMPORT EXAMPLES:
    from shared.security.auth import require_permissions
    from shared.infrastructure.db import get_db, atomic
    from shared.config.settings import settings
    from shared.config.constants import Permissions
    from shared.utils.exceptions import NotFoundError, InvalidSnapshotError
"""
