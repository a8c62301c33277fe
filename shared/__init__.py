"""
Shared module for cross-cutting concerns of the broadcast gateway.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging and connection audit trail
- shared.infrastructure: Runtime helpers
  - correlation.py: Connection ID tagging of log records

IMPORT EXAMPLES:
    from shared.config.settings import settings
    from shared.config.logging import get_logger, setup_logging
"""
