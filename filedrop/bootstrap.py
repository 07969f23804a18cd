"""
CLI entrypoint that ensures the database schema. Run before serving, e.g.:

  python -m filedrop.bootstrap

The API also runs this on startup; the CLI is for deploy pipelines that want
schema problems to fail the deploy instead of the first request.
"""

import logging
import sys

from filedrop.core.database import engine
from filedrop.services.errors import SchemaError
from filedrop.services.schema import ensure_schema

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Create missing tables and re-establish the files → users foreign key."""
    try:
        ensure_schema(engine)
        logger.info("Bootstrap completed")
        return 0
    except SchemaError as e:
        logger.exception("Bootstrap failed: %s", e.message)
        return 1
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
