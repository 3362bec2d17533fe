from __future__ import annotations

from datetime import datetime, timezone

from eventscraper.core.env import load_env
from eventscraper.db.migrations.schema import ensure_schema
from eventscraper.db.session import engine
from eventscraper.logging import configure_logging


def main() -> None:
    load_env()
    configure_logging()
    ensure_schema(engine)
    print(f"Migration completed at {datetime.now(tz=timezone.utc).isoformat()}")


if __name__ == "__main__":
    main()
