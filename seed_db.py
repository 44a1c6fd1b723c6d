"""
Reset the development database to the sample directory data.

    python seed_db.py            # create tables, wipe, seed, report counts
    python seed_db.py --counts   # only report what is there now

Seeding deletes every account and business first. Against anything other
than a local SQLite file it refuses to run without --force.
"""
import argparse
import logging
import sys

from dotenv import load_dotenv

# .env must be in the environment before bizdir.core.config builds settings
load_dotenv()

from bizdir.core.config import settings  # noqa: E402
from bizdir.db.session import SessionLocal, init_db  # noqa: E402
from bizdir.models.account import Account  # noqa: E402
from bizdir.models.business import Business, BusinessPhoto  # noqa: E402
from bizdir.seed.seed_data import seed_db  # noqa: E402

logger = logging.getLogger("seed_db")


def report_counts(db) -> dict:
    counts = {
        "accounts": db.query(Account).count(),
        "businesses": db.query(Business).count(),
        "photos": db.query(BusinessPhoto).count(),
    }
    logger.info("Database holds " + ", ".join(f"{n} {table}" for table, n in counts.items()))
    return counts


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--counts", action="store_true", help="report row counts without seeding")
    parser.add_argument("--force", action="store_true", help="allow wiping a non-SQLite database")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if not args.counts and not settings.database_url.startswith("sqlite") and not args.force:
        logger.error(f"Refusing to wipe {settings.database_url.split('@')[-1]} without --force")
        return 1

    init_db()
    db = SessionLocal()
    try:
        if not args.counts:
            logger.info("Clearing existing rows and inserting sample data")
            seed_db(db)
        report_counts(db)
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
