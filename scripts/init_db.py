"""
Create the schema from the SQLAlchemy models.

    python scripts/init_db.py                  # tables only
    python scripts/init_db.py --hours 1 2      # + default weekly hours for businesses 1, 2
"""

import argparse
import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "backend"))

from sqlalchemy import text
from app.config import BASE_DIR, settings
from app.database import SessionLocal, engine
from app.models.generated import Base
from app.services.schedule import ScheduleService


def main():
    parser = argparse.ArgumentParser(description="Create booking tables")
    parser.add_argument("--hours", nargs="*", type=int, default=[], metavar="BUSINESS_ID",
                        help="seed Mon-Fri 09:00-17:00 hours for these businesses")
    args = parser.parse_args()

    if settings.database_url.startswith("sqlite:///./"):
        (BASE_DIR / settings.database_url.replace("sqlite:///./", "")).parent.mkdir(
            parents=True, exist_ok=True
        )

    Base.metadata.create_all(engine)

    db = SessionLocal()
    try:
        print("DB OK:", db.execute(text("SELECT 1")).scalar())
        print("Tables:", ", ".join(sorted(Base.metadata.tables)))

        schedule = ScheduleService.for_session(db)
        for business_id in args.hours:
            rows = schedule.initialize_hours(business_id)
            print(f"Business {business_id}: {len(rows)} weekly hour rows")
    finally:
        db.close()


if __name__ == "__main__":
    main()
