"""Load the read-only festival and state reference data."""
from datetime import date

import config
from database import Base, SessionLocal, engine
from festivals import MONTH_ORDER
from logging_config import setup_logging
from models import Festival, State

logger = setup_logging()

STATES = [
    {
        "state_id": "INMH",
        "name": "Maharashtra",
        "capital": "Mumbai",
        "description": (
            "Land of the Sahyadri forts, the Ajanta and Ellora caves and the "
            "Warkari pilgrimage to Pandharpur."
        ),
    },
]

# (name, month, day, region)
FESTIVALS = [
    ("Makar Sankranti", "January", 14, "Pan India"),
    ("Shivaji Jayanti", "February", 19, "Maharashtra"),
    ("Maha Shivratri", "February", 26, "Pan India"),
    ("Holi", "March", 14, "Pan India"),
    ("Gudi Padwa", "March", 30, "Maharashtra"),
    ("Ram Navami", "April", 6, "Pan India"),
    ("Maharashtra Day", "May", 1, "Maharashtra"),
    ("Ashadhi Ekadashi", "July", 6, "Maharashtra"),
    ("Raksha Bandhan", "August", 9, "Pan India"),
    ("Independence Day", "August", 15, "Pan India"),
    ("Ganesh Chaturthi", "August", 27, "Maharashtra"),
    ("Onam", "September", 5, "Kerala"),
    ("Dussehra", "October", 2, "Pan India"),
    ("Diwali", "October", 20, "Pan India"),
    ("Guru Nanak Jayanti", "November", 5, "Punjab"),
    ("Christmas", "December", 25, "Pan India"),
]


def seed_reference_data(year: int = config.FESTIVAL_YEAR):
    """Insert states and festivals that are not present yet"""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        for state in STATES:
            if not db.query(State).filter(State.state_id == state["state_id"]).first():
                db.add(State(**state))
                logger.info("Added state %s", state["name"])

        added = 0
        for name, month, day, region in FESTIVALS:
            exists = db.query(Festival).filter(Festival.name == name, Festival.year == year).first()
            if not exists:
                db.add(Festival(name=name, month=month, date=date(year, MONTH_ORDER.index(month) + 1, day),
                                region=region, year=year))
                added += 1
        db.commit()
        logger.info("Added %s festivals for %s", added, year)
    finally:
        db.close()


if __name__ == "__main__":
    seed_reference_data()
