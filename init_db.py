"""Initialize the database by creating all tables defined in the models"""
from database import Base, engine
from logging_config import setup_logging
import models  # noqa: F401  registers the tables on Base.metadata

logger = setup_logging()


def init_db():
    logger.info("Creating tables on the database...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created successfully!")


if __name__ == "__main__":
    init_db()
