# regdesk/db/base_class.py

from sqlalchemy.orm import declarative_base

# Shared declarative base. All SQLAlchemy models inherit from this class.
Base = declarative_base()
