# app/db/base.py
from sqlalchemy.orm import declarative_base

# Single metadata for every table in app.models
Base = declarative_base()
