# app/models/__init__.py
from app.db.base import Base  # noqa: F401

from . import entity                 # noqa: F401
from . import deadline               # noqa: F401
from . import usage_log              # noqa: F401
from . import organization_settings  # noqa: F401
