from sqlalchemy.engine import Engine

from cleverbadge.db.base import Base

# Register every model on Base.metadata
from cleverbadge.models import assessment, question, test  # noqa: F401


def create_tables(bind: Engine) -> None:
    Base.metadata.create_all(bind=bind)
