from sqlalchemy.orm import declarative_base
import uuid

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())
