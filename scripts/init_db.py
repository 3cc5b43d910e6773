from boomerang.db.session import engine
from boomerang.models import Base


def init_db():
    if engine is None:
        print("DATABASE_URL is not set, nothing to initialize.")
        return
    print("Initializing database...")
    Base.metadata.create_all(bind=engine)
    print("Database tables created successfully!")


if __name__ == "__main__":
    init_db()
