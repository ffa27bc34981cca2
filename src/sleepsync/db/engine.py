"""SQLModel engine factory."""
from sqlmodel import SQLModel, create_engine


def get_engine(database_url: str):
    """Create an engine for `database_url` and make sure all tables exist."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, connect_args=connect_args)
    # Import all models so metadata is populated before create_all
    from sleepsync.models.night import NightRecord  # noqa
    from sleepsync.models.sync import SyncLog  # noqa
    SQLModel.metadata.create_all(engine)
    return engine
