from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base shared by the room, customer and reservation tables.

    Alembic reads Base.metadata for autogenerate; tests build throwaway
    databases from it with create_all.
    """

    pass
