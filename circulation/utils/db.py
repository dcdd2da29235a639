from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from circulation.errors import PersistenceFailure


@contextmanager
def atomic(session):
    """
    One unit of work on ``session``: commit when the block finishes, roll back
    everything it did when anything inside raises.

    Database errors surface as PersistenceFailure, after the rollback.
    """
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise PersistenceFailure(f"Database error: {e.__class__.__name__}") from e
    except Exception:
        session.rollback()
        raise
