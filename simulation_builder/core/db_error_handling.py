"""
Database error handling for repository reads.

Repository reads are the only operations in this package that can fail for
reasons outside the caller's input. Such failures are logged with the name
of the read that failed and re-raised as ``DatabaseOperationError``, chained
to the SQLAlchemy exception. Nothing is retried and, since the engine never
writes, there is nothing to roll back.

Usage:
    from simulation_builder.core.db_error_handling import handle_db_error

    with handle_db_error("count eligible questions per subject"):
        rows = db.execute(stmt).all()
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError


logger = logging.getLogger(__name__)


class DatabaseOperationError(Exception):
    """Raised when a repository read fails at the database layer.

    Example:
        >>> try:
        ...     summaries = repository.get_subject_summaries()
        ... except DatabaseOperationError as e:
        ...     logger.error(f"Selection aborted during {e.operation_name}")

    Attributes:
        operation_name: Short description of the read, e.g. "fetch candidate questions"
        original_error: The SQLAlchemy exception (also set as ``__cause__``)
        message: Text passed to ``Exception``
    """

    def __init__(
        self,
        operation_name: str,
        original_error: Exception,
        message: Optional[str] = None,
    ):
        self.operation_name = operation_name
        self.original_error = original_error
        self.message = message or f"Failed to {operation_name}: {original_error}"
        super().__init__(self.message)


@contextmanager
def handle_db_error(
    operation_name: str,
    *,
    log_level: int = logging.ERROR,
) -> Iterator[None]:
    """Translate ``SQLAlchemyError`` raised in the block.

    Other exceptions pass through unchanged.

    Args:
        operation_name: Used in the log line and the error message.
        log_level: Level of the log line written before re-raising.

    Raises:
        DatabaseOperationError: The block raised ``SQLAlchemyError``.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.log(
            log_level,
            f"Database error during {operation_name}: {e}",
            exc_info=True,
        )
        raise DatabaseOperationError(operation_name, e) from e
