# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit-of-work helper shared by the domain services.

Everything executed inside ``atomic()`` commits together or not at all.
Domain errors raised inside the block roll the session back and propagate
unchanged; database errors roll back and surface as OperationAbortedError.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campus.domains.errors import OperationAbortedError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def atomic(db: AsyncSession, operation: str) -> AsyncIterator[AsyncSession]:
    """Run a block as one transaction on the given session.

    Args:
        db: Async database session.
        operation: Short name of the operation, used in logs and errors.

    Yields:
        The same session.

    Raises:
        OperationAbortedError: If the database fails before the commit
            completes.
    """
    try:
        yield db
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning("%s aborted and rolled back: %s", operation, e)
        raise OperationAbortedError(f"{operation} aborted", e) from e
    except Exception:
        await db.rollback()
        raise
