from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from loguru import logger
from sqlalchemy.orm import SessionTransaction
from sqlmodel import Session


class UnitOfWork:
    """Explicit transaction boundary over one SQLModel session.

    Every repository used inside a unit of work shares the same session, so a
    commit persists all of their pending changes together and a rollback
    discards all of them.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self._transaction: Optional[SessionTransaction] = None

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    def begin(self) -> None:
        if self._transaction is not None:
            raise RuntimeError('transaction already in progress')
        self._transaction = self.session.get_transaction() or self.session.begin()

    def commit(self) -> None:
        self.session.commit()
        self._transaction = None

    def rollback(self) -> None:
        self.session.rollback()
        self._transaction = None

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        self.begin()
        try:
            yield self.session
            self.commit()
        except BaseException:
            logger.debug('rolling back transaction')
            self.rollback()
            raise
