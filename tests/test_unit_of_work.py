import pytest
from sqlmodel import Session, select

from app.db.session import engine, get_session
from app.db.unit_of_work import UnitOfWork
from app.models.user import User


def _user(username: str) -> User:
    return User(username=username, email=f"{username}@example.com", hashed_password="x")


def _usernames() -> list[str]:
    with Session(engine) as fresh:
        return [user.username for user in fresh.exec(select(User)).all()]


def test_session_dependency():
    gen = get_session()
    session = next(gen)
    assert session is not None
    session.close()


def test_transaction_commits_on_success(session):
    uow = UnitOfWork(session)
    with uow.transaction():
        session.add(_user("committed"))
    assert not uow.in_transaction
    assert _usernames() == ["committed"]


def test_transaction_rolls_back_and_reraises(session):
    uow = UnitOfWork(session)
    with pytest.raises(RuntimeError):
        with uow.transaction():
            session.add(_user("discarded"))
            session.flush()
            raise RuntimeError("boom")
    assert not uow.in_transaction
    assert _usernames() == []


def test_explicit_begin_commit_rollback(session):
    uow = UnitOfWork(session)
    uow.begin()
    session.add(_user("first"))
    uow.rollback()
    uow.begin()
    session.add(_user("second"))
    uow.commit()
    assert _usernames() == ["second"]


def test_nested_begin_is_rejected(session):
    uow = UnitOfWork(session)
    uow.begin()
    with pytest.raises(RuntimeError):
        uow.begin()
    uow.rollback()
