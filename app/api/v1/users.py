from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.errors import NotFoundError
from app.db.session import get_session
from app.models.user import User
from app.schemas.user import SessionOut, UserOut
from app.services.auth_service import get_current_user, require_admin
from app.services.user_service import list_sessions, to_user_out

router = APIRouter(prefix='/users', tags=['users'])


@router.get('/me', response_model=UserOut)
def me(user: User = Depends(get_current_user), session: Session = Depends(get_session)) -> UserOut:
    return to_user_out(session, user)


@router.get('/me/sessions', response_model=list[SessionOut])
def my_sessions(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> list[SessionOut]:
    return list_sessions(session, user.id)


@router.get('/{user_id}/sessions', response_model=list[SessionOut])
def user_sessions(
    user_id: str,
    _: User = Depends(require_admin),
    session: Session = Depends(get_session),
) -> list[SessionOut]:
    if session.get(User, user_id) is None:
        raise NotFoundError('User not found')
    return list_sessions(session, user_id)
