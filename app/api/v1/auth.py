from typing import Optional

from fastapi import APIRouter, Depends, Request

from app.models.user import User
from app.schemas.auth import LoginRequest, LogoutRequest, MessageResponse, RefreshRequest, TokenResponse
from app.services.auth_service import get_current_user, get_optional_user_id, get_session_service
from app.services.session_service import SessionService, TokenPair

router = APIRouter(prefix='/auth', tags=['auth'])


def _client_context(request: Request) -> tuple[Optional[str], Optional[str]]:
    device_info = request.headers.get('user-agent')
    ip_address = request.client.host if request.client else None
    return device_info, ip_address


def _to_token_response(pair: TokenPair) -> TokenResponse:
    return TokenResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        token_type=pair.token_type,
        expires_in=pair.expires_in,
        refresh_expires_at=pair.refresh_expires_at,
    )


@router.post('/login', response_model=TokenResponse)
def login(
    payload: LoginRequest,
    request: Request,
    service: SessionService = Depends(get_session_service),
    current_user_id: Optional[str] = Depends(get_optional_user_id),
) -> TokenResponse:
    device_info, ip_address = _client_context(request)
    pair = service.login(
        payload.username,
        payload.password,
        device_info,
        ip_address,
        current_user_id=current_user_id,
    )
    return _to_token_response(pair)


@router.post('/refresh-token', response_model=TokenResponse)
def refresh(
    payload: RefreshRequest,
    request: Request,
    service: SessionService = Depends(get_session_service),
) -> TokenResponse:
    device_info, ip_address = _client_context(request)
    pair = service.refresh(payload.refresh_token, device_info, ip_address)
    return _to_token_response(pair)


@router.post('/logout', response_model=MessageResponse)
def logout(
    payload: LogoutRequest,
    service: SessionService = Depends(get_session_service),
    _: User = Depends(get_current_user),
) -> MessageResponse:
    service.logout(payload.refresh_token)
    return MessageResponse(message='Logout successful')
