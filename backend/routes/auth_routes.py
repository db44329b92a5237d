import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth import jwt_handler
from backend.auth.dependencies import get_current_user
from backend.auth.passwords import verify_password
from backend.models.user import User
from backend.routes.common import database_unavailable, get_db

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    username: str = ''
    password: str = ''


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = 'bearer'


@router.post('/login', response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    username = data.username.strip()
    if not username or not data.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Username and password are required.',
        )

    try:
        user = db.query(User).filter(User.username == username).first()
    except SQLAlchemyError as exc:
        logger.exception('Login lookup failed.')
        raise database_unavailable() from exc

    if user is None or not verify_password(data.password, user.hashed_password):
        logger.info('Failed login for %s.', username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Invalid username or password.',
        )

    return TokenResponse(access_token=jwt_handler.create_access_token(subject=user.username))


@router.get('/me')
def me(current_user: User = Depends(get_current_user)):
    return {'username': current_user.username}
