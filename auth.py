"""Password hashing, signed session cookies and the server-side session store."""
import secrets
from datetime import datetime, timedelta

from fastapi import Response
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

import config
import models
from logging_config import get_logger

logger = get_logger("auth")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

SESSION_MAX_AGE = timedelta(days=config.SESSION_MAX_AGE_DAYS)


def hash_password(password: str):
    """Hash a plain text password using the configured password hashing context"""
    return pwd_context.hash(password)


def verify_password(plain_password, hashed_password):
    """ Verify if a plain text password matches its hashed version"""
    return pwd_context.verify(plain_password, hashed_password)


def purge_expired_sessions(db: Session, now: datetime | None = None) -> int:
    """Delete every session whose expiry has passed"""
    now = now or datetime.now()
    purged = (db.query(models.UserSession)
              .filter(models.UserSession.expires_at <= now)
              .delete(synchronize_session=False))
    if purged:
        logger.info("Purged %s expired sessions", purged)
    return purged


def create_session(db: Session, user: models.User) -> models.UserSession:
    """Open a new session for a user, valid for SESSION_MAX_AGE.

    Expired sessions of any user are purged in the same transaction.
    """
    now = datetime.now()
    purge_expired_sessions(db, now)
    user_session = models.UserSession(id=secrets.token_urlsafe(32),
                                      user_id=user.id,
                                      created_at=now,
                                      expires_at=now + SESSION_MAX_AGE)
    db.add(user_session)
    db.commit()
    db.refresh(user_session)
    logger.info("Session opened for user %s", user.username)
    return user_session


def resolve_session_user(db: Session, session_id: str | None):
    """Return the user behind a live session id, or None.

    Expired sessions are deleted as they are encountered.
    """
    if not session_id:
        return None
    user_session = db.get(models.UserSession, session_id)
    if user_session is None:
        return None
    if user_session.expires_at <= datetime.now():
        user_id = user_session.user_id
        db.delete(user_session)
        db.commit()
        logger.info("Expired session purged for user id %s", user_id)
        return None
    return user_session.user


def destroy_session(db: Session, session_id: str | None):
    """Delete a session record if it exists"""
    if not session_id:
        return
    user_session = db.get(models.UserSession, session_id)
    if user_session is not None:
        db.delete(user_session)
        db.commit()


def encode_session_cookie(user_session: models.UserSession) -> str:
    """Sign a session id into a JWT; expiry is enforced by the session row"""
    return jwt.encode({"sub": user_session.id},
                      config.SECRET_KEY,
                      algorithm=config.ALGORITHM)


def decode_session_cookie(token: str | None):
    """Return the session id carried by a cookie, or None if it is missing or invalid"""
    if not token:
        return None
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")


def set_session_cookie(response: Response, user_session: models.UserSession):
    """Store the signed session id in an HTTP-only cookie"""
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=encode_session_cookie(user_session),
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite="lax",
        max_age=int(SESSION_MAX_AGE.total_seconds())
    )


def clear_session_cookie(response: Response):
    response.delete_cookie(config.SESSION_COOKIE_NAME)
