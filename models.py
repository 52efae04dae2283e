"""SQLAlchemy models for users, sessions, blog posts and reference data."""
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from database import Base


class User(Base):
    """Registered site member who can author blog posts."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(100), nullable=False)

    posts = relationship("Post", back_populates="author")
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")


class UserSession(Base):
    """Server-side login session; the cookie only carries its id."""
    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    expires_at = Column(DateTime, nullable=False)

    user = relationship("User", back_populates="sessions")


class Post(Base):
    """Blog post written by a single user."""
    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    author = relationship("User", back_populates="posts")


class Festival(Base):
    """Festival calendar entry (read-only reference data)."""
    __tablename__ = "festivals"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    month = Column(String(20), nullable=False)
    date = Column(Date, nullable=False, index=True)
    region = Column(String(100), nullable=False, index=True)
    year = Column(Integer, nullable=False, index=True)


class State(Base):
    """Heritage information for one Indian state (read-only reference data)."""
    __tablename__ = "states"

    id = Column(Integer, primary_key=True, index=True)
    state_id = Column(String(10), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    capital = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
