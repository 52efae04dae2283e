"""Data access for the user directory, the post store and reference data."""
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

import models
from auth import hash_password
from errors import CastError


def get_user_by_username(db: Session, username: str):
    """Retrieve a user from the database by their username"""
    return db.query(models.User).filter(models.User.username == username).first()


def create_new_user(db: Session, username: str, password: str):
    """Create and store a new user in the database"""
    user = models.User(username=username, password_hash=hash_password(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def parse_post_id(raw_id: str) -> int:
    """Convert a path segment to a post id, raising CastError when it is not one"""
    try:
        return int(raw_id)
    except (TypeError, ValueError):
        raise CastError() from None


def get_post_by_id(db: Session, post_id: int):
    """Retrieve a post and its author by ID"""
    return (db.query(models.Post)
            .options(joinedload(models.Post.author))
            .filter(models.Post.id == post_id)
            .first())


def list_posts(db: Session):
    """Retrieve every post with its author, newest first"""
    return (db.query(models.Post)
            .options(joinedload(models.Post.author))
            .order_by(models.Post.created_at.desc(), models.Post.id.desc())
            .all())


def create_post(db: Session, author: models.User, title: str, content: str):
    db_post = models.Post(title=title, content=content, author_id=author.id)
    db.add(db_post)
    db.commit()
    db.refresh(db_post)
    return db_post


def update_post(db: Session, db_post: models.Post, title: str, content: str):
    db_post.title = title
    db_post.content = content
    db.commit()
    db.refresh(db_post)
    return db_post


def delete_post(db: Session, db_post: models.Post):
    db.delete(db_post)
    db.commit()


def get_festivals(db: Session, year: int, regions: Optional[list[str]] = None):
    """Festivals for a year, optionally restricted to a set of regions.

    Results come back in calendar order.
    """
    query = db.query(models.Festival).filter(models.Festival.year == year)
    if regions:
        query = query.filter(or_(*(models.Festival.region == region for region in regions)))
    return query.order_by(models.Festival.date, models.Festival.id).all()


def get_state_by_state_id(db: Session, state_id: str):
    return db.query(models.State).filter(models.State.state_id == state_id).first()
