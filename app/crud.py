"""
CRUD operations (Create, Read, Update, Delete)
Query functions for the favorite team and key/value app settings
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.models import AppSetting, FavoriteTeam


# ===== APP SETTINGS =====

def get_setting(db: Session, key: str) -> Optional[str]:
    """
    Get a setting value, or None if unset
    """
    row = db.get(AppSetting, key)
    return row.value if row else None


def set_setting(db: Session, key: str, value: Optional[str]) -> None:
    """
    Insert or update a setting and commit
    """
    row = db.get(AppSetting, key)
    if row is None:
        db.add(AppSetting(key=key, value=value))
    else:
        row.value = value
    db.commit()


def delete_setting(db: Session, key: str) -> None:
    row = db.get(AppSetting, key)
    if row is not None:
        db.delete(row)
        db.commit()


# ===== FAVORITE TEAM =====

def get_favorite_team(db: Session) -> Optional[FavoriteTeam]:
    """
    Get the favorite team, if one is set
    """
    return db.query(FavoriteTeam).order_by(FavoriteTeam.id).first()


def set_favorite_team(
    db: Session,
    team_id: int,
    team_name: Optional[str] = None,
) -> FavoriteTeam:
    """
    Replace the favorite team (keeps a single row)
    """
    favorite = get_favorite_team(db)
    if favorite is None:
        favorite = FavoriteTeam(team_id=team_id, team_name=team_name)
        db.add(favorite)
    else:
        if favorite.team_id != team_id:
            favorite.last_synced = None
        favorite.team_id = team_id
        favorite.team_name = team_name
    db.commit()
    db.refresh(favorite)
    return favorite


def mark_favorite_synced(db: Session, synced_at: Optional[datetime] = None) -> None:
    favorite = get_favorite_team(db)
    if favorite is not None:
        favorite.last_synced = synced_at or datetime.utcnow()
        db.commit()


def clear_favorite_team(db: Session) -> None:
    db.query(FavoriteTeam).delete()
    db.commit()
