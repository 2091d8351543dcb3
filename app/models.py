"""
Database models for the local store
SQLAlchemy ORM models for the favorite team and app key/value settings
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class FavoriteTeam(Base):
    """
    The user's favorite team - at most one row
    Drives push notifications and Live Activities for that team's matches
    """
    __tablename__ = "favorite_teams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, nullable=False)
    team_name = Column(String, nullable=True)
    last_synced = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<FavoriteTeam(team_id={self.team_id}, name='{self.team_name}')>"


class AppSetting(Base):
    """
    Key/value app preference (device uuid, onboarding flag, launch version)
    """
    __tablename__ = "app_settings"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=True)

    def __repr__(self):
        return f"<AppSetting(key='{self.key}', value='{self.value}')>"
