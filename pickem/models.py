from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .db import Base


class Game(Base):
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(String, nullable=False, unique=True, index=True)

    # team_a is the away side at first import and stays fixed for the external_id
    team_a = Column(String, nullable=False, default="")
    team_b = Column(String, nullable=False, default="")
    team_a_abbrev = Column(String, nullable=True)
    team_b_abbrev = Column(String, nullable=True)
    team_a_conf_id = Column(String, nullable=True)
    team_b_conf_id = Column(String, nullable=True)
    team_a_rank = Column(Integer, nullable=True)
    team_b_rank = Column(Integer, nullable=True)
    team_a_record = Column(String, nullable=False, default="")
    team_b_record = Column(String, nullable=False, default="")

    start_time_utc = Column(DateTime(timezone=True), nullable=True)
    game_date = Column(Date, nullable=True, index=True)
    status = Column(String, nullable=False, default="scheduled", index=True)
    result_a = Column(Integer, nullable=True)
    result_b = Column(Integer, nullable=True)
    spread = Column(String, nullable=True)   # "KAN -5.5", favorite first

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    picks = relationship("Pick", back_populates="game", cascade="all, delete-orphan")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String, primary_key=True)
    username = Column(String, nullable=True)
    email = Column(String, nullable=True)
    total_wins = Column(Integer, nullable=False, default=0)
    total_losses = Column(Integer, nullable=False, default=0)
    total_points = Column(Integer, nullable=False, default=0)
    weekly_wins = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    picks = relationship("Pick", back_populates="profile")

    @property
    def display_name(self) -> str:
        return (self.username or self.email or "Unknown").strip()


class Pick(Base):
    __tablename__ = "picks"
    __table_args__ = (
        UniqueConstraint("user_id", "game_id", name="uq_picks_user_game"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False, index=True)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=False, index=True)
    selected_team = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    game = relationship("Game", back_populates="picks")
    profile = relationship("Profile", back_populates="picks")


class WeeklyWinner(Base):
    __tablename__ = "weekly_winners"

    id = Column(Integer, primary_key=True, index=True)
    week_start = Column(Date, nullable=False, unique=True)
    week_end = Column(Date, nullable=False)
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    profile = relationship("Profile")
