from datetime import datetime

from geoalchemy2 import Geometry
from sqlalchemy import Column, Integer, String, ForeignKey, Float, DateTime, Index, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship

from models.walk_enums import OwnerRole, WalkStatus

Base = declarative_base()


# --- собаки ---
class Dog(Base):
    __tablename__ = "dogs"

    id = Column(String, primary_key=True)          # uuid
    name = Column(String, nullable=False)
    breed = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    owners = relationship("DogOwner", back_populates="dog", cascade="all, delete-orphan")
    territory = relationship("TerritoryRecord", back_populates="dog", uselist=False)

    def __repr__(self):
        return f"<Dog id={self.id} name={self.name}>"


# --- совладельцы: у собаки может быть несколько хозяев ---
class DogOwner(Base):
    __tablename__ = "dog_owners"

    dog_id = Column(String, ForeignKey("dogs.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String, primary_key=True)
    role = Column(String, default=OwnerRole.PRIMARY.value, nullable=False)
    added_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    dog = relationship("Dog", back_populates="owners")


# --- прогулка ---
class WalkSessionRecord(Base):
    __tablename__ = "walk_sessions"

    id = Column(String, primary_key=True)           # uuid из оркестратора
    dog_id = Column(String, ForeignKey("dogs.id", ondelete="CASCADE"), nullable=False)
    owner_id = Column(String, nullable=False)       # кто вёл прогулку и получил лапки
    started_at = Column(DateTime, nullable=False)
    ended_at = Column(DateTime, nullable=True)
    status = Column(String, default=WalkStatus.ACTIVE.value, nullable=False)
    distance_km = Column(Float, default=0.0)
    territory_gained_km2 = Column(Float, default=0.0)
    points_count = Column(Integer, default=0)

    points = relationship("WalkPointRecord", back_populates="session", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_walk_sessions_dog_started", "dog_id", "started_at"),
        Index("ix_walk_sessions_owner", "owner_id"),
    )


# --- точки пути ---
class WalkPointRecord(Base):
    __tablename__ = "walk_points"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String, ForeignKey("walk_sessions.id", ondelete="CASCADE"), nullable=False)
    dog_id = Column(String, nullable=False)
    lat = Column(Float, nullable=False)
    lon = Column(Float, nullable=False)
    timestamp = Column(DateTime, nullable=False)

    session = relationship("WalkSessionRecord", back_populates="points")

    __table_args__ = (
        Index("ix_walk_points_session_ts", "session_id", "timestamp"),
    )


# --- территория собаки (объединение всех прогулок) ---
class TerritoryRecord(Base):
    __tablename__ = "territories"

    dog_id = Column(String, ForeignKey("dogs.id", ondelete="CASCADE"), primary_key=True)
    geometry = Column(Geometry("MULTIPOLYGON", srid=4326), nullable=False)
    area_km2 = Column(Float, default=0.0, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    dog = relationship("Dog", back_populates="territory")


# --- лапки ---
class PawsBalance(Base):
    __tablename__ = "paws_balances"

    owner_id = Column(String, primary_key=True)
    balance = Column(Integer, default=0, nullable=False)


class PawsTransaction(Base):
    __tablename__ = "paws_transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String, nullable=False, index=True)
    type = Column(String, nullable=False)           # credit / debit
    amount = Column(Integer, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


# --- достижения ---
class AchievementRecord(Base):
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String, nullable=False)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    icon = Column(String, nullable=True)
    paws_reward = Column(Integer, default=0)
    unlocked_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("owner_id", "code", name="uq_achievements_owner_code"),
    )
