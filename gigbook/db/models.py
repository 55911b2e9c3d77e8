"""SQLAlchemy models, one table per entity type.

List and mapping attributes live in JSON columns so each row reads back as a
whole document.
"""
from __future__ import annotations

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    JSON,
    UniqueConstraint,
    func,
)

from .session import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(255), unique=True, nullable=False)
    handle = Column(String(255), nullable=True)
    preferences = Column(JSON, default=dict, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class SongModel(Base):
    __tablename__ = "songs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(255), index=True, nullable=False)
    title = Column(String(255), nullable=False, default="")
    bpm = Column(Float, nullable=True)
    key = Column(String(32), nullable=True)
    lyrics = Column(Text, nullable=True)
    streaming_links = Column(JSON, default=list, nullable=False)
    tags = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class VenueModel(Base):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(255), index=True, nullable=False)
    name = Column(String(255), nullable=False, default="")
    address = Column(Text, nullable=True)
    contacts = Column(JSON, default=list, nullable=False)
    stage_dimensions = Column(String(255), nullable=True)
    stage_width = Column(Float, nullable=True)
    stage_height = Column(Float, nullable=True)
    electrical = Column(Text, nullable=True)
    lighting = Column(Text, nullable=True)
    audio = Column(Text, nullable=True)
    hours = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class SetlistModel(Base):
    __tablename__ = "setlists"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(255), index=True, nullable=False)
    name = Column(String(255), nullable=False, default="")
    items = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class ShowModel(Base):
    __tablename__ = "shows"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(255), index=True, nullable=False)
    name = Column(String(255), nullable=False, default="")
    date = Column(Date, nullable=True)
    venue_id = Column(String(64), nullable=True)
    setlist_id = Column(String(64), nullable=True)
    setlist_ids = Column(JSON, default=list, nullable=False)
    arrive_at = Column(String(64), nullable=True)
    setup_at = Column(String(64), nullable=True)
    parking = Column(Text, nullable=True)
    food = Column(Text, nullable=True)
    technical_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class StagePlotModel(Base):
    __tablename__ = "stage_plots"
    __table_args__ = (UniqueConstraint("owner_id", "context_id", name="uq_stage_plots_owner_context"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(255), index=True, nullable=False)
    context_id = Column(String(255), index=True, nullable=False)
    name = Column(String(255), nullable=True)
    nodes = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
