"""
SQLAlchemy ORM models.

Tables
------
* ``users``          -- passengers and drivers
* ``access_tokens``  -- issued bearer tokens (deleted on logout)
* ``cars``           -- vehicles owned by drivers
* ``trips``          -- ride requests from a passenger to a driver
* ``reviews``        -- passenger feedback on drivers

Relationships used in responses are loaded with ``selectin`` so they are
available without lazy IO under ``AsyncSession``.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from ridehail.domain.enums import TripStatus, UserRole


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


def _one_of(column, enum_cls):
    values = ", ".join(f"'{value}'" for value in _enum_values(enum_cls))
    return f"{column} IN ({values})"


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(32), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        Enum(
            UserRole,
            name="userrole",
            values_callable=_enum_values,
            native_enum=False,
            length=20,
        ),
        nullable=False,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint(_one_of("role", UserRole), name="ck_users_role"),
    )


class AccessTokenModel(Base):
    __tablename__ = "access_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    jti = Column(String(64), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_access_tokens_user", "user_id"),)


class CarModel(Base):
    __tablename__ = "cars"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    model = Column(String(255), nullable=False)
    brand = Column(String(255), nullable=False)
    license_plate = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (Index("idx_cars_user", "user_id"),)


class TripModel(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, autoincrement=True)
    passenger_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    driver_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    start_address = Column(String(255), nullable=False)
    end_address = Column(String(255), nullable=False)
    preferences = Column(Text, nullable=True)
    status = Column(
        Enum(
            TripStatus,
            name="tripstatus",
            values_callable=_enum_values,
            native_enum=False,
            length=20,
        ),
        default=TripStatus.PENDING,
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    passenger = relationship(UserModel, foreign_keys=[passenger_id], lazy="selectin")
    driver = relationship(UserModel, foreign_keys=[driver_id], lazy="selectin")

    __table_args__ = (
        CheckConstraint(_one_of("status", TripStatus), name="ck_trips_status"),
        Index("idx_trips_status", "status"),
        Index("idx_trips_passenger", "passenger_id"),
        Index("idx_trips_driver", "driver_id"),
    )


class ReviewModel(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    driver_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    passenger_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    driver = relationship(UserModel, foreign_keys=[driver_id], lazy="selectin")
    passenger = relationship(UserModel, foreign_keys=[passenger_id], lazy="selectin")

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating"),
        Index("idx_reviews_driver", "driver_id"),
    )
