"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 4 passengers and 3 drivers (password for all: ``password123``)
  - 4 cars owned by the drivers
  - 8 trips (mix of pending, accepted, completed, canceled)
  - 3 reviews from passengers with completed trips
"""

import asyncio

from sqlalchemy import text

from ridehail.domain.enums import TripStatus, UserRole
from ridehail.infrastructure.database import async_session_factory, engine
from ridehail.infrastructure.models import CarModel, ReviewModel
from ridehail.services.auth_service import AuthService
from ridehail.services.trip_service import TripService

PASSWORD = "password123"

USERS = [
    {"name": "Jane Smith", "email": "jane@example.com", "phone": "+15550000001", "role": UserRole.PASSENGER},
    {"name": "Omar Haddad", "email": "omar@example.com", "phone": "+15550000002", "role": UserRole.PASSENGER},
    {"name": "Lucia Ferreira", "email": "lucia@example.com", "phone": "+15550000003", "role": UserRole.PASSENGER},
    {"name": "Ken Watanabe", "email": "ken@example.com", "phone": "+15550000004", "role": UserRole.PASSENGER},
    {"name": "John Doe", "email": "john@example.com", "phone": "+15550000101", "role": UserRole.DRIVER},
    {"name": "Amara Okafor", "email": "amara@example.com", "phone": "+15550000102", "role": UserRole.DRIVER},
    {"name": "Piotr Nowak", "email": "piotr@example.com", "phone": "+15550000103", "role": UserRole.DRIVER},
]

# (owner index, model, brand, plate)
CARS = [
    (4, "Prius", "Toyota", "ABC123"),
    (4, "Corolla", "Toyota", "ABC124"),
    (5, "Model 3", "Tesla", "EV0042"),
    (6, "Octavia", "Skoda", "WX7781"),
]

# (passenger index, driver index, start, end, preferences, final status)
TRIPS = [
    (0, 4, "123 Main St", "456 Elm St", "No music please", TripStatus.COMPLETED),
    (0, 5, "456 Elm St", "Central Station", None, TripStatus.PENDING),
    (1, 5, "Airport Terminal 2", "Harbor Hotel", "Two suitcases", TripStatus.ACCEPTED),
    (1, 6, "Harbor Hotel", "Convention Center", None, TripStatus.COMPLETED),
    (2, 4, "12 Oak Ave", "City Library", None, TripStatus.CANCELED),
    (2, 6, "City Library", "12 Oak Ave", "Child seat", TripStatus.PENDING),
    (3, 5, "North Campus", "Stadium", None, TripStatus.COMPLETED),
    (3, 4, "Stadium", "North Campus", None, TripStatus.PENDING),
]

# (passenger index, driver index, rating, comment)
REVIEWS = [
    (0, 4, 5, "Smooth ride, very polite."),
    (1, 6, 4, None),
    (3, 5, 3, "Arrived a bit late."),
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM users"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Users ─────────────────────────────────────────────────────
        auth = AuthService(session)
        users = []
        for u in USERS:
            user, _ = await auth.register(password=PASSWORD, **u)
            users.append(user)
        print(f"  Created {len(users)} users")

        # ── Cars ──────────────────────────────────────────────────────
        for owner, model, brand, plate in CARS:
            session.add(
                CarModel(
                    user_id=users[owner].id,
                    model=model,
                    brand=brand,
                    license_plate=plate,
                )
            )
        await session.flush()
        print(f"  Created {len(CARS)} cars")

        # ── Trips ─────────────────────────────────────────────────────
        trips = TripService(session)
        for passenger, driver, start, end, prefs, status in TRIPS:
            trip = await trips.create(
                users[passenger],
                driver_id=users[driver].id,
                start_address=start,
                end_address=end,
                preferences=prefs,
            )
            if status is TripStatus.CANCELED:
                await trips.cancel(users[passenger], trip.id)
            elif status is not TripStatus.PENDING:
                await trips.advance_status(trip.id, status)
        print(f"  Created {len(TRIPS)} trips")

        # ── Reviews ───────────────────────────────────────────────────
        for passenger, driver, rating, comment in REVIEWS:
            session.add(
                ReviewModel(
                    driver_id=users[driver].id,
                    passenger_id=users[passenger].id,
                    rating=rating,
                    comment=comment,
                )
            )
        await session.flush()
        print(f"  Created {len(REVIEWS)} reviews")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
