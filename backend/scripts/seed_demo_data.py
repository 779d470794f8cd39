"""
Load demo users and complaints for local development.
Run with: python -m scripts.seed_demo_data
Run with: python -m scripts.seed_demo_data --complaints 50
"""

import argparse
import asyncio
import random
from sqlalchemy import select, func
from app.auth import hash_password
from app.database import engine, async_session, Base
from app.models.user import User, DEPARTMENTS
from app.models.complaint import Complaint, CATEGORIES, PRIORITIES, STATUSES

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    {"name": "Admin", "email": "admin@campusvoice.dev", "role": "admin"},
    {"name": "Asha Patel", "email": "asha@campusvoice.dev", "role": "user"},
    {"name": "Daniel Kim", "email": "daniel@campusvoice.dev", "role": "user"},
    {"name": "Maria Lopez", "email": "maria@campusvoice.dev", "role": "user"},
]

ISSUES = {
    "Infrastructure": ("Broken stair railing", "The railing on the east stairwell is loose."),
    "Academic": ("Lab schedule clash", "Two mandatory labs are scheduled in the same slot."),
    "Hostel": ("No hot water", "Block C has had no hot water for three days."),
    "Transportation": ("Late shuttle", "The 8am shuttle has been 20 minutes late all week."),
    "Food": ("Cafeteria hygiene", "Trays are not being cleaned between uses."),
    "Security": ("Gate left open", "The north gate is left unattended at night."),
    "Technology": ("Wi-Fi outage", "Library Wi-Fi drops every few minutes."),
    "Sports": ("Court lights", "Floodlights on the basketball court are out."),
    "Library": ("Extended hours", "Please extend library hours during exams."),
    "Other": ("Lost and found", "There is no clear process for lost items."),
}


async def seed(complaint_count: int):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        existing = await db.scalar(select(func.count(User.id))) or 0
        if existing:
            print(f"Database already has {existing} users, skipping seed.")
            return

        users = []
        for u in DEMO_USERS:
            user = User(
                name=u["name"],
                email=u["email"],
                role=u["role"],
                password=hash_password(DEMO_PASSWORD),
                department=random.choice(DEPARTMENTS),
                is_verified=True,
            )
            db.add(user)
            users.append(user)
        await db.flush()
        print(f"Created {len(users)} users (password: {DEMO_PASSWORD}).")

        reporters = [u for u in users if u.role == "user"]
        for _ in range(complaint_count):
            owner = random.choice(reporters)
            category = random.choice(CATEGORIES)
            title, description = ISSUES[category]
            status = random.choice(STATUSES)
            db.add(Complaint(
                title=title,
                description=description,
                category=category,
                priority=random.choice(PRIORITIES),
                status=status,
                submitted_by=owner.id,
                attachments=[],
            ))
            owner.complaints_submitted += 1
            if status == "resolved":
                owner.complaints_resolved += 1

        await db.commit()
        print(f"Created {complaint_count} complaints.")
    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed demo users and complaints")
    parser.add_argument("--complaints", type=int, default=25, help="Number of complaints to create")
    args = parser.parse_args()

    asyncio.run(seed(args.complaints))
