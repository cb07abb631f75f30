"""Database seeding for the auction backend.

Creates one user per role and a few sample jewelry items.
"""

from typing import Optional

from sqlalchemy.orm import Session

from auction.core.enums import JewelryState, Role
from auction.db.models import Jewelry, User

DEFAULT_USERS = {
    Role.ADMIN: {"username": "admin", "full_name": "Site Administrator"},
    Role.MANAGER: {"username": "manager", "full_name": "Auction Manager"},
    Role.STAFF: {"username": "staff", "full_name": "Valuation Staff"},
    Role.MEMBER: {"username": "member", "full_name": "Demo Member"},
}

SAMPLE_JEWELRY = [
    {"name": "Sapphire Pendant", "material": "white gold", "brand": "PNJ", "weight": 4.2, "price": 1200.0},
    {"name": "Pearl Necklace", "material": "silver", "brand": "Mikimoto", "weight": 18.5, "price": 850.0},
    {"name": "Diamond Ring", "material": "platinum", "brand": "Tiffany", "weight": 3.1, "price": 5400.0},
]


def seed_default_users(db: Session, *, email_domain: str = "auction.local") -> dict[Role, User]:
    """
    Create the default user for every role.

    Idempotent - existing users (matched by username) are returned as is.

    Returns:
        Dict mapping role to User object
    """
    created = {}

    for role, config in DEFAULT_USERS.items():
        existing = get_user_by_username(db, config["username"])
        if existing:
            created[role] = existing
            continue

        user = User(
            username=config["username"],
            email=f"{config['username']}@{email_domain}",
            full_name=config["full_name"],
            role=role.value,
        )
        db.add(user)
        created[role] = user

    db.flush()
    return created


def seed_sample_jewelry(db: Session, owner: User) -> list[Jewelry]:
    """Create the sample jewelry for ``owner`` unless they already own items."""
    existing = db.query(Jewelry).filter(Jewelry.owner_id == owner.id).all()
    if existing:
        return existing

    items = []
    for config in SAMPLE_JEWELRY:
        jewelry = Jewelry(owner=owner, state=JewelryState.ACTIVE.value, **config)
        db.add(jewelry)
        items.append(jewelry)

    db.flush()
    return items


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


# CLI script for seeding
if __name__ == "__main__":
    import sys
    from auction.db.session import init_db, unit_of_work

    init_db()
    try:
        with unit_of_work() as db:
            users = seed_default_users(db)
            print(f"Seeded {len(users)} users:")
            for role, user in users.items():
                print(f"  - {user.username} ({role.value}, ID: {user.id})")

            items = seed_sample_jewelry(db, users[Role.MEMBER])
            print(f"\nSeeded {len(items)} jewelry items for {users[Role.MEMBER].username}")

        print("\nSeeding complete!")

    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)
