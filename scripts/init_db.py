"""
Database initialization script.
Creates tables and seeds categories plus demo and admin accounts.
"""
import asyncio
import sys

from sqlalchemy import select
from app.core.database import engine, AsyncSessionLocal, Base
from app.models import Category, User, UserProfile
from app.models.user import UserRole
from app.core.security import get_password_hash

# (name, slug, icon, order, subcategories)
CATEGORIES = [
    ("Furniture", "furniture", "🛋️", 1, [("Sofas", "sofas"), ("Beds", "beds"), ("Tables", "tables")]),
    ("Electronics", "electronics", "💻", 2, [("Phones", "phones"), ("Televisions", "televisions")]),
    ("Kitchen Appliances", "kitchen-appliances", "🍳", 3, []),
    ("Home Decor", "home-decor", "🖼️", 4, []),
    ("Clothing", "clothing", "👔", 5, []),
    ("Books", "books", "📚", 6, []),
    ("Sports & Leisure", "sports", "⚽", 7, []),
    ("Baby & Kids", "baby-kids", "🍼", 8, []),
    ("Garden", "garden", "🌱", 9, []),
    ("Others", "others", "📦", 10, []),
]

ACCOUNTS = [
    {
        "email": "demo@housetreasure.rw",
        "username": "demo",
        "password": "demo1234!",
        "first_name": "Demo",
        "last_name": "User",
        "province": "Kigali",
        "district": "Gasabo",
        "role": UserRole.USER,
    },
    {
        "email": "admin@housetreasure.rw",
        "username": "admin",
        "password": "admin1234!",
        "first_name": "Site",
        "last_name": "Admin",
        "province": "Kigali",
        "district": "Nyarugenge",
        "role": UserRole.ADMIN,
    },
]


async def create_tables():
    """Create all database tables."""
    print("Creating database tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    print("✓ Tables created successfully")


async def create_initial_categories():
    """Create top-level categories and their subcategories."""
    print("Creating initial categories...")

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(Category))
        if result.scalars().first():
            print("✓ Categories already exist")
            return

        count = 0
        for name, slug, icon, order, children in CATEGORIES:
            parent = Category(name=name, slug=slug, icon=icon, order=order, is_active=True)
            session.add(parent)
            await session.flush()
            count += 1

            for child_order, (child_name, child_slug) in enumerate(children, start=1):
                session.add(Category(
                    name=child_name,
                    slug=child_slug,
                    parent_id=parent.id,
                    order=child_order,
                    is_active=True,
                ))
                count += 1

        await session.commit()
        print(f"✓ Created {count} categories")


async def create_accounts():
    """Create the demo and admin users with their profiles."""
    print("Creating demo accounts...")

    async with AsyncSessionLocal() as session:
        for account in ACCOUNTS:
            result = await session.execute(
                select(User).where(User.email == account["email"])
            )
            if result.scalar_one_or_none():
                print(f"✓ {account['username']} already exists")
                continue

            data = dict(account)
            password = data.pop("password")
            user = User(
                **data,
                hashed_password=get_password_hash(password),
                is_active=True,
                is_verified=True,
            )
            session.add(user)
            await session.flush()
            session.add(UserProfile(user_id=user.id))
            print(f"✓ {account['username']} created (email: {account['email']}, password: {password})")

        await session.commit()


async def main():
    """Main initialization function."""
    print("="*60)
    print("House Treasure Database Initialization")
    print("="*60)

    try:
        await create_tables()
        await create_initial_categories()
        await create_accounts()

        print("="*60)
        print("✓ Database initialization completed successfully!")
        print("="*60)

    except Exception as e:
        print(f"✗ Error during initialization: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
