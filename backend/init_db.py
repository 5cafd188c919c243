"""
Database initialization script
Run this to create tables and seed initial data
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from workforce.core.config import settings
from workforce.core.database import engine, Base, SessionLocal
from workforce.core.security import get_password_hash
from workforce.models import User, UserRole, PaymentSettings, Workplace
from workforce.services.rates import PaymentSettingsStore


def init_db():
    """Initialize database with tables"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("✓ Tables created successfully")


def seed_data():
    """Seed initial data"""
    db = SessionLocal()

    try:
        print("\nSeeding initial data...")

        # Create admin user
        admin = db.query(User).filter(User.email == "admin@knk.fi").first()
        if not admin:
            admin = User(
                email="admin@knk.fi",
                full_name="System Administrator",
                hashed_password=get_password_hash("admin123"),
                role=UserRole.ADMIN.value,
            )
            db.add(admin)
            db.flush()
            print("✓ Admin user created (email: admin@knk.fi, password: admin123)")

        # Create sample supervisor and cleaner
        supervisor = db.query(User).filter(User.email == "supervisor@knk.fi").first()
        if not supervisor:
            supervisor = User(
                email="supervisor@knk.fi",
                full_name="Sanna Supervisor",
                hashed_password=get_password_hash("supervisor123"),
                role=UserRole.SUPERVISOR.value,
            )
            db.add(supervisor)
            db.flush()
            print("✓ Sample supervisor created (email: supervisor@knk.fi, password: supervisor123)")

        cleaner = db.query(User).filter(User.email == "cleaner@knk.fi").first()
        if not cleaner:
            cleaner = User(
                email="cleaner@knk.fi",
                full_name="Kalle Cleaner",
                hashed_password=get_password_hash("cleaner123"),
                role=UserRole.EMPLOYEE.value,
                supervisor_id=supervisor.id,
            )
            db.add(cleaner)
            print("✓ Sample cleaner created (email: cleaner@knk.fi, password: cleaner123)")

        if not db.query(Workplace).first():
            db.add(Workplace(name="Helsinki Office", address="Mannerheimintie 1, Helsinki"))
            print("✓ Sample workplace created")

        db.commit()

        # Initial global rate
        if not db.query(PaymentSettings).first():
            PaymentSettingsStore(db).append(settings.DEFAULT_REGULAR_RATE, created_by_id=admin.id)
            print(f"✓ Global regular rate set to {settings.DEFAULT_REGULAR_RATE}")

        print("\n✓ Database seeded successfully!")

    except Exception as e:
        print(f"\n✗ Error seeding data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    print("=" * 60)
    print("KNK Workforce - Database Initialization")
    print("=" * 60)

    init_db()
    seed_data()

    print("\n" + "=" * 60)
    print("Initialization complete!")
    print("=" * 60)
    print("\nYou can now access:")
    print("  - API: http://localhost:8000")
    print("  - API Docs: http://localhost:8000/docs")
    print("=" * 60)
