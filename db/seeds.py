"""
Database seeder script for OrgPulse

This script populates the review store with sample organizations and reviews
for development and manual testing of the analytics CLI.
"""

import random
from datetime import datetime, timedelta, timezone

from . import Base, SessionLocal, engine
from .models import REVIEW_POST_TYPE, Organization, Post


def seed_organizations():
    """Seed sample organizations"""
    names = ["Acme Corp", "Globex", "Initech", "Umbrella Labs"]

    db = SessionLocal()
    try:
        for name in names:
            db.add(Organization(name=name))
        db.commit()
        print(f"✅ Seeded {len(names)} organizations")
    except Exception as e:
        print(f"❌ Error seeding organizations: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def seed_sample_reviews(days: int = 45, reviews_per_org: int = 40):
    """Seed reviews with random ratings spread over the last `days` days"""
    db = SessionLocal()
    try:
        organizations = db.query(Organization).all()
        now = datetime.now(timezone.utc)

        for org in organizations:
            # Skew one organization towards poor ratings so it raises a risk signal
            low, high = (1, 3) if org.name == "Initech" else (2, 5)

            for i in range(reviews_per_org):
                ratings = {
                    dimension: (random.randint(low, high) if random.random() > 0.1 else None)
                    for dimension in (
                        "work_life_balance",
                        "culture_values",
                        "career_opportunities",
                        "compensation",
                        "management",
                    )
                }
                db.add(
                    Post(
                        organization_id=org.id,
                        type=REVIEW_POST_TYPE,
                        title=f"Review #{i + 1} of {org.name}",
                        content="Sample review",
                        created_at=now - timedelta(minutes=random.randint(1, days * 24 * 60)),
                        **ratings,
                    )
                )

        db.commit()
        print(f"✅ Seeded {reviews_per_org} reviews for {len(organizations)} organizations")
    except Exception as e:
        print(f"❌ Error seeding reviews: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def main():
    """Create tables and run all seeders"""
    print("🌱 Starting database seeding...")
    Base.metadata.create_all(bind=engine)
    seed_organizations()
    seed_sample_reviews()
    print("🎉 Database seeding completed!")


if __name__ == "__main__":
    main()
