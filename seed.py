from datetime import timedelta
from decimal import Decimal

from sportsmeet.auth import get_password_hash
from sportsmeet.clock import utcnow
from sportsmeet.database import SessionLocal, engine, Base
from sportsmeet.models import Activity, Comment, Order, Registration, User

# Create tables
Base.metadata.create_all(bind=engine)

db = SessionLocal()

# Clear existing data
db.query(Comment).delete()
db.query(Registration).delete()
db.query(Order).delete()
db.query(Activity).delete()
db.query(User).delete()

# Sample accounts
organizer = User(
    username="organizer",
    email="organizer@example.com",
    hashed_password=get_password_hash("organizer123"),
    real_name="Activity Organizer",
)
player = User(
    username="player",
    email="player@example.com",
    hashed_password=get_password_hash("player123"),
    real_name="Weekend Player",
)
db.add_all([organizer, player])
db.flush()

now = utcnow()

# Sample activities
activities = [
    Activity(
        title="Sunday 5-a-side",
        description="Friendly five-a-side football on the artificial pitch.",
        location="Riverside Sports Park",
        category="football",
        start_time=now + timedelta(days=3),
        end_time=now + timedelta(days=3, hours=2),
        price=Decimal("50.00"),
        max_participants=10,
        creator_id=organizer.id,
    ),
    Activity(
        title="Evening badminton doubles",
        description="Rotating doubles, all levels welcome.",
        location="Community Hall Court 2",
        category="badminton",
        requirements="Bring your own racket",
        start_time=now + timedelta(days=5),
        end_time=now + timedelta(days=5, hours=2),
        price=Decimal("20.00"),
        max_participants=8,
        creator_id=organizer.id,
    ),
    Activity(
        title="Morning 10k run",
        description="Easy pace group run along the canal.",
        location="Canal Towpath, North Gate",
        category="running",
        start_time=now + timedelta(days=1),
        end_time=now + timedelta(days=1, hours=1),
        price=Decimal("0"),
        max_participants=30,
        creator_id=organizer.id,
    ),
]

db.add_all(activities)
db.commit()

print("Database seeded successfully!")
print("  - 2 users (organizer / player)")
print(f"  - {len(activities)} activities")

db.close()
