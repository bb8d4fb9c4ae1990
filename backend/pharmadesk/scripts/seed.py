"""
Seed staff users and a sample medicine catalog into the DB.

Usage:
  python -m pharmadesk.scripts.seed

Both steps are idempotent: existing usernames are left alone and the catalog
is only seeded while it holds fewer than 10 medicines.
"""
import logging

from sqlalchemy.orm import Session

from pharmadesk.core.config import settings
from pharmadesk.core.db import SessionLocal, Base, engine
from pharmadesk.core.logging import setup_logging
from pharmadesk.core.security import hash_password
from pharmadesk.models import Medicine, User

logger = logging.getLogger(__name__)

STAFF = [
    ("admin", "admin@pharmadesk.local", "admin123", "admin"),
    ("chemist", "chemist@pharmadesk.local", "chemist123", "chemist"),
    ("reception", "reception@pharmadesk.local", "reception123", "receptionist"),
]

CATALOG = [
    # name, strength, form, selling price, stock, reorder level
    ("Paracetamol", "500 mg", "tablet", 2.0, 400, 50),
    ("Paracetamol", "650 mg", "tablet", 2.5, 300, 50),
    ("Ibuprofen", "400 mg", "tablet", 3.0, 200, 30),
    ("Azithromycin", "500 mg", "tablet", 22.0, 120, 20),
    ("Amoxicillin", "500 mg", "capsule", 8.5, 150, 20),
    ("Pantoprazole", "40 mg", "tablet", 6.0, 180, 30),
    ("Metformin", "500 mg", "tablet", 1.8, 250, 50),
    ("Cetirizine", "10 mg", "tablet", 1.5, 220, 30),
    ("Cough Syrup", "100 ml", "syrup", 85.0, 40, 10),
    ("ORS", "21 g", "sachet", 20.0, 90, 20),
    ("Calcium", "500 mg", "tablet", 4.0, 160, 30),
]


def seed_staff(db: Session) -> int:
    created = 0
    for username, email, password, role in STAFF:
        if db.query(User).filter(User.username == username).first():
            continue
        db.add(User(username=username, email=email, password=hash_password(password), role=role))
        created += 1
    db.commit()
    return created


def seed_catalog(db: Session) -> int:
    count = db.query(Medicine).count()
    if count >= 10:
        logger.info("Catalog already has %s items. Skipping seed.", count)
        return 0
    db.add_all(
        Medicine(
            name=name,
            strength=strength,
            form=form,
            selling_price=price,
            stock_qty=stock,
            reorder_level=reorder,
        )
        for name, strength, form, price, stock, reorder in CATALOG
    )
    db.commit()
    return len(CATALOG)


def main():
    setup_logging(settings.LOG_LEVEL)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        users = seed_staff(db)
        meds = seed_catalog(db)
    logger.info("Seeded %s users and %s medicines.", users, meds)


if __name__ == "__main__":
    main()
