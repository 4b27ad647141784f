from __future__ import annotations

import sys

from botanica.config import Settings
from botanica.db import Base, build_engine, build_session_factory
from botanica.models import Product
from botanica.repositories import ProductRepository

# prices in kopiyky
SAMPLE_PRODUCTS = [
    {"name": "Золота паста для собак - 15г", "category": "Пасти", "price": 1500, "stock": 25, "size": "15г", "flavor": "натуральний",
     "description": "Золота паста з куркумою та CBD для підтримки здоров'я собак."},
    {"name": "Золота паста для собак - 30г", "category": "Пасти", "price": 2800, "stock": 20, "size": "30г", "flavor": "натуральний",
     "description": "Золота паста з куркумою та CBD, середня упаковка."},
    {"name": "CBD олія для котів 5%", "category": "Олії", "price": 45000, "stock": 12, "size": "10мл", "flavor": "лосось",
     "description": "CBD олія широкого спектру для котів."},
    {"name": "CBD олія для собак 10%", "category": "Олії", "price": 69000, "stock": 8, "size": "10мл", "flavor": "бекон",
     "description": "CBD олія широкого спектру для собак середніх і великих порід."},
    {"name": "Заспокійливі ласощі", "category": "Ласощі", "price": 32000, "stock": 30, "size": "150г", "flavor": "курка",
     "description": "Ласощі з CBD та ромашкою для спокійних прогулянок."},
]


def main(argv: list[str]) -> None:
    reset = "--reset" in argv
    settings = Settings()
    engine = build_engine(settings.database_url)

    if reset:
        print("Rebuilding database (drop/create)...")
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    print("Tables:", ", ".join(sorted(Base.metadata.tables)))

    db = build_session_factory(engine)()
    try:
        if db.query(Product).first():
            print("Products already seeded.")
            return
        repo = ProductRepository(db)
        for p in SAMPLE_PRODUCTS:
            repo.create(p)
        print(f"Seeded {len(SAMPLE_PRODUCTS)} products.")
    finally:
        db.close()


if __name__ == "__main__":
    main(sys.argv[1:])
