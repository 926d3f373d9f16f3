#!/usr/bin/env python3
"""
Script to (re)seed the service catalog: documents, categories, subcategories
Usage: python seed_catalog.py
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from remonta import models  # noqa: E402,F401
from remonta.database import Base, SessionLocal, engine  # noqa: E402
from remonta.domain.catalog.service import CatalogService  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def seed_catalog():
    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()
    try:
        logger.info("🌱 Seeding service catalog...")
        counts = CatalogService(db).seed_catalog()
        logger.info(
            f"✅ Catalog seeded: {counts['documents']} documents, {counts['categories']} categories, "
            f"{counts['subcategories']} subcategories, {counts['categoryDocuments']} category documents"
        )
    except Exception as e:
        logger.error(f"❌ Catalog seed failed: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    seed_catalog()
