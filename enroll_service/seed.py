import logging
import threading
import time

from sqlalchemy.exc import IntegrityError

from enroll_service import models
from enroll_service.catalog import CatalogStore

logger = logging.getLogger(__name__)

SEED_COURSES = [
    {
        "name": "Aarambh Course",
        "tagline": "Start your learning journey with us!",
        "duration": "1 Week",
        "mode": "Live Online Classes",
        "price": 9,
        "subjects": ["Math", "Science", "English", "Vedic Math", "Public Speaking"],
        "features": [
            "6 Days Live Classes",
            "Interactive & Engaging Lessons",
            "Small Batch Sizes for Personalized Attention",
            "Doubt Clearing Sessions During or After Class",
            "Fun Animated Videos & Learning Materials",
        ],
        "benefits": [
            "Low-cost trial to experience HeyyGuru's teaching",
            "Interactive learning experience",
            "Build confidence in core subjects",
            "Personalized attention in small batches",
        ],
        "type": models.CourseType.AARAMBH,
    },
    {
        "name": "Atal Course",
        "tagline": "Padhai ka Agla Kadam, Success ki Guarantee",
        "duration": "1 Year (Academic Session)",
        "mode": "Live Online Classes",
        "price": 4250,
        "subjects": ["Mathematics", "Science", "English", "Social Studies"],
        "features": [
            "1–2 Weekly Mentor Doubt Sessions",
            "Monthly Tests",
            "High-Quality Content",
            "Flexible Learning",
        ],
        "benefits": [
            "Strengthen core subjects",
            "Improve grades with regular assessments",
            "Interactive & engaging content",
            "Affordable yearly plan",
        ],
        "type": models.CourseType.ATAL,
    },
    {
        "name": "Atal Course (Premium Plus)",
        "tagline": "Complete academic + skill development with personal guidance",
        "duration": "1 Year",
        "mode": "Live Online Classes",
        "price": 9999,
        "subjects": ["Mathematics", "Science", "English", "Social Studies", "Vedic Mathematics", "Public Speaking"],
        "features": [
            "Daily 1-on-1 Mentor Sessions",
            "Bi-Weekly Minor Tests",
            "Monthly Major Tests",
            "Monthly PTMs",
            "Skill Development Sessions",
            "Counseling Sessions",
            "Competitive Exam Preparation",
            "Extra Learning Resources",
        ],
        "benefits": [
            "Strong academics + life skills",
            "Daily mentor support for faster learning",
            "Preparedness for competitive exams",
            "Active parent involvement",
        ],
        "type": models.CourseType.ATAL_PREMIUM,
    },
]


def seed_courses(session_factory) -> int:
    """
    Insert the seed courses when the catalog is empty; a catalog that already
    holds any course is left alone. Each insert commits on its own; a
    unique-constraint conflict means a concurrent first start seeded that
    course first, and it is skipped.
    Returns the number of courses inserted.
    """
    db = session_factory()
    inserted = 0
    try:
        catalog = CatalogStore(db)
        if catalog.count() > 0:
            logger.info("Course catalog already initialized.")
            return 0

        for fields in SEED_COURSES:
            try:
                catalog.create(**fields)
                db.commit()
                inserted += 1
            except IntegrityError:
                db.rollback()
                logger.info("Seed course type=%s inserted concurrently; skipping", fields["type"])
    finally:
        db.close()

    logger.info("Seeded %s course(s).", inserted)
    return inserted


def _seed_after_delay(session_factory, delay: float):
    time.sleep(delay)
    try:
        seed_courses(session_factory)
    except Exception:
        logger.exception("Failed to initialize default courses")


_seeder = None
def start_seeder(session_factory, delay: float = 1.0):
    global _seeder
    if _seeder is None:
        _seeder = threading.Thread(target=_seed_after_delay, args=(session_factory, delay), daemon=True)
        _seeder.start()
    return _seeder
