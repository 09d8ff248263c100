import uuid

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from enroll_service.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Status:
    PENDING = "pending"
    COMPLETED = "completed"


class CourseType:
    AARAMBH = "aarambh"
    ATAL = "atal"
    ATAL_PREMIUM = "atal-premium"


class Course(Base):
    __tablename__ = "courses"
    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=False)
    tagline = Column(String(300), nullable=False)
    duration = Column(String(100), nullable=False)
    mode = Column(String(100), nullable=False)
    price = Column(Integer, nullable=False)
    subjects = Column(JSON, nullable=False, default=list)
    features = Column(JSON, nullable=False, default=list)
    benefits = Column(JSON, nullable=False, default=list)
    # unique so concurrent first-start seeders cannot insert the same course twice
    type = Column(String(50), nullable=False, unique=True)


class Student(Base):
    __tablename__ = "students"
    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(200), nullable=False)
    class_level = Column("class", String(20), nullable=False)
    board = Column(String(50), nullable=False)
    parent_name = Column(String(200), nullable=False)
    parent_phone = Column(String(20), nullable=False)
    email = Column(String(254), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Enrollment(Base):
    __tablename__ = "enrollments"
    id = Column(String(36), primary_key=True, default=_new_id)
    student_id = Column(String(36), ForeignKey("students.id"), nullable=False, index=True)
    course_id = Column(String(36), ForeignKey("courses.id"), nullable=False, index=True)
    amount = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=Status.PENDING)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    student = relationship("Student")
    course = relationship("Course")


class Payment(Base):
    __tablename__ = "payments"
    id = Column(String(36), primary_key=True, default=_new_id)
    enrollment_id = Column(String(36), ForeignKey("enrollments.id"), nullable=False, index=True)
    razorpay_order_id = Column(String(64), nullable=False, index=True)
    razorpay_payment_id = Column(String(64), nullable=True)
    amount = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="INR")
    status = Column(String(20), nullable=False, default=Status.PENDING)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    enrollment = relationship("Enrollment")
