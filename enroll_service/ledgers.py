from typing import Optional

from sqlalchemy.orm import Session

from enroll_service import errors, models


# Ledgers add and flush so generated ids are available; the workflow owns commit/rollback.

class EnrollmentLedger:
    def __init__(self, db: Session):
        self.db = db

    def create_student(self, name: str, class_level: str, board: str, parent_name: str,
                       parent_phone: str, email: Optional[str] = None) -> models.Student:
        student = models.Student(
            name=name,
            class_level=class_level,
            board=board,
            parent_name=parent_name,
            parent_phone=parent_phone,
            email=email,
        )
        self.db.add(student)
        self.db.flush()
        return student

    def create_enrollment(self, student_id: str, course_id: str, amount: int) -> models.Enrollment:
        enrollment = models.Enrollment(
            student_id=student_id,
            course_id=course_id,
            amount=amount,
            status=models.Status.PENDING,
        )
        self.db.add(enrollment)
        self.db.flush()
        return enrollment

    def get_enrollment(self, enrollment_id: str) -> models.Enrollment:
        enrollment = self.db.query(models.Enrollment).filter(models.Enrollment.id == enrollment_id).first()
        if not enrollment:
            raise errors.NotFound("Enrollment not found")
        return enrollment

    def complete_enrollment(self, enrollment_id: str) -> models.Enrollment:
        enrollment = self.get_enrollment(enrollment_id)
        enrollment.status = models.Status.COMPLETED
        self.db.flush()
        return enrollment


class PaymentLedger:
    def __init__(self, db: Session):
        self.db = db

    def create_payment(self, enrollment_id: str, razorpay_order_id: str, amount: int,
                       currency: str = "INR") -> models.Payment:
        payment = models.Payment(
            enrollment_id=enrollment_id,
            razorpay_order_id=razorpay_order_id,
            amount=amount,
            currency=currency,
            status=models.Status.PENDING,
        )
        self.db.add(payment)
        self.db.flush()
        return payment

    def get_payment(self, payment_id: str) -> models.Payment:
        payment = self.db.query(models.Payment).filter(models.Payment.id == payment_id).first()
        if not payment:
            raise errors.NotFound("Payment not found")
        return payment

    def complete_payment(self, payment: models.Payment, razorpay_payment_id: str) -> models.Payment:
        payment.status = models.Status.COMPLETED
        payment.razorpay_payment_id = razorpay_payment_id
        self.db.flush()
        return payment
