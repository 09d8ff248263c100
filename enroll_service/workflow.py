"""
Enrollment and payment-verification workflows.

``enroll`` writes the Student, Enrollment and Payment rows as one unit of work
around the gateway call: nothing is committed until the Payment row exists, and
any failure after the course lookup rolls the session back.

``verify_payment`` checks the gateway signature with the server-held secret
before it looks at any caller-supplied identifier.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, List

from sqlalchemy.orm import Session

from enroll_service import errors, models, schemas
from enroll_service.catalog import CatalogStore
from enroll_service.gateway import PaymentGateway, signature_matches
from enroll_service.ledgers import EnrollmentLedger, PaymentLedger

logger = logging.getLogger(__name__)

CURRENCY = "INR"
MINOR_UNITS_PER_RUPEE = 100


def default_receipt() -> str:
    return f"enroll_{int(time.time() * 1000)}"


@dataclass
class VerificationResult:
    response: schemas.PaymentVerification
    payment: models.Payment
    changed: bool


class EnrollmentWorkflow:
    def __init__(self, db: Session, gateway: PaymentGateway, gateway_secret: str,
                 receipt_factory: Callable[[], str] = default_receipt):
        self.db = db
        self.catalog = CatalogStore(db)
        self.enrollments = EnrollmentLedger(db)
        self.payments = PaymentLedger(db)
        self.gateway = gateway
        self.gateway_secret = gateway_secret
        self.receipt_factory = receipt_factory

    def enroll(self, request: schemas.EnrollmentRequest) -> schemas.EnrollmentOrder:
        course = self.catalog.get(request.course_id)

        try:
            student = self.enrollments.create_student(
                name=request.name,
                class_level=request.class_level,
                board=request.board,
                parent_name=request.parent_name,
                parent_phone=request.parent_phone,
                email=request.email,
            )
            enrollment = self.enrollments.create_enrollment(
                student_id=student.id,
                course_id=course.id,
                amount=course.price,
            )

            order_amount = course.price * MINOR_UNITS_PER_RUPEE
            logger.info("Creating gateway order enrollment=%s amount=%s", enrollment.id, order_amount)
            order = self.gateway.create_order(order_amount, CURRENCY, self.receipt_factory(), auto_capture=True)

            payment = self.payments.create_payment(
                enrollment_id=enrollment.id,
                razorpay_order_id=order.order_id,
                amount=course.price,
                currency=CURRENCY,
            )
            self.db.commit()
        except Exception as exc:
            self.db.rollback()
            logger.error("Enrollment failed for course=%s: %r", request.course_id, exc)
            raise errors.EnrollmentFailed(exc) from exc

        logger.info("Created enrollment id=%s student=%s payment=%s order=%s status=pending",
                    enrollment.id, student.id, payment.id, order.order_id)
        return schemas.EnrollmentOrder(
            order_id=order.order_id,
            amount=order_amount,
            currency=CURRENCY,
            student_id=student.id,
            enrollment_id=enrollment.id,
            payment_id=payment.id,
            course_name=course.name,
        )

    def verify_payment(self, request: schemas.PaymentVerificationRequest) -> VerificationResult:
        missing = _missing_fields(request)
        if missing:
            raise errors.ValidationError(
                "Missing required payment data",
                errors=[{"field": name, "message": "Required"} for name in missing],
            )

        if not signature_matches(request.razorpay_order_id, request.razorpay_payment_id,
                                 request.razorpay_signature, self.gateway_secret):
            logger.warning("Signature mismatch for payment=%s order=%s", request.payment_id, request.razorpay_order_id)
            raise errors.InvalidSignature("Invalid payment signature")

        payment = self.payments.get_payment(request.payment_id)

        # a valid signature only vouches for the order it was issued for
        if payment.razorpay_order_id != request.razorpay_order_id:
            logger.warning("Order mismatch for payment=%s: stored=%s supplied=%s",
                           payment.id, payment.razorpay_order_id, request.razorpay_order_id)
            raise errors.InvalidSignature("Invalid payment signature")

        confirmation = schemas.PaymentVerification(message="Payment verified successfully", status=models.Status.COMPLETED)

        if payment.status == models.Status.COMPLETED:
            if payment.razorpay_payment_id == request.razorpay_payment_id:
                logger.info("Payment %s already verified; nothing to update", payment.id)
                return VerificationResult(response=confirmation, payment=payment, changed=False)
            raise errors.ValidationError("Payment already completed")

        try:
            self.payments.complete_payment(payment, request.razorpay_payment_id)
            self.enrollments.complete_enrollment(payment.enrollment_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Verified payment id=%s razorpay_payment=%s enrollment=%s",
                    payment.id, request.razorpay_payment_id, payment.enrollment_id)
        return VerificationResult(response=confirmation, payment=payment, changed=True)


_REQUIRED_VERIFICATION_FIELDS = (
    ("payment_id", "paymentId"),
    ("razorpay_payment_id", "razorpayPaymentId"),
    ("razorpay_order_id", "razorpayOrderId"),
    ("razorpay_signature", "razorpaySignature"),
)


def _missing_fields(request: schemas.PaymentVerificationRequest) -> List[str]:
    return [alias for attr, alias in _REQUIRED_VERIFICATION_FIELDS if not getattr(request, attr)]
