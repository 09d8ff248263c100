import json
import logging

import pika

from enroll_service import models

EXCHANGE = "enrollment_events"
ENROLLMENT_CREATED_KEY = "enrollment.events.created"
PAYMENT_CONFIRMED_KEY = "payment.events.confirmed"

logger = logging.getLogger(__name__)


class EventPublisher:
    """
    Fire-and-forget publisher for enrollment domain events.
    Runs after the workflow has committed, so a broker failure is logged and
    never undoes or fails the request.
    """

    def __init__(self, rabbitmq_url: str):
        self.rabbitmq_url = rabbitmq_url

    @property
    def enabled(self) -> bool:
        return bool(self.rabbitmq_url)

    def publish(self, routing_key: str, event: dict):
        if not self.enabled:
            logger.debug("Event publishing disabled; dropping %s", event.get("type"))
            return
        try:
            params = pika.URLParameters(self.rabbitmq_url)
            connection = pika.BlockingConnection(params)
            try:
                channel = connection.channel()
                channel.exchange_declare(exchange=EXCHANGE, exchange_type="topic", durable=True)
                channel.basic_publish(
                    exchange=EXCHANGE,
                    routing_key=routing_key,
                    body=json.dumps(event),
                    properties=pika.BasicProperties(content_type="application/json", delivery_mode=2),
                )
            finally:
                connection.close()
            logger.info("Published %s on %s", event.get("type"), routing_key)
        except Exception:
            logger.exception("Error publishing %s event", event.get("type"))


# Events are built while the request session is still open and published later
# from a background task, so they carry plain values only.

def enrollment_created_event(order, course_id: str) -> dict:
    return {
        "type": "EnrollmentCreated",
        "payload": {
            "student_id": order.student_id,
            "enrollment_id": order.enrollment_id,
            "payment_id": order.payment_id,
            "course_id": course_id,
            "order_id": order.order_id,
            "amount": order.amount,
            "currency": order.currency,
        },
    }


def payment_confirmed_event(payment: models.Payment) -> dict:
    return {
        "type": "PaymentConfirmed",
        "payload": {
            "payment_id": payment.id,
            "enrollment_id": payment.enrollment_id,
            "razorpay_order_id": payment.razorpay_order_id,
            "razorpay_payment_id": payment.razorpay_payment_id,
            "amount": payment.amount,
            "currency": payment.currency,
        },
    }
