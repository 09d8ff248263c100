# enroll_service/main.py
from typing import List
import os
import logging

from fastapi import FastAPI, BackgroundTasks, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from enroll_service import database, errors, events, schemas, seed
from enroll_service.catalog import CatalogStore
from enroll_service.gateway import PaymentGateway, RazorpayGateway
from enroll_service.ledgers import PaymentLedger
from enroll_service.workflow import EnrollmentWorkflow

# config / env
DATABASE_URL = os.getenv("DATABASE_URL", "postgresql://postgres:postgres@db:5432/enrollment_db")
RABBITMQ_URL = os.getenv("RABBITMQ_URL", "")
DEFAULT_KEY_ID = "rzp_test_default"
DEFAULT_KEY_SECRET = "secret_default"
RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID") or os.getenv("RAZORPAY_KEY") or DEFAULT_KEY_ID
RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET") or os.getenv("RAZORPAY_SECRET") or DEFAULT_KEY_SECRET
SEED_DELAY_SECONDS = float(os.getenv("SEED_DELAY_SECONDS", "1"))

# logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("enrollment-service")

app = FastAPI(title="Enrollment Service")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Startup: initialize DB and seed the catalog in the background
@app.on_event("startup")
def startup():
    logger.info("Initializing DB and scheduling course seeding...")
    if RAZORPAY_KEY_SECRET == DEFAULT_KEY_SECRET:
        logger.warning("RAZORPAY_KEY_SECRET is not set; using the development default secret.")
    session_factory = database.init_db(DATABASE_URL)
    seed.start_seeder(session_factory, SEED_DELAY_SECONDS)
    logger.info("Startup complete.")

@app.exception_handler(errors.EnrollmentServiceError)
def service_error_handler(request: Request, exc: errors.EnrollmentServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())

@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError):
    field_errors = [
        {"field": ".".join(str(part) for part in err["loc"] if part != "body"), "message": err["msg"]}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"message": "Validation error", "errors": field_errors})

def get_session_factory():
    if database.SessionLocal is None:
        try:
            database.init_db(DATABASE_URL)
        except SQLAlchemyError as e:
            logger.exception("Database initialization failed")
            raise errors.ServiceUnavailable("Database unreachable") from e
    return database.SessionLocal

def get_db(session_factory=Depends(get_session_factory)):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()

_gateway = None
def get_gateway() -> PaymentGateway:
    global _gateway
    if _gateway is None:
        _gateway = RazorpayGateway(RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET)
    return _gateway

def get_event_publisher() -> events.EventPublisher:
    return events.EventPublisher(RABBITMQ_URL)

def get_workflow(db: Session = Depends(get_db), gateway: PaymentGateway = Depends(get_gateway)) -> EnrollmentWorkflow:
    return EnrollmentWorkflow(db, gateway, RAZORPAY_KEY_SECRET)

# Root and health endpoints
@app.get("/")
def root():
    return {"service": "Enrollment Service", "status": "running", "endpoints": ["/api/courses", "/api/enroll", "/api/verify-payment", "/docs"]}

@app.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.exception("Health check failed: %s", e)
        raise errors.ServiceUnavailable("Database unreachable") from e
    return {"status": "ok"}

# Course catalog
@app.get("/api/courses", response_model=List[schemas.CourseOut])
def list_courses(db: Session = Depends(get_db)):
    try:
        courses = CatalogStore(db).list()
    except SQLAlchemyError as e:
        logger.exception("Error fetching courses")
        raise errors.InternalError("Failed to fetch courses") from e
    return [schemas.CourseOut.model_validate(c) for c in courses]

@app.get("/api/courses/class/{class_level}", response_model=List[schemas.CourseOut])
def list_courses_for_class(class_level: str, db: Session = Depends(get_db)):
    try:
        courses = CatalogStore(db).list_by_class(class_level)
    except SQLAlchemyError as e:
        logger.exception("Error fetching courses for class %s", class_level)
        raise errors.InternalError("Failed to fetch courses for class") from e
    return [schemas.CourseOut.model_validate(c) for c in courses]

@app.get("/api/courses/{course_id}", response_model=schemas.CourseOut)
def get_course(course_id: str, db: Session = Depends(get_db)):
    try:
        course = CatalogStore(db).get(course_id)
    except SQLAlchemyError as e:
        logger.exception("Error fetching course %s", course_id)
        raise errors.InternalError("Failed to fetch course") from e
    return schemas.CourseOut.model_validate(course)

# Enroll: create student, enrollment, gateway order and pending payment
@app.post("/api/enroll", response_model=schemas.EnrollmentOrder)
def enroll(enrollment_in: schemas.EnrollmentRequest, background_tasks: BackgroundTasks,
           workflow: EnrollmentWorkflow = Depends(get_workflow),
           publisher: events.EventPublisher = Depends(get_event_publisher)):
    try:
        order = workflow.enroll(enrollment_in)
    except SQLAlchemyError as e:
        logger.exception("Error looking up course %s", enrollment_in.course_id)
        raise errors.InternalError("Failed to create enrollment") from e

    background_tasks.add_task(
        publisher.publish,
        events.ENROLLMENT_CREATED_KEY,
        events.enrollment_created_event(order, enrollment_in.course_id),
    )
    return order

# Verify the gateway signature and complete payment + enrollment
@app.post("/api/verify-payment", response_model=schemas.PaymentVerification)
def verify_payment(verification_in: schemas.PaymentVerificationRequest, background_tasks: BackgroundTasks,
                   workflow: EnrollmentWorkflow = Depends(get_workflow),
                   publisher: events.EventPublisher = Depends(get_event_publisher)):
    try:
        result = workflow.verify_payment(verification_in)
        if result.changed:
            background_tasks.add_task(
                publisher.publish,
                events.PAYMENT_CONFIRMED_KEY,
                events.payment_confirmed_event(result.payment),
            )
    except SQLAlchemyError as e:
        logger.exception("Payment verification error for payment=%s", verification_in.payment_id)
        raise errors.InternalError("Failed to verify payment") from e
    return result.response

# Get payment by id
@app.get("/api/payments/{payment_id}", response_model=schemas.PaymentOut)
def get_payment(payment_id: str, db: Session = Depends(get_db)):
    try:
        payment = PaymentLedger(db).get_payment(payment_id)
    except SQLAlchemyError as e:
        logger.exception("Error fetching payment %s", payment_id)
        raise errors.InternalError("Failed to fetch payment") from e
    return schemas.PaymentOut.model_validate(payment)

# Public key for the checkout widget
@app.get("/api/razorpay-key", response_model=schemas.RazorpayKeyOut)
def razorpay_key():
    return {"key": RAZORPAY_KEY_ID}
