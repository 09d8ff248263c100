from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CourseOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    name: str
    tagline: str
    duration: str
    mode: str
    price: int
    subjects: List[str]
    features: List[str]
    benefits: List[str]
    type: str


class EnrollmentRequest(CamelModel):
    name: str = Field(min_length=2, max_length=200)
    class_level: str = Field(alias="class", min_length=1, max_length=20)
    board: str = Field(min_length=1, max_length=50)
    parent_name: str = Field(min_length=2, max_length=200)
    parent_phone: str = Field(min_length=10, max_length=20)
    email: Optional[EmailStr] = None
    course_id: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class EnrollmentOrder(CamelModel):
    order_id: str
    amount: int
    currency: str
    student_id: str
    enrollment_id: str
    payment_id: str
    course_name: str


# fields are optional here so a missing one is reported by the workflow, not the parser
class PaymentVerificationRequest(CamelModel):
    payment_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_order_id: Optional[str] = None
    razorpay_signature: Optional[str] = None


class PaymentVerification(CamelModel):
    message: str
    status: str


class PaymentOut(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    enrollment_id: str
    razorpay_order_id: str
    razorpay_payment_id: Optional[str] = None
    amount: int
    currency: str
    status: str


class RazorpayKeyOut(BaseModel):
    key: str
