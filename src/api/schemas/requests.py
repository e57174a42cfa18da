"""
Pydantic schemas — Request bodies for the API.

Identities (citizen, staff) arrive as plain ids; authentication
happens upstream.
"""

from pydantic import BaseModel, Field


class CreateRequestBody(BaseModel):
    document_type_id: str
    delivery_method: str
    subject_data: dict = {}
    citizen_id: str | None = None
    commune: str | None = None
    address: str | None = None
    phone_number: str | None = None
    payment_method: str | None = None
    total: int | None = Field(default=None, description="Total displayed to the citizen")


class StaffActionBody(BaseModel):
    staff_id: str = Field(min_length=1)


class RejectBody(StaffActionBody):
    reason: str


class InitializePaymentBody(BaseModel):
    method: str | None = None


class ConfirmPaymentBody(BaseModel):
    external_reference: str
    status: str = Field(description="'succeeded' or 'failed'")


class NoteBody(BaseModel):
    author: str
    content: str
