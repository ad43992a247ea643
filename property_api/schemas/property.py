"""
Pydantic schemas for listing responses.
Field aliases keep the camelCase document shape on the wire.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


class Category(BaseModel):
    """Identifier/name pair used for purpose, type and sub-type."""

    id: str = Field(..., description="Category identifier", examples=["apartment"])
    name: str = Field(..., description="Category display name", examples=["Apartment"])


class SubPurpose(BaseModel):
    id: str = Field(..., description="Sub-purpose identifier", examples=["ready"])


class Purpose(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    purpose: Category
    sub_purpose: Optional[SubPurpose] = Field(None, alias="subPurpose")


class Address(BaseModel):
    location: str = Field(..., description="Listing location", examples=["Gulshan"])


class ListingSummary(BaseModel):
    """List-view projection of a listing."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Listing unique identifier")
    reference_no: str = Field(..., alias="referenceNo", description="Human-facing reference number")
    title: str
    size: float = Field(..., ge=0)
    price: float = Field(..., ge=0)
    bed: int = Field(..., ge=0)
    bath: int = Field(..., ge=0)
    status: str
    address: Address
    images: List[str] = Field(default_factory=list)


class ListingDetail(ListingSummary):
    """Full listing document."""

    purpose: Purpose
    type: Category
    sub_type: Category = Field(..., alias="subType")
    keywords: List[str] = Field(default_factory=list)
    video: Optional[str] = Field(None, description="Video tour reference, null when there is none")
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class PropertyListResponse(BaseModel):
    """Paginated listing search envelope."""

    success: bool = True
    message: str = ""
    page: int = Field(..., ge=1, examples=[1])
    limit: int = Field(..., ge=1, examples=[20])
    count: int = Field(..., ge=0, description="Total listings matching the filters", examples=[125])
    results: List[ListingSummary]


class PropertyDetailResults(BaseModel):
    details: ListingDetail
    related: List[ListingSummary] = Field(default_factory=list)


class PropertyDetailResponse(BaseModel):
    """Listing detail envelope with related listings."""

    success: bool = True
    message: str = ""
    results: PropertyDetailResults


class ErrorResponse(BaseModel):
    """Failure envelope shared by every endpoint."""

    success: bool = False
    message: str = Field(..., examples=["Property not found"])
