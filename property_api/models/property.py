"""
Property listing model.
Stores categorical, numeric and descriptive listing data and renders it to the
nested document shape served by the API.
"""

from sqlalchemy import String, Integer, Numeric, JSON, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from property_api.database import Base
import uuid
from typing import Any, Dict, List, Optional


class PropertyKeyword(Base):
    """Free-text keyword attached to a listing."""

    __tablename__ = "property_keywords"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    keyword: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True
    )

    property_rel: Mapped["Property"] = relationship(
        "Property",
        back_populates="keyword_entries"
    )

    def __repr__(self) -> str:
        return f"<PropertyKeyword(property_id={self.property_id}, keyword={self.keyword})>"


class Property(Base):
    """
    Property listing available for sale or rent.
    Nested document fields (purpose, type, subType, address) are flattened into columns.
    """

    __tablename__ = "properties"

    # Identity
    reference_no: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Human-facing reference number"
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Listing title"
    )

    # Purpose (sale, rent, ...) and optional sub-purpose
    purpose_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    purpose_name: Mapped[str] = mapped_column(String(255), nullable=False)
    sub_purpose_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)

    status: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
        comment="Listing status"
    )

    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="address.location"
    )

    # Property type and sub-type
    type_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    type_name: Mapped[str] = mapped_column(String(255), nullable=False)
    sub_type_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    sub_type_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Numeric attributes
    bed: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    bath: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(
        Numeric(precision=14, scale=2, asdecimal=False),
        nullable=False,
        index=True
    )
    size: Mapped[float] = mapped_column(
        Numeric(precision=12, scale=2, asdecimal=False),
        nullable=False,
        comment="Property size"
    )

    # Descriptive
    images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    video: Mapped[Optional[str]] = mapped_column(
        String(512),
        nullable=True,
        default=None,
        comment="Video tour reference; null means no tour"
    )

    keyword_entries: Mapped[List[PropertyKeyword]] = relationship(
        PropertyKeyword,
        back_populates="property_rel",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PropertyKeyword.keyword"
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, reference_no={self.reference_no}, price={self.price})>"

    @property
    def keywords(self) -> List[str]:
        return [entry.keyword for entry in self.keyword_entries]

    @keywords.setter
    def keywords(self, values: List[str]) -> None:
        self.keyword_entries = [PropertyKeyword(keyword=value) for value in dict.fromkeys(values)]

    def validate_all(self) -> None:
        """
        Check the numeric invariants of a listing.

        Raises:
            ValueError: If any numeric attribute is negative
        """
        for field in ("bed", "bath", "price", "size"):
            value = getattr(self, field)
            if value is None:
                raise ValueError(f"Property {field} is required")
            if value < 0:
                raise ValueError(f"Property {field} cannot be negative")

    def to_summary_dict(self) -> Dict[str, Any]:
        """Render the list-view projection of the listing."""
        return {
            "id": str(self.id),
            "referenceNo": self.reference_no,
            "title": self.title,
            "size": self.size,
            "price": self.price,
            "bed": self.bed,
            "bath": self.bath,
            "status": self.status,
            "address": {"location": self.location},
            "images": list(self.images or []),
        }

    def to_dict(self) -> Dict[str, Any]:
        """
        Render the full listing document.

        Returns:
            Dictionary shaped like the stored document, with camelCase keys
        """
        purpose: Dict[str, Any] = {
            "purpose": {"id": self.purpose_id, "name": self.purpose_name},
        }
        if self.sub_purpose_id is not None:
            purpose["subPurpose"] = {"id": self.sub_purpose_id}

        result = self.to_summary_dict()
        result.update({
            "purpose": purpose,
            "type": {"id": self.type_id, "name": self.type_name},
            "subType": {"id": self.sub_type_id, "name": self.sub_type_name},
            "keywords": self.keywords,
            "video": self.video,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        })
        return result


# Columns loaded for the list view; everything else stays deferred
LISTING_SUMMARY_COLUMNS = (
    Property.id,
    Property.reference_no,
    Property.title,
    Property.size,
    Property.price,
    Property.bed,
    Property.bath,
    Property.status,
    Property.location,
    Property.images,
)


# Composite index for the related-listings lookup
type_subtype_index = Index(
    "idx_properties_type_subtype",
    Property.type_id,
    Property.sub_type_id
)

# Composite index for price range filtering within a purpose
purpose_price_index = Index(
    "idx_properties_purpose_price",
    Property.purpose_id,
    Property.price
)
