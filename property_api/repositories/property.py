"""
Property repository executing compiled listing predicates against the store.
Maps document field paths to columns and each constraint variant to a SQL condition.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, func, asc, desc
from sqlalchemy.orm import load_only, raiseload, selectinload
from property_api.repositories.base import BaseRepository
from property_api.models.property import Property, PropertyKeyword, LISTING_SUMMARY_COLUMNS
from property_api.filters.predicate import (
    AnyOf,
    Between,
    Constraint,
    Equals,
    NotNull,
    Predicate,
    SortDirection,
    SortSpec,
)
from typing import Iterable, List, Optional, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)

# Document path -> column
FIELD_COLUMNS = {
    "purpose.purpose.id": Property.purpose_id,
    "purpose.subPurpose.id": Property.sub_purpose_id,
    "status": Property.status,
    "address.location": Property.location,
    "type.id": Property.type_id,
    "subType.id": Property.sub_type_id,
    "bed": Property.bed,
    "bath": Property.bath,
    "price": Property.price,
    "size": Property.size,
    "video": Property.video,
    "createdAt": Property.created_at,
}

# Document paths stored as a child collection
COLLECTION_FIELDS = {
    "keywords": (Property.keyword_entries, PropertyKeyword.keyword),
}


class UnsupportedFieldError(ValueError):
    """Predicate or sort refers to a field the store cannot query."""


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for listing search, counting and detail lookups.
    List queries load only the summary columns and never touch keywords.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def create_property(self, property_data: dict) -> Property:
        """
        Create a listing after checking its numeric invariants.

        Raises:
            ValueError: If validation fails
        """
        Property(**property_data).validate_all()
        created_property = await self.create(property_data)
        logger.info(f"Created property: {created_property.reference_no} (ID: {created_property.id})")
        return created_property

    async def find_listings(
        self,
        predicate: Predicate,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 20,
        exclude_ids: Iterable[uuid.UUID] = ()
    ) -> List[Property]:
        """
        Fetch one page of listings matching a predicate.

        Args:
            predicate: Compiled field constraints
            sort: Optional sort, applied before pagination
            skip: Number of matching listings to skip
            limit: Maximum number of listings to return
            exclude_ids: Identities that must not appear in the result

        Returns:
            Listings with only the summary columns loaded
        """
        try:
            conditions = self.build_conditions(predicate)
            excluded = list(exclude_ids)
            if excluded:
                conditions.append(Property.id.not_in(excluded))

            query = (
                select(Property)
                .options(
                    load_only(*LISTING_SUMMARY_COLUMNS),
                    raiseload(Property.keyword_entries)
                )
            )
            if conditions:
                query = query.where(and_(*conditions))

            query = query.order_by(*self.build_ordering(sort)).offset(skip).limit(limit)

            result = await self.db.execute(query)
            properties = list(result.scalars().all())

            logger.debug(f"Listing search returned {len(properties)} properties (skip={skip}, limit={limit})")
            return properties
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    async def count_listings(self, predicate: Predicate) -> int:
        """Count every listing matching a predicate, ignoring pagination."""
        try:
            count_query = select(func.count(Property.id))
            conditions = self.build_conditions(predicate)
            if conditions:
                count_query = count_query.where(and_(*conditions))

            result = await self.db.execute(count_query)
            total_count = result.scalar() or 0

            logger.debug(f"Counted {total_count} matching properties")
            return total_count
        except Exception as e:
            logger.error(f"Failed to count properties: {e}")
            raise

    async def search_listings(
        self,
        predicate: Predicate,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 20
    ) -> Tuple[List[Property], int]:
        """
        Fetch a page of listings together with the total match count.

        Returns:
            Tuple of (properties list, total count)
        """
        properties = await self.find_listings(predicate, sort=sort, skip=skip, limit=limit)
        total_count = await self.count_listings(predicate)
        return properties, total_count

    async def get_property_with_details(self, property_id: uuid.UUID) -> Optional[Property]:
        """
        Get the full listing document including keywords.

        Returns:
            Property or None if not found
        """
        try:
            query = (
                select(Property)
                .options(selectinload(Property.keyword_entries))
                .where(Property.id == property_id)
            )

            result = await self.db.execute(query)
            property_obj = result.scalar_one_or_none()

            if property_obj:
                logger.debug(f"Retrieved property with details: {property_id}")

            return property_obj
        except Exception as e:
            logger.error(f"Failed to get property with details {property_id}: {e}")
            raise

    def build_conditions(self, predicate: Predicate) -> list:
        """
        Build SQLAlchemy conditions from a predicate.

        Raises:
            UnsupportedFieldError: If a field has no column mapping
        """
        conditions = []
        for field, constraint in predicate.items():
            if field in COLLECTION_FIELDS:
                relation, element = COLLECTION_FIELDS[field]
                conditions.append(relation.any(self._condition(element, constraint)))
            elif field in FIELD_COLUMNS:
                conditions.append(self._condition(FIELD_COLUMNS[field], constraint))
            else:
                raise UnsupportedFieldError(f"Cannot filter on field '{field}'")
        return conditions

    @staticmethod
    def _condition(column, constraint: Constraint):
        if isinstance(constraint, Equals):
            return column == constraint.value
        if isinstance(constraint, AnyOf):
            return column.in_(constraint.values)
        if isinstance(constraint, Between):
            return column.between(constraint.low, constraint.high)
        if isinstance(constraint, NotNull):
            return column.isnot(None)
        raise TypeError(f"Unknown constraint type: {type(constraint).__name__}")

    @staticmethod
    def build_ordering(sort: Optional[SortSpec]) -> list:
        """Ordering clauses; id is always the final tiebreaker so pages never overlap."""
        ordering = []
        if sort is not None:
            if sort.field not in FIELD_COLUMNS:
                raise UnsupportedFieldError(f"Cannot sort on field '{sort.field}'")
            column = FIELD_COLUMNS[sort.field]
            ordering.append(desc(column) if sort.direction is SortDirection.DESC else asc(column))
        ordering.append(asc(Property.id))
        return ordering
