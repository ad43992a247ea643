"""
Property service for listing search and detail lookups.
Runs parsing and filter compilation, executes the store queries and turns store
failures into user-safe errors.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from property_api.config import Settings, get_settings
from property_api.filters import (
    Equals,
    FilterCompiler,
    Predicate,
    parse_pagination,
    parse_query_string,
)
from property_api.models.property import Property
from property_api.repositories.property import PropertyRepository
from property_api.utils.exceptions import (
    ListingQueryError,
    PropertyNotFoundError,
    StoreError,
)
import uuid
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelatedPolicy:
    """Which document fields a related listing must share, and how many to return."""

    match_fields: Tuple[str, ...] = ("type.id", "subType.id")
    limit: int = 3

    @classmethod
    def from_settings(cls, settings: Settings) -> "RelatedPolicy":
        return cls(tuple(settings.related_match_fields), settings.related_limit)


@dataclass
class ListingPage:
    """One page of search results plus the total number of matches."""

    page: int
    limit: int
    count: int
    results: List[Property] = field(default_factory=list)


def document_value(document: Dict[str, Any], path: str) -> Any:
    """Read a dotted path such as 'type.id' from a listing document."""
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


class PropertyService:
    """
    Listing search and detail service.
    The session is the only store handle; it is passed in per request.
    """

    def __init__(self, db_session: AsyncSession, settings: Optional[Settings] = None):
        self.db = db_session
        self.settings = settings or get_settings()
        self.property_repo = PropertyRepository(db_session)
        self.compiler = FilterCompiler(status_field=self.settings.status_filter_field)
        self.related_policy = RelatedPolicy.from_settings(self.settings)

    async def list_properties(self, raw_query: Optional[str]) -> ListingPage:
        """
        Search listings from a raw query string.

        Args:
            raw_query: Query string of the request, possibly empty

        Returns:
            ListingPage with the requested page and the total match count

        Raises:
            ListingQueryError: If the store cannot be queried
        """
        params = parse_query_string(raw_query)
        page, limit = parse_pagination(
            params,
            default_limit=self.settings.default_page_size,
            max_limit=self.settings.max_page_size
        )
        compiled = self.compiler.compile(params)

        try:
            properties, total_count = await self.property_repo.search_listings(
                compiled.predicate,
                sort=compiled.sort,
                skip=(page - 1) * limit,
                limit=limit
            )
        except Exception as e:
            logger.error(f"Error fetching properties: {e}")
            raise ListingQueryError(status_code=self.settings.list_failure_status_code) from e

        logger.debug(f"Listing search returned {len(properties)} of {total_count} results")
        return ListingPage(page=page, limit=limit, count=total_count, results=properties)

    async def get_property_details(self, property_id: str) -> Tuple[Property, List[Property]]:
        """
        Get one listing and the listings related to it.

        Args:
            property_id: Listing identifier from the request path

        Returns:
            Tuple of (full listing, related listings)

        Raises:
            PropertyNotFoundError: If the identifier is malformed or unknown
            StoreError: If the store cannot be queried
        """
        try:
            listing_uuid = uuid.UUID(str(property_id))
        except ValueError:
            logger.info(f"Malformed property id requested: {property_id}")
            raise PropertyNotFoundError(property_id)

        try:
            property_obj = await self.property_repo.get_property_with_details(listing_uuid)
        except Exception as e:
            logger.error(f"Error fetching property {property_id}: {e}")
            raise StoreError("Failed to fetch property") from e

        if property_obj is None:
            logger.info(f"Property not found: {property_id}")
            raise PropertyNotFoundError(property_id)

        related = await self.get_related_properties(property_obj)
        return property_obj, related

    async def get_related_properties(self, property_obj: Property) -> List[Property]:
        """
        Get listings sharing the policy's match fields with a listing, excluding itself.

        Raises:
            StoreError: If the store cannot be queried
        """
        document = property_obj.to_dict()
        predicate = self.related_predicate(document)

        try:
            related = await self.property_repo.find_listings(
                predicate,
                limit=self.related_policy.limit,
                exclude_ids=[property_obj.id]
            )
        except Exception as e:
            logger.error(f"Error fetching properties related to {property_obj.id}: {e}")
            raise StoreError("Failed to fetch property") from e

        logger.debug(f"Found {len(related)} properties related to {property_obj.id}")
        return related

    def related_predicate(self, document: Dict[str, Any]) -> Predicate:
        """Equality constraints on every policy field the listing has a value for."""
        constraints = {}
        for path in self.related_policy.match_fields:
            value = document_value(document, path)
            if value is None:
                logger.debug(f"Listing {document.get('id')} has no value for '{path}', not matched on it")
                continue
            constraints[path] = Equals(value)
        return Predicate(constraints)
