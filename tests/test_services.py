"""
Tests for the property service: listing execution, detail lookups and related listings.
"""

import logging
import pytest
import uuid
from unittest.mock import AsyncMock, patch
from sqlalchemy.exc import OperationalError

from property_api.config import Settings
from property_api.filters import Equals
from property_api.models.property import Property
from property_api.repositories.property import PropertyRepository
from property_api.services.property import PropertyService, RelatedPolicy, document_value
from property_api.utils.exceptions import ListingQueryError, PropertyNotFoundError, StoreError
from tests.conftest import ListingFactory


class TestListProperties:
    """Test the listing search flow from raw query string to page."""

    @pytest.mark.asyncio
    async def test_defaults(self, property_service: PropertyService, property_repository: PropertyRepository):
        await ListingFactory.create_listings(property_repository, 3)

        listing_page = await property_service.list_properties("")

        assert listing_page.page == 1
        assert listing_page.limit == 20
        assert listing_page.count == 3
        assert len(listing_page.results) == 3

    @pytest.mark.asyncio
    async def test_pagination(self, property_service: PropertyService, property_repository: PropertyRepository):
        await ListingFactory.create_listings(property_repository, 25, purpose_id="rent")
        await ListingFactory.create_listings(property_repository, 4, purpose_id="sale")

        listing_page = await property_service.list_properties("purpose=rent&page=2&limit=10")

        assert listing_page.page == 2
        assert listing_page.limit == 10
        assert listing_page.count == 25
        assert len(listing_page.results) == 10

    @pytest.mark.asyncio
    async def test_last_partial_page(self, property_service: PropertyService, property_repository: PropertyRepository):
        await ListingFactory.create_listings(property_repository, 25)

        listing_page = await property_service.list_properties("page=3&limit=10")

        assert len(listing_page.results) == 5
        assert listing_page.count == 25

    @pytest.mark.asyncio
    async def test_page_past_the_end(self, property_service: PropertyService, property_repository: PropertyRepository):
        await ListingFactory.create_listings(property_repository, 3)

        listing_page = await property_service.list_properties("page=9")

        assert listing_page.results == []
        assert listing_page.count == 3

    @pytest.mark.asyncio
    async def test_limit_is_capped(self, property_service: PropertyService):
        listing_page = await property_service.list_properties("limit=100000")

        assert listing_page.limit == 100

    @pytest.mark.asyncio
    async def test_partial_price_range_leaves_price_unconstrained(
        self, property_service: PropertyService, property_repository: PropertyRepository
    ):
        for price in [100, 5000, 90000]:
            await ListingFactory.create_listing(property_repository, price=price)

        only_min = await property_service.list_properties("priceMin=1000")
        only_max = await property_service.list_properties("priceMax=1000")
        both = await property_service.list_properties("priceMin=1000&priceMax=10000")

        assert only_min.count == 3
        assert only_max.count == 3
        assert [listing.price for listing in both.results] == [5000]

    @pytest.mark.asyncio
    async def test_non_numeric_bed_is_ignored(
        self, property_service: PropertyService, property_repository: PropertyRepository
    ):
        await ListingFactory.create_listing(property_repository, bed=1)
        await ListingFactory.create_listing(property_repository, bed=4)

        listing_page = await property_service.list_properties("bed=lots")

        assert listing_page.count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", ["bed=2.5", "bed=1e30", "bath=99999999999999999999"])
    async def test_fractional_or_huge_bed_is_ignored(
        self, property_service: PropertyService, property_repository: PropertyRepository, raw: str
    ):
        await ListingFactory.create_listings(property_repository, 2)

        listing_page = await property_service.list_properties(raw)

        assert listing_page.count == 2

    @pytest.mark.asyncio
    async def test_huge_page_returns_empty_page(
        self, property_service: PropertyService, property_repository: PropertyRepository
    ):
        await ListingFactory.create_listings(property_repository, 3)

        listing_page = await property_service.list_properties("page=99999999999999999999")

        assert listing_page.results == []
        assert listing_page.count == 3

    @pytest.mark.asyncio
    async def test_sort_lowest_price(self, property_service: PropertyService, property_repository: PropertyRepository):
        for price in [700, 300, 500, 100]:
            await ListingFactory.create_listing(property_repository, price=price)

        listing_page = await property_service.list_properties("sort=lowestPrice")
        prices = [listing.price for listing in listing_page.results]

        assert prices == sorted(prices)

    @pytest.mark.asyncio
    async def test_sort_highest_price(self, property_service: PropertyService, property_repository: PropertyRepository):
        for price in [700, 300, 500, 100]:
            await ListingFactory.create_listing(property_repository, price=price)

        listing_page = await property_service.list_properties("sort=highestPrice")
        prices = [listing.price for listing in listing_page.results]

        assert prices == sorted(prices, reverse=True)

    @pytest.mark.asyncio
    async def test_status_targets_sub_purpose_when_configured(
        self, db_session, property_repository: PropertyRepository
    ):
        await ListingFactory.create_listing(property_repository, status="ready", sub_purpose_id="ongoing")
        await ListingFactory.create_listing(property_repository, status="ongoing", sub_purpose_id="ready")
        settings = Settings(environment="testing", status_filter_field="purpose.subPurpose.id")

        listing_page = await PropertyService(db_session, settings).list_properties("status=ongoing")

        assert [listing.status for listing in listing_page.results] == ["ready"]

    @pytest.mark.asyncio
    async def test_store_failure_is_wrapped(self, property_service: PropertyService):
        failure = OperationalError("SELECT", {}, Exception("connection refused"))
        with patch.object(property_service.property_repo, "search_listings", AsyncMock(side_effect=failure)):
            with pytest.raises(ListingQueryError) as exc_info:
                await property_service.list_properties("purpose=sale")

        assert exc_info.value.detail == "Failed to fetch properties"
        assert exc_info.value.status_code == 200
        assert "connection refused" not in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_compiled_filters_logged_once_at_debug(self, property_service: PropertyService, caplog):
        caplog.set_level(logging.DEBUG, logger="property_api")

        await property_service.list_properties("bed=3&location=Gulshan")

        filter_records = [
            record for record in caplog.records
            if record.name.startswith("property_api") and "Gulshan" in record.getMessage()
        ]
        assert len(filter_records) == 1
        assert filter_records[0].levelno == logging.DEBUG


class TestGetPropertyDetails:
    """Test detail lookup and related listings."""

    @pytest.mark.asyncio
    async def test_details_with_related(self, property_service: PropertyService, property_repository: PropertyRepository):
        listing = await ListingFactory.create_listing(property_repository, type_id="residential", sub_type_id="duplex")
        siblings = await ListingFactory.create_listings(property_repository, 2, type_id="residential", sub_type_id="duplex")
        await ListingFactory.create_listings(property_repository, 2, type_id="residential", sub_type_id="apartment")
        await ListingFactory.create_listings(property_repository, 2, type_id="commercial", sub_type_id="duplex")

        details, related = await property_service.get_property_details(str(listing.id))

        assert details.id == listing.id
        assert sorted(item.id for item in related) == sorted(sibling.id for sibling in siblings)
        assert listing.id not in {item.id for item in related}

    @pytest.mark.asyncio
    async def test_related_is_capped_at_three(
        self, property_service: PropertyService, property_repository: PropertyRepository
    ):
        listing = await ListingFactory.create_listing(property_repository)
        await ListingFactory.create_listings(property_repository, 6)

        _, related = await property_service.get_property_details(str(listing.id))

        assert len(related) == 3
        assert listing.id not in {item.id for item in related}

    @pytest.mark.asyncio
    async def test_no_related(self, property_service: PropertyService, property_repository: PropertyRepository):
        listing = await ListingFactory.create_listing(property_repository, sub_type_id="penthouse")
        await ListingFactory.create_listing(property_repository, sub_type_id="apartment")

        _, related = await property_service.get_property_details(str(listing.id))

        assert related == []

    @pytest.mark.asyncio
    async def test_unknown_id(self, property_service: PropertyService):
        with pytest.raises(PropertyNotFoundError):
            await property_service.get_property_details(str(uuid.uuid4()))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("property_id", ["not-a-uuid", "65f1c2e4a1b2c3d4e5f60718", ""])
    async def test_malformed_id_is_not_found(self, property_service: PropertyService, property_id: str):
        with pytest.raises(PropertyNotFoundError):
            await property_service.get_property_details(property_id)

    @pytest.mark.asyncio
    async def test_store_failure_is_wrapped(self, property_service: PropertyService):
        failure = OperationalError("SELECT", {}, Exception("server closed the connection"))
        with patch.object(
            property_service.property_repo, "get_property_with_details", AsyncMock(side_effect=failure)
        ):
            with pytest.raises(StoreError) as exc_info:
                await property_service.get_property_details(str(uuid.uuid4()))

        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == "Failed to fetch property"

    @pytest.mark.asyncio
    async def test_related_lookup_failure_is_wrapped(
        self, property_service: PropertyService, property_repository: PropertyRepository
    ):
        listing = await ListingFactory.create_listing(property_repository)
        failure = OperationalError("SELECT", {}, Exception("statement timeout"))

        with patch.object(property_service.property_repo, "find_listings", AsyncMock(side_effect=failure)):
            with pytest.raises(StoreError) as exc_info:
                await property_service.get_property_details(str(listing.id))

        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == "Failed to fetch property"

    @pytest.mark.asyncio
    async def test_related_policy_is_configurable(self, db_session, property_repository: PropertyRepository):
        listing = await ListingFactory.create_listing(property_repository, location="Banani", sub_type_id="duplex")
        same_location = await ListingFactory.create_listing(property_repository, location="Banani", sub_type_id="plot")
        await ListingFactory.create_listing(property_repository, location="Uttara", sub_type_id="duplex")
        settings = Settings(environment="testing", related_match_fields=["address.location"], related_limit=1)

        _, related = await PropertyService(db_session, settings).get_property_details(str(listing.id))

        assert [item.id for item in related] == [same_location.id]


class TestRelatedPolicy:
    """Test related-listing predicate construction."""

    def test_defaults(self):
        assert RelatedPolicy() == RelatedPolicy(("type.id", "subType.id"), 3)

    def test_from_settings(self, test_settings: Settings):
        assert RelatedPolicy.from_settings(test_settings) == RelatedPolicy(("type.id", "subType.id"), 3)

    def test_related_predicate(self, property_service: PropertyService):
        document = {"id": "x", "type": {"id": "residential"}, "subType": {"id": "duplex"}}

        predicate = property_service.related_predicate(document)

        assert dict(predicate) == {"type.id": Equals("residential"), "subType.id": Equals("duplex")}

    def test_document_value(self):
        document = {"purpose": {"purpose": {"id": "sale"}}, "status": "ready"}

        assert document_value(document, "purpose.purpose.id") == "sale"
        assert document_value(document, "status") == "ready"
        assert document_value(document, "purpose.subPurpose.id") is None
        assert document_value(document, "status.id") is None
