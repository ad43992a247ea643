"""
Listing API endpoints: filtered search and detail with related listings.
Both endpoints are read-only.
"""

from fastapi import APIRouter, Depends, Path, Request, status

from property_api.services.property import PropertyService
from property_api.schemas.property import (
    ErrorResponse,
    ListingDetail,
    ListingSummary,
    PropertyDetailResponse,
    PropertyDetailResults,
    PropertyListResponse,
)
from property_api.utils.dependencies import get_property_service


router = APIRouter(prefix="/properties", tags=["Properties"])


@router.get(
    "",
    response_model=PropertyListResponse,
    status_code=status.HTTP_200_OK,
    summary="List properties with filtering, sorting and pagination",
    description=(
        "Query parameters: page, limit, purpose, status, location, type, subType, bed, bath, "
        "priceMin+priceMax, areaMin+areaMax, keyword, tour=video, "
        "sort (popular, newest, lowestPrice, highestPrice). "
        "Repeat a parameter or use key[]= to pass several values."
    ),
    responses={200: {"model": PropertyListResponse}, 500: {"model": ErrorResponse}}
)
async def list_properties(
    request: Request,
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    """
    Get a page of listings matching the query string.

    The raw query string is decoded here instead of through declared query
    parameters so repeated and bracketed keys keep their list semantics.
    """
    listing_page = await property_service.list_properties(request.url.query)

    return PropertyListResponse(
        page=listing_page.page,
        limit=listing_page.limit,
        count=listing_page.count,
        results=[
            ListingSummary.model_validate(prop.to_summary_dict())
            for prop in listing_page.results
        ]
    )


@router.get(
    "/{property_id}",
    response_model=PropertyDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get property details",
    description="Get one listing and up to three listings of the same type and sub-type",
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def get_property(
    property_id: str = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyDetailResponse:
    """
    Get detailed information about a listing together with related listings.

    Raises:
        PropertyNotFoundError: If the listing doesn't exist
        StoreError: If the store cannot be queried
    """
    property_obj, related = await property_service.get_property_details(property_id)

    return PropertyDetailResponse(
        results=PropertyDetailResults(
            details=ListingDetail.model_validate(property_obj.to_dict()),
            related=[ListingSummary.model_validate(prop.to_summary_dict()) for prop in related]
        )
    )
