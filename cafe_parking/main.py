import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional, Dict, Any

from fastapi import FastAPI, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from cafe_parking.core.config import settings
from cafe_parking.core.errors import CafeSearchError, to_http_exception
from cafe_parking.core.logging import configure_logging
from cafe_parking.models.schemas import (
    Coordinate,
    CafeResult,
    CafeSearchRequest,
    CafeSearchResponse,
    Cafe,
    ParkingType,
    SearchFilter,
    SortOption,
)
from cafe_parking.services.location import StaticLocationProvider
from cafe_parking.services.places_client import PlacesClient
from cafe_parking.services.search import CafeSearchPipeline
from cafe_parking.utils.formatting import (
    directions_url,
    format_phone_number,
    format_price_level,
    format_rating,
    is_valid_radius,
    opening_hours_today,
    price_level_description,
    rating_stars,
    share_text,
)
from cafe_parking.utils.parking import (
    ParkingTags,
    load_parking_packs,
    pack_tags,
)

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

_places_client: Optional[PlacesClient] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    global _places_client
    if _places_client is not None:
        await _places_client.aclose()
        _places_client = None


# Initialize FastAPI app
app = FastAPI(title="Cafe Parking Finder", version="1.0.0", lifespan=lifespan)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def load_parking_catalogue(path: Optional[str] = None):
    """Load parking packs from path, falling back to the bundled catalogue"""
    if path is None:
        return load_parking_packs()
    try:
        return load_parking_packs(path)
    except (OSError, ValueError) as e:
        logger.error("Error loading parking types from %s: %s", path, e)
        return load_parking_packs()


PARKING_PACKS = load_parking_catalogue(settings.PARKING_TAGS_PATH)
PARKING_TAGS: ParkingTags = pack_tags(PARKING_PACKS)


def get_places_client() -> PlacesClient:
    global _places_client
    if _places_client is None:
        _places_client = PlacesClient(
            api_key=settings.PLACES_API_KEY,
            base_url=settings.PLACES_BASE_URL,
            language=settings.PLACES_LANGUAGE,
            keyword=settings.PLACES_KEYWORD,
        )
    return _places_client


def _cafe_result(pipeline: CafeSearchPipeline, cafe: Cafe) -> CafeResult:
    return CafeResult(
        cafe=cafe,
        distance_m=pipeline.distance_to(cafe),
        distance_text=pipeline.formatted_distance_to(cafe),
        rating_text=format_rating(cafe.rating),
        rating_stars=rating_stars(cafe.rating),
        price_text=format_price_level(cafe.price_level),
        price_description=price_level_description(cafe.price_level),
        phone_text=format_phone_number(cafe.phone_number),
        opening_hours_text=opening_hours_today(cafe.opening_hours),
        directions_url=directions_url(cafe),
        share_text=share_text(cafe),
    )


# Routes

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "timestamp": datetime.now().isoformat()}


@app.get("/parking-types")
async def get_parking_types() -> Dict[str, Any]:
    """Parking catalogue and sort options the filter accepts"""
    return {
        "parking_types": [pack.model_dump(mode="json") for pack in PARKING_PACKS],
        "all_types": [p.value for p in ParkingType],
        "sort_options": [s.value for s in SortOption],
    }


@app.post("/search/cafes", response_model=CafeSearchResponse)
async def search_cafes(
    request: CafeSearchRequest,
    places_client: PlacesClient = Depends(get_places_client),
) -> CafeSearchResponse:
    """Search cafes with parking around the caller's coordinate"""
    search_filter = request.filter
    if "radius" not in search_filter.model_fields_set:
        search_filter = SearchFilter.model_validate(
            {**search_filter.model_dump(), "radius": settings.DEFAULT_SEARCH_RADIUS}
        )
    if not is_valid_radius(search_filter.radius, settings.MAX_SEARCH_RADIUS):
        raise HTTPException(
            status_code=422,
            detail=f"radius must be at most {settings.MAX_SEARCH_RADIUS} meters",
        )

    location = Coordinate(latitude=request.lat, longitude=request.lng)
    pipeline = CafeSearchPipeline(
        StaticLocationProvider(location),
        places_client,
        search_filter=search_filter,
        parking_tags=PARKING_TAGS,
    )
    try:
        cafes = await pipeline.search_cafes()
    finally:
        pipeline.close()

    if pipeline.error is not None:
        raise to_http_exception(pipeline.error)

    results = [_cafe_result(pipeline, cafe) for cafe in cafes]

    return CafeSearchResponse(
        results=results,
        total_count=len(results),
        search_info={
            "coordinates": {"lat": request.lat, "lng": request.lng},
            "radius_meters": search_filter.radius,
            "sort_by": search_filter.sort_by.value,
            "parking_types": sorted(p.value for p in search_filter.parking_types),
        },
    )


@app.get("/places/{place_id}", response_model=Cafe)
async def get_place(
    place_id: str,
    places_client: PlacesClient = Depends(get_places_client),
) -> Cafe:
    """Place details: phone, website and formatted address"""
    try:
        return await places_client.get_place_details(place_id)
    except CafeSearchError as err:
        raise to_http_exception(err) from err


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
