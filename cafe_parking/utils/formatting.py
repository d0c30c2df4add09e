"""Display helpers for café cards, share sheets and directions links."""
from __future__ import annotations

import re
from datetime import date
from typing import Optional
from urllib.parse import quote

from cafe_parking.models.schemas import MAX_SEARCH_RADIUS, Cafe, OpeningHours

_PRICE_DESCRIPTIONS = {
    0: "Free",
    1: "Inexpensive",
    2: "Moderate",
    3: "Expensive",
    4: "Very expensive",
}


def format_rating(rating: Optional[float]) -> str:
    if rating is None:
        return "No rating"
    return f"{rating:.1f}"


def rating_stars(rating: Optional[float]) -> str:
    if rating is None:
        return "☆☆☆☆☆"
    rating = max(0.0, min(5.0, rating))
    full = int(rating)
    half = (rating - full) >= 0.5
    stars = "★" * full
    if half:
        stars += "☆"
    return stars + "☆" * (5 - full - (1 if half else 0))


def format_price_level(price_level: Optional[int], symbol: str = "¥") -> str:
    if price_level is None or not 0 <= price_level <= 4:
        return "Price unknown"
    # Level 0 still renders a single symbol
    return symbol * max(price_level, 1)


def price_level_description(price_level: Optional[int]) -> str:
    return _PRICE_DESCRIPTIONS.get(price_level, "Price unknown") if price_level is not None else "Price unknown"


def format_phone_number(phone_number: Optional[str]) -> str:
    """Group Japanese numbers as 03-1234-5678 / 090-1234-5678."""
    if not phone_number:
        return "No phone number"
    digits = re.sub(r"[^0-9]", "", phone_number)
    if len(digits) == 10:
        return f"{digits[:2]}-{digits[2:6]}-{digits[6:]}"
    if len(digits) == 11:
        return f"{digits[:3]}-{digits[3:7]}-{digits[7:]}"
    return phone_number


def opening_hours_today(opening_hours: Optional[OpeningHours], today: Optional[date] = None) -> str:
    if opening_hours is None:
        return "Hours unknown"
    if opening_hours.weekday_text:
        # Places lists weekday_text Monday first
        index = (today or date.today()).weekday()
        if index < len(opening_hours.weekday_text):
            return opening_hours.weekday_text[index]
    if opening_hours.open_now is None:
        return "Hours unknown"
    return "Open now" if opening_hours.open_now else "Closed"


def share_text(cafe: Cafe) -> str:
    lines = [cafe.name, f"Address: {cafe.address}"]
    if cafe.rating is not None:
        lines.append(f"Rating: {format_rating(cafe.rating)}")
    if cafe.price_level is not None:
        lines.append(f"Price: {format_price_level(cafe.price_level)}")
    return "\n".join(lines) + "\n\nFound with Cafe Parking Finder!"


def directions_url(cafe: Cafe) -> Optional[str]:
    if cafe.location is None:
        return None
    return (
        f"http://maps.apple.com/?daddr={cafe.location.latitude},{cafe.location.longitude}"
        f"&q={quote(cafe.name)}"
    )


def is_valid_radius(radius: float, max_radius: int = MAX_SEARCH_RADIUS) -> bool:
    """Radius accepted by the search filter: positive and within ``max_radius`` meters."""
    return 0 < radius <= min(max_radius, MAX_SEARCH_RADIUS)
