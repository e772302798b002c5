"""Seed demo establishments spread around central Minsk.

Coordinates are generated from a distance and bearing off the city centre so
the data exercises every radius band: a few hundred meters, walking distance,
short rides, and the outskirts.
"""

from __future__ import annotations

import sys
import uuid
from pathlib import Path

from sqlalchemy import func

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from discovery.database import SessionLocal
from discovery.models import Establishment
from discovery.services.distance_service import destination_point
from discovery.services.hours_service import summarize_operating_hours

NAMESPACE = uuid.UUID("5f0c2a1e-4b7d-4c1a-9e2f-6a3b8d9c0e11")
MINSK_CENTER = (53.902496, 27.561831)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday")


def weekly(weekday: str, weekend: str | None = None) -> dict[str, str]:
    schedule = {day: weekday for day in WEEKDAYS}
    schedule["saturday"] = weekend or weekday
    schedule["sunday"] = weekend or weekday
    return schedule


ESTABLISHMENTS = [
    {
        "name": "Центральная кофейня",
        "description": "Уютное кафе в самом сердце Минска с отличным кофе и завтраками",
        "category": "cafe",
        "cuisines": ["european", "international"],
        "distance_m": 300,
        "bearing": 45,
        "price_range": "$$",
        "average_check_byn": 25.0,
        "average_rating": 4.7,
        "review_count": 156,
        "subscription_tier": "premium",
        "features": ["wifi", "outdoor_seating", "breakfast"],
        "hours": weekly("08:00-22:00", "09:00-22:00"),
    },
    {
        "name": "Бистро у площади",
        "description": "Быстрое обслуживание и вкусная еда для деловых обедов",
        "category": "restaurant",
        "cuisines": ["belarusian", "european"],
        "distance_m": 400,
        "bearing": 135,
        "price_range": "$",
        "average_check_byn": 18.0,
        "average_rating": 4.3,
        "review_count": 89,
        "subscription_tier": "standard",
        "features": ["wifi", "business_lunch", "takeaway"],
        "hours": weekly("09:00-21:00"),
    },
    {
        "name": "Пивной дворик",
        "description": "Крафтовое пиво и снеки в центре города",
        "category": "pub",
        "cuisines": ["european", "snacks"],
        "distance_m": 350,
        "bearing": 225,
        "price_range": "$$",
        "average_check_byn": 30.0,
        "average_rating": 4.5,
        "review_count": 203,
        "subscription_tier": "basic",
        "features": ["sports_tv", "outdoor_seating", "accepts_cards"],
        "hours": weekly("16:00-02:00", "14:00-03:00"),
    },
    {
        "name": "Суши экспресс",
        "description": "Свежие роллы навынос и с доставкой",
        "category": "restaurant",
        "cuisines": ["japanese", "asian"],
        "distance_m": 450,
        "bearing": 315,
        "price_range": "$$",
        "average_check_byn": 35.0,
        "average_rating": 4.1,
        "review_count": 67,
        "subscription_tier": "free",
        "features": ["delivery", "takeaway", "wifi"],
        "hours": weekly("11:00-23:00"),
    },
    {
        "name": "Кондитерская мечта",
        "description": "Авторские десерты и торты на заказ",
        "category": "confectionery",
        "cuisines": ["desserts", "coffee"],
        "distance_m": 800,
        "bearing": 10,
        "price_range": "$$",
        "average_check_byn": 20.0,
        "average_rating": 4.8,
        "review_count": 240,
        "subscription_tier": "premium",
        "features": ["wifi", "takeaway", "kids_zone"],
        "hours": weekly("09:00-21:00", "10:00-21:00"),
    },
    {
        "name": "Тратория итальяна",
        "description": "Паста ручной работы и вина Тосканы",
        "category": "restaurant",
        "cuisines": ["italian", "mediterranean"],
        "distance_m": 900,
        "bearing": 80,
        "price_range": "$$$",
        "average_check_byn": 65.0,
        "average_rating": 4.6,
        "review_count": 178,
        "subscription_tier": "premium",
        "features": ["reservation", "wine_selection", "parking", "wifi"],
        "hours": weekly("12:00-23:00", "12:00-00:00"),
    },
    {
        "name": "Грузинский дворик",
        "description": "Хинкали, хачапури и домашнее вино",
        "category": "restaurant",
        "cuisines": ["georgian", "caucasian"],
        "distance_m": 1600,
        "bearing": 160,
        "price_range": "$$",
        "average_check_byn": 40.0,
        "average_rating": 4.4,
        "review_count": 132,
        "subscription_tier": "standard",
        "features": ["banquet_hall", "live_music", "parking"],
        "hours": weekly("12:00-23:00"),
    },
    {
        "name": "Фастфуд сити",
        "description": "Бургеры и картофель фри без ожидания",
        "category": "fast_food",
        "cuisines": ["american", "fast_food"],
        "distance_m": 1800,
        "bearing": 250,
        "price_range": "$",
        "average_check_byn": 12.0,
        "average_rating": 3.8,
        "review_count": 410,
        "subscription_tier": "free",
        "features": ["takeaway", "drive_through", "kids_menu"],
        "hours": weekly("07:00-23:59"),
    },
    {
        "name": "Вегетарианский рай",
        "description": "Растительная кухня и смузи",
        "category": "cafe",
        "cuisines": ["vegetarian", "healthy"],
        "distance_m": 2300,
        "bearing": 300,
        "price_range": "$$",
        "average_check_byn": 22.0,
        "average_rating": 4.5,
        "review_count": 95,
        "subscription_tier": "basic",
        "features": ["vegan_options", "wifi", "quiet_zone"],
        "hours": weekly("09:00-21:00"),
    },
    {
        "name": "Ночной бар",
        "description": "Коктейли и диджей-сеты до утра",
        "category": "bar",
        "cuisines": ["cocktails", "snacks"],
        "distance_m": 2600,
        "bearing": 200,
        "price_range": "$$$",
        "average_check_byn": 55.0,
        "average_rating": 4.2,
        "review_count": 144,
        "subscription_tier": "standard",
        "features": ["dancing", "live_music", "smoking_area"],
        "hours": weekly("20:00-05:00"),
    },
    {
        "name": "Пиццерия неаполь",
        "description": "Пицца из дровяной печи",
        "category": "pizzeria",
        "cuisines": ["italian", "pizza"],
        "distance_m": 3800,
        "bearing": 30,
        "price_range": "$",
        "average_check_byn": 19.0,
        "average_rating": 4.3,
        "review_count": 221,
        "subscription_tier": "free",
        "features": ["delivery", "kids_menu", "wifi", "parking"],
        "hours": weekly("10:00-23:00"),
    },
    {
        "name": "Белорусская корчма",
        "description": "Драники, мачанка и народный интерьер",
        "category": "restaurant",
        "cuisines": ["belarusian", "traditional"],
        "distance_m": 4500,
        "bearing": 110,
        "price_range": "$$",
        "average_check_byn": 38.0,
        "average_rating": 4.6,
        "review_count": 188,
        "subscription_tier": "basic",
        "features": ["folk_interior", "homestyle_cooking", "parking", "banquet_hall"],
        "hours": weekly("11:00-23:00"),
    },
    {
        "name": "Караоке-бар веселье",
        "description": "Караоке-залы и барная карта",
        "category": "karaoke",
        "cuisines": ["european", "snacks"],
        "distance_m": 6200,
        "bearing": 280,
        "price_range": "$$",
        "average_check_byn": 45.0,
        "average_rating": 4.0,
        "review_count": 76,
        "subscription_tier": "free",
        "features": ["karaoke", "reservation", "smoking_area"],
        "hours": weekly("18:00-04:00"),
    },
    {
        "name": "Ресторан у озера",
        "description": "Рыба и гриль с видом на Цнянское водохранилище",
        "category": "restaurant",
        "cuisines": ["european", "barbecue"],
        "distance_m": 8200,
        "bearing": 350,
        "price_range": "$$$",
        "average_check_byn": 80.0,
        "average_rating": 4.7,
        "review_count": 102,
        "subscription_tier": "premium",
        "features": ["lake_view", "parking", "outdoor_seating", "reservation"],
        "hours": weekly("12:00-23:00", "11:00-23:00"),
    },
    {
        "name": "Круглосуточная столовая",
        "description": "Домашняя еда в любое время",
        "category": "canteen",
        "cuisines": ["home_cooking", "belarusian"],
        "distance_m": 5200,
        "bearing": 190,
        "price_range": "$",
        "average_check_byn": 10.0,
        "average_rating": 3.9,
        "review_count": 58,
        "subscription_tier": "free",
        "features": ["takeaway", "accepts_cards"],
        "hours": weekly("00:00-23:59", "24/7"),
    },
    {
        "name": "Боулинг-клуб страйк",
        "description": "Двенадцать дорожек, бильярд и бар",
        "category": "bowling",
        "cuisines": ["american", "snacks"],
        "distance_m": 9400,
        "bearing": 240,
        "price_range": "$$",
        "average_check_byn": 50.0,
        "average_rating": 4.1,
        "review_count": 64,
        "subscription_tier": "basic",
        "features": ["bowling", "billiards", "sports_tv", "parking"],
        "hours": weekly("12:00-02:00"),
    },
]


def establishment_id_from_name(name: str) -> uuid.UUID:
    return uuid.uuid5(NAMESPACE, name)


def main() -> None:
    session = SessionLocal()
    try:
        for item in ESTABLISHMENTS:
            latitude, longitude = destination_point(*MINSK_CENTER, item["distance_m"], item["bearing"])
            latitude, longitude = round(latitude, 6), round(longitude, 6)
            summary = summarize_operating_hours(item["hours"])
            values = {
                "name": item["name"],
                "description": item["description"],
                "city": "Минск",
                "latitude": latitude,
                "longitude": longitude,
                "location": func.geography(func.ST_SetSRID(func.ST_MakePoint(longitude, latitude), 4326)),
                "category": item["category"],
                "cuisines": item["cuisines"],
                "price_range": item["price_range"],
                "average_check_byn": item["average_check_byn"],
                "features": item["features"],
                "operating_hours": item["hours"],
                "is_24_hours": summary.is_24_hours,
                "latest_close_minute": summary.latest_close_minute,
                "average_rating": item["average_rating"],
                "review_count": item["review_count"],
                "subscription_tier": item["subscription_tier"],
                "status": "active",
            }

            establishment_id = establishment_id_from_name(item["name"])
            establishment = session.get(Establishment, establishment_id)
            if establishment is None:
                session.add(Establishment(id=establishment_id, **values))
            else:
                for key, value in values.items():
                    setattr(establishment, key, value)

        session.commit()
        print(f"Seeded establishments: {len(ESTABLISHMENTS)}")
    finally:
        session.close()


if __name__ == "__main__":
    main()
