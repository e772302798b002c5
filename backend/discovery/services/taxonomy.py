"""Fixed enumerations for every filterable establishment attribute.

Filter values are only ever matched against these members; free text never
reaches query construction.
"""

from __future__ import annotations

from enum import Enum


class Category(str, Enum):
    RESTAURANT = "restaurant"
    CAFE = "cafe"
    FAST_FOOD = "fast_food"
    BAR = "bar"
    CONFECTIONERY = "confectionery"
    PIZZERIA = "pizzeria"
    BAKERY = "bakery"
    PUB = "pub"
    CANTEEN = "canteen"
    HOOKAH = "hookah"
    BOWLING = "bowling"
    KARAOKE = "karaoke"
    BILLIARDS = "billiards"


class Cuisine(str, Enum):
    AMERICAN = "american"
    ASIAN = "asian"
    BAKERY = "bakery"
    BARBECUE = "barbecue"
    BELARUSIAN = "belarusian"
    CAUCASIAN = "caucasian"
    CHINESE = "chinese"
    COCKTAILS = "cocktails"
    COFFEE = "coffee"
    DESSERTS = "desserts"
    EUROPEAN = "european"
    FAST_FOOD = "fast_food"
    FUSION = "fusion"
    GEORGIAN = "georgian"
    HEALTHY = "healthy"
    HOME_COOKING = "home_cooking"
    INDIAN = "indian"
    INTERNATIONAL = "international"
    ITALIAN = "italian"
    JAPANESE = "japanese"
    MEDITERRANEAN = "mediterranean"
    PIZZA = "pizza"
    PUB_FOOD = "pub_food"
    SNACKS = "snacks"
    STEAKHOUSE = "steakhouse"
    TRADITIONAL = "traditional"
    VEGETARIAN = "vegetarian"


class PriceRange(str, Enum):
    BUDGET = "$"
    MODERATE = "$$"
    UPSCALE = "$$$"


class Feature(str, Enum):
    ACCEPTS_CARDS = "accepts_cards"
    BANQUET_HALL = "banquet_hall"
    BARBECUE = "barbecue"
    BILLIARDS = "billiards"
    BOWLING = "bowling"
    BREAKFAST = "breakfast"
    BUSINESS_LUNCH = "business_lunch"
    DANCING = "dancing"
    DELIVERY = "delivery"
    DRIVE_THROUGH = "drive_through"
    EARLY_OPENING = "early_opening"
    FOLK_INTERIOR = "folk_interior"
    HOMESTYLE_COOKING = "homestyle_cooking"
    KARAOKE = "karaoke"
    KIDS_MENU = "kids_menu"
    KIDS_PLAYGROUND = "kids_playground"
    KIDS_ZONE = "kids_zone"
    LAKE_VIEW = "lake_view"
    LIVE_MUSIC = "live_music"
    OUTDOOR_SEATING = "outdoor_seating"
    PARKING = "parking"
    POWER_OUTLETS = "power_outlets"
    QUIET_ZONE = "quiet_zone"
    RESERVATION = "reservation"
    RIVER_VIEW = "river_view"
    SMOKING_AREA = "smoking_area"
    SPICY_FOOD = "spicy_food"
    SPORTS_TV = "sports_tv"
    TAKEAWAY = "takeaway"
    VALET_PARKING = "valet_parking"
    VEGAN_OPTIONS = "vegan_options"
    VEGETARIAN_OPTIONS = "vegetarian_options"
    WIFI = "wifi"
    WINE_SELECTION = "wine_selection"


class HoursFilter(str, Enum):
    CLOSES_BY_22 = "closes_by_22"
    OPEN_OVERNIGHT = "open_overnight"
    OPEN_24_HOURS = "open_24_hours"


class SubscriptionTier(str, Enum):
    FREE = "free"
    BASIC = "basic"
    STANDARD = "standard"
    PREMIUM = "premium"


class EstablishmentStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"


def enum_values(enum_cls: type[Enum]) -> frozenset[str]:
    return frozenset(str(member.value) for member in enum_cls)
