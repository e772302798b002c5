from discovery.services.contracts import FilterSet
from discovery.services.filter_service import (
    MATCH_ALL,
    AllOf,
    AnyOf,
    AtLeast,
    ContainsAll,
    HoursMatch,
    Overlaps,
    compose_filters,
    describe,
)
from discovery.services.taxonomy import HoursFilter

from conftest import make_record


def test_empty_filter_set_composes_to_match_all():
    assert compose_filters(FilterSet()) == MATCH_ALL
    assert describe(MATCH_ALL) == "TRUE"


def test_compose_filters_builds_one_clause_per_group():
    predicate = compose_filters(
        FilterSet(
            categories=("bar", "cafe"),
            cuisines=("italian",),
            price_ranges=("$",),
            features=("parking", "wifi"),
            hours=HoursFilter.OPEN_OVERNIGHT,
            min_rating=4.0,
        )
    )
    assert predicate == AllOf(
        clauses=(
            AnyOf(field="category", values=("bar", "cafe")),
            Overlaps(field="cuisines", values=("italian",)),
            AnyOf(field="price_range", values=("$",)),
            ContainsAll(field="features", values=("parking", "wifi")),
            HoursMatch(option=HoursFilter.OPEN_OVERNIGHT),
            AtLeast(field="average_rating", value=4.0),
        )
    )


def test_categories_are_or_features_are_and():
    cafe_with_wifi = make_record(1, 100, 0, category="cafe", features=("wifi",))
    bar_with_both = make_record(2, 100, 0, category="bar", features=("wifi", "parking"))

    categories = compose_filters(FilterSet(categories=("bar", "cafe")))
    assert categories.matches(cafe_with_wifi)
    assert categories.matches(bar_with_both)

    features = compose_filters(FilterSet(features=("parking", "wifi")))
    assert not features.matches(cafe_with_wifi)
    assert features.matches(bar_with_both)


def test_cuisines_match_on_any_overlap():
    record = make_record(1, 100, 0, cuisines=("belarusian", "european"))
    assert Overlaps(field="cuisines", values=("asian", "european")).matches(record)
    assert not Overlaps(field="cuisines", values=("asian",)).matches(record)


def test_min_rating_is_inclusive():
    record = make_record(1, 100, 0, average_rating=4.0)
    assert AtLeast(field="average_rating", value=4.0).matches(record)
    assert not AtLeast(field="average_rating", value=4.1).matches(record)


def test_describe_renders_the_tree():
    predicate = compose_filters(FilterSet(categories=("cafe",), features=("wifi",), min_rating=4.5))
    assert describe(predicate) == "category IN (cafe) AND features @> (wifi) AND average_rating >= 4.5"
