from uuid import uuid4

import pytest

from clubhub.discovery import filters as f
from clubhub.discovery.builders import ORDER_BY, build_event_query, escape_like
from clubhub.schemas import dto


def test_empty_query_lists_everything_in_order():
    sql, params = build_event_query(f.EventQuery())
    assert "WHERE" not in sql
    assert sql.rstrip().endswith(ORDER_BY)
    assert "LEFT JOIN clubs c ON c.id = e.club_id" in sql
    assert params == []


def test_keyword_reuses_one_parameter_across_columns():
    sql, params = build_event_query(f.EventQuery.of(f.KeywordFilter("chess")))
    assert params == ["%chess%"]
    assert sql.count("ILIKE $1") == 3
    assert "c.name ILIKE $1" in sql


def test_escape_like_neutralises_wildcards():
    assert escape_like("100%_off\\") == "100\\%\\_off\\\\"
    _, params = build_event_query(f.EventQuery.of(f.LocationFilter("50%")))
    assert params == ["%50\\%%"]


def test_tag_match_any_vs_all():
    any_sql, any_params = build_event_query(f.EventQuery.of(f.TagsFilter(("stem", "music"))))
    all_sql, _ = build_event_query(f.EventQuery.of(f.TagsFilter(("stem", "music"), match="all")))
    assert "e.tags && $1::text[]" in any_sql
    assert "e.tags @> $1::text[]" in all_sql
    assert any_params == [["stem", "music"]]


def test_empty_collections_add_no_clause():
    sql, params = build_event_query(f.EventQuery.of(f.TagsFilter(()), f.ClubIdsFilter(())))
    assert "WHERE" not in sql
    assert params == []


def test_filters_combine_conjunctively_with_sequential_placeholders():
    club_id = uuid4()
    query = f.EventQuery.of(
        f.ClubNameFilter("robot"),
        f.ClubIdsFilter((club_id,)),
        f.DateEqualsFilter("2025-03-15"),
        f.StartTimeFromFilter("18:00"),
        f.EndTimeUntilFilter("22:00"),
        f.RsvpFilter(True),
    )
    sql, params = build_event_query(query)

    assert params == ["%robot%", [str(club_id)], "2025-03-15", "18:00", "22:00", True]
    assert "c.name ILIKE $1" in sql
    assert "e.club_id = ANY($2::uuid[])" in sql
    assert "e.date = $3" in sql
    assert 'e.start_time COLLATE "C" >= $4' in sql
    assert 'e.end_time COLLATE "C" <= $5' in sql
    assert "e.rsvp_needed = $6" in sql
    assert sql.count("\n\t\tAND ") == 5


def test_date_range_bounds_are_optional():
    sql, params = build_event_query(f.EventQuery.of(f.DateRangeFilter(date_to="2025-12-31")))
    assert params == ["2025-12-31"]
    assert 'e.date COLLATE "C" <= $1' in sql
    assert ">=" not in sql

    sql, params = build_event_query(f.EventQuery.of(f.DateRangeFilter()))
    assert "WHERE" not in sql


def test_limit_and_offset_follow_filter_params():
    sql, params = build_event_query(f.EventQuery.of(f.RsvpFilter(False), limit=10, offset=20))
    assert params == [False, 10, 20]
    assert sql.endswith("LIMIT $2\n\tOFFSET $3")


def test_unknown_filter_type_is_rejected():
    with pytest.raises(TypeError):
        build_event_query(f.EventQuery(filters=(object(),)))  # type: ignore[arg-type]


def test_search_query_skips_absent_dimensions():
    criteria = dto.SearchCriteria.model_validate({"keyword": "  ", "tags": "stem,", "RSVPNeeded": "false", "clubName": ""})
    query = f.search_query(criteria)
    assert query.filters == (f.TagsFilter(("stem",), match="any"), f.RsvpFilter(False))


def test_advanced_query_uses_all_tags_and_range():
    club_id = uuid4()
    request = dto.AdvancedFilterRequest.model_validate(
        {"tags": ["a", "b"], "clubIds": [str(club_id)], "dateFrom": "2025-01-01", "limit": 5}
    )
    query = f.advanced_query(request)
    assert query.filters == (
        f.TagsFilter(("a", "b"), match="all"),
        f.ClubIdsFilter((club_id,)),
        f.DateRangeFilter(date_from="2025-01-01", date_to=None),
    )
    assert query.limit == 5
