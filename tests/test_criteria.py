"""Tests for operators, filter criteria, groups, sort keys and paging descriptors."""

from __future__ import annotations

import pytest

from cqrs_ddd_querying import (
    Conjunction,
    FilterCriterion,
    FilterGroup,
    FilterOperator,
    InvalidFilterError,
    PagingDescriptor,
    SortDirection,
    SortKey,
    sort_keys_from,
)


class TestFilterOperatorParsing:
    """FilterOperator.parse accepts values, names and aliases."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("eq", FilterOperator.EQ),
            ("EQ", FilterOperator.EQ),
            ("==", FilterOperator.EQ),
            ("<>", FilterOperator.NE),
            (">=", FilterOperator.GE),
            ("gte", FilterOperator.GE),
            ("GreaterThanOrEqualTo", FilterOperator.GE),
            ("NOT_IN", FilterOperator.NOT_IN),
            ("notbetween", FilterOperator.NOT_BETWEEN),
            ("starts_with", FilterOperator.STARTSWITH),
            ("isnull", FilterOperator.IS_NULL),
            (" regex ", FilterOperator.REGEX),
        ],
    )
    def test_accepted_spellings(self, text: str, expected: FilterOperator) -> None:
        assert FilterOperator.parse(text) is expected

    def test_member_passes_through(self) -> None:
        assert FilterOperator.parse(FilterOperator.IN) is FilterOperator.IN

    def test_unknown_operator_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="not a valid FilterOperator"):
            FilterOperator.parse("near")


class TestFilterCriterion:
    def test_scalar_value_is_wrapped(self) -> None:
        criterion = FilterCriterion("name", "eq", "Laptop")
        assert criterion.values == ("Laptop",)
        assert criterion.value == "Laptop"

    def test_string_is_not_split_into_characters(self) -> None:
        assert FilterCriterion("name", "contains", "abc").values == ("abc",)

    def test_list_values_become_tuple(self) -> None:
        criterion = FilterCriterion("value", "between", [1, 10])
        assert criterion.values == (1, 10)
        assert criterion.operator is FilterOperator.BETWEEN

    def test_no_values_for_null_checks(self) -> None:
        criterion = FilterCriterion("rating", "is_null")
        assert criterion.values == ()
        assert criterion.value is None

    def test_unknown_operator_raises_invalid_filter(self) -> None:
        with pytest.raises(InvalidFilterError) as exc_info:
            FilterCriterion("name", "like", "x")
        assert exc_info.value.path == "name"

    def test_to_dict(self) -> None:
        assert FilterCriterion("category", "in", ["A", "B"]).to_dict() == {
            "op": "in",
            "attr": "category",
            "val": ["A", "B"],
        }

    def test_criteria_are_hashable_values(self) -> None:
        a = FilterCriterion("name", "eq", "x")
        b = FilterCriterion("name", "==", "x")
        assert a == b
        assert hash(a) == hash(b)


class TestFilterGroup:
    def test_default_is_empty_and(self) -> None:
        group = FilterGroup()
        assert group.conjunction is Conjunction.AND
        assert group.is_empty

    def test_string_conjunction_is_normalised(self) -> None:
        assert FilterGroup("OR").conjunction is Conjunction.OR

    def test_unknown_conjunction(self) -> None:
        with pytest.raises(InvalidFilterError, match="Unknown conjunction"):
            FilterGroup("xor")

    def test_children_must_be_nodes(self) -> None:
        with pytest.raises(InvalidFilterError, match="criteria or groups"):
            FilterGroup(Conjunction.AND, ({"op": "eq"},))  # type: ignore[arg-type]

    def test_operator_composition(self) -> None:
        a = FilterCriterion("category", "eq", "Lighting")
        b = FilterCriterion("value", "gt", 3)
        c = FilterCriterion("name", "startswith", "C")

        combined = (a & b) | c

        assert combined.conjunction is Conjunction.OR
        assert combined.children[0] == FilterGroup.all_of(a, b)
        assert combined.children[1] == c

    def test_nested_to_dict(self) -> None:
        group = FilterGroup.any_of(
            FilterCriterion("a", "eq", 1),
            FilterGroup.all_of(FilterCriterion("b", "is_null")),
        )
        assert group.to_dict() == {
            "op": "or",
            "conditions": [
                {"op": "eq", "attr": "a", "val": [1]},
                {"op": "and", "conditions": [{"op": "is_null", "attr": "b", "val": []}]},
            ],
        }


class TestSortKey:
    def test_parse_directions(self) -> None:
        assert SortKey.parse("name") == SortKey("name", SortDirection.ASC)
        assert SortKey.parse("-name") == SortKey("name", SortDirection.DESC)
        assert SortKey.parse("+name") == SortKey("name", SortDirection.ASC)

    def test_string_direction(self) -> None:
        assert SortKey("price", "descending").descending

    def test_str_round_trips(self) -> None:
        assert str(SortKey.parse("-created_at")) == "-created_at"
        assert str(SortKey.parse("created_at")) == "created_at"

    def test_empty_path_rejected(self) -> None:
        with pytest.raises(InvalidFilterError):
            SortKey.parse("-")

    def test_sort_keys_from_mixed(self) -> None:
        keys = sort_keys_from(["-value", SortKey("name")])
        assert keys == [SortKey("value", SortDirection.DESC), SortKey("name")]


class TestPagingDescriptor:
    def test_defaults_are_unbounded(self) -> None:
        paging = PagingDescriptor()
        assert paging.is_unbounded
        assert paging.effective_limit is None
        assert not paging.uses_cursor

    def test_negative_values_rejected(self) -> None:
        with pytest.raises(InvalidFilterError, match="negative"):
            PagingDescriptor(limit=-1)

    def test_non_integer_rejected(self) -> None:
        with pytest.raises(InvalidFilterError, match="integer"):
            PagingDescriptor(offset="ten")  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"limit": 2.7},
            {"offset": 0.5},
            {"limit": True},
            {"offset": False},
        ],
    )
    def test_fractional_and_boolean_values_rejected(self, kwargs: dict) -> None:
        """A page size of 2.7 or ``True`` is a caller bug, not a request for 2 or 1 rows."""
        with pytest.raises(InvalidFilterError):
            PagingDescriptor(**kwargs)

    def test_whole_number_forms_accepted(self) -> None:
        assert PagingDescriptor(offset="4", limit=3.0).to_dict() == {  # type: ignore[arg-type]
            "offset": 4,
            "limit": 3,
        }

    def test_blank_cursors_are_absent(self) -> None:
        paging = PagingDescriptor(limit=5, before="  ", after="")
        assert paging.before is None
        assert paging.after is None

    def test_for_page(self) -> None:
        assert PagingDescriptor.for_page(3, 10) == PagingDescriptor(offset=20, limit=10)
        assert PagingDescriptor.for_page(0, 10) == PagingDescriptor(offset=0, limit=10)

    def test_to_dict_includes_only_set_cursors(self) -> None:
        assert PagingDescriptor(limit=3, after="5").to_dict() == {
            "offset": 0,
            "limit": 3,
            "after": "5",
        }
