"""Tests for burrow.methods — method tokens and eligibility."""

from burrow.methods import (
    ALL_METHODS,
    INCLUSION_METHODS,
    RUNTIME_METHODS,
    Method,
    is_eligible,
    ordered,
)


class TestMethod:
    def test_seven_tokens(self) -> None:
        assert [m.value for m in ALL_METHODS] == [
            "GET",
            "POST",
            "PUT",
            "DELETE",
            "PATCH",
            "HEAD",
            "OPTIONS",
        ]

    def test_str_value(self) -> None:
        assert str(Method.DELETE) == "DELETE"
        assert Method("PATCH") is Method.PATCH

    def test_runtime_subset(self) -> None:
        assert RUNTIME_METHODS == (Method.GET, Method.POST)
        assert INCLUSION_METHODS == frozenset(RUNTIME_METHODS)


class TestHelpers:
    def test_ordered(self) -> None:
        methods = frozenset({Method.OPTIONS, Method.GET, Method.DELETE})
        assert ordered(methods) == (Method.GET, Method.DELETE, Method.OPTIONS)

    def test_eligible(self) -> None:
        assert is_eligible(frozenset({Method.GET}))
        assert is_eligible(frozenset({Method.POST, Method.PUT}))

    def test_not_eligible(self) -> None:
        assert not is_eligible(frozenset())
        assert not is_eligible(frozenset({Method.PUT, Method.DELETE}))
