"""FilterState setters, cross-dimension rules and command dispatch."""

import dataclasses

import pytest

from firecore.errors import FilterDomainError
from firecore.filters import (
    ALL,
    CAUSE_HUMAN,
    CAUSE_NATURAL,
    FilterCommand,
    FilterDomain,
    FilterState,
    apply_command,
    normalize_selection,
)


@pytest.fixture
def domain():
    return FilterDomain.from_records(["CA", "TX", "NY"], ["Arson", "Lightning", "Miscellaneous"])


@pytest.fixture
def state(domain):
    return FilterState(domain=domain)


def test_defaults(state):
    assert (state.location, state.region, state.cause, state.size_class) == (ALL, ALL, ALL, ALL)
    assert (state.year_min, state.year_max) == (1992, 2015)


class TestGeographicExclusivity:
    def test_location_clears_region(self, state):
        state.set_region("South")
        state.set_location("CA")
        assert state.location == "CA"
        assert state.region == ALL

    def test_region_clears_location(self, state):
        state.set_location("CA")
        state.set_region("Northeast")
        assert state.region == "Northeast"
        assert state.location == ALL

    @pytest.mark.parametrize("prior", [("location", "TX"), ("region", "West"), (None, None)])
    def test_exclusivity_holds_from_any_prior_state(self, state, prior):
        kind, value = prior
        if kind:
            apply_command(state, FilterCommand(kind, value))
        state.set_location("NY")
        assert state.region == ALL
        state.set_region("Midwest")
        assert state.location == ALL

    def test_selecting_all_does_not_clear_the_other(self, state):
        state.set_region("West")
        state.set_location("all")
        assert state.region == "West"

    def test_location_is_case_insensitive(self, state):
        state.set_location("ca")
        assert state.location == "CA"

    def test_table_locations_without_records_are_allowed(self, state):
        state.set_location("WY")
        assert state.location == "WY"

    def test_unknown_location_fails_fast(self, state):
        with pytest.raises(FilterDomainError):
            state.set_location("XX")

    def test_unknown_region_fails_fast(self, state):
        with pytest.raises(FilterDomainError) as info:
            state.set_region("Atlantis")
        assert isinstance(info.value, ValueError)
        assert state.region == ALL


class TestYearRange:
    def test_reversed_bounds_are_swapped(self, state):
        state.set_year_range(2010, 2000)
        assert (state.year_min, state.year_max) == (2000, 2010)

    def test_bounds_are_clamped(self, state):
        state.set_year_range(1900, 3000)
        assert (state.year_min, state.year_max) == (1992, 2015)

    def test_clamped_then_swapped(self, state):
        state.set_year_range(3000, 1900)
        assert (state.year_min, state.year_max) == (1992, 2015)

    def test_single_year(self, state):
        state.set_year_range(2003, 2003)
        assert (state.year_min, state.year_max) == (2003, 2003)

    def test_non_integer_bounds_fail(self, state):
        with pytest.raises(FilterDomainError):
            state.set_year_range("early", 2000)


class TestCauseAndSize:
    @pytest.mark.parametrize("value", [ALL, CAUSE_HUMAN, CAUSE_NATURAL, "Arson", "Campfire"])
    def test_cause_modes(self, state, value):
        state.set_cause(value)
        assert state.cause == value

    @pytest.mark.parametrize(
        "token, stored",
        [("human-aggregate", "human-aggregate"), ("human", "human-aggregate"), ("natural-aggregate", "natural-aggregate"), ("natural", "natural-aggregate")],
    )
    def test_aggregate_tokens_and_short_aliases(self, state, token, stored):
        state.set_cause(token)
        assert state.cause == stored

    def test_aggregate_command_through_engine(self, engine):
        assert engine.dispatch(FilterCommand("cause", "human-aggregate"))["active_count"] == 2
        assert engine.dispatch(FilterCommand("cause", "natural-aggregate"))["active_count"] == 1

    def test_unknown_cause_fails_fast(self, state):
        with pytest.raises(FilterDomainError):
            state.set_cause("Meteor")

    def test_size_class(self, state):
        state.set_size_class("g")
        assert state.size_class == "G"

    def test_unknown_size_class_fails_fast(self, state):
        with pytest.raises(FilterDomainError):
            state.set_size_class("H")

    @pytest.mark.parametrize("value", [None, "", 3])
    def test_non_string_values_fail(self, state, value):
        with pytest.raises(FilterDomainError):
            state.set_cause(value)

    def test_cause_has_no_cross_field_effect(self, state):
        state.set_location("TX")
        state.set_size_class("B")
        state.set_cause(CAUSE_HUMAN)
        assert (state.location, state.size_class) == ("TX", "B")


def test_reset_restores_defaults(state):
    state.set_location("CA")
    state.set_year_range(2000, 2001)
    state.set_cause("Arson")
    state.set_size_class("C")
    state.reset()
    assert state.snapshot() == FilterState(domain=state.domain).snapshot()


def test_snapshot_is_read_only(state):
    snap = state.snapshot()
    with pytest.raises(dataclasses.FrozenInstanceError):
        snap.location = "CA"


class TestCommands:
    def test_dispatch_each_kind(self, state):
        apply_command(state, FilterCommand("region", "West"))
        apply_command(state, FilterCommand("year_range", (2012, 2001)))
        apply_command(state, FilterCommand("cause", CAUSE_NATURAL))
        apply_command(state, FilterCommand("size_class", "A"))
        assert state.snapshot().region == "West"
        assert (state.year_min, state.year_max) == (2001, 2012)
        apply_command(state, FilterCommand("reset"))
        assert state.region == ALL

    def test_year_range_is_continuous(self):
        assert FilterCommand("year_range", (2000, 2001)).continuous
        assert not FilterCommand("cause", "Arson").continuous

    def test_bad_year_range_payload(self, state):
        with pytest.raises(FilterDomainError):
            apply_command(state, FilterCommand("year_range", 2000))

    def test_unknown_command(self, state):
        with pytest.raises(FilterDomainError):
            apply_command(state, FilterCommand("colour", "red"))


class TestNormalizeSelection:
    def test_empty_selection_is_default(self, domain):
        assert normalize_selection({}, domain).snapshot() == FilterState(domain=domain).snapshot()

    def test_location_wins_over_region(self, domain):
        state = normalize_selection({"location": "CA", "region": "South"}, domain)
        assert (state.location, state.region) == ("CA", ALL)

    def test_years_are_normalised(self, domain):
        state = normalize_selection({"year_min": 2014, "year_max": 1950}, domain)
        assert (state.year_min, state.year_max) == (1992, 2014)

    def test_invalid_value_raises(self, domain):
        with pytest.raises(FilterDomainError):
            normalize_selection({"region": "Atlantis"}, domain)
