from timegrid.services.entries import EntryFields, Persisted, ScheduleEntry
from timegrid.services.slot_resolver import find_gap, pick_eviction_candidate, resolve_slot


def make_entry(entry_id, start, end, *, teacher="t1", day=0, year_group="y7", subject="maths"):
    return ScheduleEntry(
        id=Persisted(entry_id),
        fields=EntryFields(
            teacher_id=teacher,
            subject_id=subject,
            year_group_id=year_group,
            day_of_week=day,
            start_time=start,
            end_time=end,
        ),
    )


def resolve(entries, *, year_group="y7", start=480, end=540):
    return resolve_slot(
        entries,
        teacher_id="t1",
        day_of_week=0,
        period_start=start,
        period_end=end,
        year_group_id=year_group,
    )


def test_empty_period_is_free_end_to_end():
    result = resolve([])
    assert result.overlaps == ()
    assert result.placement == (480, 540)
    assert result.eviction_candidate is None
    assert not result.is_full


def test_gap_between_two_entries_is_chosen():
    entries = [make_entry("late", "08:40", "09:00"), make_entry("early", "08:00", "08:20")]
    result = resolve(entries)
    assert [entry.id.value for entry in result.overlaps] == ["early", "late"]
    assert result.placement == (500, 520)
    assert result.placement_times == ("08:20", "08:40")


def test_trailing_gap_is_used_when_start_is_taken():
    result = resolve([make_entry("a", "08:00", "08:30")])
    assert result.placement == (510, 540)


def test_leading_gap_wins_over_trailing_gap():
    result = resolve([make_entry("a", "08:20", "08:40")])
    assert result.placement == (480, 500)


def test_entries_spilling_over_period_edges_still_block():
    entries = [make_entry("a", "07:30", "08:15"), make_entry("b", "08:45", "09:30")]
    result = resolve(entries)
    assert result.placement == (495, 525)


def test_touching_entries_do_not_overlap_the_period():
    entries = [make_entry("before", "07:00", "08:00"), make_entry("after", "09:00", "10:00")]
    result = resolve(entries)
    assert result.overlaps == ()
    assert result.placement == (480, 540)


def test_other_teachers_and_days_are_ignored():
    entries = [
        make_entry("other-teacher", "08:00", "09:00", teacher="t2"),
        make_entry("other-day", "08:00", "09:00", day=3),
    ]
    assert resolve(entries).placement == (480, 540)


def test_year_group_does_not_scope_occupancy():
    entries = [
        make_entry("y8", "08:00", "08:30", year_group="y8"),
        make_entry("everyone", "08:30", "09:00", year_group=None),
    ]
    result = resolve(entries, year_group="y7")
    assert result.is_full
    assert len(result.overlaps) == 2


def test_full_period_evicts_same_year_group_first():
    entries = [
        make_entry("y8", "08:00", "08:30", year_group="y8"),
        make_entry("y7", "08:30", "09:00", year_group="y7"),
    ]
    result = resolve(entries, year_group="y7")
    assert result.placement is None
    assert result.eviction_candidate.id == Persisted("y7")


def test_full_period_falls_back_to_earliest_overlap():
    entries = [
        make_entry("second", "08:30", "09:00", year_group="y9"),
        make_entry("first", "08:00", "08:30", year_group="y8"),
    ]
    result = resolve(entries, year_group="y7")
    assert result.eviction_candidate.id == Persisted("first")


def test_first_matching_overlap_in_start_order_is_evicted():
    entries = [
        make_entry("later", "08:30", "09:00", year_group="y7"),
        make_entry("earlier", "08:00", "08:30", year_group="y7"),
    ]
    assert resolve(entries).eviction_candidate.id == Persisted("earlier")


def test_find_gap_with_nested_overlaps():
    entries = [make_entry("wide", "08:00", "08:50"), make_entry("inner", "08:10", "08:20")]
    assert find_gap(entries, 480, 540) == (530, 540)


def test_pick_eviction_candidate_without_overlaps():
    assert pick_eviction_candidate([], "y7") is None
