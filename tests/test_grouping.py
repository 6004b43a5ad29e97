from fakes import record

from biobin.pipeline.grouping import group_by_sensor


def test_groups_partition_the_input():
    records = [
        record("S2", "2024-01-01 00:10"),
        record("S1", "2024-01-01 00:05"),
        record("S2", "2024-01-01 00:00"),
        record("S3", "2024-01-01 00:00"),
        record("S1", "2024-01-01 00:00"),
    ]
    groups = group_by_sensor(records)
    flattened = [r for rs in groups.values() for r in rs]
    assert len(flattened) == len(records)
    assert sorted(map(id, flattened)) == sorted(map(id, records))
    for sensor_id, rs in groups.items():
        assert all(r.sensor_id == sensor_id for r in rs)


def test_group_order_is_first_encounter_order():
    records = [record("S2", "2024-01-02 00:00"), record("S1", "2024-01-01 00:00"), record("S2", "2024-01-01 00:00")]
    assert list(group_by_sensor(records)) == ["S2", "S1"]


def test_groups_are_sorted_by_time():
    records = [
        record("S1", "2024-01-01 12:00"),
        record("S1", "2024-01-01T08:00:00Z"),
        record("S1", "2024-01-01 09:30"),
    ]
    group = group_by_sensor(records)["S1"]
    times = [r.parsed_time() for r in group]
    assert times == sorted(times)


def test_equal_timestamps_keep_input_order():
    first = record("S1", "2024-01-01 00:00", temp=1)
    second = record("S1", "2024-01-01 00:00", temp=2)
    earlier = record("S1", "2023-12-31 23:59", temp=0)
    third = record("S1", "2024-01-01T00:00:00", temp=3)
    group = group_by_sensor([first, second, earlier, third])["S1"]
    assert [r.temperature for r in group] == [0, 1, 2, 3]


def test_duplicates_are_kept_as_distinct_points():
    dup = [record("S1", "2024-01-01 00:00"), record("S1", "2024-01-01 00:00")]
    assert len(group_by_sensor(dup)["S1"]) == 2


def test_sensor_ids_are_case_sensitive():
    groups = group_by_sensor([record("sensor", "2024-01-01 00:00"), record("Sensor", "2024-01-01 00:00")])
    assert list(groups) == ["sensor", "Sensor"]


def test_records_without_time_are_left_out():
    groups = group_by_sensor([record("S1", "not-a-date"), record("S1", "2024-01-01 00:00"), record("S9", "")])
    assert list(groups) == ["S1"]
    assert len(groups["S1"]) == 1


def test_empty_input():
    assert group_by_sensor([]) == {}
