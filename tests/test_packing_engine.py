import random
from dataclasses import replace

import pytest

from loadplanner.models import CargoItem, Container, Dimensions
from loadplanner.packing_engine import InvalidContainerError, boxes_overlap, pack, placement_extent


def make_item(item_id, length, width, height, quantity=1, **extra):
    return CargoItem(
        id=item_id,
        name=f"Item {item_id}",
        dimensions=Dimensions(length=length, width=width, height=height),
        quantity=quantity,
        **extra,
    )


def assert_within_container(container, placements):
    for p in placements:
        assert p.x >= 0 and p.y >= 0 and p.z >= 0
        assert p.x_max <= container.length
        assert p.y_max <= container.height
        assert p.z_max <= container.width


def assert_no_overlaps(placements):
    boxes = [(p.position, placement_extent(p)) for p in placements]
    for i in range(len(boxes)):
        for j in range(i + 1, len(boxes)):
            assert not boxes_overlap(boxes[i][0], boxes[i][1], boxes[j][0], boxes[j][1])


def random_manifest(rng, count):
    return [
        make_item(
            f"SKU-{index}",
            rng.choice([20, 30, 40, 50, 60, 80, 120]),
            rng.choice([20, 30, 40, 50, 80]),
            rng.choice([10, 25, 40, 60, 90]),
            quantity=rng.randint(-1, 4),
        )
        for index in range(count)
    ]


def test_item_equal_to_container_fills_it():
    container = Container(length=600, width=240, height=240)
    result = pack(container, [make_item("A", 600, 240, 240)])

    assert len(result.placements) == 1
    assert result.placements[0].position == (0.0, 0.0, 0.0)
    assert result.placements[0].rotation == (0.0, 0.0, 0.0)
    assert result.unplaced_items == []
    assert result.volume_utilization_percent == pytest.approx(100.0)


def test_second_slab_does_not_fit():
    container = Container(length=100, width=100, height=100)
    items = [make_item("A", 100, 100, 60), make_item("B", 100, 100, 60)]

    result = pack(container, items)

    assert [p.item.id for p in result.placements] == ["A"]
    assert result.placements[0].position == (0.0, 0.0, 0.0)
    assert [item.id for item in result.unplaced_items] == ["B"]
    assert result.volume_utilization_percent == pytest.approx(60.0)


def test_cubes_fill_floor_bottom_back_left():
    container = Container(length=200, width=200, height=200)
    result = pack(container, [make_item("C", 50, 50, 50, quantity=8)])

    assert len(result.placements) == 8
    assert result.unplaced_items == []
    assert [p.position for p in result.placements] == [
        (0.0, 0.0, 0.0),
        (50.0, 0.0, 0.0),
        (100.0, 0.0, 0.0),
        (150.0, 0.0, 0.0),
        (0.0, 0.0, 50.0),
        (50.0, 0.0, 50.0),
        (100.0, 0.0, 50.0),
        (150.0, 0.0, 50.0),
    ]
    assert result.volume_utilization_percent == pytest.approx(12.5)
    assert_no_overlaps(result.placements)


def test_invalid_item_dimensions_are_excluded():
    container = Container(length=100, width=100, height=100)
    items = [
        make_item("flat", 0, 50, 50),
        CargoItem(id="missing", name="Missing", dimensions=None),
        make_item("negative", 10, -5, 10, quantity=3),
    ]

    result = pack(container, items)

    assert result.placements == []
    assert result.unplaced_items == []
    assert result.volume_utilization_percent == 0.0


def test_invalid_item_is_logged(caplog):
    container = Container(length=100, width=100, height=100)
    with caplog.at_level("WARNING", logger="loadplanner.packing_engine"):
        pack(container, [make_item("flat", 0, 50, 50)])

    assert "Item flat" in caplog.text


@pytest.mark.parametrize(
    "container",
    [
        None,
        Container(length=100, width=100, height=-10),
        Container(length=0, width=100, height=100),
        Container(length=100, width=float("nan"), height=100),
    ],
)
def test_invalid_container_raises(container):
    with pytest.raises(InvalidContainerError):
        pack(container, [make_item("A", 10, 10, 10)])


def test_invalid_container_is_a_value_error():
    assert issubclass(InvalidContainerError, ValueError)


def test_empty_manifest():
    result = pack(Container(length=100, width=100, height=100), [])

    assert result.placements == []
    assert result.unplaced_items == []
    assert result.volume_utilization_percent == 0.0


def test_oversized_item_is_unplaced():
    container = Container(length=100, width=100, height=100)
    result = pack(container, [make_item("long", 101, 10, 10), make_item("tall", 10, 10, 150)])

    assert result.placements == []
    assert {item.id for item in result.unplaced_items} == {"long", "tall"}


@pytest.mark.parametrize("quantity", [0, -3, None])
def test_non_positive_quantity_counts_as_one(quantity):
    container = Container(length=100, width=100, height=100)
    result = pack(container, [make_item("A", 10, 10, 10, quantity=quantity)])

    assert len(result.placements) == 1


def test_quantity_expands_into_unit_placements_with_fresh_ids():
    container = Container(length=300, width=100, height=100)
    result = pack(container, [make_item("A", 100, 100, 100, quantity=3)])

    assert len(result.placements) == 3
    assert all(p.item.quantity == 1 for p in result.placements)
    assert len({p.uuid for p in result.placements}) == 3
    assert all(p.uuid != "A" for p in result.placements)


def test_unplaced_units_are_collapsed_to_quantity_one():
    container = Container(length=100, width=100, height=100)
    result = pack(container, [make_item("A", 100, 100, 100, quantity=3)])

    assert len(result.placements) == 1
    assert len(result.unplaced_items) == 2
    assert all(item.quantity == 1 for item in result.unplaced_items)


def test_larger_volume_is_placed_first_then_taller():
    container = Container(length=1000, width=1000, height=1000)
    items = [
        make_item("small", 10, 10, 10),
        make_item("flat", 40, 40, 10),
        make_item("tall", 10, 40, 40),
        make_item("big", 50, 50, 50),
    ]

    result = pack(container, items)

    assert [p.item.id for p in result.placements] == ["big", "tall", "flat", "small"]


def test_items_stack_when_the_floor_is_full():
    container = Container(length=100, width=100, height=100)
    result = pack(container, [make_item("slab", 100, 100, 40, quantity=2)])

    assert [p.position for p in result.placements] == [(0.0, 0.0, 0.0), (0.0, 40.0, 0.0)]


def test_touching_faces_do_not_overlap():
    assert not boxes_overlap((0, 0, 0), (10, 10, 10), (10, 0, 0), (10, 10, 10))
    assert boxes_overlap((0, 0, 0), (10, 10, 10), (9.5, 0, 0), (10, 10, 10))


def test_metadata_is_passed_through_but_ignored():
    container = Container(length=100, width=100, height=100)
    fragile = make_item("glass", 100, 100, 50, weight=900.0, is_fragile=True, is_stackable=False)
    heavy = make_item("anvil", 100, 100, 50, weight=5000.0)

    result = pack(container, [fragile, heavy])

    assert len(result.placements) == 2
    placed = {p.item.id: p for p in result.placements}
    assert placed["glass"].item.is_fragile is True
    assert placed["glass"].item.is_stackable is False
    assert placed["anvil"].item.weight == 5000.0
    assert placed["anvil"].y == 50.0


def test_result_carries_container_id():
    container = Container(length=100, width=100, height=100, id="tata-407")
    assert pack(container, []).container_id == "tata-407"


@pytest.mark.parametrize("seed", range(12))
def test_random_manifests_respect_invariants(seed):
    rng = random.Random(seed)
    container = Container(length=rng.choice([200, 320, 600]), width=rng.choice([120, 170, 240]), height=rng.choice([100, 170, 240]))
    items = random_manifest(rng, rng.randint(1, 15))

    result = pack(container, items)

    assert_within_container(container, result.placements)
    assert_no_overlaps(result.placements)
    assert len(result.placements) + len(result.unplaced_items) == sum(max(1, item.quantity or 1) for item in items)
    placed_volume = sum(p.volume for p in result.placements)
    assert result.volume_utilization_percent == pytest.approx(100.0 * placed_volume / container.volume)
    assert 0.0 <= result.volume_utilization_percent <= 100.0


@pytest.mark.parametrize("seed", range(4))
def test_repeated_calls_are_deterministic(seed):
    rng = random.Random(seed)
    container = Container(length=600, width=240, height=240)
    items = random_manifest(rng, 12)

    first = pack(container, items)
    second = pack(container, items)

    assert [(p.item.id, p.position) for p in first.placements] == [(p.item.id, p.position) for p in second.placements]
    assert [item.id for item in first.unplaced_items] == [item.id for item in second.unplaced_items]


def test_inputs_are_not_mutated():
    container = Container(length=100, width=100, height=100)
    items = [make_item("A", 50, 50, 50, quantity=4), make_item("B", 60, 60, 60, quantity=0)]
    snapshot = [replace(item) for item in items]

    pack(container, items)

    assert items == snapshot
    assert container == Container(length=100, width=100, height=100)
