"""0/1 knapsack with multi-subject matches.

The solver matches over `(items, capacity)`. A capacity of zero or an empty
item list ends the recursion, whatever the other subject holds, which is
written with a wildcard field: `literal(_, 0)`.

Items are `(weight, value)` pairs. Selected items are reported by their index
in the input.

Run with:
    matchkit trace examples.knapsack:knapsack 12 "[(2, 3), (3, 4), (4, 5), (5, 6), (6, 7)]"
"""

from collections.abc import Sequence

from matchkit import _, guard, literal, match

type Item = tuple[int, int]
type KnapsackResult = tuple[int, tuple[int, ...]]


def _solve(items: tuple[Item, ...], capacity: int, selected: tuple[int, ...], index: int) -> KnapsackResult:
    return (
        match(items, capacity)
        | literal(_, 0) >> (lambda _items, _capacity: (0, selected))
        | literal((), _) >> (lambda _items, _capacity: (0, selected))
        | _ >> (lambda items, capacity: _take_or_skip(items, capacity, selected, index))
    ).materialize(tuple[int, tuple[int, ...]])


def _take_or_skip(
    items: tuple[Item, ...],
    capacity: int,
    selected: tuple[int, ...],
    index: int,
) -> KnapsackResult:
    (weight, value), rest = items[0], items[1:]
    without = _solve(rest, capacity, selected, index + 1)
    if weight > capacity:
        return without
    taken = _solve(rest, capacity - weight, (*selected, index), index + 1)

    return (
        match(without, taken)
        | guard(lambda without, taken: value + taken[0] > without[0])
        >> (lambda _without, taken: (value + taken[0], taken[1]))
        | _ >> (lambda without, _taken: without)
    ).materialize()


def knapsack(capacity: int, items: Sequence[Item]) -> KnapsackResult:
    """Return the best total value and the indices of the items achieving it."""
    if capacity < 0:
        msg = f"Capacity must be non-negative, got: {capacity}"
        raise ValueError(msg)
    return _solve(tuple(tuple(item) for item in items), capacity, (), 0)


def calculate_totals(items: Sequence[Item], selected: Sequence[int]) -> tuple[int, int]:
    """Return the total weight and value of the selected items."""
    chosen = [items[i] for i in selected if 0 <= i < len(items)]
    return sum(w for w, _v in chosen), sum(v for _w, v in chosen)


def format_result(result: KnapsackResult, items: Sequence[Item]) -> list[str]:
    best, selected = result
    total_weight, total_value = calculate_totals(items, selected)
    return [
        f"Max Value: {best}",
        f"Selected Item: {' '.join(str(i) for i in selected)}",
        f"Total Weight: {total_weight}",
        f"Total Value: {total_value}",
    ]


if __name__ == "__main__":
    example_items = [(2, 3), (3, 4), (4, 5), (5, 6), (6, 7)]
    for line in format_result(knapsack(12, example_items), example_items):
        print(line)  # noqa: T201
