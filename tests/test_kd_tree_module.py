import pytest

from datos_module import random_items
from geo_module import Axis, Item, Point
from kd_tree_module import (
    Nearest,
    Node,
    build,
    closer_of,
    find_nearest,
    find_nearest_traced,
    stats,
    upsert,
)


def three_in_a_column():
    return [Item.at(20.0, 70.0, "parent"),
            Item.at(10.0, 70.0, "left"),
            Item.at(30.0, 70.0, "right")]


def brute_force(items, point):
    return min(it.point.square_distance(point) for it in items)


def check_shape(node):
    """Cada área: izquierda n//2 items, derecha n-1-n//2."""
    if node.is_empty:
        return
    n = len(node)
    assert len(node.izq) == n // 2
    assert len(node.der) == n - 1 - n // 2
    check_shape(node.izq)
    check_shape(node.der)


def check_split(node, axis=Axis.Latitude):
    if node.is_empty:
        return
    corte = node.item.point[axis]
    assert all(it.point[axis] < corte for it in node.izq.items())
    assert all(it.point[axis] >= corte for it in node.der.items())
    check_split(node.izq, axis.next())
    check_split(node.der, axis.next())


# ----------------------------------------------------------
# closer_of
# ----------------------------------------------------------
def test_closer_of_with_none_returns_first():
    first = Nearest(100.0, Item.at(1.0, 20.0, "foo"))
    assert closer_of(first, None) is first
    assert first.closer_of(None) is first


def test_closer_of_with_nearer_second_returns_second():
    first = Nearest(100.0, Item.at(1.0, 20.0, "foo"))
    second = Nearest(80.0, Item.at(2.0, 10.0, "bar"))
    assert closer_of(first, second) is second


def test_closer_of_with_farther_second_returns_first():
    first = Nearest(100.0, Item.at(1.0, 20.0, "foo"))
    second = Nearest(120.0, Item.at(2.0, 10.0, "baz"))
    assert closer_of(first, second) is first


def test_closer_of_tie_keeps_first():
    first = Nearest(50.0, Item.at(1.0, 20.0, "foo"))
    second = Nearest(50.0, Item.at(2.0, 10.0, "bar"))
    assert closer_of(first, second) is first
    assert closer_of(second, first) is second


# ----------------------------------------------------------
# build
# ----------------------------------------------------------
def test_build_empty_returns_empty():
    node = build([])
    assert node.is_empty
    assert node == Node()
    assert len(node) == 0
    assert node.height() == 0


def test_build_one_item_has_no_children():
    node = build([Item.at(1.0, 20.0, "foo")])
    assert node.value == "foo"
    assert node.left is None
    assert node.right is None


def test_build_three_items_median_by_latitude():
    items = [Item.at(3.0, 10.0, "foo"),
             Item.at(2.0, 10.0, "bar"),
             Item.at(1.0, 10.0, "baz")]
    node = Node.build(items)

    assert node.value == "bar"
    assert node.left.value == "baz"
    assert node.right.value == "foo"


def test_build_reorders_input_in_place():
    items = [Item.at(3.0, 10.0, "foo"),
             Item.at(2.0, 10.0, "bar"),
             Item.at(1.0, 10.0, "baz")]
    build(items)
    assert [it.value for it in items] == ["baz", "bar", "foo"]


def test_build_four_items_alternates_to_longitude():
    items = [Item.at(4.0, 3.0, "foo"),
             Item.at(2.0, 1.0, "bar"),
             Item.at(3.0, 2.0, "baz"),
             Item.at(1.0, 4.0, "qux")]
    node = build(items)

    # latitud: qux bar | baz | foo ; la izquierda se corta por longitud
    assert node.value == "baz"
    assert node.right.value == "foo"
    assert node.left.value == "qux"
    assert node.left.left.value == "bar"
    assert node.left.right is None


@pytest.mark.parametrize("n", [0, 1, 2, 3, 4, 5, 8, 17, 100])
def test_build_shape_left_gets_half(n):
    node = build(random_items(n, seed=n))
    assert len(node) == n
    check_shape(node)


def test_build_split_invariant_holds():
    node = build(random_items(300, seed=11))
    check_split(node)


def test_build_keeps_duplicates():
    items = [Item.at(5.0, 5.0, "a"), Item.at(5.0, 5.0, "b"), Item.at(5.0, 5.0, "c")]
    node = build(items)
    assert len(node) == 3
    assert sorted(it.value for it in node.items()) == ["a", "b", "c"]


def test_build_balanced_height():
    node = build(random_items(1023, seed=1))
    assert node.height() == 10
    assert stats(node) == {"puntos": 1023, "altura": 10}


# ----------------------------------------------------------
# upsert
# ----------------------------------------------------------
def test_upsert_into_empty_creates_single_node():
    node = Node()
    upsert(node, Item.at(20.0, 70.0, "foo"))
    assert node.value == "foo"
    assert node.left is None
    assert node.right is None
    assert len(node) == 1


def test_upsert_same_place_changes_value():
    node = Node(Item.at(20.0, 70.0, "foo"))
    node.upsert(Item.at(20.0, 70.0, "bar"))
    assert node.value == "bar"
    assert len(node) == 1


def test_upsert_more_north_goes_right():
    node = Node(Item.at(20.0, 70.0, "foo"))
    upsert(node, Item.at(30.0, 70.0, "bar"))
    assert node.right.value == "bar"
    assert node.left is None


def test_upsert_more_south_goes_left():
    node = Node(Item.at(20.0, 70.0, "foo"))
    upsert(node, Item.at(10.0, 70.0, "baz"))
    assert node.left.value == "baz"
    assert node.right is None


def test_upsert_equal_latitude_goes_right():
    node = Node(Item.at(20.0, 70.0, "foo"))
    upsert(node, Item.at(20.0, 10.0, "tie"))
    assert node.right.value == "tie"


def test_upsert_second_level_compares_longitude():
    node = Node(Item.at(20.0, 70.0, "root"))
    upsert(node, Item.at(30.0, 70.0, "north"))
    upsert(node, Item.at(40.0, 60.0, "west"))
    upsert(node, Item.at(25.0, 80.0, "east"))
    assert node.right.left.value == "west"
    assert node.right.right.value == "east"


def test_upsert_updates_left_child():
    node = build(three_in_a_column())
    upsert(node, Item.at(10.0, 70.0, "foo"))
    assert node.left.value == "foo"


def test_upsert_updates_right_child_without_new_node():
    node = build(three_in_a_column())
    izq, der = node.izq, node.der
    hijos_der = (der.izq, der.der)

    upsert(node, Item.at(30.0, 70.0, "bar"))

    assert node.right.value == "bar"
    assert len(node) == 3
    assert node.izq is izq
    assert node.der is der
    assert (der.izq, der.der) == hijos_der
    assert node.left.value == "left"
    assert node.value == "parent"


def test_upsert_then_find_returns_new_value():
    node = build(three_in_a_column())
    upsert(node, Item.at(30.0, 70.0, "bar"))
    assert find_nearest(node, Point(31.0, 70.0)).value == "bar"


def test_upsert_many_agrees_with_brute_force():
    items = random_items(200, seed=5)
    node = Node()
    for it in items:
        upsert(node, it)
    assert len(node) == 200
    check_split(node)
    for q in random_items(50, seed=6):
        assert find_nearest(node, q.point).point.square_distance(q.point) == brute_force(items, q.point)


# ----------------------------------------------------------
# find_nearest
# ----------------------------------------------------------
def test_find_nearest_empty_returns_none():
    assert find_nearest(Node(), Point(1.0, 20.0)) is None


def test_find_nearest_single_node_returns_it():
    node = Node(Item.at(20.0, 70.0, "parent"))
    assert node.find_nearest(Point(23.0, 74.0)) == Item.at(20.0, 70.0, "parent")


def test_find_nearest_same_point_returns_item():
    node = build(three_in_a_column())
    mejor, dist, nodos, _, _ = find_nearest_traced(node, Point(20.0, 70.0))
    assert mejor == Item.at(20.0, 70.0, "parent")
    assert dist == 0.0
    assert nodos == 1


def test_find_nearest_right_child_by_true_distance():
    node = build(three_in_a_column())
    mejor, dist, _, _, recorrido = find_nearest_traced(node, Point(33.0, 74.0))
    assert mejor.value == "right"
    assert dist == pytest.approx(5.0)
    assert recorrido[0] == Point(20.0, 70.0)


def test_find_nearest_crosses_to_left_child():
    items = [Item.at(20.0, 60.0, "parent"),
             Item.at(18.0, 70.0, "left"),
             Item.at(30.0, 70.0, "right")]
    node = build(items)
    assert find_nearest(node, Point(21.0, 74.0)).value == "left"


def test_find_nearest_prunes_in_squared_space():
    # corte a 0.3 del punto de consulta: 0.3 >= 0.2025 pero 0.09 < 0.2025
    items = [Item.at(0.0, 10.0, "root"),
             Item.at(0.3, 0.45, "near side"),
             Item.at(-0.01, 0.0, "far side")]
    node = build(items)
    assert node.value == "root"
    assert find_nearest(node, Point(0.3, 0.0)).value == "far side"


def test_find_nearest_skips_far_branch_when_bound_is_large():
    items = [Item.at(0.0, 0.0, "root"),
             Item.at(10.0, 0.0, "north"),
             Item.at(-10.0, 0.0, "south")]
    node = build(items)
    _, _, nodos, _, recorrido = find_nearest_traced(node, Point(9.0, 0.0))
    assert nodos == 2
    assert Point(-10.0, 0.0) not in recorrido


def test_find_nearest_parent_wins_tie_with_child():
    node = Node()
    upsert(node, Item.at(0.0, 0.0, "parent"))
    upsert(node, Item.at(2.0, 0.0, "child"))
    assert find_nearest(node, Point(1.0, 0.0)).value == "parent"


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_find_nearest_agrees_with_brute_force(seed):
    items = random_items(500, seed=seed)
    node = build(list(items))
    for q in random_items(100, seed=seed + 100):
        mejor = find_nearest(node, q.point)
        assert mejor.point.square_distance(q.point) == brute_force(items, q.point)


def test_find_nearest_every_stored_point_returns_itself():
    items = random_items(200, seed=9)
    node = build(list(items))
    for it in items:
        assert find_nearest(node, it.point) == it


def test_find_nearest_traced_empty():
    assert find_nearest_traced(Node(), Point(0.0, 0.0)) == (None, None, 0, 0.0, [])


def test_find_nearest_traced_visits_fewer_than_all():
    items = random_items(1000, seed=4)
    node = build(list(items))
    mejor, _, nodos, _, recorrido = find_nearest_traced(node, Point(55.0, 35.0))
    assert mejor == find_nearest(node, Point(55.0, 35.0))
    assert nodos == len(recorrido)
    assert nodos < len(items)


# ----------------------------------------------------------
# Node
# ----------------------------------------------------------
def test_node_equality_is_structural():
    a = build(three_in_a_column())
    b = build(three_in_a_column())
    assert a == b
    upsert(b, Item.at(10.0, 70.0, "changed"))
    assert a != b


def test_items_preorder():
    node = build(three_in_a_column())
    assert [it.value for it in node.items()] == ["parent", "left", "right"]


# ----------------------------------------------------------
# Árboles profundos (upserts ordenados)
# ----------------------------------------------------------
@pytest.fixture(scope="module")
def deep_tree():
    node = Node()
    for i in range(5000):
        upsert(node, Item.at(float(i), 0.0, i))
    return node


def test_deep_tree_find_nearest(deep_tree):
    assert find_nearest(deep_tree, Point(4999.0, 0.0)).value == 4999
    assert find_nearest(deep_tree, Point(-3.0, 0.0)).value == 0
    assert find_nearest(deep_tree, Point(2500.4, 1.0)).value == 2500


def test_deep_tree_traced(deep_tree):
    mejor, dist, nodos, _, _ = find_nearest_traced(deep_tree, Point(5100.0, 0.0))
    assert mejor.value == 4999
    assert dist == pytest.approx(101.0)
    assert nodos == 5000


def test_deep_tree_helpers(deep_tree):
    assert len(deep_tree) == 5000
    assert deep_tree.height() == 5000
    assert [it.value for it in deep_tree.items()][:3] == [0, 1, 2]
    assert stats(deep_tree) == {"puntos": 5000, "altura": 5000}
    assert repr(deep_tree).startswith("Node(Item(point=Point(latitude=0.0")


def test_deep_trees_compare_equal():
    a, b = Node(), Node()
    for i in range(3000):
        upsert(a, Item.at(float(i), float(i), i))
        upsert(b, Item.at(float(i), float(i), i))
    assert a == b
    upsert(b, Item.at(2999.0, 2999.0, "changed"))
    assert a != b


def test_repr_nested():
    node = build(three_in_a_column())
    assert repr(node) == (
        f"Node({Item.at(20.0, 70.0, 'parent')!r}, "
        f"Node({Item.at(10.0, 70.0, 'left')!r}, Node(), Node()), "
        f"Node({Item.at(30.0, 70.0, 'right')!r}, Node(), Node()))"
    )


def recursive_route(node, axis, query, route):
    """Búsqueda recursiva de referencia; devuelve (metric, item)."""
    if node.is_empty:
        return None
    route.append(node.item.point)
    metric = node.item.point.square_distance(query)
    if metric == 0.0:
        return metric, node.item
    if query[axis] >= node.item.point[axis]:
        near, far = node.der, node.izq
    else:
        near, far = node.izq, node.der
    best = (metric, node.item)
    other = recursive_route(near, axis.next(), query, route)
    if other is not None and other[0] < best[0]:
        best = other
    if (query[axis] - node.item.point[axis]) ** 2 < best[0]:
        other = recursive_route(far, axis.next(), query, route)
        if other is not None and other[0] < best[0]:
            best = other
    return best


@pytest.mark.parametrize("seed", [7, 8])
def test_search_route_matches_recursive_order(seed):
    node = build(random_items(300, seed=seed))
    for q in random_items(30, seed=seed + 50):
        expected = []
        _, item = recursive_route(node, Axis.Latitude, q.point, expected)
        mejor, _, nodos, _, route = find_nearest_traced(node, q.point)
        assert route == expected
        assert nodos == len(expected)
        assert mejor is item
