import itertools

import pytest

from domain.models import Position
from gui.diagram.geometry import CardGeometry, Rect
from services.layout import column_from_raw, layout_tables


def _raw(n_tables, n_cols=3):
    return [
        {"name": f"t{i}", "columns": [{"name": f"c{j}"} for j in range(n_cols + i)]}
        for i in range(n_tables)
    ]


def _rects(tables):
    geo = CardGeometry()
    return [
        Rect(t.position.x, t.position.y, geo.width, geo.card_height(len(t.columns)))
        for t in tables
    ]


def test_single_row_positions():
    tables = layout_tables(_raw(3))
    assert [t.position for t in tables] == [Position(50, 50), Position(400, 50), Position(750, 50)]


def test_cards_never_overlap():
    for per_row in (None, 1, 2, 3):
        rects = _rects(layout_tables(_raw(7), per_row=per_row))
        for i, a in enumerate(rects):
            for b in rects[i + 1 :]:
                assert not a.intersects(b), (per_row, a, b)


def test_wrapping_starts_below_tallest_card():
    tables = layout_tables(_raw(3, n_cols=2), per_row=2)
    tallest = max(CardGeometry().card_height(len(t.columns)) for t in tables[:2])
    assert tables[2].position == Position(50, 50 + tallest + 60)


def test_layout_is_deterministic_given_ids():
    counter = itertools.count()
    first = layout_tables(_raw(4), id_factory=lambda: f"x{next(counter)}")
    counter = itertools.count()
    second = layout_tables(_raw(4), id_factory=lambda: f"x{next(counter)}")
    assert first == second


def test_invalid_per_row():
    with pytest.raises(ValueError):
        layout_tables(_raw(2), per_row=0)


def test_column_defaults_from_sparse_payload():
    col = column_from_raw({"name": "flag"}, lambda: "c1")
    assert (col.id, col.type, col.is_pk, col.is_nullable) == ("c1", "VARCHAR", False, True)


def test_unnamed_table_gets_placeholder():
    (t,) = layout_tables([{"columns": []}])
    assert t.name == "table_1"
    assert t.columns == ()
