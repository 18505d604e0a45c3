# -*- coding: utf-8 -*-
"""
SelectionModel 測試
"""
import pytest

from tagmeister.pipeline.selection import SelectionModel


PATHS = ["a", "b", "c", "d", "e"]


@pytest.fixture
def model():
    return SelectionModel(PATHS)


def assert_primary_invariant(m: SelectionModel):
    if m.selected:
        assert m.primary in m.selected
    else:
        assert m.primary is None


class TestSelectOne:

    def test_select_one(self, model):
        model.select_one("c")
        assert model.selected == {"c"}
        assert model.primary == "c"
        assert model.last_anchor == "c"

    def test_unknown_path(self, model):
        with pytest.raises(KeyError):
            model.select_one("zzz")


class TestToggle:

    def test_add(self, model):
        model.select_one("a")
        model.toggle("c")
        assert model.selected == {"a", "c"}
        assert model.primary == "c"
        assert model.last_anchor == "c"

    def test_remove_picks_most_recently_added(self, model):
        model.select_one("a")
        model.toggle("d")
        model.toggle("b")
        model.toggle("b")
        assert model.selected == {"a", "d"}
        assert model.primary == "d"
        assert model.last_anchor == "b"

    def test_remove_last(self, model):
        model.select_one("a")
        model.toggle("a")
        assert model.selected == set()
        assert model.primary is None
        assert model.last_anchor == "a"


class TestSelectRange:

    def test_range_backwards(self, model):
        model.select_one("c")
        assert model.select_range("a") is True
        assert model.selected == {"a", "b", "c"}
        assert model.primary == "a"
        assert model.last_anchor == "c"

    def test_range_is_symmetric(self):
        forward = SelectionModel(PATHS)
        forward.select_one("c")
        forward.select_range("a")

        backward = SelectionModel(PATHS)
        backward.select_one("a")
        backward.select_range("c")

        assert forward.selected == backward.selected

    def test_range_replaces_selection(self, model):
        model.select_one("e")
        model.toggle("a")
        model.select_range("c")
        assert model.selected == {"a", "b", "c"}

    def test_additive_range_unions(self, model):
        model.select_one("e")
        model.toggle("b")
        model.select_range("c", additive=True)
        assert model.selected == {"b", "c", "e"}
        assert model.primary == "c"

    def test_without_anchor_does_nothing(self, model):
        assert model.select_range("c") is False
        assert model.selected == set()
        assert model.primary is None


class TestSelectAll:

    def test_select_all(self, model):
        model.select_all()
        assert model.selected == set(PATHS)
        assert model.primary == "a"

    def test_select_all_empty(self):
        m = SelectionModel([])
        m.select_all()
        assert m.selected == set()
        assert m.primary is None


class TestHandleClick:

    def test_plain_ctrl_shift(self, model):
        model.handle_click("b")
        model.handle_click("d", ctrl=True)
        assert model.selected == {"b", "d"}
        model.handle_click("e", shift=True)
        assert model.selected == {"d", "e"}
        model.handle_click("a", ctrl=True, shift=True)
        assert model.selected == {"a", "b", "c", "d", "e"}

    def test_invariant_after_sequence(self, model):
        ops = [
            ("select_one", "b"), ("toggle", "d"), ("toggle", "b"),
            ("select_range", "a"), ("toggle", "a"), ("toggle", "c"),
            ("toggle", "d"), ("select_all", None), ("toggle", "a"),
        ]
        for name, arg in ops:
            if arg is None:
                getattr(model, name)()
            else:
                getattr(model, name)(arg)
            assert_primary_invariant(model)


class TestLoadAndDiscard:

    def test_load_selects_first(self):
        m = SelectionModel()
        m.load(PATHS)
        assert m.selected == {"a"}
        assert m.primary == "a"

    def test_load_empty(self):
        m = SelectionModel(PATHS)
        m.load([])
        assert m.selected == set()
        assert m.primary is None

    def test_discard_moves_primary_to_first_remaining(self, model):
        model.select_all()
        model.set_primary("b")
        model.discard(["a", "b"])
        assert model.selected == {"c", "d", "e"}
        assert model.primary == "c"

    def test_discard_reset_primary(self, model):
        model.select_all()
        model.set_primary("e")
        model.discard(["a"], reset_primary=True)
        assert model.primary == "b"

    def test_set_primary_ignores_unselected(self, model):
        model.select_one("a")
        model.set_primary("c")
        assert model.primary == "a"

    def test_selected_paths_in_list_order(self, model):
        model.select_one("d")
        model.toggle("a")
        model.toggle("c")
        assert model.selected_paths() == ["a", "c", "d"]
