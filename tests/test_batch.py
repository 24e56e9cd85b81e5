import pytest

from shop_admin import batch
from shop_admin.sync import ShopSync


def test_credit_add_on_selected_shops(shops):
    selected = [shops[1], shops[3]]  # 72, 65
    assert batch.apply_credit_adjustment(selected, batch.ADJUST_ADD, 10) == {2: 82, 4: 75}


def test_credit_adjustment_clamps(shops):
    assert batch.apply_credit_adjustment(shops[:1], batch.ADJUST_ADD, 50) == {1: 100}
    assert batch.apply_credit_adjustment(shops[:1], batch.ADJUST_SUBTRACT, 200) == {1: 0}
    assert batch.apply_credit_adjustment(shops[:2], batch.ADJUST_SET, "60") == {1: 60, 2: 60}


def test_credit_adjustment_ignores_invalid_amount(shops):
    assert batch.apply_credit_adjustment(shops[:2], batch.ADJUST_ADD, "abc") == {1: 85, 2: 72}


def test_set_credit_score_clamps_individual_edit():
    assert batch.set_credit_score({1: 50}, 1, 140) == {1: 100}
    assert batch.set_credit_score({1: 50}, 2, -3) == {1: 50, 2: 0}


def test_balance_adjustment(shops):
    selected = [shops[0], shops[1]]
    assert batch.apply_balance_adjustment(selected, batch.ADJUST_ADD, "100.25") == {
        1: 15100.75,
        2: -2399.75,
    }
    assert batch.apply_balance_adjustment(selected, batch.ADJUST_SET, 0) == {1: 0.0, 2: 0.0}
    assert batch.apply_balance_adjustment(selected, batch.ADJUST_SUBTRACT, "") == {
        1: 15000.5,
        2: -2500.0,
    }


def test_unknown_mode_raises(shops):
    with pytest.raises(ValueError):
        batch.apply_balance_adjustment(shops[:1], "multiply", 2)


def test_tag_actions(shops):
    selected = [shops[0], shops[3]]
    added = batch.apply_tag_action(selected, batch.TAG_ADD, ["VIP", "Frozen"])
    assert added == {1: ["New Shop", "VIP", "Frozen"], 4: ["Frozen", "Old Client", "VIP"]}
    removed = batch.apply_tag_action(selected, batch.TAG_REMOVE, ["Old Client"])
    assert removed == {1: ["New Shop", "VIP"], 4: ["Frozen"]}
    replaced = batch.apply_tag_action(selected, batch.TAG_REPLACE, ["No Product"])
    assert replaced == {1: ["No Product"], 4: ["No Product"]}


def test_tag_action_without_tags_keeps_current(shops):
    assert batch.apply_tag_action(shops[:1], batch.TAG_REPLACE, []) == {1: ["New Shop", "VIP"]}


def test_toggle_tag():
    tags = batch.toggle_tag({1: ["VIP"]}, 1, "Frozen", True)
    assert tags == {1: ["VIP", "Frozen"]}
    assert batch.toggle_tag(tags, 1, "VIP", False) == {1: ["Frozen"]}
    assert batch.toggle_tag(tags, 1, "Frozen", True) == tags


def test_edited_values_skip_cleared_cells():
    values = batch.edited_values([1, 2, 3, 4], [120.5, float("nan"), None, " "])
    assert values == {1: 120.5}


def test_cleared_balance_cell_keeps_stored_balance(db):
    db.seed("shops", [
        {"id": 1, "shopId": "SH1", "clientName": "A", "balance": 500.0},
        {"id": 2, "shopId": "SH2", "clientName": "B", "balance": 750.0},
    ])
    sync = ShopSync(db)
    sync.subscribe()
    assert sync.update_balances(batch.edited_values([1, 2], [float("nan"), 80.0]))
    assert {s.id: s.balance for s in sync.records} == {1: 500.0, 2: 80.0}
