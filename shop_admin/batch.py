"""일괄 수정 미리보기 계산.

These helpers turn a bulk action (add / subtract / set, tag add / remove /
replace) into the final ``{shop id: value}`` mapping that ``ShopSync``
commits as one batch.
"""
from .models import clamp_credit_score, safe_float, safe_int, safe_tags

ADJUST_ADD = "add"
ADJUST_SUBTRACT = "subtract"
ADJUST_SET = "set"
ADJUST_MODES = (ADJUST_ADD, ADJUST_SUBTRACT, ADJUST_SET)

TAG_ADD = "add"
TAG_REMOVE = "remove"
TAG_REPLACE = "replace"
TAG_ACTIONS = (TAG_ADD, TAG_REMOVE, TAG_REPLACE)


def _adjust(current: float, mode: str, amount: float) -> float:
    if mode == ADJUST_ADD:
        return current + amount
    if mode == ADJUST_SUBTRACT:
        return current - amount
    if mode == ADJUST_SET:
        return amount
    raise ValueError(f"unknown adjustment mode: {mode!r}")


def _parse_amount(amount):
    return safe_float(amount, None)


def current_balances(shops) -> dict:
    return {shop.id: shop.balance for shop in shops}


def current_credit_scores(shops) -> dict:
    return {shop.id: shop.credit_score for shop in shops}


def current_tags(shops) -> dict:
    return {shop.id: list(shop.tags) for shop in shops}


def apply_balance_adjustment(shops, mode: str, amount) -> dict:
    """숫자가 아니면 현재 잔액을 그대로 돌려줍니다."""
    value = _parse_amount(amount)
    if value is None:
        return current_balances(shops)
    return {shop.id: round(_adjust(shop.balance, mode, value), 2) for shop in shops}


def apply_credit_adjustment(shops, mode: str, amount) -> dict:
    value = _parse_amount(amount)
    if value is None:
        return current_credit_scores(shops)
    value = safe_int(value)
    return {
        shop.id: clamp_credit_score(_adjust(shop.credit_score, mode, value))
        for shop in shops
    }


def set_credit_score(scores: dict, shop_id: int, value) -> dict:
    """개별 입력도 0~100으로 고정합니다."""
    return {**scores, shop_id: clamp_credit_score(value)}


def toggle_tag(tags: dict, shop_id: int, tag: str, checked: bool) -> dict:
    current = list(tags.get(shop_id, []))
    if checked and tag not in current:
        current.append(tag)
    elif not checked:
        current = [t for t in current if t != tag]
    return {**tags, shop_id: current}


def apply_tag_action(shops, action: str, selected_tags) -> dict:
    wanted = safe_tags(list(selected_tags or []))
    if not wanted:
        return current_tags(shops)
    out = {}
    for shop in shops:
        current = list(shop.tags)
        if action == TAG_ADD:
            out[shop.id] = current + [t for t in wanted if t not in current]
        elif action == TAG_REMOVE:
            out[shop.id] = [t for t in current if t not in wanted]
        elif action == TAG_REPLACE:
            out[shop.id] = list(wanted)
        else:
            raise ValueError(f"unknown tag action: {action!r}")
    return out


def edited_values(ids, values) -> dict:
    """data_editor 열 → {id: 값}. 비워 둔 칸(NaN/None)은 빼서 기존 값을 덮지 않습니다."""
    out = {}
    for shop_id, value in zip(ids, values):
        if isinstance(value, str):
            value = value.strip() or None
        if safe_float(value, None) is None:
            continue
        out[safe_int(shop_id)] = value
    return out
