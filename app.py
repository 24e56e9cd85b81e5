# ==============================================================
# 🏪 Shop & Orders Admin Dashboard
# Streamlit + Firestore (실시간 스냅샷) 관리자 화면
# ==============================================================

from datetime import datetime, time, timezone

import pandas as pd
import plotly.express as px
import plotly.io as pio
import streamlit as st

from shop_admin import batch, bulk_orders, exporter, importer, view
from shop_admin.config import PAGE_SIZE, configure_logging
from shop_admin.errors import ImportFormatError, ShopAdminError
from shop_admin.events import VARIANT_DESTRUCTIVE, VARIANT_SUCCESS
from shop_admin.firebase import check_connection, init_firestore
from shop_admin.models import (
    LOCATION_OPTIONS,
    REQUEST_TYPE_OPTIONS,
    STATUS_ACTIVE,
    STATUS_OPTIONS,
    TAG_OPTIONS,
    clamp_credit_score,
)
from shop_admin.state import AppState

configure_logging()

st.set_page_config(page_title="🏪 Shop & Orders Admin", layout="wide")
pio.templates.default = "plotly_white"
px.defaults.template = "plotly_white"


def format_usd(x: float) -> str:
    """숫자를 달러 형식 문자열로 변환합니다."""
    try:
        return f"${x:,.2f}"
    except Exception:
        return "-"


def safe_rerun():
    """Streamlit 버전에 맞춰 앱을 새로고침합니다."""
    if hasattr(st, "rerun"):
        st.rerun()
    elif hasattr(st, "experimental_rerun"):
        st.experimental_rerun()


# ----------------------
# 0️⃣ Firestore / 세션 상태
# ----------------------
@st.cache_resource
def get_db():
    db = init_firestore()
    check_connection(db)
    return db


try:
    DB = get_db()
except ShopAdminError as e:
    st.error(str(e))
    st.stop()

TOAST_ICONS = {VARIANT_SUCCESS: "✅", VARIANT_DESTRUCTIVE: "❌"}


def get_state() -> AppState:
    if "app_state" not in st.session_state:
        state = AppState.create(DB)
        queue = []
        # 스냅샷 콜백은 백그라운드 스레드에서 오므로 큐에 쌓았다가 렌더링 때 표시
        state.bus.subscribe(queue.append)
        st.session_state.app_state = state
        st.session_state.toast_queue = queue
    return st.session_state.app_state


def drain_toasts():
    queue = st.session_state.get("toast_queue", [])
    while queue:
        t = queue.pop(0)
        st.toast(f"**{t.title}**: {t.description}" if t.description else t.title,
                 icon=TOAST_ICONS.get(t.variant, "ℹ️"))


def get_view(key: str, spec: view.ViewSpec) -> view.ViewState:
    if key not in st.session_state:
        st.session_state[key] = spec.initial_state(PAGE_SIZE)
    return st.session_state[key]


def set_view(key: str, new_state: view.ViewState):
    st.session_state[key] = new_state


APP = get_state()

# ----------------------
# 1️⃣ 로그인
# ----------------------
if APP.user is None:
    st.header("🔐 Admin Login")
    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")
    if submitted:
        if APP.auth.sign_in(email, password):
            APP.start()
            safe_rerun()
        else:
            st.error(APP.auth.error or "Login failed")
    st.stop()

APP.start()
for sync in APP.syncs():
    if sync.loading:
        sync.refresh()
drain_toasts()
CAN_WRITE = APP.can_write

with st.sidebar:
    st.markdown(f"**{APP.user.email}**")
    st.caption(f"Role: {APP.user.role}")
    if st.button("🔄 Refresh"):
        safe_rerun()
    if st.button("🚪 Logout"):
        APP.stop()
        APP.auth.sign_out()
        for key in list(st.session_state.keys()):
            del st.session_state[key]
        safe_rerun()

st.markdown("## 🏪 Shop & Orders Admin")

shops = APP.shops.records
orders = APP.orders.records

# ----------------------
# 2️⃣ 요약
# ----------------------
m1, m2, m3, m4 = st.columns(4)
m1.metric("Shops", len(shops))
m2.metric("Active", sum(1 for s in shops if s.status == STATUS_ACTIVE))
m3.metric("Orders", len(orders))
m4.metric("Order Volume", format_usd(sum(o.amount for o in orders)))

if orders:
    df_loc = pd.DataFrame({"location": [o.location for o in orders], "amount": [o.amount for o in orders]})
    df_loc = df_loc.groupby("location", as_index=False)["amount"].sum().sort_values("amount", ascending=False)
    fig = px.bar(df_loc, x="location", y="amount", title="📦 Order amount by location")
    st.plotly_chart(fig, use_container_width=True)


# ----------------------
# 3️⃣ 테이블 공통 위젯 (콜백으로 ViewState 갱신)
# ----------------------
def _on_page(key: str, wkey: str):
    set_view(key, view.with_page(st.session_state[key], st.session_state[wkey]))


def _on_sort(key: str, wkey: str):
    set_view(key, view.toggle_sort(st.session_state[key], st.session_state[wkey]))


def _on_flip(key: str):
    state = st.session_state[key]
    set_view(key, view.toggle_sort(state, state.sort_field))


def _on_select(key: str, wkey: str):
    set_view(key, view.with_selection(st.session_state[key], st.session_state[wkey]))


def _on_select_page(key: str, wkey: str, page_keys: list):
    set_view(key, view.with_selection(st.session_state[key], page_keys))
    st.session_state[wkey] = list(page_keys)


def reset_selection(key: str):
    set_view(key, view.clear_selection(st.session_state[key]))
    st.session_state.pop(f"{key}_sel", None)


def pager(key: str, result: view.ViewResult):
    wkey = f"{key}_page"
    pages = max(result.total_pages, 1)
    # 필터로 결과가 줄면 derive()가 페이지를 당겨오므로 위젯도 맞춰줌
    st.session_state[wkey] = result.page
    c1, c2 = st.columns([1, 5])
    c1.number_input("Page", min_value=1, max_value=pages, step=1, key=wkey,
                    on_change=_on_page, args=(key, wkey))
    c2.caption(f"Page {result.page} of {pages} · {result.total} records, showing {len(result.paginated)}")


def sort_controls(key: str, spec: view.ViewSpec, labels: dict):
    state = st.session_state[key]
    wkey = f"{key}_sort"
    st.session_state[wkey] = state.sort_field
    c1, c2 = st.columns([3, 1])
    c1.selectbox("Sort by", list(spec.sort_kinds), format_func=lambda f: labels.get(f, f),
                 key=wkey, on_change=_on_sort, args=(key, wkey))
    arrow = "⬆️ asc" if state.sort_direction == view.ASC else "⬇️ desc"
    c2.button(arrow, key=f"{key}_dir", on_click=_on_flip, args=(key,))


def selection_controls(key: str, result: view.ViewResult, describe, key_attr: str = "id"):
    wkey = f"{key}_sel"
    labels = {getattr(r, key_attr): describe(r) for r in result.filtered}
    current = st.session_state.get(wkey, list(st.session_state[key].selected))
    st.session_state[wkey] = [k for k in current if k in labels]
    c1, c2 = st.columns([4, 1])
    c1.multiselect("Selected", list(labels), format_func=lambda k: labels.get(k, str(k)),
                   key=wkey, on_change=_on_select, args=(key, wkey))
    page_keys = [getattr(r, key_attr) for r in result.paginated]
    c2.button("Select page", key=f"{key}_selpage", on_click=_on_select_page, args=(key, wkey, page_keys))
    return [k for k in st.session_state[key].selected if k in labels]


SHOP_LABELS = {"client_name": "Client Name", "credit_score": "Credit Score", "balance": "Balance"}
SHOP_TABLE = {"shop_id": "Shop ID", "client_name": "Client Name", "status": "Status",
              "tags": "Tags", "credit_score": "Credit Score", "balance": "Balance"}
ORDER_LABELS = {"client_name": "Client Name", "amount": "Amount", "created_at": "Date"}
ORDER_TABLE = {"id": "Order ID", "shop_id": "Shop ID", "client_name": "Client Name",
               "amount": "Amount", "location": "Location", "created_at": "Date"}
ADVANCE_LABELS = {"order_id": "Order ID", "shop_id": "Shop ID", "request_type": "Request Type",
                  "created_at": "Date"}
ADVANCE_TABLE = {"order_id": "Order ID", "shop_id": "Shop ID", "request_type": "Request Type",
                 "message": "Message", "created_at": "Date"}

tab_names = ["🏪 Shops", "🧾 Orders"]
if CAN_WRITE:
    tab_names.append("📨 Advance Orders")
tab_names.append("📥 Import / 📤 Export")
tabs = st.tabs(tab_names)

# ==============================================================
# TAB 1: Shops
# ==============================================================
with tabs[0]:
    key = "shop_view"
    state = get_view(key, view.SHOP_VIEW)
    if APP.shops.loading:
        st.info("Loading shops... ⏳")

    f1, f2, f3 = st.columns([2, 1, 2])
    search = f1.text_input("Search shops", value=state.search, key="shop_search")
    status = f2.selectbox("Status", [view.ALL, *STATUS_OPTIONS],
                          index=[view.ALL, *STATUS_OPTIONS].index(state.filters.get("status", view.ALL)))
    tags = f3.multiselect("Tags (any)", TAG_OPTIONS, default=list(state.filters.get("tags", ())))
    new_state = view.with_search(state, search)
    new_state = view.with_filter(new_state, "status", status)
    new_state = view.with_filter(new_state, "tags", tuple(tags))
    if new_state != state:
        set_view(key, new_state)
        state = new_state

    sort_controls(key, view.SHOP_VIEW, SHOP_LABELS)
    result = view.derive(shops, st.session_state[key], view.SHOP_VIEW)
    st.dataframe(view.to_frame(result.paginated, SHOP_TABLE), hide_index=True, use_container_width=True)
    pager(key, result)

    selected_ids = selection_controls(key, result, lambda s: f"{s.shop_id} · {s.client_name}")
    selected_shops = [s for s in shops if s.id in selected_ids]

    if not CAN_WRITE:
        st.caption("👀 Viewer access: editing is disabled.")
    else:
        # --- 추가 / 수정 ---
        with st.expander("➕ Add / ✏️ Edit shop"):
            editing = st.selectbox("Edit existing (leave empty to add new)", [None, *[s.id for s in shops]],
                                   format_func=lambda i: "— new shop —" if i is None else
                                   next(f"{s.shop_id} · {s.client_name}" for s in shops if s.id == i))
            current = next((s for s in shops if s.id == editing), None)
            with st.form("shop_form", clear_on_submit=True):
                shop_code = st.text_input("Shop ID", value=current.shop_id if current else "")
                client = st.text_input("Client Name", value=current.client_name if current else "")
                f_status = st.selectbox("Status", STATUS_OPTIONS,
                                        index=STATUS_OPTIONS.index(current.status) if current else 0)
                f_tags = st.multiselect("Tags", TAG_OPTIONS,
                                        default=[t for t in (current.tags if current else []) if t in TAG_OPTIONS])
                score = st.number_input("Credit Score", min_value=0, max_value=100, step=1,
                                        value=current.credit_score if current else 0)
                balance = st.number_input("Balance", value=float(current.balance) if current else 0.0, format="%.2f")
                if st.form_submit_button("💾 Save", type="primary"):
                    payload = {"shopId": shop_code.strip(), "clientName": client.strip(), "status": f_status,
                               "tags": f_tags, "creditScore": clamp_credit_score(score), "balance": balance}
                    dup = APP.shops.find_by_code(payload["shopId"])
                    if not payload["shopId"] or not payload["clientName"]:
                        st.error("Shop ID and client name are required.")
                    elif dup is not None and (current is None or dup.id != current.id):
                        st.error("Shop ID already exists.")
                    elif current is not None:
                        if APP.shops.update(current.id, payload):
                            APP.bus.success("Shop Updated", f"Successfully updated {payload['clientName']}")
                            safe_rerun()
                    elif APP.shops.create(payload):
                        APP.bus.success("Shop Added", f"Successfully added {payload['clientName']}")
                        safe_rerun()

        if selected_shops:
            st.markdown(f"**{len(selected_shops)} shop(s) selected**")
            a1, a2, a3 = st.columns([2, 1, 1])
            bulk_status = a1.selectbox("Set status", STATUS_OPTIONS, key="bulk_status")
            if a2.button("Apply status"):
                if APP.shops.bulk_update_status(selected_ids, bulk_status):
                    APP.bus.success("Status Updated", f"{len(selected_ids)} shop(s) set to {bulk_status}")
                    reset_selection(key)
                    safe_rerun()
            if a3.button("🗑 Delete selected"):
                if APP.shops.delete_many(selected_ids):
                    APP.bus.success("Shops Deleted", f"Deleted {len(selected_ids)} shop(s)")
                    reset_selection(key)
                    safe_rerun()

            # --- 일괄 수정: 잔액 ---
            with st.expander("💰 Batch edit balances"):
                b1, b2 = st.columns(2)
                mode = b1.selectbox("Action", batch.ADJUST_MODES, key="bal_mode")
                amount = b2.text_input("Amount", key="bal_amount")
                preview = batch.apply_balance_adjustment(selected_shops, mode, amount)
                df_prev = pd.DataFrame([{"id": s.id, "Shop ID": s.shop_id, "Current": s.balance,
                                         "New": preview[s.id]} for s in selected_shops])
                edited = st.data_editor(df_prev, disabled=["id", "Shop ID", "Current"], hide_index=True,
                                        key="bal_editor")
                if st.button("💾 Save balances"):
                    values = batch.edited_values(edited["id"], edited["New"])
                    if APP.shops.update_balances(values):
                        APP.bus.success("Balances Updated", f"Updated {len(values)} shop(s)")
                        safe_rerun()

            # --- 일괄 수정: 신용점수 ---
            with st.expander("📈 Batch edit credit scores"):
                c1, c2 = st.columns(2)
                mode = c1.selectbox("Action", batch.ADJUST_MODES, index=2, key="cs_mode")
                amount = c2.text_input("Amount", key="cs_amount")
                preview = batch.apply_credit_adjustment(selected_shops, mode, amount)
                df_prev = pd.DataFrame([{"id": s.id, "Shop ID": s.shop_id, "Current": s.credit_score,
                                         "New": preview[s.id]} for s in selected_shops])
                edited = st.data_editor(
                    df_prev, disabled=["id", "Shop ID", "Current"], hide_index=True, key="cs_editor",
                    column_config={"New": st.column_config.NumberColumn("New", min_value=0, max_value=100)},
                )
                if st.button("💾 Save credit scores"):
                    scores = {}
                    for sid, val in batch.edited_values(edited["id"], edited["New"]).items():
                        scores = batch.set_credit_score(scores, sid, val)
                    if APP.shops.update_credit_scores(scores):
                        APP.bus.success("Credit Scores Updated", f"Updated {len(scores)} shop(s)")
                        safe_rerun()

            # --- 일괄 수정: 태그 ---
            with st.expander("🏷 Batch edit tags"):
                t1, t2 = st.columns(2)
                action = t1.selectbox("Action", batch.TAG_ACTIONS, key="tag_action")
                bulk_tags = t2.multiselect("Tags", TAG_OPTIONS, key="tag_values")
                preview = batch.apply_tag_action(selected_shops, action, bulk_tags)
                st.dataframe(pd.DataFrame([{"Shop ID": s.shop_id, "Current": ", ".join(s.tags),
                                            "New": ", ".join(preview[s.id])} for s in selected_shops]),
                             hide_index=True, use_container_width=True)
                if st.button("💾 Save tags"):
                    if APP.shops.update_tags(preview):
                        APP.bus.success("Tags Updated", f"Updated {len(preview)} shop(s)")
                        safe_rerun()

            if len(selected_shops) == 1 and st.button(f"🗑 Delete {selected_shops[0].client_name}"):
                target = selected_shops[0]
                if APP.shops.delete(target.id):
                    APP.bus.success("Shop Deleted", f"Successfully deleted {target.client_name}")
                    reset_selection(key)
                    safe_rerun()

# ==============================================================
# TAB 2: Orders
# ==============================================================
with tabs[1]:
    key = "order_view"
    state = get_view(key, view.ORDER_VIEW)
    if APP.orders.loading:
        st.info("Loading orders... ⏳")

    f1, f2 = st.columns([2, 1])
    search = f1.text_input("Search orders", value=state.search, key="order_search")
    loc_opts = [view.ALL, *LOCATION_OPTIONS]
    location = f2.selectbox("Location", loc_opts, index=loc_opts.index(state.filters.get("location", view.ALL)))
    new_state = view.with_filter(view.with_search(state, search), "location", location)
    if new_state != state:
        set_view(key, new_state)

    sort_controls(key, view.ORDER_VIEW, ORDER_LABELS)
    result = view.derive(orders, st.session_state[key], view.ORDER_VIEW)
    st.dataframe(view.to_frame(result.paginated, ORDER_TABLE), hide_index=True, use_container_width=True,
                 column_config={"Amount": st.column_config.NumberColumn(format="$%.2f")})
    pager(key, result)

    selected_ids = selection_controls(key, result, lambda o: f"#{o.id} · {o.shop_id} · {format_usd(o.amount)}")
    selected_orders = [o for o in orders if o.id in selected_ids]

    if selected_orders:
        with st.expander("📋 Copy selected orders"):
            st.code(exporter.orders_clipboard_text(selected_orders), language=None)
            st.code(exporter.orders_clipboard_text_chinese(selected_orders), language=None)

    if CAN_WRITE:
        if selected_orders and st.button("🗑 Delete selected orders"):
            if APP.orders.delete_many(selected_ids):
                APP.bus.success("Orders Deleted", f"Deleted {len(selected_ids)} order(s)")
                reset_selection(key)
                safe_rerun()

        # --- 주문 일괄 입력 ---
        with st.expander("📦 Create orders"):
            if "bulk_rows" not in st.session_state:
                st.session_state.bulk_rows = bulk_orders.blank_rows()
            rows = st.session_state.bulk_rows

            p1, p2, p3 = st.columns([3, 1, 1])
            codes = p1.multiselect("Add rows for shops", [s.shop_id for s in shops], key="bulk_codes")
            bulk_amount = p2.text_input("Amount for all", key="bulk_amount")
            bulk_location = p3.selectbox("Location for all", ["", *LOCATION_OPTIONS], key="bulk_location")
            b1, b2, b3, b4, b5 = st.columns(5)
            before = rows
            if b1.button("Add selected shops") and codes:
                rows = bulk_orders.rows_from_shop_codes(rows, codes, shops, bulk_amount, bulk_location)
                APP.bus.info("Rows Added", f"Added {len(codes)} order row{'s' if len(codes) > 1 else ''}")
            if b2.button("Apply amount"):
                rows = bulk_orders.apply_bulk_amount(rows, bulk_amount)
            if b3.button("Apply location"):
                rows = bulk_orders.apply_bulk_location(rows, bulk_location)
            if b4.button("➕ Row"):
                rows = bulk_orders.add_row(rows)
            if b5.button("➖ Last row") and len(rows) > 1:
                rows = bulk_orders.remove_row(rows, rows[-1].row_id)
            if rows is not before:
                # 행 구성이 바뀌면 편집기 델타를 버리고 rows에서 다시 그림
                st.session_state.pop("bulk_editor", None)

            df_rows = pd.DataFrame([{"row": r.row_id, "Shop ID": r.shop_id, "Amount": r.amount,
                                     "Location": r.location} for r in rows]).astype({"Amount": "float"})
            edited = st.data_editor(
                df_rows, hide_index=True, disabled=["row"], key="bulk_editor", num_rows="fixed",
                column_config={"Location": st.column_config.SelectboxColumn(options=list(LOCATION_OPTIONS))},
            )
            for rec in edited.to_dict("records"):
                rows = bulk_orders.update_row(
                    rows, int(rec["row"]), shops,
                    shop_id=str(rec["Shop ID"] or "").strip(),
                    amount=rec["Amount"],
                    location=rec["Location"] or "",
                )
            st.session_state.bulk_rows = rows
            for r in rows:
                if r.error:
                    st.warning(f"Row {r.row_id}: {r.error}")
                elif r.client is not None:
                    st.caption(f"Row {r.row_id}: {r.client.client_name} ({r.client.status})")

            valid = bulk_orders.valid_rows(rows)
            if st.button(f"✅ Submit {len(valid)} order(s)", type="primary", disabled=not valid):
                if APP.orders.create_many(bulk_orders.order_payloads(rows)):
                    APP.bus.success("Orders Created",
                                    f"Successfully created {len(valid)} order{'s' if len(valid) > 1 else ''}")
                    st.session_state.bulk_rows = bulk_orders.blank_rows()
                    st.session_state.pop("bulk_editor", None)
                    safe_rerun()

# ==============================================================
# TAB 3: Advance Orders (관리자 전용)
# ==============================================================
if CAN_WRITE:
    with tabs[2]:
        key = "advance_view"
        state = get_view(key, view.ADVANCE_ORDER_VIEW)
        advance = APP.advance_orders.records

        with st.form("advance_form", clear_on_submit=True):
            a1, a2, a3 = st.columns(3)
            order_ref = a1.text_input("Order ID")
            shop_code = a2.text_input("Shop ID")
            req_type = a3.selectbox("Request Type", REQUEST_TYPE_OPTIONS)
            message = st.text_area("Message")
            if st.form_submit_button("➕ Add advance order", type="primary"):
                if not order_ref.strip() or not shop_code.strip():
                    st.error("Order ID and Shop ID are required.")
                else:
                    if not APP.shops.find_by_code(shop_code):
                        st.warning(f"Shop {shop_code} is not in the shop list; saving anyway.")
                    if APP.advance_orders.create({"orderId": order_ref.strip(), "shopId": shop_code.strip(),
                                                  "requestType": req_type, "message": message}):
                        APP.bus.success("Advance Order Added", f"Saved {order_ref.strip()}")
                        safe_rerun()

        f1, f2 = st.columns([2, 1])
        search = f1.text_input("Search advance orders", value=state.search, key="advance_search")
        rt_opts = [view.ALL, *REQUEST_TYPE_OPTIONS]
        req_filter = f2.selectbox("Request Type", rt_opts,
                                  index=rt_opts.index(state.filters.get("request_type", view.ALL)))
        new_state = view.with_filter(view.with_search(state, search), "request_type", req_filter)
        if new_state != state:
            set_view(key, new_state)

        sort_controls(key, view.ADVANCE_ORDER_VIEW, ADVANCE_LABELS)
        result = view.derive(advance, st.session_state[key], view.ADVANCE_ORDER_VIEW)
        st.dataframe(view.to_frame(result.paginated, ADVANCE_TABLE), hide_index=True, use_container_width=True)
        pager(key, result)

        target = st.selectbox("Delete advance order", [None, *[a.order_id for a in result.filtered]],
                              format_func=lambda x: "—" if x is None else x)
        if target and st.button("🗑 Delete"):
            if APP.advance_orders.delete(target):
                APP.bus.success("Advance Order Deleted", f"Deleted {target}")
                safe_rerun()

# ==============================================================
# TAB 4: Import / Export
# ==============================================================
with tabs[-1]:
    left, right = st.columns(2)

    with left:
        st.subheader("📥 Import shops from CSV")
        if not CAN_WRITE:
            st.caption("Only Admin users can import shops.")
        else:
            st.caption("Required: shopid, client. Optional: status, tags (;-separated), creditscore, balance.")
            st.code(importer.EXAMPLE_CSV, language="csv")
            uploaded = st.file_uploader("CSV file", type=["csv"])
            if uploaded is not None:
                try:
                    parsed = importer.parse_shop_csv(uploaded.getvalue().decode("utf-8-sig"), shops)
                except (ImportFormatError, UnicodeDecodeError) as e:
                    st.error(str(e))
                    parsed = []
                if parsed:
                    summary = importer.import_summary(parsed)
                    st.write(f"✅ {summary['valid']} valid · ❌ {summary['errors']} errors · "
                             f"♻️ {summary['duplicates']} duplicates")
                    st.dataframe(pd.DataFrame([{
                        "Row": p.row_number, "Shop ID": p.shop_id, "Client": p.client_name,
                        "Status": p.status, "Tags": "; ".join(p.tags), "Credit Score": p.credit_score,
                        "Balance": p.balance, "Errors": "; ".join(p.errors),
                    } for p in parsed]), hide_index=True, use_container_width=True)
                    payloads = importer.importable(parsed)
                    if st.button(f"Import {len(payloads)} shop(s)", type="primary", disabled=not payloads):
                        if APP.shops.create_many(payloads):
                            APP.bus.success("Shops Imported",
                                            f"Successfully imported {len(payloads)} "
                                            f"shop{'s' if len(payloads) > 1 else ''}")
                            safe_rerun()

    with right:
        st.subheader("📤 Export")
        target = st.radio("Data", ["Shops", "Orders"], horizontal=True)
        fmt_label = st.selectbox("Format", [k for k in exporter.EXPORT_FORMATS if k != "Excel"])
        scope_label = st.selectbox("Scope", list(exporter.EXPORT_SCOPES))
        fmt = exporter.EXPORT_FORMATS[fmt_label]
        scope = exporter.EXPORT_SCOPES[scope_label]
        try:
            if target == "Shops":
                sv = get_view("shop_view", view.SHOP_VIEW)
                cols = st.multiselect("Columns", [c[0] for c in exporter.SHOP_COLUMNS],
                                      default=[c[0] for c in exporter.SHOP_COLUMNS])
                e_status = st.selectbox("Status", [view.ALL, *STATUS_OPTIONS], key="exp_status")
                e_tags = st.multiselect("Must have all tags", TAG_OPTIONS, key="exp_tags")
                cmin, cmax = st.slider("Credit score", 0, 100, (0, 100))
                settings = exporter.ShopExportSettings(format=fmt, scope=scope, columns=cols, status=e_status,
                                                       tags=e_tags, credit_min=cmin, credit_max=cmax)
                filtered = view.derive(shops, sv, view.SHOP_VIEW).filtered
                filename, mime, content = exporter.export_shops(shops, filtered, sv.selected, settings)
            else:
                ov = get_view("order_view", view.ORDER_VIEW)
                cols = st.multiselect("Columns", [c[0] for c in exporter.ORDER_COLUMNS],
                                      default=[c[0] for c in exporter.ORDER_COLUMNS])
                e_loc = st.selectbox("Location", [view.ALL, *LOCATION_OPTIONS], key="exp_loc")
                d1, d2 = st.columns(2)
                date_from = d1.date_input("From", value=None)
                date_to = d2.date_input("To", value=None)
                settings = exporter.OrderExportSettings(
                    format=fmt, scope=scope, columns=cols, location=e_loc,
                    date_from=datetime.combine(date_from, time.min, timezone.utc) if date_from else None,
                    date_to=datetime.combine(date_to, time.max, timezone.utc) if date_to else None,
                )
                filtered = view.derive(orders, ov, view.ORDER_VIEW).filtered
                filename, mime, content = exporter.export_orders(orders, filtered, ov.selected, settings)
            st.download_button(f"⬇️ Download {filename}", data=content, file_name=filename, mime=mime)
        except ShopAdminError as e:
            st.error(str(e))

drain_toasts()
