"""Solar Quote Pro Streamlit app.

Quotation builder and management dashboard for a solar installation sales
team: staff log in, build quotations from the configured pricing packages
and BOM templates, and download them as PDF or Excel. Admins maintain the
reference data in the Config Panel.
"""

import base64

import streamlit as st
import streamlit.components.v1 as components
import pandas as pd
import plotly.express as px

from config import Config, configure_logging
from constants import (
    PROJECT_TYPES,
    STRUCTURE_TYPES,
    PANEL_TYPES,
    STATUSES,
    ROLES,
    PRICING_FIELDS,
    CUSTOMER_FIELDS,
    DEFAULT_CLASSIFICATION,
    WITHOUT_STRUCTURE,
    STRUCTURE_INCLUDED,
    STATUS_PENDING
)
from catalog import new_id
from store import JsonStore
from controller import QuoteController, SAVE_SAVED, SAVE_ERROR
from builder import new_form, change_classification, apply_product
from resolver import (
    TRIPLE_FIELDS,
    ALL,
    triple_of,
    find_products,
    find_product_by_name,
    pricing_options,
    filter_by_triple
)
from pricing import (
    calculate_breakdown,
    structure_disclaimer,
    investment_label,
    is_non_subsidy,
    format_inr
)
from document import assemble_document
from quotation import render_quotation_pdf, render_quotation_html, pdf_filename
from spreadsheet import export_quotation, export_master_report, sample_workbook, XLSX_MIME
from auth import (
    can_access_settings,
    can_edit_base_pricing,
    can_change_status,
    can_modify_quotations,
    can_export_master_report,
    visible_quotations
)
from exceptions import (
    ValidationError,
    PersistenceError,
    ImportFormatError,
    RenderError,
    AuthError
)

configure_logging()

st.set_page_config(
    page_title="Solar Quote Pro",
    page_icon="☀️",
    layout="wide"
)

# Custom CSS for sidebar and totals
st.markdown("""
<style>
    [data-testid="stSidebar"] {
        background-color: #fef9e7;
    }
    [data-testid="stSidebar"] p,
    [data-testid="stSidebar"] span,
    [data-testid="stSidebar"] label {
        color: #1a1a1a !important;
        font-weight: 500 !important;
    }
    .investment-total {
        background-color: #2E86AB;
        color: white;
        padding: 12px 16px;
        border-radius: 6px;
        font-size: 1.3em;
        font-weight: bold;
    }
    .system-warning {
        background-color: #fff3cd;
        padding: 10px;
        border-radius: 5px;
        border-left: 4px solid #ffc107;
    }
    .draft-badge {
        color: #dc3545;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)

LABELS = {
    "actual_plant_cost": "Actual Plant Cost (₹)",
    "discount": "Discount (₹)",
    "subsidy_amount": "Subsidy Amount (₹)",
    "kseb_charges": "KSEB Charges (₹)",
    "additional_material_cost": "Additional Material Cost (₹)",
    "customized_structure_cost": "Customized Structure Cost (₹)",
    "net_meter_cost": "Net Meter Cost (₹)",
    "customer_name": "Customer Name *",
    "discom_number": "Consumer No",
    "address": "Address",
    "mobile": "Mobile",
    "email": "Email",
    "location": "Location",
}

TRIPLE_OPTIONS = {
    "project_type": PROJECT_TYPES,
    "structure_type": STRUCTURE_TYPES,
    "panel_type": PANEL_TYPES,
}

BOM_COLUMNS = ["product", "uom", "quantity", "specification", "make"]


@st.cache_resource
def get_controller() -> QuoteController:
    """One controller (and one in-memory state) per server process."""
    controller = QuoteController(JsonStore(Config.DATA_DIR))
    controller.load()
    return controller


def _index(options: list, value) -> int:
    return options.index(value) if value in options else 0


def _to_data_url(upload) -> str:
    encoded = base64.b64encode(upload.getvalue()).decode()
    return f"data:{upload.type};base64,{encoded}"


def _frame_records(frame: pd.DataFrame) -> list:
    return frame.astype(object).where(pd.notnull(frame), None).to_dict(orient="records")


def show_save_status(status: str) -> None:
    if status == SAVE_SAVED:
        st.success("Saved")
    elif status == SAVE_ERROR:
        st.error("Save failed. Your changes are kept on screen; please try again.")


def reset_form(user: dict, quotation: dict = None, state: dict = None) -> None:
    form = new_form(user, quotation)
    if quotation is not None and not form.get("product_id") and state is not None:
        product = find_product_by_name(state, quotation.get("system_description"))
        form["product_id"] = product.get("id") if product else None
    st.session_state["form"] = form
    st.session_state["form_rev"] = st.session_state.get("form_rev", 0) + 1


def login_screen(controller: QuoteController) -> None:
    st.title("☀️ Solar Quote Pro")
    st.caption(controller.state["company"].get("name", ""))

    with st.form("login_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Login", type="primary")

    if submitted:
        try:
            st.session_state["user"] = controller.login(username.strip(), password)
        except AuthError as exc:
            st.error(exc.message)
        else:
            reset_form(st.session_state["user"])
            st.rerun()


# --- Dashboard ---

def quotation_actions(controller: QuoteController, user: dict, quotation: dict) -> None:
    state = controller.state
    quote_id = quotation["id"]

    col_pdf, col_print, col_excel, col_edit, col_delete = st.columns(5)

    with col_pdf:
        if st.button("Generate PDF", key=f"pdf_{quote_id}", type="primary"):
            with st.spinner(f"Generating {quote_id}..."):
                try:
                    document = assemble_document(quotation, state)
                    pdf_bytes = render_quotation_pdf(document, state["company"])
                except RenderError as exc:
                    st.error(exc.message)
                else:
                    st.download_button(
                        label="Download PDF",
                        data=pdf_bytes,
                        file_name=pdf_filename(quotation),
                        mime="application/pdf",
                        key=f"download_pdf_{quote_id}"
                    )

    with col_print:
        show_print = st.toggle("Print view", key=f"print_{quote_id}")

    with col_excel:
        filename, data = export_quotation(quotation)
        st.download_button(
            label="Export Excel",
            data=data,
            file_name=filename,
            mime=XLSX_MIME,
            key=f"excel_{quote_id}"
        )

    if can_modify_quotations(user) or quotation.get("created_by") == user.get("id"):
        with col_edit:
            if st.button("Edit", key=f"edit_{quote_id}"):
                reset_form(user, quotation, state)
                st.info(f"Editing {quote_id}. Open the Create Quote tab to continue.")
    if can_modify_quotations(user):
        with col_delete:
            confirm = st.checkbox("Confirm delete", key=f"confirm_delete_{quote_id}")
            if st.button("Delete", key=f"delete_{quote_id}", disabled=not confirm):
                try:
                    controller.delete_quotation(quote_id)
                except PersistenceError as exc:
                    st.error(exc.message)
                else:
                    st.success(f"Deleted {quote_id}")
                    st.rerun()

    if show_print:
        document = assemble_document(quotation, state)
        components.html(render_quotation_html(document), height=900, scrolling=True)


def dashboard_tab(controller: QuoteController, user: dict) -> None:
    state = controller.state
    st.header("Quotations")

    col_search, col_report = st.columns([3, 1])
    with col_search:
        search = st.text_input("Search by quote ID, customer or project type")
    rows = visible_quotations(state["quotations"], user, search)

    if can_export_master_report(user):
        with col_report:
            filename, data = export_master_report(state["quotations"])
            st.download_button(
                label="Master Report",
                data=data,
                file_name=filename,
                mime=XLSX_MIME,
                disabled=not state["quotations"]
            )

    if not rows:
        st.info("No quotations yet. Create one in the Create Quote tab.")
        return

    totals = [calculate_breakdown(q.get("pricing"), q.get("project_type"))["grand_total"] for q in rows]

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Quotations", len(rows))
    with col2:
        st.metric("Total Net Investment", f"₹{format_inr(sum(totals))}")
    with col3:
        pending = sum(1 for q in rows if q.get("status") == STATUS_PENDING)
        st.metric("Site Survey Pending", pending)

    df_quotes = pd.DataFrame({
        "Quote ID": [q.get("id") for q in rows],
        "Date": [q.get("date") for q in rows],
        "Customer": [q.get("customer_name") for q in rows],
        "Project Type": [q.get("project_type") for q in rows],
        "System": [q.get("system_description") for q in rows],
        "Status": [q.get("status") for q in rows],
        "Net Investment (₹)": totals,
        "Sales Person": [q.get("created_by_name") for q in rows],
    })
    st.dataframe(df_quotes, use_container_width=True, hide_index=True)

    df_chart = df_quotes.groupby("Project Type", as_index=False)["Net Investment (₹)"].sum()
    fig = px.bar(
        df_chart,
        x="Project Type",
        y="Net Investment (₹)",
        color="Project Type",
        color_discrete_sequence=["#2E86AB", "#4ECDC4", "#FFD93D", "#6BCB77", "#9B59B6", "#E74C3C"]
    )
    fig.update_layout(showlegend=False, height=350)
    st.plotly_chart(fig, use_container_width=True)

    st.markdown("---")
    selected_id = st.selectbox("Select quotation", [q["id"] for q in rows])
    quotation = next(q for q in rows if q["id"] == selected_id)
    if quotation.get("status") == STATUS_PENDING:
        st.markdown('<span class="draft-badge">DRAFT</span>', unsafe_allow_html=True)
    quotation_actions(controller, user, quotation)


# --- Quotation form ---

def classification_inputs(form: dict, rev: int) -> dict:
    updates = {}
    columns = st.columns(3)
    for column, (field, label) in zip(columns, [
        ("project_type", "Project Type"),
        ("structure_type", "Structure Type"),
        ("panel_type", "Panel Type"),
    ]):
        options = [""] + TRIPLE_OPTIONS[field]
        with column:
            value = st.selectbox(
                label, options,
                index=_index(options, form.get(field)),
                format_func=lambda v: v or "Select...",
                key=f"{field}_{rev}"
            )
        if value != form.get(field):
            updates[field] = value
    return updates


def pricing_inputs(form: dict, user: dict, rev: int) -> dict:
    pricing = dict(form["pricing"])
    project_type = form.get("project_type")
    structure_type = form.get("structure_type")
    base_locked = not can_edit_base_pricing(user)

    fields = ["actual_plant_cost", "discount"]
    if not is_non_subsidy(project_type):
        fields.append("subsidy_amount")
    fields += ["kseb_charges", "additional_material_cost", "net_meter_cost"]
    if structure_type == WITHOUT_STRUCTURE:
        fields.append("customized_structure_cost")

    columns = st.columns(3)
    for i, field in enumerate(fields):
        with columns[i % 3]:
            pricing[field] = st.number_input(
                LABELS[field],
                value=float(pricing.get(field) or 0),
                step=500.0,
                format="%.2f",
                disabled=base_locked and field in ("actual_plant_cost", "discount", "subsidy_amount"),
                key=f"{field}_{rev}"
            )
    if structure_type == STRUCTURE_INCLUDED:
        st.caption("Customized Structure Cost: Included")
    return pricing


def bom_editor(form: dict, rev: int) -> list:
    df_bom = pd.DataFrame(form["bom_items"], columns=["id"] + BOM_COLUMNS)
    edited = st.data_editor(
        df_bom,
        num_rows="dynamic",
        use_container_width=True,
        hide_index=True,
        column_config={
            "id": None,
            "product": "Products",
            "uom": "UOM",
            "quantity": "Qty",
            "specification": "Spec/Type",
            "make": "Make",
        },
        key=f"bom_{rev}"
    )
    items = []
    for row in _frame_records(edited):
        if not any(row.get(column) for column in BOM_COLUMNS):
            continue
        item = {column: "" if row.get(column) is None else str(row[column]) for column in BOM_COLUMNS}
        items.append({"id": row.get("id") or new_id(), **item})
    return items


def quotation_form_tab(controller: QuoteController, user: dict) -> None:
    state = controller.state
    if "form" not in st.session_state:
        reset_form(user)
    form = st.session_state["form"]
    rev = st.session_state["form_rev"]

    title = f"Edit Quotation {form['id']}" if form.get("id") else "New Quotation"
    if form.get("status") == STATUS_PENDING:
        title += " (DRAFT)"
    st.header(title)

    st.subheader("System Classification")
    updates = classification_inputs(form, rev)
    if updates:
        st.session_state["form"] = change_classification(form, **updates)
        st.session_state["form_rev"] = rev + 1
        st.rerun()

    products = find_products(state, triple_of(form))
    names = [""] + [p["name"] for p in products]
    selected_name = st.selectbox(
        "Product Description",
        names,
        index=_index(names, form.get("system_description")),
        format_func=lambda v: v or "Select a product...",
        key=f"product_{rev}"
    )
    if all(triple_of(form)) and not products:
        st.markdown(
            '<div class="system-warning">No products are configured for this classification.</div>',
            unsafe_allow_html=True
        )
    if selected_name and selected_name != form.get("system_description"):
        product = find_product_by_name(state, selected_name)
        st.session_state["form"] = apply_product(form, product, state)
        st.session_state["form_rev"] = rev + 1
        st.rerun()

    st.subheader("Customer Details")
    columns = st.columns(3)
    for i, field in enumerate(CUSTOMER_FIELDS):
        with columns[i % 3]:
            form[field] = st.text_input(LABELS[field], value=form.get(field) or "", key=f"{field}_{rev}")

    form["status"] = st.selectbox(
        "Status", STATUSES,
        index=_index(STATUSES, form.get("status")),
        disabled=not can_change_status(user),
        key=f"status_{rev}"
    )

    st.subheader("Pricing")
    form["pricing"] = pricing_inputs(form, user, rev)

    breakdown = calculate_breakdown(form["pricing"], form.get("project_type"))
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("After Discount", f"₹{format_inr(breakdown['after_discount'])}")
    with col2:
        st.metric("Subsidy Applied", f"₹{format_inr(breakdown['subsidy_applied'])}")
    with col3:
        st.metric("After Subsidy", f"₹{format_inr(breakdown['after_subsidy'])}")
    st.markdown(
        f'<div class="investment-total">{investment_label(form.get("project_type"))}: '
        f'₹{format_inr(breakdown["grand_total"])}</div>',
        unsafe_allow_html=True
    )
    disclaimer = structure_disclaimer(form.get("structure_type"), form["pricing"])
    if disclaimer:
        st.caption(disclaimer)

    st.subheader("Bill of Materials")
    form["bom_items"] = bom_editor(form, rev)
    st.session_state["form"] = form

    if can_access_settings(user) and form["bom_items"]:
        with st.expander("Save BOM as Template"):
            template_name = st.text_input("Template Name", key=f"bom_template_name_{rev}")
            if st.button("Save as Template", key=f"bom_template_save_{rev}"):
                try:
                    show_save_status(controller.save_bom_as_template(template_name, form["bom_items"]))
                except ValidationError as exc:
                    st.error(exc.message)

    st.markdown("---")
    col_save, col_cancel = st.columns([1, 4])
    with col_save:
        if st.button("Save Quotation", type="primary"):
            product = find_product_by_name(state, form.get("system_description"))
            try:
                quotation = controller.submit_quotation(form, product, user)
            except ValidationError as exc:
                st.error(exc.message)
            except PersistenceError as exc:
                st.error(f"{exc.message}. The quotation is kept in this session; please retry.")
            else:
                st.success(f"Saved quotation {quotation['id']}")
                reset_form(user)
    with col_cancel:
        if st.button("Clear Form"):
            reset_form(user)
            st.rerun()


# --- Config panel ---

def company_settings(controller: QuoteController) -> None:
    company = dict(controller.state["company"])
    with st.form("company_form"):
        fields = [
            ("name", "Company Name"), ("head_office", "Head Office"),
            ("regional_office_1", "Regional Office 1"), ("regional_office_2", "Regional Office 2"),
            ("phone", "Phone"), ("email", "Email"), ("website", "Website"), ("gstin", "GSTIN"),
        ]
        for key, label in fields:
            company[key] = st.text_input(label, value=company.get(key, ""))
        logo = st.file_uploader("Company Logo", type=["png", "jpg", "jpeg"])
        seal = st.file_uploader("Company Seal", type=["png", "jpg", "jpeg"])
        submitted = st.form_submit_button("Save Company Profile", type="primary")

    col_logo, col_seal = st.columns(2)
    if company.get("logo"):
        col_logo.image(company["logo"], caption="Logo", width=150)
    if company.get("seal"):
        col_seal.image(company["seal"], caption="Seal", width=120)

    if submitted:
        if logo is not None:
            company["logo"] = _to_data_url(logo)
        if seal is not None:
            company["seal"] = _to_data_url(seal)
        show_save_status(controller.update_settings("company", company))


def bank_settings(controller: QuoteController) -> None:
    bank = dict(controller.state["bank"])
    with st.form("bank_form"):
        fields = [
            ("company_name", "Account Holder"), ("bank_name", "Bank Name"),
            ("account_number", "Account Number"), ("branch", "Branch"), ("ifsc", "IFSC Code"),
            ("address", "Bank Address"), ("pan", "PAN"), ("upi_id", "UPI ID"),
            ("gst_number", "GST Number"),
        ]
        for key, label in fields:
            bank[key] = st.text_input(label, value=bank.get(key, ""))
        submitted = st.form_submit_button("Save Bank Details", type="primary")
    if submitted:
        show_save_status(controller.update_settings("bank", bank))


def user_settings(controller: QuoteController) -> None:
    users = controller.state["users"]
    st.dataframe(
        pd.DataFrame(users, columns=["name", "username", "role", "sales_person_name", "sales_person_mobile"]),
        use_container_width=True,
        hide_index=True
    )

    choices = ["New user"] + [u["id"] for u in users]
    labels = {u["id"]: f"{u['name']} ({u['username']})" for u in users}
    selected = st.selectbox("User", choices, format_func=lambda v: labels.get(v, v))
    current = next((u for u in users if u["id"] == selected), {})

    with st.form(f"user_form_{selected}"):
        name = st.text_input("Name *", value=current.get("name", ""))
        username = st.text_input("Username *", value=current.get("username", ""))
        password = st.text_input("Password *", value=current.get("password", ""), type="password")
        role = st.selectbox("Role", ROLES, index=_index(ROLES, current.get("role", "user")))
        sales_name = st.text_input("Sales Person Name", value=current.get("sales_person_name", ""))
        sales_mobile = st.text_input("Sales Person Mobile", value=current.get("sales_person_mobile", ""))
        submitted = st.form_submit_button("Save User", type="primary")

    if submitted:
        values = {
            "name": name, "username": username, "password": password, "role": role,
            "sales_person_name": sales_name, "sales_person_mobile": sales_mobile,
        }
        if current:
            values["id"] = current["id"]
        try:
            show_save_status(controller.upsert_user(values))
        except ValidationError as exc:
            st.error(exc.message)

    if current and st.button("Delete User", key=f"delete_user_{selected}"):
        try:
            show_save_status(controller.delete_user(current["id"]))
        except ValidationError as exc:
            st.error(exc.message)
        else:
            st.rerun()


def triple_filters(prefix: str) -> tuple:
    columns = st.columns(3)
    values = []
    for column, field, label in zip(columns, TRIPLE_FIELDS, ["Project Type", "Structure Type", "Panel Type"]):
        with column:
            values.append(st.selectbox(f"Filter {label}", [ALL] + TRIPLE_OPTIONS[field], key=f"{prefix}_{field}"))
    return tuple(values)


def import_controls(controller: QuoteController, collection: str) -> None:
    col_upload, col_sample = st.columns([3, 1])
    with col_upload:
        upload = st.file_uploader("Import from Excel", type=["xlsx", "csv"], key=f"import_{collection}")
        if upload is not None and st.button("Import", key=f"import_btn_{collection}"):
            try:
                count = controller.import_records(collection, upload.getvalue(), upload.name)
            except ImportFormatError as exc:
                st.error(exc.message)
            else:
                st.success(f"Imported {count} record(s)")
                show_save_status(controller.save_status)
    with col_sample:
        filename, data = sample_workbook(collection)
        st.download_button("Download Sample", data=data, file_name=filename,
                           mime=XLSX_MIME, key=f"sample_{collection}")


COLLECTION_EDITORS = {
    "product_pricing": {
        "columns": ["id", "name", *TRIPLE_FIELDS, *PRICING_FIELDS],
        "defaults": {"name": "New Pricing Package", **{f: 0 for f in PRICING_FIELDS}},
    },
    "product_descriptions": {
        "columns": ["id", "name", *TRIPLE_FIELDS, "default_pricing_id", "default_bom_template_id"],
        "defaults": {"name": "New Product", "default_pricing_id": "", "default_bom_template_id": ""},
        "locked": ["default_pricing_id", "default_bom_template_id"],
    },
    "terms": {
        "columns": ["id", "order", "text", "enabled", *TRIPLE_FIELDS],
        "defaults": {"text": "New Term", "enabled": True},
    },
    "warranty_packages": {
        "columns": ["id", *TRIPLE_FIELDS, "panel_warranty", "inverter_warranty",
                    "battery_warranty", "system_warranty", "monitoring_system"],
        "defaults": {"panel_warranty": "", "inverter_warranty": "", "battery_warranty": "",
                     "system_warranty": "", "monitoring_system": ""},
    },
}


def record_editor(controller: QuoteController, collection: str) -> None:
    editor = COLLECTION_EDITORS[collection]
    records = controller.state[collection]
    filters = triple_filters(collection)
    filtered = filter_by_triple(records, *filters)

    column_config = {
        field: st.column_config.SelectboxColumn(options=TRIPLE_OPTIONS[field], required=True)
        for field in TRIPLE_FIELDS
    }
    column_config["enabled"] = st.column_config.CheckboxColumn("enabled")
    for field in PRICING_FIELDS:
        column_config[field] = st.column_config.NumberColumn(LABELS[field])

    edited = st.data_editor(
        pd.DataFrame(filtered, columns=editor["columns"]),
        column_config=column_config,
        disabled=["id"] + editor.get("locked", []),
        use_container_width=True,
        hide_index=True,
        key=f"editor_{collection}_{'_'.join(filters)}"
    )

    col_save, col_add, col_pick, col_copy, col_delete = st.columns([1, 1, 2, 1, 1])
    with col_save:
        if st.button("Save Changes", key=f"save_{collection}", type="primary"):
            changes = {row["id"]: row for row in _frame_records(edited)}
            merged = [{**r, **changes.get(r["id"], {})} for r in records]
            show_save_status(controller.update_settings(collection, merged))
    with col_add:
        if st.button("Add", key=f"add_{collection}"):
            triple = {
                field: value if value != ALL else DEFAULT_CLASSIFICATION[field]
                for field, value in zip(TRIPLE_FIELDS, filters)
            }
            record = {**editor["defaults"], **triple}
            if collection == "terms":
                record["order"] = len(records) + 1
            show_save_status(controller.add_record(collection, record))
            st.rerun()
    with col_pick:
        ids = [r["id"] for r in filtered]
        picked = st.selectbox("Record", ids, key=f"pick_{collection}", label_visibility="collapsed")
    with col_copy:
        if picked and st.button("Copy", key=f"copy_{collection}"):
            show_save_status(controller.copy_record(collection, picked))
            st.rerun()
    with col_delete:
        if picked and st.button("Delete", key=f"delete_{collection}"):
            show_save_status(controller.delete_record(collection, picked))
            st.rerun()

    if collection == "product_descriptions" and picked:
        product_links(controller, picked)

    import_controls(controller, collection)


def product_links(controller: QuoteController, product_id: str) -> None:
    state = controller.state
    product = next(p for p in state["product_descriptions"] if p["id"] == product_id)
    st.markdown(f"**Links for {product['name']}**")

    options = [""] + [p["id"] for p in pricing_options(state, triple_of(product))]
    pricing_names = {p["id"]: p["name"] for p in state["product_pricing"]}
    templates = [""] + [t["id"] for t in state["bom_templates"]]
    template_names = {t["id"]: t["name"] for t in state["bom_templates"]}

    col_pricing, col_bom, col_save = st.columns([2, 2, 1])
    with col_pricing:
        pricing_id = st.selectbox(
            "Pricing Package", options,
            index=_index(options, product.get("default_pricing_id")),
            format_func=lambda v: pricing_names.get(v, "None"),
            key=f"link_pricing_{product_id}"
        )
    with col_bom:
        template_id = st.selectbox(
            "BOM Template", templates,
            index=_index(templates, product.get("default_bom_template_id")),
            format_func=lambda v: template_names.get(v, "None"),
            key=f"link_bom_{product_id}"
        )
    with col_save:
        if st.button("Save Links", key=f"save_links_{product_id}"):
            show_save_status(controller.update_record("product_descriptions", product_id, {
                "default_pricing_id": pricing_id,
                "default_bom_template_id": template_id,
            }))


def bom_settings(controller: QuoteController) -> None:
    templates = controller.state["bom_templates"]
    names = {t["id"]: t["name"] for t in templates}

    col_pick, col_new = st.columns([3, 1])
    with col_pick:
        selected = st.selectbox("Template", [t["id"] for t in templates],
                                format_func=lambda v: names.get(v, v), key="bom_template_pick")
    with col_new:
        if st.button("New Template"):
            show_save_status(controller.add_record("bom_templates", {"name": "New BOM Template", "items": []}))
            st.rerun()

    if selected:
        template = next(t for t in templates if t["id"] == selected)
        name = st.text_input("Template Name", value=template["name"], key=f"bom_name_{selected}")
        edited = st.data_editor(
            pd.DataFrame(template["items"], columns=["id"] + BOM_COLUMNS),
            num_rows="dynamic",
            column_config={"id": None},
            use_container_width=True,
            hide_index=True,
            key=f"bom_items_{selected}"
        )
        col_save, col_dup, col_delete = st.columns(3)
        with col_save:
            if st.button("Save Template", type="primary"):
                items = [
                    {"id": row.get("id") or new_id(),
                     **{c: "" if row.get(c) is None else str(row[c]) for c in BOM_COLUMNS}}
                    for row in _frame_records(edited)
                    if any(row.get(c) for c in BOM_COLUMNS)
                ]
                show_save_status(controller.update_record("bom_templates", selected, {"name": name, "items": items}))
        with col_dup:
            if st.button("Duplicate"):
                show_save_status(controller.duplicate_bom_template(selected))
                st.rerun()
        with col_delete:
            if st.button("Delete Template"):
                show_save_status(controller.delete_record("bom_templates", selected))
                st.rerun()

    import_controls(controller, "bom_templates")


def config_panel_tab(controller: QuoteController) -> None:
    st.header("Config Panel")
    tabs = st.tabs(["Company", "Bank", "Users", "Pricing", "Products", "Terms", "Warranty", "BOM"])
    with tabs[0]:
        company_settings(controller)
    with tabs[1]:
        bank_settings(controller)
    with tabs[2]:
        user_settings(controller)
    with tabs[3]:
        record_editor(controller, "product_pricing")
    with tabs[4]:
        record_editor(controller, "product_descriptions")
    with tabs[5]:
        record_editor(controller, "terms")
    with tabs[6]:
        record_editor(controller, "warranty_packages")
    with tabs[7]:
        bom_settings(controller)


def main() -> None:
    with st.spinner("Loading quotation data..."):
        controller = get_controller()

    user = st.session_state.get("user")
    if user is None:
        login_screen(controller)
        return

    st.sidebar.header(controller.state["company"].get("name", "Solar Quote Pro"))
    st.sidebar.markdown(f"**{user['name']}** ({user['role']})")
    if st.sidebar.button("Logout"):
        st.session_state.clear()
        st.rerun()

    st.title("☀️ Solar Quote Pro")

    tab_names = ["Dashboard", "Create Quote"]
    if can_access_settings(user):
        tab_names.append("Config Panel")
    tabs = st.tabs(tab_names)

    with tabs[0]:
        dashboard_tab(controller, user)
    with tabs[1]:
        quotation_form_tab(controller, user)
    if can_access_settings(user):
        with tabs[2]:
            config_panel_tab(controller)


main()
