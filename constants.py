"""Constants for solar quotation pricing and documents."""

PROJECT_TYPES = [
    "Ongrid Subsidy",
    "Hybrid Subsidy",
    "Micro Inverter Subsidy",
    "Hybrid Without Battery Subsidy",
    "Ongrid Non Subsidy",
    "Hybrid Non Subsidy",
    "Micro Inverter Non Subsidy",
    "Hybrid Without Battery Non Subsidy"
]

STRUCTURE_TYPES = [
    "1 Meter Flat Roof Structure",
    "2 Meter Flat Roof Structure",
    "Without Structure"
]

PANEL_TYPES = [
    "TOPCON G12R",
    "TOPCON HJT",
    "MONO PERC Bifacial"
]

# Only these two variants carry a battery warranty line
HYBRID_PROJECT_TYPES = ["Hybrid Subsidy", "Hybrid Non Subsidy"]

STATUS_PENDING = "Site Survey Pending"
STATUS_COMPLETED = "Site Survey Completed"
STATUSES = [STATUS_PENDING, STATUS_COMPLETED]

ROLE_ADMIN = "admin"
ROLE_TEAM_LEAD = "TL"
ROLE_USER = "user"
ROLES = [ROLE_ADMIN, ROLE_TEAM_LEAD, ROLE_USER]

WITHOUT_STRUCTURE = "Without Structure"
STRUCTURE_INCLUDED = "1 Meter Flat Roof Structure"

# Fallbacks used when an imported row leaves a classification cell blank
DEFAULT_CLASSIFICATION = {
    "project_type": "Ongrid Subsidy",
    "structure_type": "2 Meter Flat Roof Structure",
    "panel_type": "TOPCON G12R"
}

PRICING_FIELDS = [
    "actual_plant_cost",
    "discount",
    "subsidy_amount",
    "kseb_charges",
    "additional_material_cost",
    "customized_structure_cost",
    "net_meter_cost"
]

CUSTOMER_FIELDS = ["customer_name", "discom_number", "address", "mobile", "email", "location"]

SETTINGS_KEYS = [
    "company",
    "bank",
    "product_pricing",
    "warranty_packages",
    "terms",
    "bom_templates",
    "product_descriptions",
    "users"
]

# Document texts
TOTAL_PAGES = 4

DISCLAIMER_STRUCTURE_INCLUDED = "Customized Structure Cost Included without GST"
DISCLAIMER_STRUCTURE_EXTRA = "* Structure cost is additionally chargeable"
TOTAL_NOTE_STRUCTURE_EXTRA = "Customized Structure cost additionally chargeable as per site condition"

LABEL_NET_INVESTMENT = "NET INVESTMENT PAYABLE"
LABEL_TOTAL_INVESTMENT = "TOTAL INVESTMENT PAYABLE"

TOTAL_BANNER_HEADING = (
    "CUSTOMER EFFECTIVE COST AFTER SUBSIDY - INCLUDING KSEB CHARGES AS PER THE CURRENT SLAB"
)
TOTAL_BANNER_NOTES = [
    "INCLUSIVE OF GST, TRANSPORTATION & STANDARD INSTALLATION",
    "CONSUMER NEED TO PAY TOTAL PLANT COST, MNRE SUBSIDY WILL DIRECTLY REACH "
    "THE CUSTOMER'S ACCOUNT WITHIN 1-3 MONTH"
]
TERMS_HINT = "Check TERMS AND CONDITIONS PAGE 3"

PROJECT_ROADMAP = [
    {"step": "01", "title": "Delivery", "detail": "7-10 Days After Advance & Approval"},
    {"step": "02", "title": "Payment", "detail": "10% Advance, 90% at delivery"},
    {"step": "03", "title": "Setup", "detail": "7-10 Days from final payment clearance"}
]

REQUIRED_DOCUMENTS = [
    "Aadhar Card Copy",
    "Electricity Bill Copy",
    "Bank Passbook Front Page",
    "Passport Size Photo"
]

DATE_FORMAT_PRINT = "%d %B %Y"  # 05 March 2025
