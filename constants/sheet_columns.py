# constants/sheet_columns.py

# Reserved columns of the stock opname form responses
TIMESTAMP_COLUMN = "Timestamp"
EMAIL_COLUMN = "Email address"
STAFF_COLUMN = "PNS yang mengisi:"

# Google Forms pads unnamed columns as "Column 12", "Column 13", ...
PADDING_COLUMN_PREFIX = "Column"

# "Rice [kg]" -> "Rice"
ITEM_SUFFIX_SEPARATOR = " ["

# Processing table, matched case-insensitively
PROCESSING_COLUMNS = {
    "item": "Item",
    "unit": "Unit",
    "vendor": "Vendor",
    "category": "Category",
    "par_qty": "Par Qty",
    "min_restock": "Min Restock",
    "current_qty": "Current Qty",
}

# Supplier contact table, matched case-insensitively
SUPPLIER_COLUMNS = {
    "name": "Name",
    "media": "Media",
    "phone": "Phone",
    "alias": "Alias",
}

# Restock conditions
CONDITION_DANGER = "bahaya"
CONDITION_LOW = "low"
CONDITION_NORMAL = "-"

CONDITION_ORDER = {
    CONDITION_DANGER: 0,
    CONDITION_LOW: 1,
    CONDITION_NORMAL: 2,
}

# Sentinel shown when an item was not observed on a given day
MISSING_VALUE = "-"

# Vendor bucket for items without a vendor
NO_VENDOR_LABEL = "Tanpa Vendor"

WHATSAPP_MEDIA = "whatsapp"

BUSINESS_NAME = "Sarkop"

RESTOCK_MESSAGE_TEMPLATE = (
    "Halo {name},\n\n"
    "Kami dari " + BUSINESS_NAME + " membutuhkan barang yang perlu direstock:\n\n"
    "{lines}\n\n"
    "Mohon segera informasikan apabila ada barang yang tidak tersedia. Terima kasih."
)
