"""
Shop Ledger configuration: sheet sources, column aliases, constants.
"""
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Paths: override with SHOPLEDGER_DATA_DIR env var for cloud deployment
# ---------------------------------------------------------------------------
_data_dir = Path(os.environ.get("SHOPLEDGER_DATA_DIR", str(Path.home() / "Shop Ledger")))
EXPORTS_FOLDER = _data_dir / "exports"

# ---------------------------------------------------------------------------
# Sheet sources (opensheet-style JSON endpoints)
# ---------------------------------------------------------------------------
OPENSHEET_BASE = os.environ.get("SHOPLEDGER_OPENSHEET_BASE", "https://opensheet.elk.sh")
BALANCE_SHEET_ID = os.environ.get(
    "SHOPLEDGER_BALANCE_SHEET_ID", "1lukJC1vKSq02Nus23svZ21_pp-86fz0mU1EARjalCBI"
)
TRANSACTION_SHEET_ID = os.environ.get(
    "SHOPLEDGER_TRANSACTION_SHEET_ID", "1CfAAIdWp3TuamCkSUw5w_Vd3QQnjc7LjF4zo4u4eZv0"
)
# Backup_Index sheet (Date, URL) listing daily transaction snapshots; optional
BACKUP_INDEX_URL = os.environ.get("SHOPLEDGER_BACKUP_INDEX_URL", "")

REQUEST_TIMEOUT = float(os.environ.get("SHOPLEDGER_TIMEOUT", "20"))

SHOP_BALANCE_SHEET = "SHOPS BALANCE"
DEPOSIT_SHEET = "TOTAL DEPOSIT"
WITHDRAWAL_SHEET = "TOTAL WITHDRAWAL"
SETTLEMENT_SHEET = "STLM/TOPUP"
COMMISSION_SHEET = "COMM"

# Every sheet the ledger needs; balance lookups require all of them
BALANCE_SOURCES = [
    SHOP_BALANCE_SHEET,
    DEPOSIT_SHEET,
    WITHDRAWAL_SHEET,
    SETTLEMENT_SHEET,
    COMMISSION_SHEET,
]

# Transaction listing degrades per source
TRANSACTION_SOURCES = ["WD", "DP", "B2B"]

# ---------------------------------------------------------------------------
# Column alias maps: normalized sheet header → internal column
# ---------------------------------------------------------------------------
BALANCE_COLUMN_MAP = {
    "SHOP": "shop_name",
    "SHOP NAME": "shop_name",
    "TEAM LEADER": "team_leader",
    "SECURITY DEPOSIT": "security_deposit",
    "BRING FORWARD BALANCE": "bring_forward_balance",
    "TOTAL DEPOSIT": "total_deposit",
    "TOTAL WITHDAWAL": "total_withdrawal",     # upstream spelling
    "TOTAL WITHDRAWAL": "total_withdrawal",
    "INTERNAL TRANSFER IN": "transfer_in",
    "INTERNAL TRANSAFER OUT": "transfer_out",  # upstream spelling
    "INTERNAL TRANSFER OUT": "transfer_out",
    "SETTLEMENT": "settlement",
    "SPECIAL PAYMENT": "special_payment",
    "ADJUSTMENT": "adjustment",
    "DP COMM": "dp_comm",
    "WD COMM": "wd_comm",
    "ADD COMM": "add_comm",
}

BALANCE_NUMERIC_COLS = [
    "security_deposit",
    "bring_forward_balance",
    "total_deposit",
    "total_withdrawal",
    "transfer_in",
    "transfer_out",
    "settlement",
    "special_payment",
    "adjustment",
    "dp_comm",
    "wd_comm",
    "add_comm",
]

# Deposit / withdrawal / settlement sheets
FLOW_COLUMN_MAP = {
    "SHOP": "shop_name",
    "SHOP NAME": "shop_name",
    "DATE": "date",
    "AMOUNT": "amount",
    "MODE": "mode",
}

COMMISSION_COLUMN_MAP = {
    "SHOP": "shop_name",
    "SHOP NAME": "shop_name",
    "DP COMM": "dp_rate",
    "WD COMM": "wd_rate",
    "ADD COMM": "add_rate",
}

TRANSACTION_COLUMN_MAP = {
    "TO WALLET NUMBER": "to_wallet",
    "WALLET": "wallet",
    "REFERENCE": "reference",
    "AMOUNT": "amount",
    "DATE": "date",
    "TYPE": "type",
    "SHOP NAME": "shop_name",
    "LEADER": "leader",
    "FROM WALLET NUMBER": "from_wallet",
}

TRANSACTION_TEXT_COLS = ["to_wallet", "wallet", "reference", "type", "leader", "from_wallet"]
MISSING_TEXT = "-"

BACKUP_INDEX_COLUMN_MAP = {
    "DATE": "date",
    "URL": "url",
}

# ---------------------------------------------------------------------------
# Settlement modes → ledger column
# ---------------------------------------------------------------------------
SETTLEMENT_MODES = {
    "IN": "transfer_in",
    "OUT": "transfer_out",
    "SETTLEMENT": "settlement",
    "SPECIAL PAYMENT": "special_payment",
    "ADJUSTMENT": "adjustment",
    "SECURITY DEPOSIT": "security_deposit",
}

# ---------------------------------------------------------------------------
# Dates: explicit format contract (tried after ISO 8601, first match wins)
# ---------------------------------------------------------------------------
DATE_FORMATS = [
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %I:%M:%S %p",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%d-%b-%Y",
    "%d %b %Y",
    "%b %d, %Y",
    "%B %d, %Y",
]

# ---------------------------------------------------------------------------
# Filters / tables
# ---------------------------------------------------------------------------
ALL_SENTINEL = "ALL"
LEADER_PLACEHOLDERS = {"", "-", "#N/A", "N/A"}
ROWS_PER_PAGE = 20
OPENING_ROW_LABEL = "B/F Balance"
TOTAL_ROW_LABEL = "TOTAL"

# ---------------------------------------------------------------------------
# Export column orders: (internal column, header)
# ---------------------------------------------------------------------------
SUMMARY_EXPORT_COLUMNS = [
    ("shop_name", "SHOP NAME"),
    ("team_leader", "TEAM LEADER"),
    ("security_deposit", "SECURITY DEPOSIT"),
    ("bring_forward_balance", "BRING FORWARD BALANCE"),
    ("total_deposit", "TOTAL DEPOSIT"),
    ("total_withdrawal", "TOTAL WITHDRAWAL"),
    ("transfer_in", "INTERNAL TRANSFER IN"),
    ("transfer_out", "INTERNAL TRANSFER OUT"),
    ("settlement", "SETTLEMENT"),
    ("special_payment", "SPECIAL PAYMENT"),
    ("adjustment", "ADJUSTMENT"),
    ("dp_comm", "DP COMM"),
    ("wd_comm", "WD COMM"),
    ("add_comm", "ADD COMM"),
    ("running_balance", "RUNNING BALANCE"),
]

TRANSACTION_EXPORT_COLUMNS = [
    ("to_wallet", "To Wallet Number"),
    ("wallet", "Wallet"),
    ("reference", "Reference"),
    ("amount", "Amount"),
    ("date", "Date"),
    ("type", "Type"),
    ("shop_name", "Shop Name"),
    ("leader", "Leader"),
    ("from_wallet", "From Wallet Number"),
]

LEDGER_EXPORT_COLUMNS = [
    ("date", "DATE"),
    ("deposit", "DEPOSIT"),
    ("withdrawal", "WITHDRAWAL"),
    ("transfer_in", "IN"),
    ("transfer_out", "OUT"),
    ("settlement", "SETTLEMENT"),
    ("special_payment", "SPECIAL PAYMENT"),
    ("adjustment", "ADJUSTMENT"),
    ("security_deposit", "SECURITY DEPOSIT"),
    ("dp_comm", "DP COMM"),
    ("wd_comm", "WD COMM"),
    ("add_comm", "ADD COMM"),
    ("running_balance", "RUNNING BALANCE"),
]

LEDGER_FLOW_COLS = [key for key, _ in LEDGER_EXPORT_COLUMNS[1:-1]]
