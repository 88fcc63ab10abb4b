# billboard_accounts/constants.py
APP_NAME = "Billboard Accounts"

DATA_DIR = "data"
DB_FILE_NAME = "billboards.db"
STYLE_FILE = "style.qss"

TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1.0"

# jinja2 print templates (package resource path)
STATEMENT_TEMPLATES_PACKAGE = "billboard_accounts.resources.templates.statements"
STATEMENT_TEMPLATE_NAME = "account_statement.html"

# Currencies offered on the statement (code, name, symbol, written name)
CURRENCIES = [
    {"code": "LYD", "name": "دينار ليبي", "symbol": "د.ل", "written_name": "دينار ليبي"},
    {"code": "USD", "name": "دولار أمريكي", "symbol": "$", "written_name": "دولار أمريكي"},
    {"code": "EUR", "name": "يورو", "symbol": "€", "written_name": "يورو"},
    {"code": "GBP", "name": "جنيه إسترليني", "symbol": "£", "written_name": "جنيه إسترليني"},
    {"code": "SAR", "name": "ريال سعودي", "symbol": "ر.س", "written_name": "ريال سعودي"},
    {"code": "AED", "name": "درهم إماراتي", "symbol": "د.إ", "written_name": "درهم إماراتي"},
]
DEFAULT_CURRENCY_CODE = "LYD"
