APP_DIR_NAME = "todo-cli"
DATA_FILE_NAME = ".todo_data.json"
CONFIG_FILE = "config.yaml"

DATE_FORMAT = "%Y-%m-%d"
DEFAULT_URGENT_DAYS = 3
DEFAULT_LOG_LEVEL = "WARNING"

STORE_FILE_MODE = 0o600
JSON_INDENT = 2

INVALID_DUE_DATE_MESSAGE = "Warning: Invalid due date format. Use YYYY-MM-DD."
