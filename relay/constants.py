import os


def to_integer(value):
    """Converte string de ambiente em int; retorna None para vazio ou não inteiro."""
    if value is None:
        return None
    str_value = str(value).strip()
    if str_value == "":
        return None
    try:
        return int(str_value)
    except ValueError:
        return None


def _clamp(value, default, upper):
    if value is None or value <= 0 or value > upper:
        return default
    return value


# Configurações globais de ambiente
APP_PORT = to_integer(os.getenv("APP_PORT")) or to_integer(os.getenv("PORT")) or 5001
DEBUG_MODE = os.getenv("DEBUG_MODE", "False").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG_MODE else "INFO").upper()

CONFIG_PATH = os.getenv("CONFIG_PATH", "/etc/alertmanager-discord.yml")
# 'default' | 'alternative'
WORKING_MODE = os.getenv("WORKING_MODE", "default").strip().lower()

WEBHOOK_TIMEOUT_SECONDS = to_integer(os.getenv("WEBHOOK_TIMEOUT_SECONDS")) or 10

# Limites das plataformas (Discord aceita no máximo 10 embeds e 25 fields)
MAX_EMBEDS_LENGTH = _clamp(to_integer(os.getenv("MAX_EMBEDS_LENGTH")), 10, 10)
MAX_FIELDS_LENGTH = _clamp(to_integer(os.getenv("MAX_FIELDS_LENGTH")), 25, 25)
MAX_TABLE_ROWS = _clamp(to_integer(os.getenv("MAX_TABLE_ROWS")), 20, 100)
MAX_FIELD_CHARS = 1024
MAX_SLACK_BLOCKS = 50

# Teto de aninhamento do compilador markdown -> rich_text
MARKDOWN_MAX_DEPTH = max(1, to_integer(os.getenv("MARKDOWN_MAX_DEPTH")) or 16)

DISCORD_COLORS = {
    "firing": 0xD50000,
    "resolved": 0x00C853,
    "default": 0x333333,
}

MESSAGE_PARAMS = {
    "max_embeds_length": MAX_EMBEDS_LENGTH,
    "max_fields_length": MAX_FIELDS_LENGTH,
    "max_table_rows": MAX_TABLE_ROWS,
}
