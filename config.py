"""Runtime configuration for the solar quotation app."""
import logging
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Application configuration read from the environment."""

    # Storage
    DATA_DIR = os.getenv('SOLAR_QUOTE_DATA_DIR', 'data')
    SETTINGS_FILE = os.getenv('SOLAR_QUOTE_SETTINGS_FILE', 'settings.json')
    QUOTATIONS_FILE = os.getenv('SOLAR_QUOTE_QUOTATIONS_FILE', 'quotations.json')

    # Quotation numbering
    QUOTE_ID_PREFIX = os.getenv('QUOTE_ID_PREFIX', 'KLMNRE')
    LEGACY_ID_PREFIXES = ('KAPL', 'KLMNRE')
    SEQUENCE_FLOOR = int(os.getenv('QUOTE_SEQUENCE_FLOOR', '1000'))

    # Branding
    COMPANY_TAGLINE = os.getenv('COMPANY_TAGLINE', 'ADANI SOLAR AUTHORIZED CHANNEL PARTNER')

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
    LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def configure_logging(level: str = None) -> None:
    """Configure root logging once for the Streamlit process."""
    logging.basicConfig(
        level=getattr(logging, level or Config.LOG_LEVEL, logging.INFO),
        format=Config.LOG_FORMAT
    )
