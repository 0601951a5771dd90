# utils/config.py

import os
import logging
from dotenv import load_dotenv
from typing import Dict, Any

# Initialize logger
logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)


def is_running_on_streamlit_cloud() -> bool:
    """Detect if running on Streamlit Cloud"""
    try:
        import streamlit as st
        return hasattr(st, 'secrets') and "DB_CONFIG" in st.secrets
    except Exception:
        return False


class Config:
    """Centralized configuration management for the fibre planning tools"""

    def __init__(self):
        self.is_cloud = is_running_on_streamlit_cloud()
        self._load_config()

    def _load_config(self):
        """Load configuration based on environment"""
        if self.is_cloud:
            self._load_cloud_config()
        else:
            self._load_local_config()

        # Common configuration
        self._load_app_config()

    def _load_cloud_config(self):
        """Load configuration from Streamlit Cloud secrets"""
        import streamlit as st

        # Database configuration
        self.db_config = dict(st.secrets["DB_CONFIG"])

        logger.info("☁️  Running in STREAMLIT CLOUD")
        self._log_config_status()

    def _load_local_config(self):
        """Load configuration from local environment"""
        # Load .env file
        load_dotenv()

        # Database configuration - validated when an engine is requested
        self.db_config = {
            "host": os.getenv("DB_HOST"),
            "port": int(os.getenv("DB_PORT", "3306")),
            "user": os.getenv("DB_USER"),
            "password": os.getenv("DB_PASSWORD"),
            "database": os.getenv("DB_NAME", os.getenv("DB_DATABASE", "spims"))
        }

        logger.info("💻 Running in LOCAL environment")
        self._log_config_status()

    def _load_app_config(self):
        """Load application-specific configuration"""
        self.app_config = {
            # Performance
            "DB_POOL_SIZE": int(os.getenv("DB_POOL_SIZE", "5")),
            "DB_POOL_RECYCLE": int(os.getenv("DB_POOL_RECYCLE", "3600")),

            # Display
            "LOW_STOCK_THRESHOLD_KG": float(os.getenv("LOW_STOCK_THRESHOLD_KG", "20")),
            "DISPLAY_DECIMALS": int(os.getenv("DISPLAY_DECIMALS", "2")),

            # Localization
            "TIMEZONE": os.getenv("TIMEZONE", "Asia/Kolkata"),
        }

    def missing_db_settings(self) -> list:
        """Names of required database settings that are not configured"""
        missing = []
        for key in ("host", "user", "password", "database"):
            if not self.db_config.get(key):
                missing.append(key)
        return missing

    def _log_config_status(self):
        """Log configuration status for debugging"""
        logger.info("─" * 55)
        logger.info("📊 DATABASE CONFIGURATION")

        missing = self.missing_db_settings()
        if not missing:
            logger.info(f"   ✅ Host: {self.db_config.get('host')}:{self.db_config.get('port', 3306)}")
            logger.info(f"   ✅ Database: {self.db_config.get('database')}")
            logger.info(f"   ✅ User: {self.db_config.get('user')}")
            logger.info(f"   ✅ Password: {'*' * 8} (configured)")
        else:
            logger.warning(f"   ⚠️  Missing: {', '.join(missing)} (order snapshot queries disabled)")
        logger.info("─" * 55)

    def get_db_config(self) -> Dict[str, Any]:
        """Get database configuration"""
        return self.db_config.copy()

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        """Get application setting"""
        return self.app_config.get(key, default)


# Create singleton instance
config = Config()

# Export commonly used values
IS_RUNNING_ON_CLOUD = config.is_cloud
DB_CONFIG = config.db_config
APP_CONFIG = config.app_config


# Export all
__all__ = [
    'config',
    'Config',
    'IS_RUNNING_ON_CLOUD',
    'DB_CONFIG',
    'APP_CONFIG',
]
