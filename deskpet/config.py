"""Configuration management for the desk pet"""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv


class Config:
    """Application configuration loaded from .env and environment variables"""

    def __init__(self):
        # Load .env file from project root
        env_path = Path(__file__).parent.parent / '.env'
        load_dotenv(env_path)

        # Shared storage location (main app and widget both open this file)
        self.data_dir = self._get_data_dir()
        self.db_path = self.data_dir / 'deskpet.db'

        # Reminder threshold defaults (hours)
        self.inactivity_warning_hours = self._parse_float(os.getenv('INACTIVITY_WARNING_HOURS', '2.0'), 2.0)
        self.inactivity_limit_hours = self._parse_float(os.getenv('INACTIVITY_LIMIT_HOURS', '6.0'), 6.0)
        self.check_interval_hours = self._parse_float(os.getenv('CHECK_INTERVAL_HOURS', '1.0'), 1.0)
        self.continuous_warning_hours = self._parse_float(os.getenv('CONTINUOUS_WARNING_HOURS', '1.5'), 1.5)

        # Test mode
        self.test_mode_scale = self._parse_float(os.getenv('TEST_MODE_SCALE', '120'), 120.0)
        self.simulation_restore_seconds = self._parse_float(os.getenv('SIMULATION_RESTORE_SECONDS', '10'), 10.0)

        # Message library
        self.max_messages_per_state = int(os.getenv('MAX_MESSAGES_PER_STATE', '20'))

        # Logging
        self.log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.log_file: Optional[str] = os.getenv('LOG_FILE') or None

        # Behavior
        self.notifications_enabled = self._parse_bool(os.getenv('NOTIFICATIONS_ENABLED', 'true'))

    def _get_data_dir(self) -> Path:
        """Get data directory from .env or fall back to the home directory"""
        env_path = os.getenv('DESKPET_DATA_DIR')
        if env_path:
            return Path(env_path).expanduser()

        return Path.home() / '.deskpet'

    def _parse_float(self, value: str, default: float) -> float:
        """Parse a float; zero or negative values fall back to default"""
        try:
            parsed = float(value)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid number: {value}")

        return parsed if parsed > 0 else default

    def _parse_bool(self, value: str) -> bool:
        """Parse boolean string"""
        return value.lower() in ('true', '1', 'yes', 'on')

    def ensure_data_directory(self):
        """Ensure data directory exists"""
        self.data_dir.mkdir(parents=True, exist_ok=True)


# Global config instance
config = Config()
