# ai_scientist/config.py
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, asdict
import json
import logging

logger = logging.getLogger(__name__)


@dataclass
class PathConfig:
    """Configuration for project paths"""
    PROJECT_ROOT: Path
    LOGS_DIR: Path


@dataclass
class ProfilingConfig:
    """Configuration for column type inference and statistics"""
    NUMERIC_RATIO: float
    DATETIME_RATIO: float
    CATEGORICAL_UNIQUE_RATIO: float
    CATEGORICAL_MAX_DISTINCT: int
    MAX_CATEGORIES: int
    MAX_CORRELATION_COLUMNS: int
    MAX_FEATURE_IMPORTANCES: int


@dataclass
class QualityGateConfig:
    """Thresholds for the PASS/WARN/FAIL quality gate"""
    MIN_ROWS: int                      # below this the dataset fails
    RECOMMENDED_ROWS: int              # below this the dataset warns
    CRITICAL_MISSING_PERCENTAGE: float
    MODERATE_MISSING_PERCENTAGE: float
    COLUMN_MISSING_PERCENTAGE: float
    SEVERE_IMBALANCE_RATIO: float
    MODERATE_IMBALANCE_RATIO: float
    DROP_COLUMN_MISSING_PERCENTAGE: float
    ROW_REMOVAL_FRACTION: float


@dataclass
class AssistantConfig:
    """Configuration for the external text-generation service"""
    API_KEY: Optional[str]
    BASE_URL: str
    MODEL: str
    TEMPERATURE: float
    MAX_TOKENS: int
    TIMEOUT: int  # seconds
    SAMPLE_ROWS: int


@dataclass
class APIConfig:
    """Configuration for the HTTP API"""
    DEFAULT_HOST: str
    DEFAULT_PORT: int
    WORKERS: int
    ENABLE_CORS: bool
    ENABLE_DOCS: bool


class Config:
    """Central configuration manager for the analysis engine"""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration

        Args:
            config_file: Optional path to JSON config file to override defaults
        """
        self._load_default_config()

        if config_file and os.path.exists(config_file):
            self._load_config_file(config_file)

        self._load_environment_variables()

    def _load_default_config(self):
        """Load default configuration values"""

        project_root = Path(__file__).parent.parent
        self.paths = PathConfig(
            PROJECT_ROOT=project_root,
            LOGS_DIR=project_root / "logs",
        )

        self.profiling = ProfilingConfig(
            NUMERIC_RATIO=0.8,
            DATETIME_RATIO=0.8,
            CATEGORICAL_UNIQUE_RATIO=0.5,
            CATEGORICAL_MAX_DISTINCT=20,
            MAX_CATEGORIES=10,
            MAX_CORRELATION_COLUMNS=8,
            MAX_FEATURE_IMPORTANCES=5,
        )

        self.quality_gate = QualityGateConfig(
            MIN_ROWS=50,
            RECOMMENDED_ROWS=200,
            CRITICAL_MISSING_PERCENTAGE=30.0,
            MODERATE_MISSING_PERCENTAGE=5.0,
            COLUMN_MISSING_PERCENTAGE=30.0,
            SEVERE_IMBALANCE_RATIO=10.0,
            MODERATE_IMBALANCE_RATIO=3.0,
            DROP_COLUMN_MISSING_PERCENTAGE=50.0,
            ROW_REMOVAL_FRACTION=0.02,
        )

        self.assistant = AssistantConfig(
            API_KEY=None,
            BASE_URL="https://api.groq.com/openai/v1",
            MODEL="llama-3.3-70b-versatile",
            TEMPERATURE=0.3,
            MAX_TOKENS=1024,
            TIMEOUT=30,
            SAMPLE_ROWS=8,
        )

        self.api = APIConfig(
            DEFAULT_HOST="0.0.0.0",
            DEFAULT_PORT=8000,
            WORKERS=1,
            ENABLE_CORS=True,
            ENABLE_DOCS=True,
        )

        self.logging_level = "INFO"
        self.debug_mode = False

    def _load_config_file(self, config_file: str):
        """Load configuration from JSON file"""
        try:
            with open(config_file, 'r') as f:
                config_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not load config file {config_file}: {e}")
            return

        for section, values in config_data.items():
            if not hasattr(self, section):
                continue
            config_obj = getattr(self, section)
            if isinstance(values, dict):
                for key, value in values.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)
            else:
                setattr(self, section, values)

    def _load_environment_variables(self):
        """Load configuration from environment variables"""

        # Assistant settings
        if os.getenv("GROQ_API_KEY"):
            self.assistant.API_KEY = os.getenv("GROQ_API_KEY")

        if os.getenv("ASSISTANT_MODEL"):
            self.assistant.MODEL = os.getenv("ASSISTANT_MODEL")

        if os.getenv("ASSISTANT_BASE_URL"):
            self.assistant.BASE_URL = os.getenv("ASSISTANT_BASE_URL")

        if os.getenv("ASSISTANT_TIMEOUT"):
            self.assistant.TIMEOUT = int(os.getenv("ASSISTANT_TIMEOUT"))

        # API settings
        if os.getenv("API_PORT"):
            self.api.DEFAULT_PORT = int(os.getenv("API_PORT"))

        if os.getenv("API_HOST"):
            self.api.DEFAULT_HOST = os.getenv("API_HOST")

        # General settings
        if os.getenv("LOG_LEVEL"):
            self.logging_level = os.getenv("LOG_LEVEL")

        if os.getenv("DEBUG_MODE"):
            self.debug_mode = os.getenv("DEBUG_MODE").lower() == 'true'

    def save_config(self, config_file: str):
        """Save current configuration to JSON file"""
        config_dict: Dict[str, Any] = {}

        for section in ("paths", "profiling", "quality_gate", "assistant", "api"):
            values = asdict(getattr(self, section))
            config_dict[section] = {
                key: str(value) if isinstance(value, Path) else value
                for key, value in values.items()
            }
        # Never persist credentials
        config_dict["assistant"]["API_KEY"] = None
        config_dict["logging_level"] = self.logging_level
        config_dict["debug_mode"] = self.debug_mode

        with open(config_file, 'w') as f:
            json.dump(config_dict, f, indent=2)

    def validate_config(self) -> List[str]:
        """Validate configuration and return list of issues"""
        issues = []

        for name in ("NUMERIC_RATIO", "DATETIME_RATIO", "CATEGORICAL_UNIQUE_RATIO"):
            value = getattr(self.profiling, name)
            if value <= 0 or value > 1:
                issues.append(f"Invalid {name.lower()}: {value}")

        if self.profiling.MAX_CORRELATION_COLUMNS < 1:
            issues.append(f"Correlation column cap must be >= 1: {self.profiling.MAX_CORRELATION_COLUMNS}")

        gate = self.quality_gate
        if gate.MIN_ROWS <= 0:
            issues.append(f"Invalid min rows: {gate.MIN_ROWS}")

        if gate.RECOMMENDED_ROWS < gate.MIN_ROWS:
            issues.append(
                f"Recommended rows ({gate.RECOMMENDED_ROWS}) below minimum rows ({gate.MIN_ROWS})"
            )

        if gate.MODERATE_MISSING_PERCENTAGE > gate.CRITICAL_MISSING_PERCENTAGE:
            issues.append("Moderate missing threshold exceeds critical missing threshold")

        if gate.MODERATE_IMBALANCE_RATIO > gate.SEVERE_IMBALANCE_RATIO:
            issues.append("Moderate imbalance ratio exceeds severe imbalance ratio")

        if self.assistant.TIMEOUT <= 0:
            issues.append(f"Invalid assistant timeout: {self.assistant.TIMEOUT}")

        return issues

    def __str__(self) -> str:
        """String representation of configuration"""
        return f"Config(project_root={self.paths.PROJECT_ROOT}, debug={self.debug_mode})"


# Global configuration instance
_config = None


def get_config(config_file: Optional[str] = None) -> Config:
    """Get global configuration instance (singleton pattern)"""
    global _config
    if _config is None:
        _config = Config(config_file)
    return _config


def reload_config(config_file: Optional[str] = None) -> Config:
    """Reload configuration (useful for testing)"""
    global _config
    _config = Config(config_file)
    return _config


# Example configuration file template
CONFIG_TEMPLATE = {
    "quality_gate": {
        "MIN_ROWS": 50,
        "RECOMMENDED_ROWS": 200,
        "CRITICAL_MISSING_PERCENTAGE": 30.0
    },
    "assistant": {
        "MODEL": "llama-3.3-70b-versatile",
        "TIMEOUT": 30
    },
    "api": {
        "DEFAULT_PORT": 8080
    }
}


def create_config_template(output_file: str):
    """Create a configuration template file"""
    with open(output_file, 'w') as f:
        json.dump(CONFIG_TEMPLATE, f, indent=2)
    logger.info(f"Configuration template created: {output_file}")
