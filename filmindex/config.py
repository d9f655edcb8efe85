"""
============================================================================
FILMINDEX - Configuration Manager
============================================================================
This module loads and validates all configuration from .env file.
Provides type-safe access to settings throughout the application.

🔧 USAGE:
    from filmindex.config import config

    data_dir = config.paths.imdb_dir
    workers = config.loading.max_workers

📝 FEATURES:
    - Automatic .env loading
    - Type validation with Pydantic
    - Helpful error messages for missing/invalid settings
    - Organized by functional area
============================================================================
"""

import os
import sys
import logging
from pathlib import Path
from typing import Optional, Any
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv


logger = logging.getLogger(__name__)


# ============================================================================
# FIND AND LOAD .env FILE
# ============================================================================

def find_dotenv(start: Optional[Path] = None) -> Optional[Path]:
    """
    Find .env file by searching up the directory tree.

    Args:
        start: Directory to start from (defaults to the working directory)

    Returns:
        Path to .env file if found, None otherwise
    """
    current = start or Path.cwd()

    # Search up to 5 levels up
    for _ in range(5):
        env_file = current / ".env"
        if env_file.exists():
            return env_file

        # Stop at root directory
        if current.parent == current:
            break

        current = current.parent

    return None


# ============================================================================
# PATHS CONFIGURATION
# ============================================================================

class PathsConfig(BaseModel):
    """
    Dataset, export and log locations.

    🔧 CUSTOMIZE: Point IMDB_DIR at the folder holding the five TSV files
    """

    imdb_dir: Path = Field(
        default=Path("./data/raw/imdb"),
        description="Directory for IMDb TSV files (.tsv or .tsv.gz)"
    )
    exports_dir: Path = Field(
        default=Path("./data/exports"),
        description="Query result exports"
    )
    logs_dir: Path = Field(
        default=Path("./data/logs"),
        description="Application logs"
    )

    def get_imdb_file(self, filename: str) -> Path:
        """
        Get path to IMDb dataset file.

        Args:
            filename: IMDb dataset filename (e.g., 'title.basics.tsv')

        Returns:
            Full path to the file
        """
        return self.imdb_dir / filename

    class Config:
        """Pydantic configuration."""
        extra = 'ignore'


# ============================================================================
# LOADING CONFIGURATION
# ============================================================================
# Worker pool and timeouts for the in-memory ingestion

class LoadingConfig(BaseModel):
    """
    Ingestion worker pool settings.

    🔧 CUSTOMIZE: Lower max_workers on small machines
    """

    max_workers: int = Field(
        default_factory=lambda: os.cpu_count() or 1,
        ge=1,
        le=256,
        description="Worker threads used for dataset loads"
    )
    shutdown_grace_seconds: float = Field(
        default=60.0,
        gt=0.0,
        description="Time allowed for in-flight loads once submission is closed"
    )
    load_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Upper bound for each ingestion phase (None = wait indefinitely)"
    )
    show_progress: bool = Field(
        default=True,
        description="Show tqdm progress bars while loading"
    )
    field_size_limit: int = Field(
        default=10 * 1024 * 1024,
        ge=131072,
        description="csv field size limit in bytes (long character lists)"
    )

    @field_validator('load_timeout_seconds')
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        """Timeout must be positive when set."""
        if v is not None and v <= 0:
            raise ValueError(f"load_timeout_seconds must be positive, got {v}")
        return v

    class Config:
        """Pydantic configuration."""
        extra = 'ignore'


# ============================================================================
# PROCESSING CONFIGURATION
# ============================================================================

class ProcessingConfig(BaseModel):
    """Export settings for query results."""

    export_format: str = Field(
        default="json",
        description="Export format: json or csv"
    )

    @field_validator('export_format')
    @classmethod
    def validate_export_format(cls, v: str) -> str:
        """Validate export format is supported."""
        allowed = ['json', 'csv']
        if v.lower() not in allowed:
            raise ValueError(f"export_format must be one of {allowed}, got '{v}'")
        return v.lower()

    class Config:
        """Pydantic configuration."""
        extra = 'ignore'


# ============================================================================
# LOGGING CONFIGURATION
# ============================================================================

class LoggingConfig(BaseModel):
    """
    Logging configuration.

    🔧 CUSTOMIZE: Adjust log levels and formats
    """

    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_file: Optional[Path] = Field(
        default=Path("./data/logs/filmindex.log"),
        description="Log file path (None disables file logging)"
    )
    console_output: bool = Field(
        default=True,
        description="Print logs to console"
    )
    log_format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        description="Log message format"
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Log timestamp format"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        allowed = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}, got '{v}'")
        return v_upper

    class Config:
        """Pydantic configuration."""
        extra = 'ignore'


# ============================================================================
# MAIN CONFIGURATION
# ============================================================================

class Config(BaseModel):
    """
    Main configuration class combining all settings.

    🔧 USAGE:
        from filmindex.config import config

        imdb_dir = config.paths.imdb_dir
        workers = config.loading.max_workers
    """

    paths: PathsConfig = Field(default_factory=PathsConfig)
    loading: LoadingConfig = Field(default_factory=LoadingConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    environment: str = Field(
        default="development",
        description="Environment: development, production, testing"
    )
    project_name: str = Field(
        default="Filmindex",
        description="Project name"
    )
    version: str = Field(
        default="0.1.0",
        description="Project version"
    )

    def print_summary(self):
        """Print configuration summary."""
        print("\n" + "="*70)
        print(f"🎬 {self.project_name} v{self.version} - Configuration Summary")
        print("="*70)

        print(f"\n📍 Environment: {self.environment.upper()}")
        print(f"📂 IMDb Directory: {self.paths.imdb_dir.absolute()}")
        print(f"📤 Exports Directory: {self.paths.exports_dir.absolute()}")

        print("\n⚡ Loading:")
        print(f"  • Workers: {self.loading.max_workers}")
        print(f"  • Shutdown grace: {self.loading.shutdown_grace_seconds:.0f}s")
        timeout = self.loading.load_timeout_seconds
        print(f"  • Phase timeout: {'none' if timeout is None else f'{timeout:.0f}s'}")
        print(f"  • Export Format: {self.processing.export_format.upper()}")

        print("\n📝 Logging:")
        print(f"  • Level: {self.logging.log_level}")
        if self.logging.log_file:
            print(f"  • File: {self.logging.log_file.absolute()}")

        print("\n" + "="*70 + "\n")

    class Config:
        """Pydantic configuration."""
        extra = 'ignore'


# ============================================================================
# LOAD CONFIGURATION
# ============================================================================

def load_config() -> Config:
    """
    Load configuration from environment variables.

    Returns:
        Configured Config object

    Exits the process with status 1 if a value is invalid.
    """
    env_path = find_dotenv()
    if env_path:
        load_dotenv(env_path)
        logger.debug("Loaded environment from %s", env_path)

    def get_env(key: str, default: Any = None) -> Any:
        """Get environment variable with fallback."""
        return os.getenv(key, default)

    timeout = get_env('LOAD_TIMEOUT_SECONDS')
    logs_dir = Path(get_env('LOGS_DIR', './data/logs'))
    # LOG_FILE= (empty) disables file logging
    log_file = get_env('LOG_FILE', str(logs_dir / 'filmindex.log'))

    try:
        loading_kwargs = dict(
            shutdown_grace_seconds=float(get_env('SHUTDOWN_GRACE_SECONDS', 60.0)),
            load_timeout_seconds=float(timeout) if timeout else None,
            show_progress=get_env('SHOW_PROGRESS', 'True').lower() == 'true',
            field_size_limit=int(get_env('CSV_FIELD_SIZE_LIMIT', 10 * 1024 * 1024)),
        )
        if get_env('MAX_WORKERS'):
            loading_kwargs['max_workers'] = int(get_env('MAX_WORKERS'))

        return Config(
            paths=PathsConfig(
                imdb_dir=Path(get_env('IMDB_DIR', './data/raw/imdb')),
                exports_dir=Path(get_env('EXPORTS_DIR', './data/exports')),
                logs_dir=logs_dir,
            ),
            loading=LoadingConfig(**loading_kwargs),
            processing=ProcessingConfig(
                export_format=get_env('EXPORT_FORMAT', 'json'),
            ),
            logging=LoggingConfig(
                log_level=get_env('LOG_LEVEL', 'INFO'),
                log_file=Path(log_file) if log_file else None,
                console_output=get_env('LOG_CONSOLE', 'True').lower() == 'true',
            ),
            environment=get_env('ENVIRONMENT', 'development'),
        )

    except Exception as e:
        print(f"❌ Error loading configuration: {e}")
        print("Please check your .env file and ensure all values are valid.")
        sys.exit(1)


# Single configuration instance used throughout the application
config = load_config()


if __name__ == "__main__":
    config.print_summary()
