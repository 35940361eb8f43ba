"""
Configuration Management

Bot settings: GitHub App credentials, LLM endpoint, review limits,
logging and server options.
"""

import os
import re
import yaml
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any
from pathlib import Path
import logging


class ConfigurationError(ValueError):
    """Invalid or incomplete configuration. Fatal at startup."""


@dataclass
class GitHubAppConfig:
    """GitHub App credentials"""
    id: Optional[str] = None
    client_id: Optional[str] = None
    private_key_path: Optional[str] = None
    webhook_secret: Optional[str] = None


@dataclass
class GitHubConfig:
    """GitHub API settings"""
    app: GitHubAppConfig = field(default_factory=GitHubAppConfig)
    api_url: str = "https://api.github.com"
    timeout_seconds: int = 30


@dataclass
class LLMConfig:
    """Ollama LLM settings"""
    model: str = "qwen2.5-coder:7b"
    base_url: str = "http://localhost:11434"
    timeout_seconds: int = 60
    enabled: bool = True
    temperature: float = 0.7


@dataclass
class ReviewSettings:
    """Review pipeline switches and limits"""
    max_diff_size_bytes: int = 1048576  # 1MB
    max_files_per_pr: int = 50
    heuristics_enabled: bool = True
    llm_enabled: bool = True
    enable_comment_deletion: bool = False


@dataclass
class LoggingConfig:
    """Logging settings"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class ServerConfig:
    """Webhook server settings"""
    host: str = "0.0.0.0"
    port: int = 8080
    review_workers: int = 4


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _snake_case(key: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', key).lower()


def _normalize_keys(data: Any) -> Any:
    """Accept both camelCase (``privateKeyPath``) and snake_case YAML keys."""
    if isinstance(data, dict):
        return {_snake_case(str(k)): _normalize_keys(v) for k, v in data.items()}
    return data


@dataclass
class AppConfig:
    """Complete bot configuration"""
    github: GitHubConfig = field(default_factory=GitHubConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    app: ReviewSettings = field(default_factory=ReviewSettings)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    debug: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load configuration from environment variables"""
        return cls(
            github=GitHubConfig(
                app=GitHubAppConfig(
                    id=os.getenv("GITHUB_APP_ID"),
                    client_id=os.getenv("GITHUB_APP_CLIENT_ID"),
                    private_key_path=os.getenv("GITHUB_APP_PRIVATE_KEY_PATH"),
                    webhook_secret=os.getenv("GITHUB_WEBHOOK_SECRET"),
                ),
                api_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
                timeout_seconds=int(os.getenv("GITHUB_TIMEOUT", "30")),
            ),
            llm=LLMConfig(
                model=os.getenv("LLM_MODEL", "qwen2.5-coder:7b"),
                base_url=os.getenv("LLM_BASE_URL", "http://localhost:11434"),
                timeout_seconds=int(os.getenv("LLM_TIMEOUT_SECONDS", "60")),
                enabled=_env_bool("LLM_ENABLED", "true"),
                temperature=float(os.getenv("LLM_TEMPERATURE", "0.7")),
            ),
            app=ReviewSettings(
                max_diff_size_bytes=int(os.getenv("APP_MAX_DIFF_SIZE_BYTES", "1048576")),
                max_files_per_pr=int(os.getenv("APP_MAX_FILES_PER_PR", "50")),
                heuristics_enabled=_env_bool("APP_HEURISTICS_ENABLED", "true"),
                llm_enabled=_env_bool("APP_LLM_ENABLED", "true"),
                enable_comment_deletion=_env_bool("APP_ENABLE_COMMENT_DELETION", "false"),
            ),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", "INFO"),
                format=os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_path=os.getenv("LOG_FILE"),
                max_file_size=int(os.getenv("LOG_MAX_SIZE", str(10 * 1024 * 1024))),
                backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5")),
            ),
            server=ServerConfig(
                host=os.getenv("SERVER_HOST", "0.0.0.0"),
                port=int(os.getenv("SERVER_PORT", "8080")),
                review_workers=int(os.getenv("REVIEW_WORKERS", "4")),
            ),
            debug=_env_bool("DEBUG", "false"),
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "AppConfig":
        """Load configuration from a YAML file"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = _normalize_keys(yaml.safe_load(f) or {})

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Config file must hold a mapping: {config_path}")

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "AppConfig":
        """
        Build configuration from a nested mapping (see ``to_dict``)

        Raises:
            ConfigurationError: On unknown keys or sections that are not mappings
        """
        try:
            github_data = dict(config_data.get('github') or {})
            app_credentials = GitHubAppConfig(**(github_data.pop('app', None) or {}))
            if app_credentials.id is not None:
                app_credentials.id = str(app_credentials.id)

            return cls(
                github=GitHubConfig(app=app_credentials, **github_data),
                llm=LLMConfig(**(config_data.get('llm') or {})),
                app=ReviewSettings(**(config_data.get('app') or {})),
                logging=LoggingConfig(**(config_data.get('logging') or {})),
                server=ServerConfig(**(config_data.get('server') or {})),
                debug=config_data.get('debug', False),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def validate(self) -> None:
        """Validate settings; raises ConfigurationError listing every problem"""
        errors = []

        if not self.github.app.webhook_secret:
            errors.append("GitHub webhook secret is required")

        if not self.github.app.id:
            errors.append("GitHub App id is required")

        key_path = self.github.app.private_key_path
        if not key_path:
            errors.append("GitHub App private key path is required")
        elif not os.access(key_path, os.R_OK) or not Path(key_path).is_file():
            errors.append(f"GitHub App private key is not readable: {key_path}")

        if self.github.timeout_seconds <= 0 or self.llm.timeout_seconds <= 0:
            errors.append("Timeouts must be positive")

        if self.app.max_diff_size_bytes <= 0:
            errors.append("Max diff size must be positive")

        if self.app.max_files_per_pr <= 0:
            errors.append("Max files per PR must be positive")

        if self.server.review_workers <= 0:
            errors.append("Review worker count must be positive")

        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to a dictionary"""
        data = asdict(self)
        # secrets are never exported
        data['github']['app'].pop('webhook_secret', None)
        return data


class ConfigManager:
    """Validates configuration and sets up logging"""

    def __init__(self, config: Optional[AppConfig] = None):
        self._config = config or AppConfig.from_env()
        self._config.validate()
        self._setup_logging()

    @property
    def config(self) -> AppConfig:
        """Current configuration"""
        return self._config

    def _setup_logging(self) -> None:
        """Configure the root logger"""
        logging.basicConfig(
            level=getattr(logging, self._config.logging.level.upper()),
            format=self._config.logging.format,
        )

        # rotate when a log file is configured
        if self._config.logging.file_path:
            from logging.handlers import RotatingFileHandler

            handler = RotatingFileHandler(
                self._config.logging.file_path,
                maxBytes=self._config.logging.max_file_size,
                backupCount=self._config.logging.backup_count,
            )
            handler.setFormatter(logging.Formatter(self._config.logging.format))

            root_logger = logging.getLogger()
            root_logger.addHandler(handler)


_config_manager: Optional[ConfigManager] = None


def get_config() -> AppConfig:
    """Process-wide configuration, loaded from the environment on first use"""
    global _config_manager
    if _config_manager is None:
        config_path = os.getenv("REVIEW_BOT_CONFIG")
        config = AppConfig.from_yaml(config_path) if config_path else AppConfig.from_env()
        _config_manager = ConfigManager(config)
    return _config_manager.config
