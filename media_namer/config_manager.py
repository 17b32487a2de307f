# media_namer/config_manager.py

import os
import re
import logging
import argparse
from pathlib import Path
from typing import Optional, List, Dict, Any, Union

import tomli
import platformdirs
from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigError

log = logging.getLogger(__name__)
APP_NAME = "media_namer"
APP_AUTHOR = "media_namer"
DEFAULT_CONFIG_FILENAME = "config.toml"

DEFAULT_TRIM_REGEX = [
    r"(?i)[\s._-]*\bs\d{1,2}(?:e\d{1,3})?\b",
    r"(?i)[\s._\-\[(]*\b\d{3,4}p\b",
    r"[\s._-]*\[\d{4}\]",
    r"(?i)[\s._-]*\b(?:x264|x265|h\.?264|h\.?265|hevc|blu-?ray|web-?dl|webrip|hdtv|dvdrip|brrip|hdrip)\b",
]

class BaseProfileSettings(BaseModel):
    # Library
    movies_path: Optional[str] = Field(default="~/Videos/Movies", description="Root folder of the movie library.")
    tv_path: Optional[str] = Field(default="~/Videos/TV", description="Root folder of the TV library.")

    # Name Matching
    rename_max_depth: Optional[int] = Field(default=1, ge=1, description="How deep to look for existing titles below a library root.")
    trim_regex: Optional[List[str]] = Field(default_factory=lambda: list(DEFAULT_TRIM_REGEX), description="Ordered patterns; each cuts the raw name at its first match.")
    similarity_percent: Optional[int] = Field(default=75, ge=0, le=100, description="Minimum similarity (0-100) for an existing library folder to be offered.")

    # External Metadata
    tmdb_base_url: Optional[str] = Field(default="https://api.themoviedb.org/3", description="TMDB API base URL.")
    tmdb_language: Optional[str] = Field(default="en-US", description="Language sent with TMDB requests.")
    search_movies_url: Optional[str] = Field(default="{base_url}/search/movie?api_key={api_key}&query={query}&year={year}", description="Movie search URL template.")
    search_tv_url: Optional[str] = Field(default="{base_url}/search/tv?api_key={api_key}&query={query}&first_air_date_year={year}", description="TV search URL template.")
    movie_credits_url: Optional[str] = Field(default="{base_url}/movie/{id}/credits?api_key={api_key}", description="Movie credits URL template.")
    tv_credits_url: Optional[str] = Field(default="{base_url}/tv/{id}/credits?api_key={api_key}", description="TV credits URL template.")
    poster_base: Optional[str] = Field(default="https://image.tmdb.org/t/p/w500", description="Prefix prepended to poster paths.")
    result_limit: Optional[int] = Field(default=10, ge=1, description="Maximum number of external results kept per search.")

    # API Options
    api_rate_limit_delay: Optional[float] = Field(default=0.25, ge=0.0, description="Delay (seconds) between API calls.")
    api_retry_attempts: Optional[int] = Field(default=3, ge=1, description="Number of attempts for API calls.")
    api_retry_wait_seconds: Optional[float] = Field(default=2.0, ge=0.0, description="Wait time (seconds) between API retry attempts.")
    api_timeout_seconds: Optional[float] = Field(default=15.0, gt=0.0, description="Timeout (seconds) for a single HTTP request.")

    # Caching Options
    cache_directory: Optional[str] = Field(default=None, description="Custom cache directory (default: user cache dir).")

    # Logging Options
    log_file: Optional[str] = Field(default=None, description="Path to log file (e.g., media_namer.log).")
    log_level: Optional[str] = Field(default='INFO', description="Logging level: DEBUG, INFO, WARNING, ERROR.")

    @field_validator('log_level', mode='before')
    @classmethod
    def check_log_level(cls, v: Any) -> Optional[str]:
        if v is not None and isinstance(v, str) and v.upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR']:
            raise ValueError("log_level must be one of DEBUG, INFO, WARNING, ERROR")
        return v.upper() if isinstance(v, str) else None

    @field_validator('trim_regex', mode='before')
    @classmethod
    def check_trim_regex(cls, v: Any) -> Optional[List[str]]:
        if v is None: return None
        if isinstance(v, str): v = [v]
        if not isinstance(v, list):
            raise ValueError("trim_regex must be a list of regular expressions")
        for pattern in v:
            try:
                re.compile(str(pattern))
            except re.error as e:
                raise ValueError(f"invalid trim_regex pattern '{pattern}': {e}")
        return [str(p) for p in v]

    @field_validator('search_movies_url', 'search_tv_url', mode='before')
    @classmethod
    def check_search_template(cls, v: Any) -> Optional[str]:
        if v is not None and '{query}' not in str(v):
            raise ValueError("search URL templates must contain the {query} placeholder")
        return v

    @field_validator('movie_credits_url', 'tv_credits_url', mode='before')
    @classmethod
    def check_credits_template(cls, v: Any) -> Optional[str]:
        if v is not None and '{id}' not in str(v):
            raise ValueError("credits URL templates must contain the {id} placeholder")
        return v


class DefaultSettings(BaseProfileSettings):
    pass

class RootConfigModel(BaseModel):
    default: DefaultSettings = Field(default_factory=DefaultSettings)
    model_config = {'extra': 'allow'}


def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, str):
        # Literal strings keep regex backslashes readable
        if "'" not in value:
            return f"'{value}'"
        return '"' + value.replace('\\', '\\\\').replace('"', '\\"') + '"'
    if isinstance(value, list):
        return "[" + ", ".join(_toml_value(item) for item in value) + "]"
    return str(value)

def generate_default_toml_content() -> str:
    default_settings = DefaultSettings()
    content_lines = ["# media-namer Default Configuration File", ""]

    sections: Dict[str, List[str]] = {
        "Library": ['movies_path', 'tv_path'],
        "Name Matching": ['rename_max_depth', 'trim_regex', 'similarity_percent'],
        "External Metadata": ['tmdb_base_url', 'tmdb_language', 'search_movies_url', 'search_tv_url', 'movie_credits_url', 'tv_credits_url', 'poster_base', 'result_limit'],
        "API Options": ['api_rate_limit_delay', 'api_retry_attempts', 'api_retry_wait_seconds', 'api_timeout_seconds'],
        "Caching Options": ['cache_directory'],
        "Logging Options": ['log_file', 'log_level'],
    }

    content_lines.append("[default]")
    for section_name, keys in sections.items():
        content_lines.append(f"\n  # --- {section_name} ---")
        for key in keys:
            field_info = BaseProfileSettings.model_fields[key]
            default_value = getattr(default_settings, key)
            if field_info.description:
                content_lines.append(f"  # {field_info.description}")
            if default_value is None:
                content_lines.append(f"  # {key} = (not set)")
                continue
            content_lines.append(f"  {key} = {_toml_value(default_value)}")

    content_lines.append("\n# Other profiles override [default], e.g.:")
    content_lines.append("# [strict]")
    content_lines.append("# similarity_percent = 90")
    return "\n".join(content_lines) + "\n"


class ConfigManager:
    def __init__(self, config_path_override: Optional[Path] = None):
        self.config_path = self._resolve_config_path(config_path_override)
        self._raw_toml_content_str: Optional[str] = None
        self._config = self._load_config()
        self._api_keys = self._load_env_keys()
        log.debug(f"Config path used: {self.config_path}")

    def _resolve_config_path(self, config_path_override: Optional[Path]) -> Path:
        if config_path_override:
            p = Path(config_path_override)
            log.debug(f"Using explicit config path target: {p.resolve()}")
            return p.resolve()

        cwd_path = Path.cwd() / DEFAULT_CONFIG_FILENAME
        if cwd_path.is_file():
            log.debug(f"Found config file in current directory: {cwd_path}")
            return cwd_path.resolve()

        user_config_path = Path(platformdirs.user_config_dir(APP_NAME, APP_AUTHOR, ensure_exists=False)) / DEFAULT_CONFIG_FILENAME
        if user_config_path.is_file():
            log.debug(f"Found config file in user config directory: {user_config_path}")
            return user_config_path.resolve()

        proj_path = Path(__file__).parent.parent.resolve() / DEFAULT_CONFIG_FILENAME
        if proj_path.is_file():
            log.debug(f"Found config file in project directory: {proj_path}")
            return proj_path

        log.debug(f"No config file found. Preferred default creation location: {user_config_path}")
        return user_config_path.resolve()

    def _load_config(self) -> Dict[str, Any]:
        if not self.config_path.is_file():
            log.warning(f"Config file not found at '{self.config_path}'. Using internal defaults.")
            self._raw_toml_content_str = "# Config file not found.\n"
            return RootConfigModel().model_dump()

        try:
            self._raw_toml_content_str = self.config_path.read_text(encoding='utf-8')
        except OSError as e_os:
            raise ConfigError(f"Failed to read config file '{self.config_path}': {e_os}")
        if not self._raw_toml_content_str.strip():
            log.warning(f"Config file '{self.config_path}' is empty. Using internal defaults.")
            return RootConfigModel().model_dump()

        try:
            cfg_dict = tomli.loads(self._raw_toml_content_str)
            log.info(f"Loaded configuration from '{self.config_path}'")
        except tomli.TOMLDecodeError as e_toml:
            raise ConfigError(f"Failed to parse TOML config '{self.config_path}': {e_toml}")

        try:
            validated_config = RootConfigModel.model_validate(cfg_dict)
            log.debug("Config validation successful.")
        except ValidationError as e_val:
            error_msgs = [f"  - Field `{' -> '.join(map(str, err['loc']))}`: {err['msg']}" for err in e_val.errors()]
            error_summary = f"Config file '{self.config_path}' validation failed:\n" + "\n".join(error_msgs)
            log.error(error_summary)
            raise ConfigError(error_summary) from e_val

        config = validated_config.model_dump()
        # Named profiles are kept raw by the root model; validate them against the same schema.
        for profile_name, profile_data in cfg_dict.items():
            if profile_name == 'default' or not isinstance(profile_data, dict):
                continue
            try:
                BaseProfileSettings.model_validate(profile_data)
            except ValidationError as e_val:
                raise ConfigError(f"Profile '{profile_name}' in '{self.config_path}' is invalid: {e_val}") from e_val
        return config

    def get_raw_toml_content(self) -> Optional[str]:
        return self._raw_toml_content_str

    def _load_env_keys(self) -> Dict[str, Optional[str]]:
        env_path: Union[str, Path, None] = find_dotenv(usecwd=True)
        if env_path:
            log.debug(f"Loading environment variables from: {env_path}")
            load_dotenv(dotenv_path=env_path)
        else:
            log.debug(".env file not found by find_dotenv. Checking os.getenv directly.")

        keys: Dict[str, Optional[str]] = {
            'tmdb_api_key': os.getenv("TMDB_API_KEY"),
            'tmdb_language': os.getenv("TMDB_LANGUAGE"),
        }
        if keys['tmdb_api_key']:
            log.info(f"Loaded TMDB API key from {'.env file' if env_path else 'environment variables'}.")
        else:
            log.debug("No TMDB_API_KEY found in .env file or environment.")
        return keys

    def get_value(self, key: str, profile: str = 'default', command_line_value: Any = None, default_value: Any = None) -> Any:
        if command_line_value is not None:
            return command_line_value

        if key == 'tmdb_language' and self._api_keys.get('tmdb_language'):
            return self._api_keys['tmdb_language']

        profile_settings_dict = self._config.get(profile, {})
        if isinstance(profile_settings_dict, dict) and profile_settings_dict.get(key) is not None:
            return profile_settings_dict[key]

        default_settings_dict = self._config.get('default', {})
        if isinstance(default_settings_dict, dict) and default_settings_dict.get(key) is not None:
            return default_settings_dict[key]

        if default_value is None and key in BaseProfileSettings.model_fields:
            field_info = BaseProfileSettings.model_fields[key]
            if field_info.default_factory is not None:
                return field_info.default_factory()
            return field_info.default
        return default_value

    def get_api_key(self, service_name: str) -> Optional[str]:
        return self._api_keys.get(f"{service_name.lower()}_api_key")

    def get_profile_settings(self, profile: str = 'default') -> Dict[str, Any]:
        final_settings = DefaultSettings().model_dump()
        for section in ('default', profile) if profile != 'default' else ('default',):
            section_data = self._config.get(section, {})
            if not isinstance(section_data, dict):
                log.warning(f"Profile '{section}' in config is not a table. Skipping merge for this profile.")
                continue
            final_settings.update({k: v for k, v in section_data.items() if v is not None})
        if profile != 'default' and profile not in self._config:
            log.debug(f"Profile '{profile}' not found in config. Using default settings.")
        return final_settings


class ConfigHelper:
    def __init__(self, config_manager: ConfigManager, args_ns: argparse.Namespace):
        self.manager = config_manager
        self.args = args_ns
        self.profile = getattr(args_ns, 'profile', 'default') or 'default'

    def __call__(self, key: str, default_value: Any = None, arg_value: Any = None) -> Any:
        cmd_line_val = arg_value if arg_value is not None else getattr(self.args, key, None)
        return self.manager.get_value(key, self.profile, cmd_line_val, default_value)

    def get_api_key(self, service_name: str) -> Optional[str]:
        return self.manager.get_api_key(service_name)

    def get_list(self, key: str, default_value: Optional[List[Any]] = None) -> List[Any]:
        val = self(key, default_value)
        if isinstance(val, list):
            return val
        if isinstance(val, str):
            return [val]
        return default_value if isinstance(default_value, list) else []
