"""Settings file support.

Settings live in a JSON file using the same layout as the tool's historical
``appsettings.json``::

    {
        "Settings": {
            "DatFilePath": "games.dat",
            "OldRomsPath": "old",
            "OutputPath": ".",
            "LogFilePath": "romcleaner_{:%Y%m%d_%H%M%S}.log",
            "Workers": 4
        }
    }

Command-line options always win over values read here.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from romcleaner.errors import SettingsError

DEFAULT_SETTINGS_FILE = Path("appsettings.json")

# Rendered once at load time to reject patterns that cannot be formatted
_SAMPLE_TIMESTAMP = datetime(2000, 1, 1)


class CleanerSettings(BaseModel):
    """Defaults for a cleaning run.

    Fields are populated either by name (``dat_file_path``) or by their
    ``appsettings.json`` key (``DatFilePath``). Unknown keys are ignored.

    Attributes:
        dat_file_path: DAT catalog to check ROMs against.
        input_path: Directory scanned for ROMs.
        output_path: Root of the "new" and "checked" areas.
        log_file_pattern: ``str.format`` pattern applied to the run's start time.
        workers: Hashing threads.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    dat_file_path: Annotated[Path, Field(alias="DatFilePath")] = Path("games.dat")
    input_path: Annotated[Path, Field(alias="OldRomsPath")] = Path("old")
    output_path: Annotated[Path, Field(alias="OutputPath")] = Path(".")
    log_file_pattern: Annotated[
        StrictStr,
        Field(alias="LogFilePath"),
    ] = "romcleaner_{:%Y%m%d_%H%M%S}.log"
    workers: Annotated[StrictInt, Field(alias="Workers", ge=1)] = 4

    @field_validator("log_file_pattern")
    @classmethod
    def _check_log_file_pattern(cls, value: str) -> str:
        try:
            value.format(_SAMPLE_TIMESTAMP)
        except (KeyError, IndexError, ValueError, AttributeError, TypeError) as e:
            raise ValueError(f"cannot render log file pattern {value!r}: {e!r}") from e
        return value

    def log_file_for(self, timestamp: datetime) -> Path:
        """Render the log file pattern for a run started at ``timestamp``."""
        return Path(self.log_file_pattern.format(timestamp))


def _describe(error: ValidationError) -> str:
    problems = []
    for item in error.errors():
        key = item["loc"][0] if item["loc"] else "Settings"
        problems.append(f"Setting '{key}': {item['msg']}")
    return "; ".join(problems)


def load_settings(path: Optional[Path] = None) -> CleanerSettings:
    """Read settings from a JSON file.

    Args:
        path: Settings file. Defaults to ``appsettings.json`` in the current
            directory. A missing file yields the defaults.

    Returns:
        CleanerSettings with file values applied over the defaults.

    Raises:
        SettingsError: If the file is not valid JSON or a value fails
            validation.
    """
    settings_path = path if path is not None else DEFAULT_SETTINGS_FILE

    if not settings_path.is_file():
        return CleanerSettings()

    try:
        document = json.loads(settings_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SettingsError(f"Invalid settings file {settings_path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Cannot read settings file {settings_path}: {e}") from e

    if not isinstance(document, dict):
        raise SettingsError(f"Settings file {settings_path} must contain a JSON object")

    try:
        return CleanerSettings.model_validate(document.get("Settings", document))
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {settings_path}: {_describe(e)}") from e
