#!/usr/bin/env python3

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from headerpack.errors import ConfigurationError

CONFIG_FILE_NAME = "headerpackconfig.json"

LINE_TERMINATORS = {
    "\n": "\n",
    "\r\n": "\r\n",
    "\r": "\r",
    "lf": "\n",
    "crlf": "\r\n",
    "cr": "\r",
}


class PackConfig(BaseModel):
    """Settings for one packing run, usually read from headerpackconfig.json."""

    model_config = ConfigDict(populate_by_name=True)

    # Directory the config file lives in; relative paths resolve against it
    base_dir: Path

    include: str  # root file listing the initial headers
    output: str
    disclaimer: str = ""  # file copied verbatim to the top of the output
    line_terminator: str = Field(default="\n", alias="lineterminator")
    timestamp: bool = False  # append the generation time to the banner

    @field_validator("include", "output")
    @classmethod
    def _not_blank(cls, value: str, info) -> str:
        if not value.strip():
            raise ValueError(f"No {info.field_name} path set")
        return value

    @field_validator("line_terminator")
    @classmethod
    def _known_terminator(cls, value: str) -> str:
        try:
            return LINE_TERMINATORS[value.lower()]
        except KeyError:
            raise ValueError(f"Unknown line terminator {value!r}") from None

    def include_path(self) -> Path:
        """Get the full path to the root include file."""
        return self.base_dir / self.include

    def output_path(self) -> Path:
        """Get the full path of the generated file."""
        return self.base_dir / self.output

    def disclaimer_path(self) -> Path | None:
        if not self.disclaimer.strip():
            return None
        return self.base_dir / self.disclaimer

    def check_paths(self) -> None:
        """Fail early on paths that must exist before packing starts."""
        disclaimer = self.disclaimer_path()
        if disclaimer is not None and not disclaimer.is_file():
            raise ConfigurationError(f'Could not find disclaimer file "{self.disclaimer}"')

    @classmethod
    def load_from_file(cls, config_path: Path) -> "PackConfig":
        """Load configuration from a JSON file."""
        if not config_path.is_file():
            raise ConfigurationError(
                f'Config file has to exist! Expected "{config_path.resolve()}"'
            )
        try:
            args = json.loads(config_path.read_text(encoding="utf-8-sig"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Failed to parse config file {config_path}: {e}") from e
        if not isinstance(args, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a JSON object")

        args["base_dir"] = config_path.resolve().parent
        try:
            config = cls.model_validate(args)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in error['loc']) or 'config'}: {error['msg']}"
                for error in e.errors()
            )
            raise ConfigurationError(f"Invalid config file {config_path}: {problems}") from e
        config.check_paths()
        return config

    @classmethod
    def find_config(cls, start_path: Path) -> Path | None:
        """Find headerpackconfig.json by searching up the directory tree."""
        current = start_path.resolve()
        while True:
            config_file = current / CONFIG_FILE_NAME
            if config_file.exists():
                return config_file
            if current == current.parent:
                return None
            current = current.parent
