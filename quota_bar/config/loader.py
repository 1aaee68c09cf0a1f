"""
Schema-driven configuration loader.

This module provides a ConfigLoader that uses the configuration schema
to automatically load, validate, and merge configuration from multiple sources.
"""

import logging
import os
import typing
from argparse import ArgumentParser, Namespace, RawDescriptionHelpFormatter
from typing import Dict, Any, Optional, Mapping

from dotenv import dotenv_values
from pydantic import ValidationError

from ..models.provider import PROVIDER_PRIORITY
from .schema import ConfigSchema


logger = logging.getLogger(__name__)

DOTENV_FILE = ".env.local"


class ConfigLoader:
    """Loads and validates configuration using a schema-driven approach."""

    @staticmethod
    def load(
        schema: type = ConfigSchema,
        cli_args: Optional[Namespace] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> ConfigSchema:
        """
        Load configuration from all sources with precedence handling.

        Loading order (lowest to highest priority):
        1. Schema defaults
        2. .env.local file (if it exists)
        3. OS environment variables
        4. CLI arguments
        5. Overrides keyed by env var name (session edits, highest priority)

        Args:
            schema: The configuration schema class to use
            cli_args: Parsed CLI arguments (if available)
            overrides: Direct overrides mapping keyed by env var name

        Returns:
            Validated configuration instance

        Raises:
            ValueError: If configuration validation fails
        """
        config_dict: Dict[str, Any] = {}

        # Step 1: Read .env.local on every call; the process environment is left untouched
        file_values = _read_dotenv_file()

        # Step 2: Load from environment variables based on schema, falling back to the file
        for field_name, field_info in schema.model_fields.items():
            env_var = _extra(field_info).get("env_var")
            if env_var:
                env_value = os.environ.get(env_var, file_values.get(env_var))
                if env_value is not None:
                    # Strip whitespace and convert empty strings to None
                    stripped = env_value.strip()
                    if stripped:
                        config_dict[field_name] = stripped
                    # Don't add to config_dict if empty string - let default/None be used

        # Step 3: Apply CLI arguments
        if cli_args:
            for field_name, field_info in schema.model_fields.items():
                cli_arg = _extra(field_info).get("cli_arg")
                if cli_arg and hasattr(cli_args, cli_arg):
                    cli_value = getattr(cli_args, cli_arg)
                    if cli_value is not None:
                        _apply_value(config_dict, field_name, cli_value)

        # Step 4: Apply overrides (highest priority)
        if overrides:
            for field_name, field_info in schema.model_fields.items():
                env_var = _extra(field_info).get("env_var")
                if env_var in overrides and overrides[env_var] is not None:
                    _apply_value(config_dict, field_name, overrides[env_var])

        # Step 5: Create and validate the configuration
        try:
            config = schema(**config_dict)
            logger.debug("Configuration loaded and validated successfully")
            return config
        except ValidationError as e:
            # Convert Pydantic validation errors to more user-friendly messages
            errors = []
            for error in e.errors():
                field = error["loc"][0] if error["loc"] else "config"
                msg = error["msg"]
                field_info = schema.model_fields.get(field)
                env_var = _extra(field_info).get("env_var") if field_info else None
                errors.append(f"{env_var or str(field).upper()}: {msg}")

            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {err}" for err in errors)
            raise ValueError(error_msg) from e

    @staticmethod
    def add_schema_arguments(parser: ArgumentParser, schema: type = ConfigSchema) -> ArgumentParser:
        """
        Add one CLI flag per schema field that declares a cli_arg.

        Args:
            parser: Parser (or subparser) to extend
            schema: The configuration schema class

        Returns:
            The same parser, for chaining
        """
        for field_name, field_info in schema.model_fields.items():
            extra = _extra(field_info)
            cli_arg = extra.get("cli_arg")
            if not cli_arg:
                continue

            # Build argument name
            arg_name = f"--{cli_arg.replace('_', '-')}"

            kwargs = {
                "help": field_info.description or f"Override {extra.get('env_var', field_name.upper())} env var",
                "default": None,  # Don't set schema defaults here - let the loader handle it
            }

            field_type = _unwrap_optional(field_info.annotation)
            choices = extra.get("cli_choices")

            if choices:
                kwargs["choices"] = choices
            elif field_type == int:
                kwargs["type"] = int
            elif field_type == float:
                kwargs["type"] = float
            elif field_type == bool:
                kwargs["action"] = "store_true"

            parser.add_argument(arg_name, **kwargs)

        return parser

    @staticmethod
    def generate_cli_parser(
        schema: type = ConfigSchema,
        description: str = "Show AI provider usage quotas as compact status indicators",
    ) -> ArgumentParser:
        """
        Generate an ArgumentParser from the configuration schema.

        Args:
            schema: The configuration schema class
            description: Parser description

        Returns:
            Configured ArgumentParser
        """
        providers = "\n".join(f"  {p.value:<12}{p.description}" for p in PROVIDER_PRIORITY)
        parser = ArgumentParser(
            prog="quota-bar",
            description=description,
            formatter_class=RawDescriptionHelpFormatter,
            epilog=f"""
Providers (in priority order):
{providers}

Examples:
  quota-bar once
  quota-bar once --json --providers claude,gemini
  quota-bar watch --interval 5 --mode per-provider
            """,
        )

        parser.add_argument(
            "--verbose",
            action="store_true",
            help="Enable verbose logging (DEBUG level)",
        )

        subparsers = parser.add_subparsers(dest="command")
        subparsers.required = True

        once = subparsers.add_parser("once", help="Run a single refresh cycle and print the indicators")
        once.add_argument(
            "--json",
            action="store_true",
            help="Print the aggregate snapshot as JSON",
        )
        ConfigLoader.add_schema_arguments(once, schema)

        watch = subparsers.add_parser("watch", help="Refresh periodically and print indicator updates")
        watch.add_argument(
            "--log-output",
            action="store_true",
            help="Log the raw fetcher output of every cycle",
        )
        ConfigLoader.add_schema_arguments(watch, schema)

        return parser


def _extra(field_info) -> Dict[str, Any]:
    extra = getattr(field_info, "json_schema_extra", None)
    return extra if isinstance(extra, dict) else {}


def _unwrap_optional(field_type):
    """Return X for Optional[X], otherwise the type unchanged."""
    if typing.get_origin(field_type) is typing.Union:
        non_none_args = [arg for arg in typing.get_args(field_type) if arg is not type(None)]
        if len(non_none_args) == 1:
            return non_none_args[0]
    return field_type


def _apply_value(config_dict: Dict[str, Any], field_name: str, value: Any) -> None:
    # For strings, strip whitespace
    if isinstance(value, str):
        stripped = value.strip()
        if stripped:
            config_dict[field_name] = stripped
        else:
            # Treat explicit empty string as an override to clear the value
            config_dict[field_name] = None
    else:
        config_dict[field_name] = value


def _read_dotenv_file() -> Dict[str, str]:
    """Read values from .env.local if it exists, without exporting them."""
    if not os.path.exists(DOTENV_FILE):
        logger.debug(f"{DOTENV_FILE} file not found, skipping")
        return {}

    values = {key: value for key, value in dotenv_values(DOTENV_FILE).items() if value is not None}
    logger.debug(f"Read {len(values)} value(s) from {DOTENV_FILE}")
    return values
