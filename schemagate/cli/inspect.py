"""Inspect command implementation.

Loads a schema from a ``module:attribute`` target, preprocesses it with the
requested toggles and prints the resulting SDL. Optionally reports the schema
surface the run removed.
"""

from __future__ import annotations

import importlib
import json
import logging
import sys
from pathlib import Path
from typing import Any

from graphql import GraphQLSchema, print_schema

from schemagate.analysis.exclusion import ExclusionAnalyzer
from schemagate.config.loader import load_preprocessor_config
from schemagate.graph.preprocessor import preprocess_schema
from schemagate.graph.schema_config import SchemaConfig

logger = logging.getLogger("schemagate.cli.inspect")


def load_target(target: str) -> SchemaConfig:
    """Resolve ``module:attribute`` to a schema descriptor.

    The attribute may be a :class:`SchemaConfig`, a :class:`GraphQLSchema`
    or a zero-argument callable returning either.

    Raises:
        ValueError: If the target is malformed or resolves to something else.
    """
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise ValueError(f"Target must look like 'package.module:attribute', got {target!r}")

    module = importlib.import_module(module_name)
    value: Any = module
    for part in attribute.split("."):
        value = getattr(value, part)

    if callable(value) and not isinstance(value, (SchemaConfig, GraphQLSchema)):
        value = value()

    if isinstance(value, SchemaConfig):
        return value
    if isinstance(value, GraphQLSchema):
        return SchemaConfig.from_schema(value)
    raise ValueError(f"{target} resolved to {type(value).__name__}, expected a schema")


def inspect_command(args) -> int:
    """Execute inspect command.

    Args:
        args: Parsed command-line arguments containing:
            - target: ``module:attribute`` of the schema
            - config: Optional TOML/JSON config path or inline string
            - beta: Force beta features on
            - output: Optional SDL output file
            - report: Log the exclusion report
            - report_json: Optional path for the report as JSON

    Returns:
        int: Exit code (0 for success, non-zero for failure).
    """
    try:
        config = load_preprocessor_config(getattr(args, "config", None))
        if getattr(args, "beta", False):
            config = config.model_copy(update={"beta_features_enabled": True})
        logger.info("Preprocessor configuration: %s", config.to_dict())

        original = load_target(args.target)
        preprocessed = preprocess_schema(original, config)
        sdl = print_schema(preprocessed.to_schema())

        output = getattr(args, "output", None)
        if output:
            output_path = Path(output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(sdl + "\n", encoding="utf-8")
            logger.info("Wrote preprocessed schema to %s", output_path)
        else:
            sys.stdout.write(sdl + "\n")

        report_json = getattr(args, "report_json", None)
        if getattr(args, "report", False) or report_json:
            report = ExclusionAnalyzer(original, preprocessed).analyze()
            for key, entries in report.to_dict().items():
                for entry in entries:
                    logger.warning("%s: %s", key, entry)
            if report_json:
                Path(report_json).write_text(
                    json.dumps(report.to_dict(), indent=2, ensure_ascii=False),
                    encoding="utf-8",
                )

        return 0

    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("Inspect command failed: %s", e, exc_info=True)
        return 1
