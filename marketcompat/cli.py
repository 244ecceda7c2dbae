"""
Command-line interface for marketcompat.

Example:
    marketcompat --target 9.2 --plugins plugins.yaml --type confluence -o results.json
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from marketcompat.batch import BatchRunner
from marketcompat.config import Config, config as default_config
from marketcompat.models import PluginDescriptor
from marketcompat.results import summarize_results
from marketcompat.utils.error_handling import CompatError, InputValidationError, ResourceError
from marketcompat.utils.logging_config import configure_logging, logger

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_RESOURCE_ERROR = 2


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="marketcompat",
        description="Check marketplace plugin versions against a Data Center release",
    )
    parser.add_argument("--target", "-t", required=True, help="Target platform version, e.g. 9.2")
    parser.add_argument("--plugins", "-p", required=True, help="YAML or JSON file listing plugins")
    parser.add_argument("--type", dest="product_type", help="Only check plugins of this product type")
    parser.add_argument("--output", "-o", help="Write results JSON here instead of stdout")
    parser.add_argument("--config", "-c", help="YAML or JSON configuration file")
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    parser.add_argument("--quiet", "-q", action="store_true", help="Do not print progress lines")
    return parser


def load_plugins(path: str, product_type: Optional[str] = None) -> List[PluginDescriptor]:
    """
    Load plugin descriptors from a YAML or JSON file.

    The file holds either a list of plugins or a mapping with a ``plugins`` key.

    Raises:
        InputValidationError: If the file cannot be read or has the wrong shape
    """
    file_path = Path(path)
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            if file_path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise InputValidationError(f"Could not read plugin file {path}: {e}", field="plugins", cause=e)

    if isinstance(data, dict):
        data = data.get("plugins")
    if not isinstance(data, list):
        raise InputValidationError(f"Plugin file {path} must contain a list of plugins", field="plugins")

    plugins = [PluginDescriptor.from_dict(item) for item in data if isinstance(item, dict)]
    if product_type:
        wanted = product_type.lower()
        plugins = [p for p in plugins if (p.product_type or "").lower() == wanted]
    return plugins


def _write_output(payload: Dict[str, Any], output: Optional[str]) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        logger.info(f"Results written to {output}")
    else:
        sys.stdout.write(text + "\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    args = create_parser().parse_args(argv)

    try:
        cfg = Config(config_file=args.config) if args.config else default_config
    except CompatError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    configure_logging(log_level=args.log_level or cfg.get("LOG_LEVEL"))

    def print_progress(message: str) -> None:
        print(message, file=sys.stderr)

    try:
        plugins = load_plugins(args.plugins, args.product_type)
        runner = BatchRunner(config=cfg, progress=None if args.quiet else print_progress)
        results = asyncio.run(runner.run(plugins, args.target))
    except InputValidationError as e:
        e.log()
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except ResourceError as e:
        e.log()
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RESOURCE_ERROR

    summary = summarize_results(results)
    print(str(summary), file=sys.stderr)
    _write_output({
        "targetVersion": args.target,
        "summary": summary.to_dict(),
        "results": [r.to_dict() for r in results],
    }, args.output)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
