"""Command line entry point.

Usage::

    python -m cloudpages.main generate page.yaml --output build/
    python -m cloudpages.main generate --template bootstrap-landing overrides.json
    python -m cloudpages.main validate page.json
    python -m cloudpages.main templates
"""

import argparse
import json
import logging
import logging.config
import sys
from pathlib import Path
from typing import List, Optional

from cloudpages.config import get_settings
from cloudpages.exceptions import CloudPagesError, TemplateNotFoundError
from cloudpages.models.output import GeneratedOutput
from cloudpages.services.configuration_parser import ConfigFormat, load_document
from cloudpages.services.generator import PageGenerator, deep_merge

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                },
            },
            "root": {"level": level.upper(), "handlers": ["console"]},
        }
    )


def _detect_format(path: Path, explicit: Optional[str]) -> ConfigFormat:
    if explicit:
        return explicit
    return "yaml" if path.suffix.lower() in (".yaml", ".yml") else "json"


def _read_document(path: Path, explicit_format: Optional[str]) -> dict:
    return load_document(path.read_text(encoding="utf-8"), _detect_format(path, explicit_format))


def write_output(output: GeneratedOutput, directory: Path) -> List[Path]:
    """Write every artifact of the first generated page into *directory*."""
    directory.mkdir(parents=True, exist_ok=True)
    page = output.pages[0]
    files = {
        "index.html": page.html,
        "styles.css": page.css,
        "scripts.js": page.javascript,
        "ampscript.txt": page.ampscript,
        "integration-notes.md": output.integration_notes,
        "testing-guidelines.md": output.testing_guidelines,
        "deployment-instructions.md": output.deployment_instructions,
    }
    written = []
    for name, content in files.items():
        if content is None:
            continue
        path = directory / name
        path.write_text(content, encoding="utf-8")
        written.append(path)
    return written


def _generate(generator: PageGenerator, args: argparse.Namespace) -> int:
    if not args.template and not args.config:
        print("Error: a configuration file or --template is required", file=sys.stderr)
        return 1

    document = _read_document(Path(args.config), args.format) if args.config else None

    if args.template and not args.framework:
        output = generator.generate_from_template(args.template, document)
    else:
        if args.template:
            template = generator.engine.get_template(args.template)
            if template is None:
                raise TemplateNotFoundError(args.template)
            document = deep_merge(template.configuration.to_wire(), document or {})
        if args.framework:
            logger.info("Generating for framework %s", args.framework)
            output = generator.generate_for_framework(document, args.framework)
        else:
            output = generator.generate(document)

    for path in write_output(output, Path(args.output)):
        print(f"Wrote {path}")
    for warning in output.warnings:
        print(f"Warning: {warning.field}: {warning.message}", file=sys.stderr)
    return 0


def _validate(generator: PageGenerator, args: argparse.Namespace) -> int:
    document = _read_document(Path(args.config), args.format)
    result = generator.validate_configuration(document)
    print(json.dumps(result.model_dump(), indent=2))
    return 0 if result.is_valid else 1


def _templates(generator: PageGenerator, args: argparse.Namespace) -> int:
    for template in generator.list_templates(args.page_type):
        print(f"{template.id:<24} {template.name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloudpages",
        description="Generate SFMC cloud pages from a declarative configuration",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser("generate", help="Generate page artifacts")
    generate.add_argument("config", nargs="?", help="Configuration file (or overrides with --template)")
    generate.add_argument("--format", "-f", choices=["json", "yaml"], help="Configuration format (default: by extension)")
    generate.add_argument("--template", "-t", help="Start from a registered template id")
    generate.add_argument("--framework", choices=["bootstrap", "tailwind", "vanilla"], help="Override the CSS framework")
    generate.add_argument("--output", "-o", default=".", help="Output directory (default: current)")

    validate = subparsers.add_parser("validate", help="Validate a configuration and print diagnostics")
    validate.add_argument("config", help="Configuration file")
    validate.add_argument("--format", "-f", choices=["json", "yaml"], help="Configuration format (default: by extension)")

    templates = subparsers.add_parser("templates", help="List registered templates")
    templates.add_argument("--page-type", help="Only list templates for this page type")

    return parser


_COMMANDS = {
    "generate": _generate,
    "validate": _validate,
    "templates": _templates,
}


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(get_settings().log_level)

    generator = PageGenerator()
    try:
        return _COMMANDS[args.command](generator, args)
    except (CloudPagesError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
