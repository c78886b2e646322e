"""Command line entry point.

Usage:
    godojo-content check
    godojo-content build
    godojo-content godojo:prepare
    godojo-content new --category basics --title "Variables" --slug variables
"""

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from godojo_content import __version__
from godojo_content.authoring import (
    ProfileStore,
    Scaffolder,
    StructureGenerator,
    content_stats,
    format_tree,
)
from godojo_content.authoring.generator import TARGETS
from godojo_content.authoring.sync import SCOPES, GitSync, suggest_commit_message
from godojo_content.building import ContentBuilder
from godojo_content.config import (
    ContentConfig,
    PipelineSettings,
    load_content_config,
    load_settings,
)
from godojo_content.errors import ConfigError, ConfigSchemaInvalid, ContentPipelineError
from godojo_content.export import GodojoExporter
from godojo_content.models.finding import Report
from godojo_content.quality import check_content
from godojo_content.validation import GodojoValidator, StructureValidator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_FATAL = 2

COMMANDS: dict[str, str] = {
    "init": "Create the local author profile",
    "new": "Scaffold a new topic or category index",
    "validate": "Structure validation plus quality check",
    "stats": "Author profile and per-category content statistics",
    "help": "Show this command table",
    "check": "Run the quality rules over every Markdown file",
    "format": "Normalize headings, fences, lists and links",
    "build": "Build JSON/YAML records into the build directory",
    "sync": "Git status, commit, push and pull for content",
    "structure:validate": "Check the content tree against the configuration",
    "structure:generate": "Create missing config, directories, docs and sample content",
    "godojo:prepare": "Export build output as a godojo.dev package",
    "godojo:validate": "Check the export (or the source) against platform requirements",
}

Handler = Callable[[argparse.Namespace, PipelineSettings], int]


def print_report(report: Report) -> None:
    """Print findings grouped by severity and a one-line summary."""
    if report.title:
        print(f"\n== {report.title} ==")
    if report.blocking:
        print(f"\nBlocking ({len(report.blocking)}):")
        for finding in report.blocking:
            print(f"  {finding.file_path}: {finding.message}")
    if report.advisory:
        print(f"\nAdvisory ({len(report.advisory)}):")
        for finding in report.advisory:
            print(f"  {finding.file_path}: {finding.message}")
    for message in report.passed:
        print(f"  ok: {message}")
    print(
        f"\n{report.checked} checked, {len(report.blocking)} blocking, "
        f"{len(report.advisory)} advisory"
    )


def _config(settings: PipelineSettings) -> ContentConfig:
    return load_content_config(settings.config_path)


def cmd_init(args: argparse.Namespace, settings: PipelineSettings) -> int:
    store = ProfileStore(settings.author_profile)
    profile, created = store.create(
        name=args.name,
        email=args.email,
        language=args.language,
        focus=args.focus,
        experience=args.experience,
        force=args.force,
    )
    if created:
        print(f"Author profile created for {profile.name} ({profile.author_id})")
    else:
        print(f"Welcome back, {profile.name}! Topics created so far: {profile.content_created}")
    return EXIT_OK


def cmd_new(args: argparse.Namespace, settings: PipelineSettings) -> int:
    store = ProfileStore(settings.author_profile)
    profile = store.load()
    if profile is None:
        print("No author profile found, run `init` first", file=sys.stderr)
        return EXIT_FATAL

    scaffolder = Scaffolder(_config(settings), settings.content_dir)
    if args.kind == "category":
        result = scaffolder.new_category_index(
            profile, args.category, title=args.title, description=args.description
        )
    else:
        result = scaffolder.new_topic(
            profile, args.category, args.title, description=args.description, slug=args.slug
        )
    store.record_created(profile)
    print(f"Created {result.path}")
    if result.module is not None:
        print(f"Module number: {result.module}")
    return EXIT_OK


def cmd_validate(args: argparse.Namespace, settings: PipelineSettings) -> int:
    config = _config(settings)
    structure = StructureValidator(config, settings.content_dir, settings.config_path).validate()
    report = structure
    # A missing content directory is already a structure finding
    if Path(settings.content_dir).is_dir():
        quality = check_content(
            settings.content_dir,
            config.quality,
            code_language=config.structure.code_language,
            display_root=Path(settings.content_dir).parent,
        )
        report = structure.merge(quality)
    print_report(report)
    return report.exit_code


def cmd_stats(args: argparse.Namespace, settings: PipelineSettings) -> int:
    profile = ProfileStore(settings.author_profile).load()
    if profile is not None:
        print(f"Author: {profile.name} <{profile.email}> ({profile.author_id})")
        print(f"Language: {profile.default_language}, focus: {profile.content_focus}")
        print(f"Content created: {profile.content_created}\n")

    totals = [0, 0, 0, 0]
    print(f"{'category':<16}{'modules':>9}{'topics':>8}{'words':>9}{'code':>6}{'exercises':>11}")
    for stats in content_stats(_config(settings), settings.content_dir):
        print(
            f"{stats.slug:<16}{stats.modules:>9}{stats.topics:>8}{stats.words:>9}"
            f"{stats.code_examples:>6}{stats.exercises:>11}"
        )
        counts = (stats.topics, stats.words, stats.code_examples, stats.exercises)
        totals = [total + count for total, count in zip(totals, counts)]
    print(f"{'total':<16}{'':>9}{totals[0]:>8}{totals[1]:>9}{totals[2]:>6}{totals[3]:>11}")
    return EXIT_OK


def cmd_help(args: argparse.Namespace, settings: PipelineSettings) -> int:
    print(f"godojo-content {__version__}\n")
    width = max(len(name) for name in COMMANDS)
    for name, description in COMMANDS.items():
        print(f"  {name:<{width}}  {description}")
    return EXIT_OK


def cmd_check(args: argparse.Namespace, settings: PipelineSettings) -> int:
    config = _config(settings)
    report = check_content(
        settings.content_dir,
        config.quality,
        code_language=config.structure.code_language,
        display_root=Path(settings.content_dir).parent,
    )
    print_report(report)
    return report.exit_code


def cmd_format(args: argparse.Namespace, settings: PipelineSettings) -> int:
    config = _config(settings)
    result = format_tree(
        settings.content_dir, code_language=config.structure.code_language, check=args.check
    )
    verb = "Would format" if args.check else "Formatted"
    for path in result.formatted:
        print(f"{verb}: {path}")
    for path, message in result.errors:
        print(f"Error: {path}: {message}", file=sys.stderr)
    print(
        f"\n{len(result.formatted)} formatted, {result.unchanged} unchanged, "
        f"{len(result.errors)} errors"
    )
    if result.errors or (args.check and result.formatted):
        return EXIT_FINDINGS
    return EXIT_OK


def cmd_build(args: argparse.Namespace, settings: PipelineSettings) -> int:
    builder = ContentBuilder(_config(settings), settings.content_dir, settings.build_dir)
    result = builder.build()
    for failure in result.failures:
        print(f"  skipped {failure.file_path}: {failure.reason}")
    print(
        f"\nBuilt {len(result.topics)} topics and {len(result.categories)} categories "
        f"into {result.output_dir} ({len(result.failures)} failed)"
    )
    return EXIT_OK if result.ok else EXIT_FINDINGS


def cmd_sync(args: argparse.Namespace, settings: PipelineSettings) -> int:
    content_dir = Path(settings.content_dir).as_posix()
    config_files = [Path(settings.config_path).as_posix(), Path(args.settings).as_posix()]
    git = GitSync(".", content_dir=content_dir, config_files=config_files)
    if args.action == "status":
        changes = git.status()
        print(
            f"{len(changes.added)} added, {len(changes.modified)} modified, "
            f"{len(changes.deleted)} deleted"
        )
        if not changes.empty:
            print(f"Suggested message: {suggest_commit_message(changes.paths, content_dir)}")
    elif args.action == "commit":
        message = git.commit(args.message, scope=args.scope)
        print(f"Committed: {message}" if message else "Nothing to commit")
    elif args.action == "push":
        print(f"Pushed {git.push()}")
    else:
        print(f"Pulled {git.pull()}")
    return EXIT_OK


def cmd_structure_validate(args: argparse.Namespace, settings: PipelineSettings) -> int:
    config = _config(settings)
    report = StructureValidator(config, settings.content_dir, settings.config_path).validate()
    print_report(report)
    return report.exit_code


def cmd_structure_generate(args: argparse.Namespace, settings: PipelineSettings) -> int:
    generator = StructureGenerator(".", settings.content_dir, settings.config_path)
    result = generator.generate(args.what)
    for path in result.created:
        print(f"  created {path}")
    for path in result.skipped:
        print(f"  exists  {path}")
    print(f"\n{len(result.created)} created, {len(result.skipped)} already present")
    return EXIT_OK


def cmd_godojo_prepare(args: argparse.Namespace, settings: PipelineSettings) -> int:
    exporter = GodojoExporter(_config(settings), settings.build_dir, settings.export_dir)
    result = exporter.export()
    for warning in result.warnings:
        print(f"  warning: {warning}")
    print(
        f"\nExported {result.topics} topics ({result.exercises} exercises, "
        f"{result.code_examples} examples) to {result.output_dir}"
    )
    print(f"{result.file_count} files, {result.total_size} bytes, {result.checksum}")
    return EXIT_OK


def cmd_godojo_validate(args: argparse.Namespace, settings: PipelineSettings) -> int:
    validator = GodojoValidator(_config(settings), settings.content_dir, settings.export_dir)
    report = validator.validate()
    print_report(report)
    return report.exit_code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="godojo-content",
        description="Content pipeline for the Go tutorial corpus",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--settings", default="godojo.yaml", help="Pipeline settings file")
    parser.add_argument("--config", help="Content configuration (content.config.json)")
    parser.add_argument("--content-dir", help="Content directory")
    parser.add_argument("--build-dir", help="Build output directory")
    parser.add_argument("--export-dir", help="Export directory")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Warnings only")

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    def command(name: str, handler: Handler) -> argparse.ArgumentParser:
        command_parser = sub.add_parser(name, help=COMMANDS[name], description=COMMANDS[name])
        command_parser.set_defaults(handler=handler)
        return command_parser

    init = command("init", cmd_init)
    init.add_argument("--name", required=True)
    init.add_argument("--email", required=True)
    init.add_argument("--language", default="ru", choices=["ru", "en"])
    init.add_argument(
        "--focus", default="all", choices=["beginner", "intermediate", "advanced", "all"]
    )
    init.add_argument(
        "--experience",
        default="intermediate",
        choices=["beginner", "intermediate", "advanced", "expert"],
    )
    init.add_argument("--force", action="store_true", help="Replace an existing profile")

    new = command("new", cmd_new)
    new.add_argument("--category", required=True, help="Category slug")
    new.add_argument("--title", help="Title (required for topics)")
    new.add_argument("--description", default="")
    new.add_argument("--slug", help="Topic slug (derived from the title if omitted)")
    new.add_argument("--kind", default="topic", choices=["topic", "category"])

    command("validate", cmd_validate)
    command("stats", cmd_stats)
    command("help", cmd_help)
    command("check", cmd_check)

    fmt = command("format", cmd_format)
    fmt.add_argument("--check", action="store_true", help="Report files that would change")

    command("build", cmd_build)

    sync = command("sync", cmd_sync)
    sync.add_argument("action", choices=["status", "commit", "push", "pull"])
    sync.add_argument("-m", "--message", help="Commit message")
    sync.add_argument("--scope", default="content", choices=list(SCOPES))

    command("structure:validate", cmd_structure_validate)
    generate = command("structure:generate", cmd_structure_generate)
    generate.add_argument("--what", default="all", choices=list(TARGETS))

    command("godojo:prepare", cmd_godojo_prepare)
    command("godojo:validate", cmd_godojo_validate)
    return parser


def _apply_overrides(settings: PipelineSettings, args: argparse.Namespace) -> PipelineSettings:
    overrides = {
        "config_path": args.config,
        "content_dir": args.content_dir,
        "build_dir": args.build_dir,
        "export_dir": args.export_dir,
    }
    return settings.model_copy(update={k: v for k, v in overrides.items() if v})


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run one command and return its exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = _apply_overrides(load_settings(args.settings), args)

    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.command == "new" and args.kind == "topic" and not args.title:
        parser.error("new: --title is required for topics")

    try:
        return args.handler(args, settings)
    except ConfigSchemaInvalid as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_FATAL
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_FATAL
    except ContentPipelineError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FATAL
