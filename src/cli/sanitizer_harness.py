# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command-line harness for sanitizing and restoring source code."""

import argparse
import dataclasses
import json
import logging
import os
import shutil
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import pathspec
from rich.console import Console
from rich.logging import RichHandler

from sanitizer import (
    CodeSanitizer,
    InvalidMappingFormatError,
    RestoreMode,
    SanitizeOptions,
    SanitizeResult,
    SourceUnit,
    render_prompt,
    restore_from_response,
    restore_with_map,
)
from sanitizer.assist_client import AssistClient, AssistError
from sanitizer.syntax import SanitizerError, language_for_suffix

logger = logging.getLogger(__name__)

MAP_SUFFIX = ".map.json"


@dataclass(frozen=True)
class CopySummary:
    """Represent copy phase counters."""

    files_copied: int
    dirs_created: int
    paths_skipped_by_gitignore: int
    paths_skipped_git_dir: int
    elapsed_ms: int


@dataclass(frozen=True)
class SanitizeDirSummary:
    """Represent sanitize phase counters."""

    files_discovered: int
    files_sanitized: int
    files_skipped: int
    identifiers_renamed: int
    strings_masked: int
    comments_masked: int
    elapsed_ms: int


class ValidationError(RuntimeError):
    """Represent user input validation failure."""


class IgnoreMatcher:
    """Match project paths against .gitignore patterns."""

    def __init__(self, spec: pathspec.GitIgnoreSpec) -> None:
        """Initialize matcher.

        Args:
            spec: Compiled gitignore matcher.
        """
        self._spec = spec

    @classmethod
    def from_project_root(cls, input_root: Path) -> "IgnoreMatcher":
        """Build matcher from root and nested .gitignore files.

        Args:
            input_root: Project root.

        Returns:
            Configured ignore matcher; matches nothing without .gitignore files.

        Raises:
            OSError: If .gitignore files cannot be read.
            UnicodeDecodeError: If .gitignore files contain invalid UTF-8.
        """
        patterns: list[str] = []
        for ignore_path in sorted(input_root.rglob(".gitignore")):
            base = ignore_path.parent.relative_to(input_root).as_posix()
            if base == ".":
                base = ""
            for line in ignore_path.read_text(encoding="utf-8").splitlines():
                patterns.append(_translate_gitignore_line(line=line, base=base))
        return cls(spec=pathspec.GitIgnoreSpec.from_lines(patterns))

    def matches(self, relative_path: str, is_dir: bool) -> bool:
        """Check whether a path should be ignored.

        Args:
            relative_path: Project-relative POSIX path.
            is_dir: Whether the path is a directory.

        Returns:
            True when path should be ignored.
        """
        normalized = relative_path.replace(os.sep, "/").strip("/")
        if not normalized:
            return False
        if self._spec.match_file(normalized):
            return True
        return is_dir and self._spec.match_file(f"{normalized}/")


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _add_sanitize_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--options", required=False, help="JSON file with sanitize options."
    )
    parser.add_argument(
        "--no-vars", dest="mask_vars", action="store_false", default=None,
        help="Do not mask variable definitions.",
    )
    parser.add_argument(
        "--no-funcs", dest="mask_funcs", action="store_false", default=None,
        help="Do not mask function definitions.",
    )
    parser.add_argument(
        "--no-classes", dest="mask_classes", action="store_false", default=None,
        help="Do not mask class and type definitions.",
    )
    parser.add_argument(
        "--mask-strings", dest="mask_strings", action="store_true", default=None,
        help="Replace string literals with tags.",
    )
    parser.add_argument(
        "--remove-comments", dest="remove_comments", action="store_true", default=None,
        help="Replace comment contents with tags.",
    )
    parser.add_argument(
        "--whitelist", required=False, help="Comma-separated names never masked."
    )
    parser.add_argument(
        "--whitelist-mode",
        choices=("append", "overwrite"),
        default=None,
        help="Append the whitelist to the defaults or replace them.",
    )
    parser.add_argument(
        "--min-name-length", type=int, default=None,
        help="Shortest name eligible for masking.",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="code-sanitizer")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sanitize_parser = subparsers.add_parser("sanitize")
    sanitize_parser.add_argument("--input", required=True, help="Source file path.")
    sanitize_parser.add_argument(
        "--language", required=False, help="Language id; inferred from suffix."
    )
    sanitize_parser.add_argument(
        "--format",
        choices=("text", "json", "prompt"),
        default="text",
        help="Output format.",
    )
    sanitize_parser.add_argument(
        "--output", required=False, help="Output file path; stdout when omitted."
    )
    sanitize_parser.add_argument(
        "--map", required=False, help="Mapping JSON output path (text format)."
    )
    _add_sanitize_options(sanitize_parser)

    restore_parser = subparsers.add_parser("restore")
    restore_parser.add_argument("--input", required=True, help="Sanitized file path.")
    restore_parser.add_argument(
        "--map",
        required=False,
        help="Mapping JSON path; read from the input's map table when omitted.",
    )
    restore_parser.add_argument(
        "--language", required=False, help="Language id; inferred from suffix."
    )
    restore_parser.add_argument(
        "--mode",
        choices=tuple(mode.value for mode in RestoreMode),
        default=RestoreMode.TAGS.value,
        help="Restoration strategy.",
    )
    restore_parser.add_argument(
        "--output", required=False, help="Output file path; stdout when omitted."
    )

    dir_parser = subparsers.add_parser("sanitize-dir")
    dir_parser.add_argument("--input", required=True, help="Input project path.")
    dir_parser.add_argument("--output", required=True, help="Output folder path.")
    dir_parser.add_argument(
        "--map-dir",
        required=True,
        help="Folder for mapping files; must be outside the output folder.",
    )
    _add_sanitize_options(dir_parser)

    assist_parser = subparsers.add_parser("assist")
    assist_parser.add_argument("--input", required=True, help="Source file path.")
    assist_parser.add_argument(
        "--language", required=False, help="Language id; inferred from suffix."
    )
    assist_parser.add_argument(
        "--provider", choices=("ollama", "openai"), default="ollama",
        help="Assistant provider.",
    )
    assist_parser.add_argument(
        "--provider-url", required=True, help="Provider API endpoint URL."
    )
    assist_parser.add_argument("--model", required=True, help="Provider model name.")
    assist_parser.add_argument(
        "--output", required=False, help="Output file path; stdout when omitted."
    )
    _add_sanitize_options(assist_parser)
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 2

    try:
        if args.command == "sanitize":
            return _run_sanitize(args=args, stdout=stdout, stderr=stderr)
        if args.command == "restore":
            return _run_restore(args=args, stdout=stdout, stderr=stderr)
        if args.command == "sanitize-dir":
            return _run_sanitize_dir(args=args, stdout=stdout, stderr=stderr)
        if args.command == "assist":
            return _run_assist(args=args, stdout=stdout, stderr=stderr)
    except ValidationError as exc:
        logger.warning(f"Validation failed (error={exc})")
        stderr.write(f"{exc}\n")
        return 2

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return 2


def _run_sanitize(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run sanitize command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    input_path = Path(args.input)
    language_id = _resolve_language(args.language, input_path)
    options = options_from_args(args)
    if args.format == "text" and not args.map:
        raise ValidationError("--map is required with --format text")

    unit = SourceUnit(text=_read_text(input_path), language_id=language_id)
    result = CodeSanitizer().sanitize_unit(unit, options)
    if result.skipped_reason is not None:
        stderr.write(f"sanitize_skipped: {result.skipped_reason}\n")

    if args.format == "json":
        payload = json.dumps(_result_payload(result), indent=2, ensure_ascii=False)
        _write_output(payload, args.output, stdout)
    elif args.format == "prompt":
        _write_output(render_prompt(result, language_id), args.output, stdout)
    else:
        _write_text(Path(args.map), _mapping_json(result.mapping))
        _write_output(result.sanitized, args.output, stdout)
    return 0


def _run_restore(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run restore command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    input_path = Path(args.input)
    text = _read_text(input_path)
    language_id = args.language or language_for_suffix(input_path.suffix)
    try:
        if args.map:
            restored = restore_with_map(
                text,
                _read_text(Path(args.map)),
                language_id=language_id,
                mode=args.mode,
            )
        else:
            restored = restore_from_response(
                text, language_id=language_id, mode=args.mode
            )
    except InvalidMappingFormatError as exc:
        logger.warning(f"Invalid mapping (error={exc})")
        stderr.write(f"Invalid mapping: {exc}\n")
        return 2
    except (SanitizerError, ValueError) as exc:
        logger.warning(f"Restore failed (error={exc})")
        stderr.write(f"Restore failed: {exc}\n")
        return 2
    _write_output(restored, args.output, stdout)
    return 0


def _run_sanitize_dir(
    args: argparse.Namespace, stdout: TextIO, stderr: TextIO
) -> int:
    """Run sanitize-dir command.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    options = options_from_args(args)
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    _emit_marker(console=console, phase="validation", state="start")
    input_path, output_path, map_path = _validate_paths(
        input_path=Path(args.input),
        output_path=Path(args.output),
        map_path=Path(args.map_dir),
    )
    _emit_marker(console=console, phase="validation", state="done")

    try:
        matcher = IgnoreMatcher.from_project_root(input_root=input_path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Failed to read .gitignore files (error={exc})")
        stderr.write(f"Failed to read .gitignore files: {exc}\n")
        return 2

    _emit_marker(console=console, phase="copy", state="start")
    try:
        copy_summary = _copy_project(
            input_root=input_path, output_root=output_path, matcher=matcher
        )
    except OSError as exc:
        logger.warning(f"Copy failed (error={exc})")
        stderr.write(f"Copy failed: {exc}\n")
        return 2
    _emit_marker(console=console, phase="copy", state="done")
    _emit_summary(console=console, summary=dataclasses.asdict(copy_summary))

    _emit_marker(console=console, phase="sanitize", state="start")
    try:
        sanitize_summary = _sanitize_tree(
            output_root=output_path,
            map_root=map_path,
            options=options,
            stderr=stderr,
        )
    except OSError as exc:
        logger.warning(f"Sanitize failed (error={exc})")
        stderr.write(f"Sanitize failed: {exc}\n")
        return 2
    _emit_marker(console=console, phase="sanitize", state="done")
    _emit_summary(console=console, summary=dataclasses.asdict(sanitize_summary))
    console.print("status=success", highlight=False)
    return 0


def _run_assist(args: argparse.Namespace, stdout: TextIO, stderr: TextIO) -> int:
    """Run assist command: sanitize, ask the provider, restore the reply.

    Args:
        args: Parsed CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    input_path = Path(args.input)
    language_id = _resolve_language(args.language, input_path)
    options = options_from_args(args)
    result = CodeSanitizer().sanitize(_read_text(input_path), language_id, options)
    if result.skipped_reason is not None:
        logger.warning(
            f"Refusing to send unsanitized code (reason={result.skipped_reason})"
        )
        stderr.write(f"Sanitize skipped, nothing sent: {result.skipped_reason}\n")
        return 2

    prompt = render_prompt(result, language_id, include_mapping=False)
    try:
        client = build_assist_client(
            provider=args.provider, provider_url=args.provider_url, model=args.model
        )
        response = client.complete(prompt)
        restored = restore_from_response(
            response, fallback_mapping=result.mapping, language_id=language_id
        )
    except AssistError as exc:
        stderr.write(f"Assistant request failed: {exc}\n")
        return 2
    except InvalidMappingFormatError as exc:
        stderr.write(f"Invalid mapping in response: {exc}\n")
        return 2
    _write_output(restored, args.output, stdout)
    return 0


def options_from_args(args: argparse.Namespace) -> SanitizeOptions:
    """Merge the options file with explicit flags.

    Args:
        args: Parsed CLI arguments.

    Returns:
        Sanitize options.

    Raises:
        ValidationError: If the options file or a flag value is invalid.
    """
    try:
        options = SanitizeOptions()
        if args.options:
            loaded = json.loads(_read_text(Path(args.options)))
            if not isinstance(loaded, dict):
                raise ValueError("options file must contain a JSON object")
            options = SanitizeOptions.from_mapping(loaded)
        overrides: dict[str, object] = {
            name: getattr(args, name)
            for name in (
                "mask_vars",
                "mask_funcs",
                "mask_classes",
                "mask_strings",
                "remove_comments",
                "whitelist_mode",
                "min_name_length",
            )
            if getattr(args, name) is not None
        }
        if args.whitelist:
            overrides["whitelist"] = tuple(
                name.strip() for name in args.whitelist.split(",") if name.strip()
            )
        return dataclasses.replace(options, **overrides)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ValidationError(f"Invalid sanitize options: {exc}") from exc


def build_assist_client(provider: str, provider_url: str, model: str) -> AssistClient:
    """Create the configured assistant client.

    Args:
        provider: Provider name, ``ollama`` or ``openai``.
        provider_url: Provider endpoint URL.
        model: Model name.

    Returns:
        Configured assistant client.
    """
    from sanitizer.llm import OllamaClient, OpenAIClient

    if provider == "openai":
        return OpenAIClient(provider_url=provider_url, model=model)
    return OllamaClient(provider_url=provider_url, model=model)


def _resolve_language(language: str | None, input_path: Path) -> str:
    resolved = language or language_for_suffix(input_path.suffix)
    if resolved is None:
        raise ValidationError(
            f"Cannot infer language from suffix, pass --language: {input_path}"
        )
    return resolved


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ValidationError(f"Cannot read file: {path} ({exc})") from exc


def _write_text(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ValidationError(f"Cannot write file: {path} ({exc})") from exc


def _write_output(content: str, output: str | None, stdout: TextIO) -> None:
    if output:
        _write_text(Path(output), content)
        return
    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    console.print(content, markup=False, highlight=False, emoji=False, soft_wrap=True)


def _mapping_json(mapping: dict[str, str]) -> str:
    return json.dumps(mapping, indent=2, ensure_ascii=False)


def _result_payload(result: SanitizeResult) -> dict[str, object]:
    return {
        "sanitized": result.sanitized,
        "mapping": result.mapping,
        "language_id": result.language_id,
        "identifiers_renamed": result.identifiers_renamed,
        "strings_masked": result.strings_masked,
        "comments_masked": result.comments_masked,
        "skipped_reason": result.skipped_reason,
    }


def _emit_marker(console: Console, phase: str, state: str) -> None:
    console.print(f"{phase}:{state}", highlight=False)


def _emit_summary(console: Console, summary: dict[str, int]) -> None:
    fields = " ".join(f"{key}={value}" for key, value in summary.items())
    console.print(fields, highlight=False, soft_wrap=True)


def _validate_paths(
    input_path: Path, output_path: Path, map_path: Path
) -> tuple[Path, Path, Path]:
    """Validate required input, output and map folder constraints.

    Args:
        input_path: Input path from user args.
        output_path: Output path from user args.
        map_path: Mapping folder path from user args.

    Returns:
        Normalized absolute input, output and map paths.

    Raises:
        ValidationError: If path constraints are not met.
    """
    input_abs = input_path.resolve()
    output_abs = output_path.resolve()
    map_abs = map_path.resolve()

    if not input_abs.exists():
        raise ValidationError(f"Input path does not exist: {input_abs}")
    if not input_abs.is_dir():
        raise ValidationError(f"Input path must be a directory: {input_abs}")
    if output_abs.exists() and output_abs.is_dir() and any(output_abs.iterdir()):
        raise ValidationError(f"Output path must be empty: {output_abs}")
    if map_abs.exists() and map_abs.is_dir() and any(map_abs.iterdir()):
        raise ValidationError(f"Map path must be empty: {map_abs}")
    if _overlaps(input_abs, output_abs):
        raise ValidationError("Input and output paths must not overlap")
    if _overlaps(map_abs, output_abs):
        raise ValidationError("Map path must be outside the output path")
    if _overlaps(map_abs, input_abs):
        raise ValidationError("Map path must be outside the input path")
    return input_abs, output_abs, map_abs


def _overlaps(first: Path, second: Path) -> bool:
    return first == second or first in second.parents or second in first.parents


def _copy_project(
    input_root: Path, output_root: Path, matcher: IgnoreMatcher
) -> CopySummary:
    """Copy project tree while applying ignore rules.

    Args:
        input_root: Source project root.
        output_root: Target project root.
        matcher: Ignore matcher instance.

    Returns:
        Copy summary counters.
    """
    started = time.monotonic()
    output_root.mkdir(parents=True, exist_ok=True)
    files_copied = 0
    dirs_created = 0
    skipped_by_gitignore = 0
    skipped_git_dir = 0
    queue: list[Path] = [input_root]

    while queue:
        current = queue.pop(0)
        for child in sorted(current.iterdir(), key=lambda item: item.name):
            relative_child = child.relative_to(input_root)
            if child.name == ".git" and child.is_dir():
                skipped_git_dir += 1
                continue
            if matcher.matches(
                relative_path=relative_child.as_posix(), is_dir=child.is_dir()
            ):
                skipped_by_gitignore += 1
                continue

            destination = output_root / relative_child
            if child.is_symlink():
                continue
            if child.is_dir():
                queue.append(child)
                if not destination.exists():
                    destination.mkdir(parents=True, exist_ok=True)
                    dirs_created += 1
                continue

            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(child, destination)
            files_copied += 1

    elapsed_ms = int(round((time.monotonic() - started) * 1000))
    return CopySummary(
        files_copied=files_copied,
        dirs_created=dirs_created,
        paths_skipped_by_gitignore=skipped_by_gitignore,
        paths_skipped_git_dir=skipped_git_dir,
        elapsed_ms=elapsed_ms,
    )


def _sanitize_tree(
    output_root: Path, map_root: Path, options: SanitizeOptions, stderr: TextIO
) -> SanitizeDirSummary:
    """Sanitize every supported file of a copied tree in place.

    Each file gets its own mapping table, written under the map root as
    ``<relative path>.map.json``. Files that cannot be sanitized are removed
    from the output tree and reported on stderr.

    Args:
        output_root: Output project root.
        map_root: Folder receiving mapping files, outside the output root.
        options: Sanitize options.
        stderr: Standard error stream.

    Returns:
        Sanitize summary counters.

    Raises:
        OSError: If a file cannot be read, written or removed.
    """
    started = time.monotonic()
    sanitizer = CodeSanitizer(default_options=options)
    files: list[tuple[Path, str]] = []
    for path in sorted(output_root.rglob("*")):
        language_id = language_for_suffix(path.suffix)
        if language_id is not None and path.is_file():
            files.append((path, language_id))
    sanitized_count = 0
    skipped = 0
    identifiers_renamed = 0
    strings_masked = 0
    comments_masked = 0

    for file_path, language_id in files:
        relative_path = file_path.relative_to(output_root).as_posix()
        try:
            source = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            _drop_unsanitized(file_path, relative_path, f"undecodable: {exc}", stderr)
            skipped += 1
            continue
        result = sanitizer.sanitize(source, language_id)
        if result.skipped_reason is not None:
            _drop_unsanitized(file_path, relative_path, result.skipped_reason, stderr)
            skipped += 1
            continue
        identifiers_renamed += result.identifiers_renamed
        strings_masked += result.strings_masked
        comments_masked += result.comments_masked

        tmp_path = file_path.with_suffix(f"{file_path.suffix}.tmp")
        tmp_path.write_text(result.sanitized, encoding="utf-8")
        tmp_path.replace(file_path)
        map_path = map_root / f"{relative_path}{MAP_SUFFIX}"
        map_path.parent.mkdir(parents=True, exist_ok=True)
        map_path.write_text(_mapping_json(result.mapping), encoding="utf-8")
        sanitized_count += 1

    elapsed_ms = int(round((time.monotonic() - started) * 1000))
    return SanitizeDirSummary(
        files_discovered=len(files),
        files_sanitized=sanitized_count,
        files_skipped=skipped,
        identifiers_renamed=identifiers_renamed,
        strings_masked=strings_masked,
        comments_masked=comments_masked,
        elapsed_ms=elapsed_ms,
    )


def _drop_unsanitized(
    file_path: Path, relative_path: str, reason: str, stderr: TextIO
) -> None:
    """Remove a file that could not be sanitized from the output tree."""
    logger.warning(f"Removing unsanitized file (path={relative_path} reason={reason})")
    file_path.unlink()
    stderr.write(f"sanitize_skipped: {relative_path} ({reason})\n")


def _translate_gitignore_line(line: str, base: str) -> str:
    """Translate one .gitignore line to root-relative pattern.

    Args:
        line: Original .gitignore line.
        base: Parent directory relative to project root.

    Returns:
        Root-relative pattern line.
    """
    if not base or not line:
        return line
    if line.lstrip().startswith("#"):
        return line
    if line.startswith(r"\!") or line.startswith(r"\#"):
        return line
    is_negation = line.startswith("!")
    pattern = line[1:] if is_negation else line
    anchored = pattern.startswith("/")
    normalized_pattern = pattern[1:] if anchored else pattern
    prefixed = f"{base}/{normalized_pattern}" if normalized_pattern else base
    if anchored:
        prefixed = f"/{prefixed}"
    if is_negation:
        return f"!{prefixed}"
    return prefixed


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
