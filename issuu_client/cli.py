"""CLI entry point for issuu-client.

Runs one API call and prints the resulting envelope as JSON.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from issuu_client.client import IssuuApiClient
    from issuu_client.models import IssuuResponse, IssuuSettings


EXIT_OK = 0
EXIT_FAILED_CALL = 1
EXIT_USAGE = 2

SHARE_KINDS = ("reader", "fullscreen", "qrcode", "embed")
ASSET_TYPES = ("cover", "image", "text")


def positive_int(value: str) -> int:
    """Parse and validate a positive integer value.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        result = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid integer '{value}'.")
    if result <= 0:
        raise argparse.ArgumentTypeError(f"Value must be positive, got {result}.")
    return result


@dataclass
class GlobalArgs:
    """Options shared by every subcommand."""

    config: Path | None
    verbose: bool


@dataclass
class ListArgs(GlobalArgs):
    """Parsed arguments for list-drafts and list-publications."""

    group: str
    page: int | None
    size: int | None


@dataclass
class SlugArgs(GlobalArgs):
    """Parsed arguments for get-/delete- commands that only take a slug."""

    command: str
    slug: str


@dataclass
class PublishArgs(GlobalArgs):
    """Parsed arguments for publish-draft."""

    slug: str
    desired_name: str | None


@dataclass
class UploadArgs(GlobalArgs):
    """Parsed arguments for upload-draft."""

    slug: str
    file: Path
    confirm_copyright: bool


@dataclass
class AssetsArgs(GlobalArgs):
    """Parsed arguments for publication-assets."""

    slug: str
    asset_type: str
    document_page: int | None
    page: int | None
    size: int | None


@dataclass
class ShareArgs(GlobalArgs):
    """Parsed arguments for publication-share."""

    slug: str
    kind: str


ParsedArgs = ListArgs | SlugArgs | PublishArgs | UploadArgs | AssetsArgs | ShareArgs


def _add_paging(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--page", type=positive_int, default=None, help="Page to fetch (1-based)")
    parser.add_argument("--size", type=positive_int, default=None, help="Items per page")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per API call."""
    parser = argparse.ArgumentParser(
        prog="issuu-client",
        description="Call the Issuu API and print the response envelope as JSON.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML settings file (default: read ISSUU_* environment variables)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log requests and responses to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="API call")

    list_drafts_parser = subparsers.add_parser("list-drafts", help="List drafts")
    _add_paging(list_drafts_parser)

    list_pubs_parser = subparsers.add_parser("list-publications", help="List publications")
    _add_paging(list_pubs_parser)

    for name, help_text in (
        ("get-draft", "Get a draft"),
        ("delete-draft", "Delete a draft"),
        ("get-publication", "Get a publication"),
        ("delete-publication", "Delete a publication"),
    ):
        slug_parser = subparsers.add_parser(name, help=help_text)
        slug_parser.add_argument("slug", help="Document slug")

    publish_parser = subparsers.add_parser("publish-draft", help="Publish a draft")
    publish_parser.add_argument("slug", help="Draft slug")
    publish_parser.add_argument(
        "--desired-name",
        default=None,
        help="Preferred public name (slugified before sending)",
    )

    upload_parser = subparsers.add_parser("upload-draft", help="Upload document content to a draft")
    upload_parser.add_argument("slug", help="Draft slug")
    upload_parser.add_argument("--file", type=Path, required=True, help="Document to upload")
    upload_parser.add_argument(
        "--confirm-copyright",
        action="store_true",
        help="Confirm you hold the copyright for the document",
    )

    assets_parser = subparsers.add_parser("publication-assets", help="List publication assets")
    assets_parser.add_argument("slug", help="Publication slug")
    assets_parser.add_argument("--asset-type", choices=ASSET_TYPES, required=True, help="Asset kind")
    assets_parser.add_argument(
        "--document-page",
        type=positive_int,
        default=None,
        help="Only assets for this document page",
    )
    _add_paging(assets_parser)

    share_parser = subparsers.add_parser("publication-share", help="Get a share link for a publication")
    share_parser.add_argument("slug", help="Publication slug")
    share_parser.add_argument("--kind", choices=SHARE_KINDS, default="reader", help="Share kind")

    return parser


def parse_args(args: list[str] | None = None) -> ParsedArgs:
    """Parse command-line arguments and return a typed args dataclass.

    Raises:
        SystemExit: If arguments are invalid (argparse behavior).
    """
    parser = build_parser()
    namespace = parser.parse_args(args)
    common = {"config": namespace.config, "verbose": namespace.verbose}

    if namespace.command in ("list-drafts", "list-publications"):
        group = "drafts" if namespace.command == "list-drafts" else "publications"
        return ListArgs(**common, group=group, page=namespace.page, size=namespace.size)
    elif namespace.command in ("get-draft", "delete-draft", "get-publication", "delete-publication"):
        return SlugArgs(**common, command=namespace.command, slug=namespace.slug)
    elif namespace.command == "publish-draft":
        return PublishArgs(**common, slug=namespace.slug, desired_name=namespace.desired_name)
    elif namespace.command == "upload-draft":
        return UploadArgs(
            **common,
            slug=namespace.slug,
            file=namespace.file,
            confirm_copyright=namespace.confirm_copyright,
        )
    elif namespace.command == "publication-assets":
        return AssetsArgs(
            **common,
            slug=namespace.slug,
            asset_type=namespace.asset_type,
            document_page=namespace.document_page,
            page=namespace.page,
            size=namespace.size,
        )
    elif namespace.command == "publication-share":
        return ShareArgs(**common, slug=namespace.slug, kind=namespace.kind)
    else:
        # Should not happen with required=True on subparsers
        parser.error(f"Unknown command: {namespace.command}")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def load_cli_settings(config: Path | None) -> IssuuSettings:
    """Settings from --config if given, else from the environment.

    Raises:
        ConfigError: If settings cannot be loaded.
    """
    from issuu_client.config_loader import load_settings, settings_from_env

    if config is not None:
        return load_settings(config)
    return settings_from_env()


async def dispatch(api: IssuuApiClient, args: ParsedArgs) -> IssuuResponse[Any]:
    """Run the API call selected by args."""
    from issuu_client.primitives import AssetType

    if isinstance(args, ListArgs):
        if args.group == "drafts":
            return await api.drafts.get_drafts(page=args.page, size=args.size)
        return await api.publications.get_publications(page=args.page, size=args.size)

    if isinstance(args, SlugArgs):
        if args.command == "get-draft":
            return await api.drafts.get_draft(args.slug)
        if args.command == "delete-draft":
            return await api.drafts.delete_draft(args.slug)
        if args.command == "get-publication":
            return await api.publications.get_publication(args.slug)
        return await api.publications.delete_publication(args.slug)

    if isinstance(args, PublishArgs):
        return await api.drafts.publish_draft(args.slug, desired_name=args.desired_name)

    if isinstance(args, UploadArgs):
        return await api.drafts.upload_document_content(
            args.slug,
            file_path=args.file,
            confirm_copyright=args.confirm_copyright,
        )

    if isinstance(args, AssetsArgs):
        return await api.publications.get_publication_assets(
            args.slug,
            AssetType(args.asset_type),
            document_page_number=args.document_page,
            page=args.page,
            size=args.size,
        )

    if args.kind == "fullscreen":
        return await api.publications.get_publication_fullscreen_share(args.slug)
    if args.kind == "qrcode":
        return await api.publications.get_publication_qr_code(args.slug)
    if args.kind == "embed":
        return await api.publications.get_publication_embed(args.slug)
    return await api.publications.get_publication_reader_share(args.slug)


def format_response(response: IssuuResponse[Any]) -> str:
    """Render an envelope as indented JSON. Data uses the API's field names."""
    return json.dumps(
        response.model_dump(mode="json", by_alias=True, exclude_none=True),
        indent=2,
    )


async def run(args: ParsedArgs, settings: IssuuSettings) -> int:
    """Execute one call and print the envelope. Returns the exit code."""
    from issuu_client.client import create_api_client

    async with create_api_client(settings) as api:
        response = await dispatch(api, args)

    print(format_response(response))
    return EXIT_OK if response.is_success else EXIT_FAILED_CALL


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    from issuu_client.config_loader import ConfigError

    parsed = parse_args(argv)
    configure_logging(parsed.verbose)

    try:
        settings = load_cli_settings(parsed.config)
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        return asyncio.run(run(parsed, settings))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return EXIT_FAILED_CALL


if __name__ == "__main__":
    sys.exit(main())
