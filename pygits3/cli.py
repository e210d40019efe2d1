"""CLI interface for PyGitS3."""

import logging
from typing import Any, Optional

import click

from . import __version__
from .api import S3Client
from .cli_progress import SyncProgressDisplay
from .cloudfront import CloudFrontInvalidator
from .config import config
from .content_type import ContentTypeDetector
from .exceptions import GitS3Error
from .output import OutputFormatter
from .sync import (
    CompositeReporter,
    LoggingReporter,
    PathFilter,
    Reconciler,
    RemoteInventory,
    SyncResult,
    TreeWalker,
)
from .utils import format_size

logger = logging.getLogger(__name__)


def _resolve_acl(acl: Optional[str]) -> Optional[str]:
    """Resolve the --acl option against the configured default."""
    if acl is None:
        return config.acl
    if acl.lower() == "none":
        return None
    return acl


def _display_summary(out: OutputFormatter, result: SyncResult) -> None:
    """Display the outcome of a reconciliation pass.

    Args:
        out: Output formatter
        result: Result of the pass
    """
    if out.json_output:
        out.output_json(result.to_dict())
        return

    out.print("")
    if result.dry_run:
        out.success("Dry run complete!")
        for key in sorted(result.uploaded):
            out.info(f"  ↑ Would upload: {key}")
        for key in sorted(result.deleted):
            out.info(f"  ✗ Would delete: {key}")
    else:
        out.success("Sync complete!")

    stats = result.stats
    if result.total_actions > 0:
        out.info(f"Total actions: {result.total_actions}")
        if stats["uploads"] > 0:
            out.info(f"  Uploaded: {stats['uploads']}")
        if stats["deletes"] > 0:
            out.info(f"  Deleted: {stats['deletes']}")
    else:
        out.info("No changes needed - everything is in sync!")
    if stats["skips"] > 0:
        out.info(f"  Unchanged: {stats['skips']}")
    if result.invalidation_id:
        out.info(f"Invalidation: {result.invalidation_id}")


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """PyGitS3 - Mirror a git branch onto an S3 bucket."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pygits3").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    # botocore is very chatty at debug level
    for name in ("botocore", "boto3", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)


@main.command()
@click.option("--bucket", prompt="Target S3 bucket", help="Target S3 bucket")
@click.option(
    "--distribution",
    prompt="CloudFront distribution ID",
    help="CloudFront distribution ID",
)
@click.option(
    "--region",
    prompt="AWS region",
    default="",
    show_default=False,
    help="AWS region",
)
@click.pass_context
def init(ctx: Any, bucket: str, distribution: str, region: str) -> None:
    """Initialize PyGitS3 configuration.

    Stores the target bucket and distribution in ~/.config/pygits3/config.
    """
    out: OutputFormatter = ctx.obj["out"]

    try:
        config_path = config.save(
            bucket=bucket,
            distribution_id=distribution,
            region=region or None,
        )
    except OSError as e:
        out.error(f"Initialization failed: {e}")
        ctx.exit(1)
        return

    out.print_summary(
        "Initialization Complete",
        [
            ("Status", "✓ Configuration saved successfully"),
            ("Config file", str(config_path)),
            ("Bucket", bucket),
            ("Distribution", distribution),
        ],
    )


@main.command()
@click.argument(
    "repo",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    required=False,
)
@click.option(
    "--branch", "-b", default="master", show_default=True, help="Branch to mirror"
)
@click.option("--bucket", help="Target S3 bucket (default: PYGITS3_BUCKET)")
@click.option(
    "--distribution",
    "-d",
    help="CloudFront distribution ID (default: PYGITS3_DISTRIBUTION_ID)",
)
@click.option("--region", help="AWS region")
@click.option("--profile", help="AWS profile name")
@click.option("--endpoint-url", help="Endpoint URL for S3-compatible stores")
@click.option("--acl", help="Canned ACL for uploads ('none' to omit)")
@click.option(
    "--exclude",
    "-e",
    multiple=True,
    help="Reserved key prefix never touched (repeatable, default: .git, .ssh)",
)
@click.option("--workers", "-w", type=int, help="Number of parallel upload workers")
@click.option("--dry-run", is_flag=True, help="Show what would be done")
@click.option("--no-progress", is_flag=True, help="Disable the progress display")
@click.pass_context
def sync(
    ctx: Any,
    repo: str,
    branch: str,
    bucket: Optional[str],
    distribution: Optional[str],
    region: Optional[str],
    profile: Optional[str],
    endpoint_url: Optional[str],
    acl: Optional[str],
    exclude: tuple[str, ...],
    workers: Optional[int],
    dry_run: bool,
    no_progress: bool,
) -> None:
    """Mirror a branch of a git repository onto the S3 bucket.

    REPO: Path of the git repository (bare or with a working tree)

    Every regular file of the branch is uploaded unless the bucket already
    holds an object with the same MD5 checksum. Objects that are not part of
    the branch are deleted, except reserved prefixes (.git, .ssh). The
    CloudFront distribution is invalidated after every sync.

    Examples:
        pygits3 sync ./site.git -b main
        pygits3 sync . --bucket www.example.com -d E2ABCDEF123456
        pygits3 sync . --dry-run                     # Preview changes
        pygits3 sync . -w 8                          # Upload with 8 workers
    """
    out: OutputFormatter = ctx.obj["out"]

    if not bucket and not config.is_configured():
        out.error("No bucket configured. Run 'pygits3 init' or use --bucket.")
        ctx.exit(1)
        return

    try:
        client = S3Client(
            bucket=bucket, region=region, profile=profile, endpoint_url=endpoint_url
        )
        invalidator = CloudFrontInvalidator(
            distribution, region=region, profile=profile
        )
        walker = TreeWalker.from_path(repo, branch)
        path_filter = PathFilter(list(exclude) or config.excluded_prefixes)
        max_workers = workers if workers is not None else config.workers

        reconciler = Reconciler(
            client,
            walker,
            invalidator,
            detector=ContentTypeDetector(),
            path_filter=path_filter,
            acl=_resolve_acl(acl),
            max_workers=max_workers,
        )

        out.info(f"Syncing: {repo} ({branch}) -> {reconciler.uri}")
        out.info(f"Excluded prefixes: {', '.join(path_filter.prefixes) or '-'}")
        if dry_run:
            out.info("Dry run: No changes will be made")
        if max_workers > 1:
            out.info(f"Parallel workers: {max_workers}")

        if no_progress or dry_run or out.quiet or out.json_output:
            result = reconciler.reconcile(dry_run=dry_run)
        else:
            with SyncProgressDisplay() as display:
                reconciler.reporter = CompositeReporter(LoggingReporter(), display)
                result = reconciler.reconcile(dry_run=dry_run)

    except GitS3Error as e:
        out.error(str(e))
        ctx.exit(1)
        return
    except KeyboardInterrupt:
        out.warning("\nSync cancelled by user")
        ctx.exit(130)
        return

    _display_summary(out, result)


@main.command("ls")
@click.option("--bucket", help="S3 bucket (default: PYGITS3_BUCKET)")
@click.option("--region", help="AWS region")
@click.option("--profile", help="AWS profile name")
@click.option("--endpoint-url", help="Endpoint URL for S3-compatible stores")
@click.option(
    "--all", "show_all", is_flag=True, help="Include reserved keys (.git, .ssh)"
)
@click.pass_context
def ls(
    ctx: Any,
    bucket: Optional[str],
    region: Optional[str],
    profile: Optional[str],
    endpoint_url: Optional[str],
    show_all: bool,
) -> None:
    """List the objects of the bucket as seen by the sync."""
    out: OutputFormatter = ctx.obj["out"]

    if not bucket and not config.is_configured():
        out.error("No bucket configured. Run 'pygits3 init' or use --bucket.")
        ctx.exit(1)
        return

    try:
        client = S3Client(
            bucket=bucket, region=region, profile=profile, endpoint_url=endpoint_url
        )
        path_filter = PathFilter([] if show_all else config.excluded_prefixes)
        inventory = RemoteInventory.load(client, path_filter)
    except GitS3Error as e:
        out.error(str(e))
        ctx.exit(1)
        return

    # Nothing has been claimed, so the residue is the complete listing
    entries = inventory.residue()

    if out.json_output:
        out.output_json(
            [
                {"key": e.key, "fingerprint": e.fingerprint, "size": e.size}
                for e in entries
            ]
        )
        return

    if not entries:
        out.warning("No files found")
        return

    for entry in entries:
        size = format_size(entry.size)
        out.print(f"{entry.fingerprint:<34} {size:>10}  {entry.key}")

    if inventory.excluded_count:
        out.info(f"\n{inventory.excluded_count} reserved key(s) hidden (use --all)")


@main.command()
@click.argument("key")
@click.option("--bucket", help="S3 bucket (default: PYGITS3_BUCKET)")
@click.option("--region", help="AWS region")
@click.option("--profile", help="AWS profile name")
@click.option("--endpoint-url", help="Endpoint URL for S3-compatible stores")
@click.pass_context
def stat(
    ctx: Any,
    key: str,
    bucket: Optional[str],
    region: Optional[str],
    profile: Optional[str],
    endpoint_url: Optional[str],
) -> None:
    """Show the metadata of a single object.

    KEY: Object key (e.g. index.html)
    """
    out: OutputFormatter = ctx.obj["out"]

    if not bucket and not config.is_configured():
        out.error("No bucket configured. Run 'pygits3 init' or use --bucket.")
        ctx.exit(1)
        return

    try:
        client = S3Client(
            bucket=bucket, region=region, profile=profile, endpoint_url=endpoint_url
        )
        info = client.head_object(key)
    except GitS3Error as e:
        out.error(str(e))
        ctx.exit(1)
        return

    out.print_summary(
        f"{client.uri}/{key}",
        [
            ("Fingerprint", info.fingerprint),
            ("Size", format_size(info.size)),
            ("Content type", info.content_type or "-"),
            ("Last modified", str(info.last_modified or "-")),
        ],
    )


@main.command()
@click.option(
    "--distribution",
    "-d",
    help="CloudFront distribution ID (default: PYGITS3_DISTRIBUTION_ID)",
)
@click.option("--region", help="AWS region")
@click.option("--profile", help="AWS profile name")
@click.pass_context
def invalidate(
    ctx: Any,
    distribution: Optional[str],
    region: Optional[str],
    profile: Optional[str],
) -> None:
    """Invalidate all cached paths of the CloudFront distribution."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        invalidator = CloudFrontInvalidator(
            distribution, region=region, profile=profile
        )
        invalidation_id = invalidator.invalidate()
    except GitS3Error as e:
        out.error(str(e))
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(
            {
                "distribution_id": invalidator.distribution_id,
                "invalidation_id": invalidation_id,
            }
        )
        return
    out.success(
        f"✓ Invalidation {invalidation_id} created for {invalidator.distribution_id}"
    )


if __name__ == "__main__":
    main()
