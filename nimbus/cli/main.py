"""CLI entrypoint for nimbus."""
import argparse
import asyncio
import logging
import shutil
import sys
from pathlib import Path

from .. import __version__
from .validators import parse_header, validate_bucket_name, validate_secret_name, validate_secret_value

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def cmd_version(args):
    """Show version information."""
    print(f"nimbus {__version__}")


def cmd_config_set_path(args):
    """Set config file path preference."""
    from nimbus.domains.preferences import CONFIG_PATH_KEY, set_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        print(f"Error: Config file does not exist: {config_path}", file=sys.stderr)
        sys.exit(1)

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_path}", file=sys.stderr)
        sys.exit(1)

    set_preference(CONFIG_PATH_KEY, str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_show(args):
    """Show current config file path."""
    from nimbus.domains.config_loader import default_config_path
    from nimbus.domains.preferences import CONFIG_PATH_KEY, get_preference

    config_path_pref = get_preference(CONFIG_PATH_KEY)

    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            print(f"Config path: {config_path}")
        else:
            print(f"Config path (from preference, but file not found): {config_path}")
        print("Source: preference")
        return

    default_config = default_config_path()
    print(f"Config path: {default_config}")
    if default_config.exists():
        print("Source: default")
    else:
        print("Source: default (file not found)")


def cmd_config_clear(args):
    """Clear config path preference."""
    from nimbus.domains.config_loader import default_config_path
    from nimbus.domains.preferences import CONFIG_PATH_KEY, clear_preference

    clear_preference(CONFIG_PATH_KEY)
    print(f"Config path preference cleared. Will use default: {default_config_path()}")


def cmd_config_init(args):
    """Interactive config setup."""
    from nimbus.domains.config_loader import default_config_path
    from nimbus.domains.preferences import CONFIG_PATH_KEY, set_preference

    default_config = default_config_path()

    print("=== nimbus Configuration Setup ===\n")
    print(f"Default config location: {default_config}\n")

    if default_config.exists():
        print(f"Configuration file already exists at: {default_config}")
        response = input("Do you want to use a different config file? (y/N): ").strip().lower()
        if response != 'y':
            print(f"\nUsing existing config at: {default_config}")
            return

    print("Choose an option:")
    print("1. Copy an existing config file to default location")
    print("2. Point to an existing config file at a different location")
    print("3. Cancel (manually create config file later)")

    choice = input("\nEnter choice (1-3): ").strip()

    if choice == "1":
        source = Path(input("Enter path to existing config file: ").strip()).expanduser().resolve()
        if not source.exists():
            print(f"Error: File not found: {source}", file=sys.stderr)
            sys.exit(1)

        default_config.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, default_config)
        print(f"\nConfig copied to: {default_config}")

    elif choice == "2":
        config_file = Path(input("Enter path to config file: ").strip()).expanduser().resolve()
        if not config_file.exists():
            print(f"Error: File not found: {config_file}", file=sys.stderr)
            sys.exit(1)

        set_preference(CONFIG_PATH_KEY, str(config_file))
        print(f"\nConfig path set to: {config_file}")

    elif choice == "3":
        print("\nSetup cancelled.")
        print(f"Create your config file at: {default_config}")
        print("Or use: nimbus config set-path <path>")

    else:
        print("Invalid choice.", file=sys.stderr)
        sys.exit(2)


def cmd_secrets_get(args):
    """Get a secret from GCP Secret Manager."""
    from nimbus.workflows.cloud_operations import fetch_secret

    validate_secret_name(args.secret_name)
    secret_value = asyncio.run(fetch_secret(args.secret_name, args.project_id, args.version))

    if args.quiet:
        # Raw payload, no trailing newline
        sys.stdout.buffer.write(secret_value)
        sys.stdout.flush()
    else:
        print(f"Secret '{args.secret_name}': {secret_value.decode('UTF-8', errors='replace')}")


def cmd_secrets_create(args):
    """Create a secret in GCP Secret Manager."""
    from nimbus.workflows.cloud_operations import store_secret

    validate_secret_name(args.secret_name)
    validate_secret_value(args.secret_value)
    asyncio.run(store_secret(args.secret_name, args.secret_value, args.project_id))
    print(f"Secret '{args.secret_name}' created")


def cmd_storage_upload(args):
    """Upload a local file to Cloud Storage."""
    from nimbus.workflows.cloud_operations import upload_object

    validate_bucket_name(args.bucket)
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)

    asyncio.run(upload_object(args.bucket, args.key, path, args.content_type))
    print(f"Uploaded {path} to gs://{args.bucket}/{args.key}")


def cmd_storage_download(args):
    """Download an object from Cloud Storage."""
    from nimbus.workflows.cloud_operations import download_object, download_object_to

    validate_bucket_name(args.bucket)
    if args.dest is None:
        data = asyncio.run(download_object(args.bucket, args.key))
        sys.stdout.buffer.write(data)
        sys.stdout.flush()
        return

    path = asyncio.run(download_object_to(args.bucket, args.key, Path(args.dest)))
    print(f"Downloaded gs://{args.bucket}/{args.key} to {path}")


def cmd_storage_delete(args):
    """Delete an object from Cloud Storage."""
    from nimbus.workflows.cloud_operations import delete_object

    validate_bucket_name(args.bucket)
    asyncio.run(delete_object(args.bucket, args.key))
    print(f"Deleted gs://{args.bucket}/{args.key}")


def cmd_tasks_push(args):
    """Push an HTTP task to a Cloud Tasks queue."""
    from nimbus.workflows.cloud_operations import push_http_task

    headers = dict(parse_header(h) for h in args.header) if args.header else None
    body = args.body.encode("UTF-8") if args.body is not None else None

    response, _task = asyncio.run(push_http_task(
        args.queue,
        args.url,
        args.method,
        body=body,
        headers=headers,
        project_id=args.project_id,
        location=args.location,
    ))
    print(f"Task created: {response.name}")


def build_parser():
    """Build the argument parser.

    Returns:
        (parser, group_parsers): the root parser and the parsers of the
        command groups, keyed by group name, for printing group help
    """
    parser = argparse.ArgumentParser(
        prog="nimbus",
        description="nimbus CLI - helpers for GCP Secret Manager, Cloud Storage and Cloud Tasks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (authentication, network, not found, etc.)
  2 - Usage error (invalid arguments, invalid secret or bucket name, etc.)

Environment variables:
  GCP_PROJECT  - GCP project ID (overrides config file)
  GCP_LOCATION - Cloud Tasks location (overrides config file)

Configuration:
  Default location: ~/.config/nimbus/config.yml
  Custom path: Set with 'nimbus config set-path <path>'
        """
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging on stderr"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("version", help="Show version information")

    # config
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="Store the absolute path to your config file in ~/.config/nimbus/preferences.json"
    )
    config_set_path_parser.add_argument("path", help="Path to config file")
    config_subparsers.add_parser("show", help="Show current config path")
    config_subparsers.add_parser("clear", help="Clear config path preference")
    config_subparsers.add_parser("init", help="Interactive config setup")

    # secrets
    secrets_parser = subparsers.add_parser("secrets", help="Secret Manager operations")
    secrets_subparsers = secrets_parser.add_subparsers(dest="secrets_command")

    get_parser = secrets_subparsers.add_parser(
        "get",
        help="Get a secret value",
        description="Fetch a secret version from GCP Secret Manager and print it."
    )
    get_parser.add_argument(
        "secret_name",
        help="Name of the secret (format: [a-zA-Z0-9_-]+)"
    )
    get_parser.add_argument(
        "--project-id",
        help="GCP project ID (from GCP_PROJECT or config file if not provided)"
    )
    get_parser.add_argument(
        "--version",
        default="latest",
        help="Secret version (default: latest)"
    )
    get_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Output only the raw secret value, useful for scripts"
    )

    create_parser = secrets_subparsers.add_parser("create", help="Create a secret")
    create_parser.add_argument("secret_name", help="Name of the secret (format: [a-zA-Z0-9_-]+)")
    create_parser.add_argument("secret_value", help="Value of the first secret version")
    create_parser.add_argument("--project-id", help="GCP project ID")

    # storage
    storage_parser = subparsers.add_parser("storage", help="Cloud Storage operations")
    storage_subparsers = storage_parser.add_subparsers(dest="storage_command")

    upload_parser = storage_subparsers.add_parser("upload", help="Upload a file")
    upload_parser.add_argument("bucket", help="Bucket name")
    upload_parser.add_argument("key", help="Object name")
    upload_parser.add_argument("file", help="Local file to upload")
    upload_parser.add_argument("--content-type", help="MIME type of the object")

    download_parser = storage_subparsers.add_parser(
        "download",
        help="Download an object",
        description="Download an object to stdout, or into --dest as DEST/KEY."
    )
    download_parser.add_argument("bucket", help="Bucket name")
    download_parser.add_argument("key", help="Object name")
    download_parser.add_argument("--dest", help="Destination directory")

    delete_parser = storage_subparsers.add_parser("delete", help="Delete an object")
    delete_parser.add_argument("bucket", help="Bucket name")
    delete_parser.add_argument("key", help="Object name")

    # tasks
    tasks_parser = subparsers.add_parser("tasks", help="Cloud Tasks operations")
    tasks_subparsers = tasks_parser.add_subparsers(dest="tasks_command")

    push_parser = tasks_subparsers.add_parser(
        "push",
        help="Push an HTTP task",
        description="Enqueue an HTTP task. QUEUE is a queue ID or a fully qualified queue name."
    )
    push_parser.add_argument("queue", help="Queue ID or projects/.../locations/.../queues/... name")
    push_parser.add_argument("url", help="Target URL")
    push_parser.add_argument("-X", "--method", default="POST", help="HTTP method (default: POST)")
    push_parser.add_argument("-d", "--body", help="Request body")
    push_parser.add_argument(
        "-H", "--header",
        action="append",
        help="Request header as 'Name: value' (repeatable)"
    )
    push_parser.add_argument("--project-id", help="GCP project ID")
    push_parser.add_argument("--location", help="Queue location, e.g. us-central1")

    groups = {
        "config": config_parser,
        "secrets": secrets_parser,
        "storage": storage_parser,
        "tasks": tasks_parser,
    }
    return parser, groups


COMMANDS = {
    ("version", None): cmd_version,
    ("config", "set-path"): cmd_config_set_path,
    ("config", "show"): cmd_config_show,
    ("config", "clear"): cmd_config_clear,
    ("config", "init"): cmd_config_init,
    ("secrets", "get"): cmd_secrets_get,
    ("secrets", "create"): cmd_secrets_create,
    ("storage", "upload"): cmd_storage_upload,
    ("storage", "download"): cmd_storage_download,
    ("storage", "delete"): cmd_storage_delete,
    ("tasks", "push"): cmd_tasks_push,
}


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (authentication, network, not found, etc.)
        2 - Usage errors (invalid arguments, invalid names, etc.)
    """
    parser, groups = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    subcommand = getattr(args, f"{args.command}_command", None)
    handler = COMMANDS.get((args.command, subcommand))
    if handler is None:
        groups.get(args.command, parser).print_help()
        sys.exit(2)

    try:
        handler(args)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
