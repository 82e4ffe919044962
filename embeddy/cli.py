"""CLI entry point for embeddy.

Subcommands:
    pull   Download a model from the Hugging Face Hub and register it
    serve  Start the HTTP API server (models are loaded on demand)
    run    Embed texts once and print the result as JSON
    list   List registered models
"""

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from embeddy import __version__
from embeddy.core.domain.errors import EmbeddyError, InvalidInput
from embeddy.settings import settings

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _registry():
    from embeddy.infrastructure.persistence.sqlalchemy import SqlModelRegistry, init_db

    init_db()
    return SqlModelRegistry()


# =============================================================================
# Commands
# =============================================================================


def cmd_pull(args: argparse.Namespace) -> int:
    """Handle the pull command."""
    from embeddy.infrastructure.hub import ModelDownloader

    downloader = ModelDownloader(registry=_registry())
    model_info = downloader.pull(args.model, alias=args.alias)

    print(f"Successfully pulled model: {args.model}")
    print(f"  Repository: {model_info.hf_repo_id}")
    print(f"  Path: {model_info.model_path}")
    if model_info.alias:
        print(f"  Alias: {model_info.alias}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Handle the serve command."""
    from embeddy.utils import parse_device

    device = parse_device(args.device)
    settings.device = args.device

    from embeddy.app.main import run_server

    host = args.host or settings.app_host
    port = args.port or settings.app_port

    print("Embeddy server starting...")
    print(f"   Device: {device}")
    print(f"   Listening on: http://{host}:{port}")
    print(f"   Health: http://{host}:{port}/api/health")
    print(f"   Embed: http://{host}:{port}/api/embed")
    print("\n   Models will be loaded on-demand when requested via API")

    run_server(host=host, port=port)
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Handle the run command."""
    if not args.text:
        raise InvalidInput('No text provided. Use --text "your text"')

    from embeddy.infrastructure.embeddings import TableEmbedder
    from embeddy.utils import parse_device

    model_info = _registry().get_model(args.model)
    device = parse_device(args.device)

    logger.info(f"Loading model '{args.model}'")
    embedder = TableEmbedder.load(model_info, device)
    try:
        logger.info(f"Generating embeddings for {len(args.text)} texts")
        embeddings = embedder.embed(args.text)
    finally:
        embedder.close()

    output = {
        "model": args.model,
        "dimension": embedder.embedding_dim,
        "embeddings": embeddings,
    }
    print(json.dumps(output, indent=2))
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """Handle the list command."""
    models = _registry().list_models()

    if not models:
        print("No models installed.")
        print("Use 'embeddy pull <model-id>' to download a model.")
        return 0

    print("Installed models:\n")
    for model in models:
        print(f"  {model.key}")
        print(f"    Repository: {model.hf_repo_id}")
        print(f"    Path: {model.model_path}")
        print(f"    Downloaded: {model.downloaded_at}")
        if model.embedding_dim is not None:
            print(f"    Dimension: {model.embedding_dim}")
        print()
    return 0


# =============================================================================
# Parser
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="embeddy",
        description="A lightweight embeddings-only model runtime",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    pull = subparsers.add_parser("pull", help="Download a model from HuggingFace")
    pull.add_argument(
        "model",
        help='HuggingFace model repository ID (e.g., "sentence-transformers/all-MiniLM-L6-v2")',
    )
    pull.add_argument("--alias", default=None, help="Optional alias for the model")
    pull.set_defaults(func=cmd_pull)

    serve = subparsers.add_parser(
        "serve", help="Start the HTTP API server (models loaded on-demand)"
    )
    serve.add_argument("--device", default="cpu", help='Device to run on (e.g., "cpu" or "cuda:0")')
    serve.add_argument("--port", type=int, default=None, help="Port to listen on (default: EMBEDDY_APP_PORT or 8080)")
    serve.add_argument("--host", default=None, help="Host to bind to (default: EMBEDDY_APP_HOST or 0.0.0.0)")
    serve.set_defaults(func=cmd_serve)

    run = subparsers.add_parser("run", help="Run embeddings on text input")
    run.add_argument("model", help="Model name or alias to use")
    run.add_argument(
        "--text",
        action="append",
        default=[],
        help="Text to embed (can be specified multiple times)",
    )
    run.add_argument("--device", default="cpu", help='Device to run on (e.g., "cpu" or "cuda:0")')
    run.set_defaults(func=cmd_run)

    list_cmd = subparsers.add_parser("list", help="List installed models")
    list_cmd.set_defaults(func=cmd_list)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    setup_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return args.func(args)
    except EmbeddyError as exc:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
