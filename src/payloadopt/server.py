"""MCP server exposing the payload optimizer as tools."""

import argparse
import base64
import logging
import os
from typing import Any, Dict, List, Optional

from fastmcp import FastMCP

from payloadopt.container import get_container

logger = logging.getLogger(__name__)


def _create_mcp_server() -> FastMCP:
    return FastMCP(
        "Payload Optimizer",
        instructions=(
            "Shape and compress JSON payloads: select fields, guard depth "
            "and cycles, negotiate gzip/deflate, and inspect compression stats."
        ),
    )


mcp = _create_mcp_server()


@mcp.tool(
    name="optimize_payload",
    description=(
        "Run the full response pipeline on a payload: size check, optional "
        "field selection (comma-separated paths), depth/cycle guard and "
        "negotiated compression. Compressed bodies are returned base64-encoded."
    ),
)
async def optimize_payload(
    payload: Any,
    fields: Optional[str] = None,
    accept_encoding: str = "",
) -> Dict[str, Any]:
    """Optimize one payload as an HTTP response would be optimized."""

    optimizer = get_container().response_optimizer
    response = await optimizer.optimize_response(payload, fields, accept_encoding)
    compression = response.compression

    if response.compressed:
        body = base64.b64encode(response.body).decode("ascii")
    else:
        body = response.body

    return {
        "success": True,
        "compressed": response.compressed,
        "algorithm": (
            compression.algorithm.value
            if compression is not None and compression.algorithm is not None
            else None
        ),
        "original_size": compression.original_size if compression else None,
        "compressed_size": compression.compressed_size if compression else None,
        "ratio": compression.ratio if compression else None,
        "size_check": response.size_check.to_dict(),
        "headers": response.headers,
        "body": body,
    }


@mcp.tool(
    name="select_fields",
    description="Keep only the given field paths (dotted paths allowed) of a payload.",
)
async def select_fields(payload: Any, fields: List[str]) -> Dict[str, Any]:
    """Project a payload onto a list of field paths."""

    optimizer = get_container().response_optimizer
    return {"success": True, "result": optimizer.select_fields(payload, fields)}


@mcp.tool(
    name="sanitize_payload",
    description="Copy a payload with containers beyond max_depth replaced by a marker.",
)
async def sanitize_payload(payload: Any, max_depth: int = 5) -> Dict[str, Any]:
    """Depth-limit a payload."""

    optimizer = get_container().response_optimizer
    return {"success": True, "result": optimizer.optimize_nested_objects(payload, max_depth)}


@mcp.tool(
    name="check_payload_size",
    description="Estimate a payload's encoded size and flag it if over the configured maximum.",
)
async def check_payload_size(payload: Any) -> Dict[str, Any]:
    """Report the encoded size of a payload."""

    optimizer = get_container().response_optimizer
    return {"success": True, **optimizer.check_response_size(payload).to_dict()}


@mcp.tool(
    name="get_compression_stats",
    description="Return running compression statistics for this process.",
)
async def get_compression_stats() -> Dict[str, Any]:
    """Return the shared compression counters."""

    return {"success": True, "stats": get_container().compression_stats.snapshot()}


@mcp.tool(
    name="reset_compression_stats",
    description="Zero the running compression statistics.",
)
async def reset_compression_stats() -> Dict[str, Any]:
    """Reset the shared compression counters."""

    container = get_container()
    container.compression_stats.reset()
    return {"success": True, "stats": container.compression_stats.snapshot()}


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Payload optimizer MCP server.")
    parser.add_argument(
        "--transport",
        dest="transport",
        choices=["stdio", "http", "sse"],
        help="Transport to use for the MCP server (default: stdio).",
    )
    parser.add_argument(
        "--host",
        dest="host",
        help="Host/interface for HTTP transport (default 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        dest="port",
        type=int,
        help="Port for HTTP transport (default 8000).",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        help="Log level (e.g., INFO, DEBUG). Defaults to PAYLOADOPT_LOG_LEVEL or INFO.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Start the payload optimizer MCP server."""

    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    log_level = args.log_level or os.getenv("PAYLOADOPT_LOG_LEVEL", "INFO")
    logging.basicConfig(level=log_level.upper())

    run_kwargs: Dict[str, Any] = {}
    transport = args.transport or "stdio"
    run_kwargs["transport"] = transport
    if transport != "stdio":
        if args.host:
            run_kwargs["host"] = args.host
        if args.port:
            run_kwargs["port"] = args.port

    config = get_container().optimizer_config
    logger.info(
        f"Starting payload optimizer ({transport}); compression "
        f"{'enabled' if config.compression.enabled else 'disabled'}, "
        f"threshold {config.compression.threshold} bytes"
    )

    try:
        mcp.run(**run_kwargs)
    except KeyboardInterrupt:
        logger.info("Payload optimizer interrupted by user")


if __name__ == "__main__":
    main()
