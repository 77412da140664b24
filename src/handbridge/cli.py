"""CLI for handbridge: ``handbridge serve``, ``detect`` and ``fetch-model``."""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="handbridge",
        description="Camera frame to hand landmark inference bridge",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )
    sub = parser.add_subparsers(dest="command")

    # Model options shared by serve and detect
    model_opts = argparse.ArgumentParser(add_help=False)
    model_opts.add_argument(
        "--model", "-m",
        action="append",
        default=None,
        help="Candidate model path, tried in order (repeatable). "
             "Defaults to the standard search locations.",
    )
    model_opts.add_argument("--max-hands", type=int, default=2)
    model_opts.add_argument("--min-detection-confidence", type=float, default=0.5)
    model_opts.add_argument("--min-presence-confidence", type=float, default=0.5)
    model_opts.add_argument("--min-tracking-confidence", type=float, default=0.5)
    model_opts.add_argument(
        "--running-mode",
        choices=["image", "stream"],
        default="image",
        help="Model running mode (default: image)",
    )
    model_opts.add_argument("--delegate", choices=["cpu", "gpu"], default="cpu")

    # handbridge serve
    serve_p = sub.add_parser("serve", parents=[model_opts], help="Serve the bridge over ZMQ")
    serve_p.add_argument(
        "--address", "-a",
        default="tcp://*:5555",
        help="ZMQ bind address, or 'ipc' for a fresh local socket "
             "(default: tcp://*:5555)",
    )
    serve_p.add_argument(
        "--permissive-format",
        action="store_true",
        help="Treat unrecognized pixel formats as BGRA instead of rejecting them",
    )

    # handbridge detect
    detect_p = sub.add_parser("detect", parents=[model_opts], help="Detect hands in an image file")
    detect_p.add_argument("image", help="Path to an image file")

    # handbridge fetch-model
    fetch_p = sub.add_parser("fetch-model", help="Download the default hand landmarker model")
    fetch_p.add_argument(
        "--dest",
        default=None,
        help="Target file (default: models directory)",
    )

    return parser


def _model_config(args: argparse.Namespace):
    from handbridge.config import ModelConfig, RunningMode

    return ModelConfig(
        max_hands=args.max_hands,
        min_detection_confidence=args.min_detection_confidence,
        min_presence_confidence=args.min_presence_confidence,
        min_tracking_confidence=args.min_tracking_confidence,
        running_mode=RunningMode(args.running_mode),
        delegate=args.delegate,
    )


def _candidates(args: argparse.Namespace):
    from handbridge.paths import default_model_candidates

    if args.model:
        return [Path(m) for m in args.model]
    return default_model_candidates()


def _resolve_address(address: str):
    """Return (bind address, socket file to remove on exit or None)."""
    if address == "ipc":
        from handbridge.ipc._util import generate_ipc_address

        return generate_ipc_address()
    return address, None


def _cmd_serve(args: argparse.Namespace, config) -> int:
    """Handle ``handbridge serve``."""
    from handbridge.bridge import BridgeEndpoint
    from handbridge.config import BridgeConfig
    from handbridge.ipc.server import BridgeServer
    from handbridge.session import InferenceSession

    session = InferenceSession(config)
    endpoint = BridgeEndpoint(session, BridgeConfig(strict_format=not args.permissive_format))
    try:
        server = BridgeServer(endpoint)
    except ImportError as e:
        print(str(e), file=sys.stderr)
        return 1

    # A missing model is not fatal: calls answer INIT_ERROR until it appears
    session.try_load(_candidates(args))

    address, socket_path = _resolve_address(args.address)
    try:
        server.bind(address)
        print(f"Serving on {address}", flush=True)
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        server.close()
        session.close()
        if socket_path is not None and os.path.exists(socket_path):
            os.unlink(socket_path)
    return 0


def _cmd_detect(args: argparse.Namespace, config) -> int:
    """Handle ``handbridge detect``."""
    import cv2

    from handbridge.bridge import BridgeEndpoint
    from handbridge.session import InferenceSession

    image = cv2.imread(args.image, cv2.IMREAD_COLOR)
    if image is None:
        print(f"Cannot read image: {args.image}", file=sys.stderr)
        return 1
    bgra = cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
    height, width = bgra.shape[:2]

    request = {
        "planes": [{"bytes": bgra.tobytes(), "bytesPerRow": width * 4, "bytesPerPixel": 4}],
        "width": width,
        "height": height,
        "format": "bgra",
    }

    with InferenceSession(config) as session:
        session.try_load(_candidates(args))
        response = BridgeEndpoint(session).handle_detect_request(request)

    print(json.dumps(response.to_dict(), indent=2))
    return 0 if response.ok else 1


def _cmd_fetch_model(args: argparse.Namespace) -> int:
    """Handle ``handbridge fetch-model``."""
    from handbridge.paths import download_model

    try:
        path = download_model(Path(args.dest) if args.dest else None)
    except RuntimeError as e:
        print(str(e), file=sys.stderr)
        return 1
    print(path)
    return 0


def main(argv=None) -> None:
    """Entry point for ``handbridge`` CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    if args.command in ("serve", "detect"):
        try:
            config = _model_config(args)
        except ValueError as e:
            parser.error(str(e))

    if args.command == "serve":
        code = _cmd_serve(args, config)
    elif args.command == "detect":
        code = _cmd_detect(args, config)
    elif args.command == "fetch-model":
        code = _cmd_fetch_model(args)
    else:
        parser.print_help()
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
