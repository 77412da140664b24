"""Transport helpers used by the bridge server and the CLI."""

import os
import tempfile

ZMQ_INSTALL_HINT = "pyzmq is required for the bridge transport. Install it with: pip install pyzmq"


def check_zmq_available() -> bool:
    """True if pyzmq can be imported."""
    try:
        import zmq  # noqa: F401
        return True
    except ImportError:
        return False


def generate_ipc_address(prefix: str = "handbridge") -> tuple[str, str]:
    """Pick a fresh ``ipc://`` address for a local bridge socket.

    The socket file is not created here; ZMQ creates it on bind.

    Returns:
        ``(address, socket_path)``, e.g.
        ``("ipc:///tmp/handbridge-4242-ab12.sock", "/tmp/handbridge-4242-ab12.sock")``.
    """
    socket_path = tempfile.mktemp(prefix=f"{prefix}-{os.getpid()}-", suffix=".sock")
    return f"ipc://{socket_path}", socket_path
