"""
Writer — serialize the install receipt to JSON.
"""
import json
from pathlib import Path

from pgext_installer.io.schema import InstallReceipt


def write_receipt(receipt: InstallReceipt, path: Path) -> Path:
    """
    Write *receipt* to *path* as indented, key-sorted JSON.

    Creates the parent directory if it does not exist.
    Returns the path written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            receipt.model_dump(mode="json"),
            indent=2,
            sort_keys=True,
        )
        + "\n"
    )
    return path
