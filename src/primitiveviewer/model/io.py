"""
Input/Output Manager (JSON in, binary out)
Reads scene documents and writes exported binaries to disk.
"""
import json
import logging
import os
from typing import Any
from importlib.metadata import version, PackageNotFoundError

# Get module logger
logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("primitiveviewer")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"


class DocumentError(ValueError):
    """The scene file is unreadable or not a JSON object."""


class IOManager:
    @staticmethod
    def parse_document(text: str, source: str = "<text>") -> dict[str, Any]:
        """
        Parse JSON text into a scene document.

        Raises:
            DocumentError: If the text is not valid JSON or its top level is
                not an object.
        """
        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as e:
            # JSONDecodeError is a ValueError; so are over-long integer literals
            msg = f"Invalid JSON in {source}: {e}"
            logger.error(msg)
            raise DocumentError(msg) from e

        if not isinstance(data, dict):
            msg = f"Scene document in {source} must be a JSON object, got {type(data).__name__}."
            logger.error(msg)
            raise DocumentError(msg)

        return data

    @staticmethod
    def read_document(filepath: str) -> dict[str, Any]:
        logger.info(f"Loading scene from: {filepath}")
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Could not read '{filepath}': {e}"
            logger.error(msg)
            raise DocumentError(msg) from e

        return IOManager.parse_document(text, source=os.path.basename(filepath))

    @staticmethod
    def write_binary(data: bytes, filepath: str) -> str:
        """Write bytes to `filepath`, creating parent folders. Returns the path."""
        parent = os.path.dirname(os.path.abspath(filepath))
        try:
            os.makedirs(parent, exist_ok=True)
            with open(filepath, "wb") as f:
                f.write(data)
        except OSError as e:
            logger.exception(f"Failed to write '{filepath}': {e}")
            raise e
        logger.info(f"Wrote {len(data)} bytes to: {filepath}")
        return filepath
