"""
Scans a build output directory into the asset mapping the engine consumes.
"""
from pathlib import Path
from typing import Dict, Union
import logging

from ..core.models import AssetEntry


class AssetScanner:
    """Builds a name -> AssetEntry mapping from files under a directory"""

    def __init__(self, root_dir: Union[str, Path]):
        """
        Initialize scanner.

        Args:
            root_dir: Build output directory
        """
        self.root_dir = Path(root_dir)
        self.logger = logging.getLogger(__name__)

    def scan(self) -> Dict[str, AssetEntry]:
        """
        Recursively collect regular files.

        Names are POSIX paths relative to the root, sorted so repeated
        scans of the same tree yield the same order.

        Returns:
            Dict mapping asset name to entry (all emitted)
        """
        if not self.root_dir.is_dir():
            raise FileNotFoundError(f"Build output directory does not exist: {self.root_dir}")

        assets: Dict[str, AssetEntry] = {}
        for path in sorted(self.root_dir.rglob("*")):
            if not path.is_file():
                continue
            name = path.relative_to(self.root_dir).as_posix()
            assets[name] = AssetEntry(local_path=str(path), emitted=True)

        self.logger.info(f"Found {len(assets)} file(s) under {self.root_dir}")
        return assets
