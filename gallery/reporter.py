"""
Reporter - Human-readable reports about the album registry.
"""

import logging
import sys
from typing import List, Optional, TextIO

from .album_record import Album


class Reporter:
    """
    Prints album summaries for the maintenance CLI.
    """

    def __init__(
        self,
        output: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize reporter.

        Args:
            output: Output stream (default: stdout)
            logger: Optional logger instance
        """
        self.output = output or sys.stdout
        self.logger = logger or logging.getLogger(__name__)

    def _print(self, text: str = "") -> None:
        """Print to output stream."""
        print(text, file=self.output)

    def _format_bytes(self, bytes_val: int) -> str:
        """Format bytes as human-readable string."""
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if bytes_val < 1024:
                return f"{bytes_val:.1f} {unit}"
            bytes_val /= 1024
        return f"{bytes_val:.1f} PB"

    def report_summary(self, albums: List[Album]) -> None:
        """Print one line per album and a total."""
        self._print("=" * 70)
        self._print("ALBUM SUMMARY")
        self._print("=" * 70)

        if not albums:
            self._print("  No albums.")
            return

        self._print(f"  {'Album':<30} {'Light':>8} {'Max':>8} {'Size':>12}")
        self._print(f"  {'-' * 30} {'-' * 8} {'-' * 8} {'-' * 12}")
        total_photos = 0
        total_bytes = 0
        for album in albums:
            counts = album.tier_counts()
            name = album.name if len(album.name) <= 30 else album.name[:27] + '...'
            self._print(
                f"  {name:<30} {counts['light']:>8,} {counts['max']:>8,} "
                f"{self._format_bytes(album.total_bytes):>12}"
            )
            total_photos += album.photo_count
            total_bytes += album.total_bytes

        self._print()
        self._print(f"  Albums:  {len(albums):,}")
        self._print(f"  Photos:  {total_photos:,}")
        self._print(f"  Size:    {self._format_bytes(total_bytes)}")

    def report_detailed(self, albums: List[Album]) -> None:
        """Print every album with its id and photos."""
        for album in albums:
            self._print(album.format_status())
            for photo in album.photos:
                self._print(f"    [{photo.tier:<5}] {photo.stored_path} ({photo.width}x{photo.height})")

    def report_orphans(self, stored_paths: List[str]) -> None:
        self._print(f"Orphaned files: {len(stored_paths):,}")
        for stored_path in stored_paths:
            self._print(f"  {stored_path}")
