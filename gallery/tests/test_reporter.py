"""Tests for Reporter class."""

import io
import sys

from gallery.reporter import Reporter


class TestReporter:
    """Tests for Reporter class."""

    def test_init_default_output(self):
        """Test default output is stdout."""
        reporter = Reporter()
        assert reporter.output == sys.stdout

    def test_format_bytes(self):
        """Test byte formatting."""
        reporter = Reporter()

        assert reporter._format_bytes(500) == '500.0 B'
        assert reporter._format_bytes(1024) == '1.0 KB'
        assert reporter._format_bytes(1024 * 1024) == '1.0 MB'

    def test_report_summary(self, sample_album):
        """Test summary report generation."""
        output = io.StringIO()
        reporter = Reporter(output=output)

        reporter.report_summary([sample_album])

        result = output.getvalue()
        assert 'ALBUM SUMMARY' in result
        assert 'Wedding' in result
        assert 'Albums:  1' in result
        assert 'Photos:  2' in result

    def test_report_summary_empty(self):
        """Test summary with no albums."""
        output = io.StringIO()

        Reporter(output=output).report_summary([])

        assert 'No albums.' in output.getvalue()

    def test_report_summary_truncates_long_names(self, sample_album):
        """Test long album names are shortened to the column width."""
        sample_album.name = 'A' * 50
        output = io.StringIO()

        Reporter(output=output).report_summary([sample_album])

        assert 'A' * 27 + '...' in output.getvalue()
        assert 'A' * 31 not in output.getvalue()

    def test_report_detailed(self, sample_album):
        """Test detailed report lists every photo."""
        output = io.StringIO()

        Reporter(output=output).report_detailed([sample_album])

        result = output.getvalue()
        assert 'Wedding (album-1)' in result
        assert 'album-1/light/a.jpg (1800x1200)' in result
        assert 'album-1/max/a.jpg (6000x4000)' in result

    def test_report_orphans(self):
        """Test orphan listing."""
        output = io.StringIO()

        Reporter(output=output).report_orphans(['a/light/x.jpg'])

        assert 'Orphaned files: 1' in output.getvalue()
        assert 'a/light/x.jpg' in output.getvalue()
