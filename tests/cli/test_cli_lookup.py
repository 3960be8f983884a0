"""Tests for ``chtsh lookup`` CLI command."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from chtsh.cli import main
from chtsh.errors import FetchError


class TestLookup:
    def test_lookup_prints_sheet(self) -> None:
        with patch("chtsh.fetcher.ChtShFetcher") as mock_cls:
            mock_instance = mock_cls.return_value
            mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
            mock_instance.__aexit__ = AsyncMock(return_value=False)
            mock_instance.fetch = AsyncMock(return_value="list(map(f, xs))")

            runner = CliRunner()
            result = runner.invoke(main, ["lookup", "map", "-l", "python", "-o", "T", "-o", "q"])

        assert result.exit_code == 0
        assert "list(map(f, xs))" in result.output
        mock_instance.fetch.assert_awaited_once_with("map", "python", ("T", "q"))

    def test_lookup_error(self) -> None:
        with patch("chtsh.fetcher.ChtShFetcher") as mock_cls:
            mock_instance = mock_cls.return_value
            mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
            mock_instance.__aexit__ = AsyncMock(return_value=False)
            mock_instance.fetch = AsyncMock(side_effect=FetchError("[Errno -2] Name unknown"))

            runner = CliRunner()
            result = runner.invoke(main, ["lookup", "map"])

        assert result.exit_code == 1
        assert "Lookup error" in result.output
        assert "[Errno -2]" in result.output
