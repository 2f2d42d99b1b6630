"""Tests for update detection and release selection."""

import pytest

from modportal.exceptions import NotFoundError
from modportal.models import Version
from modportal.services import VersionResolver

from conftest import make_release


@pytest.fixture
def resolver():
    return VersionResolver()


@pytest.fixture
def releases():
    return [make_release("1.2.0", "0.15.0"), make_release("1.1.0", "0.14.0")]


class TestCheckForUpdate:
    """First compatible newer release wins."""

    def test_skips_release_for_other_game_minor(self, resolver, releases):
        result = resolver.check_for_update("1.0.0", releases, "0.14.0")

        assert result.has_update is True
        assert result.version == Version(1, 1, 0)

    def test_wildcard_accepts_any_game_version(self, resolver, releases):
        result = resolver.check_for_update("1.0.0", releases, "0.0.0")

        assert result.has_update is True
        assert result.version == Version(1, 2, 0)

    def test_default_target_is_wildcard(self, resolver, releases):
        result = resolver.check_for_update("1.0.0", releases)
        assert result.version == Version(1, 2, 0)

    def test_up_to_date(self, resolver, releases):
        result = resolver.check_for_update("1.2.0", releases, "0.0.0")

        assert result.has_update is False
        assert result.version is None
        assert result.to_dict() == {"name": "", "hasUpdate": False}

    def test_no_compatible_release(self, resolver, releases):
        result = resolver.check_for_update("1.0.0", releases, "0.16")
        assert result.has_update is False

    def test_target_game_version_is_normalized(self, resolver, releases):
        result = resolver.check_for_update("1.0", releases, "0.14")
        assert result.version == Version(1, 1, 0)

    def test_first_match_wins_on_unsorted_list(self, resolver):
        unsorted = [
            make_release("1.1.0", "0.14.0"),
            make_release("1.3.0", "0.14.0"),
        ]

        result = resolver.check_for_update("1.0.0", unsorted, "0.14.0")

        assert result.version == Version(1, 1, 0)

    def test_equal_version_is_not_an_update(self, resolver):
        result = resolver.check_for_update("1.1", [make_release("1.1.0")], "0.0.0")
        assert result.has_update is False

    def test_result_to_dict(self, resolver, releases):
        result = resolver.check_for_update("1.0.0", releases, "0.14", name="mod")
        assert result.to_dict() == {"name": "mod", "hasUpdate": True, "version": "1.1.0"}

    def test_empty_release_list(self, resolver):
        assert resolver.check_for_update("1.0.0", [], "0.14").has_update is False


class TestSelectReleaseToDownload:
    """Exact version lookup or most recent release."""

    def test_latest_is_first_entry(self, resolver, releases):
        assert resolver.select_release_to_download(releases) is releases[0]

    def test_requested_version(self, resolver, releases):
        release = resolver.select_release_to_download(releases, "1.1.0")
        assert release is releases[1]

    def test_requested_version_is_normalized(self, resolver, releases):
        release = resolver.select_release_to_download(releases, "1.1")
        assert release is releases[1]

    def test_missing_version_raises_not_found(self, resolver, releases):
        with pytest.raises(NotFoundError):
            resolver.select_release_to_download(releases, "9.9.9", name="mod")

    def test_empty_releases_raise_not_found(self, resolver):
        with pytest.raises(NotFoundError):
            resolver.select_release_to_download([])
