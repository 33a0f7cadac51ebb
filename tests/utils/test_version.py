"""Tests for version utility module."""

import unittest
from importlib.metadata import PackageNotFoundError
from unittest.mock import patch

from edumyles_api.utils.version import DEV_VERSION, get_version, parse_version


class TestVersion(unittest.TestCase):
    """Test cases for version utility functions."""

    def setUp(self):
        get_version.cache_clear()

    def tearDown(self):
        get_version.cache_clear()

    def test_get_version(self):
        """Test get_version returns a VersionInfo model with all components."""
        test_version = "0.1.0.post11+ga524f7b.dirty"
        with patch("edumyles_api.utils.version.version", return_value=test_version):
            result = get_version()

        self.assertEqual(result.version, "0.1.0")
        self.assertEqual(result.full_version, test_version)
        self.assertEqual(result.post_count, "11")
        self.assertEqual(result.git_commit, "a524f7b")
        self.assertTrue(result.is_dirty)

    def test_get_version_not_installed(self):
        """Test get_version falls back to the development version."""
        with patch("edumyles_api.utils.version.version", side_effect=PackageNotFoundError("edumyles-api")):
            result = get_version()

        self.assertEqual(result.full_version, DEV_VERSION)
        self.assertEqual(result.version, "0.1.0")

    def test_parse_version_complete(self):
        """Test parse_version with a complete version string."""
        base_version, post_count, git_commit, is_dirty = parse_version("0.1.0.post11+ga524f7b.dirty")
        self.assertEqual(base_version, "0.1.0")
        self.assertEqual(post_count, "11")
        self.assertEqual(git_commit, "a524f7b")
        self.assertTrue(is_dirty)

    def test_parse_version_no_dirty(self):
        """Test parse_version with a version string without dirty flag."""
        base_version, post_count, git_commit, is_dirty = parse_version("0.1.0.post11+ga524f7b")
        self.assertEqual(base_version, "0.1.0")
        self.assertEqual(post_count, "11")
        self.assertEqual(git_commit, "a524f7b")
        self.assertFalse(is_dirty)

    def test_parse_version_no_post(self):
        """Test parse_version with a version string without post count."""
        base_version, post_count, git_commit, is_dirty = parse_version("0.1.0+ga524f7b.dirty")
        self.assertEqual(base_version, "0.1.0")
        self.assertIsNone(post_count)
        self.assertEqual(git_commit, "a524f7b")
        self.assertTrue(is_dirty)

    def test_parse_version_release(self):
        """Test parse_version with a plain release version."""
        self.assertEqual(parse_version("1.2.3"), ("1.2.3", None, None, False))

    def test_parse_version_unparseable(self):
        """Test parse_version keeps unparseable strings as the base version."""
        base_version, post_count, git_commit, is_dirty = parse_version("dev")
        self.assertEqual(base_version, "dev")
        self.assertIsNone(post_count)
        self.assertIsNone(git_commit)
        self.assertFalse(is_dirty)


if __name__ == "__main__":
    unittest.main()
