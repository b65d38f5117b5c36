"""Tests for the previews module."""

from unittest.mock import Mock

import pytest

from photo_timeline.previews import PreviewRegistry
from conftest import make_photo


class TestPreviewRegistry:
    """Test suite for PreviewRegistry."""

    def setup_method(self):
        self.mock_logger = Mock()
        self.registry = PreviewRegistry(self.mock_logger)

    @pytest.mark.unit
    def test_entries_pair_each_point_with_its_preview(self, trip_points):
        entries = self.registry.build_entries(trip_points)

        assert [e.photo for e in entries] == trip_points
        for entry in entries:
            assert entry.preview.uri.startswith("file://")
            assert entry.preview.uri.endswith(entry.photo.name)
        assert self.registry.outstanding == len(trip_points)

    @pytest.mark.unit
    def test_release_entries(self, trip_points):
        entries = self.registry.build_entries(trip_points)

        self.registry.release_entries(entries)

        assert all(e.preview.released for e in entries)
        assert self.registry.outstanding == 0

    @pytest.mark.unit
    def test_double_release_is_reported(self):
        handle = self.registry.create(make_photo("a.jpg", "2024-06-01T09:00"))

        self.registry.release(handle)
        self.registry.release(handle)

        assert handle.released is True
        assert self.registry.outstanding == 0
        self.mock_logger.warning.assert_called_once()

    @pytest.mark.unit
    def test_handles_for_the_same_file_are_independent(self):
        photo = make_photo("a.jpg", "2024-06-01T09:00")
        first = self.registry.create(photo)
        second = self.registry.create(photo)

        self.registry.release(first)

        assert second.released is False
        assert self.registry.outstanding == 1
