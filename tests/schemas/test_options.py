"""
Unit tests for option bags and merging.
"""
import pytest
from pydantic import ValidationError

from filestorage.schemas.options import (
    ListOptions,
    TemporaryUrlOptions,
    WriteOptions,
    merge_options,
    option_values,
)


class TestMergeOptions:
    """Test suite for merge_options() precedence."""

    def test_later_layers_win(self):
        merged = merge_options(
            WriteOptions,
            {"visibility": "public", "mime_type": "text/plain"},
            {"visibility": "private"},
        )

        assert merged.visibility == "private"
        assert merged.mime_type == "text/plain"

    def test_none_never_overrides(self):
        """Test a None call-site value keeps the configured default."""
        merged = merge_options(WriteOptions, {"visibility": "private"}, {"visibility": None})

        assert merged.visibility == "private"

    def test_models_only_contribute_explicitly_set_fields(self):
        merged = merge_options(WriteOptions, {"visibility": "private"}, WriteOptions(mime_type="text/csv"))

        assert merged.visibility == "private"
        assert merged.mime_type == "text/csv"

    def test_unknown_keys_are_forwarded(self):
        merged = merge_options(WriteOptions, {"acl": "bucket-owner"}, {"metadata": {"a": "b"}})

        assert merged.model_extra == {"acl": "bucket-owner", "metadata": {"a": "b"}}

    def test_no_layers_gives_empty_options(self):
        merged = merge_options(ListOptions)

        assert merged.deep is None
        assert merged.abort_signal is None
        assert merged.timeout is None


def test_option_values_handles_none():
    assert option_values(None) == {}


def test_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        WriteOptions(timeout=0)


def test_temporary_url_options_require_expiry():
    with pytest.raises(ValidationError):
        TemporaryUrlOptions()
