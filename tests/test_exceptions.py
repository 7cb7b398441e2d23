"""
Unit tests for the error taxonomy.
"""
import pytest

from filestorage.storage import exceptions as errors


OPERATION_ERRORS = [
    errors.UnableToWriteFile,
    errors.UnableToReadFile,
    errors.UnableToDeleteFile,
    errors.UnableToCreateDirectory,
    errors.UnableToDeleteDirectory,
    errors.UnableToCopyFile,
    errors.UnableToMoveFile,
    errors.UnableToGetStat,
    errors.UnableToCheckFileExistence,
    errors.UnableToCheckDirectoryExistence,
    errors.UnableToListDirectory,
    errors.UnableToSetVisibility,
    errors.UnableToGetVisibility,
    errors.UnableToGetPublicUrl,
    errors.UnableToGetTemporaryUrl,
    errors.UnableToGetChecksum,
    errors.UnableToGetMimeType,
    errors.UnableToGetLastModified,
    errors.UnableToGetFileSize,
    errors.UnableToPrepareUploadRequest,
]


@pytest.mark.parametrize("error_class", OPERATION_ERRORS)
def test_because_keeps_cause_and_context(error_class):
    cause = OSError("disk full")

    error = error_class.because("disk full", context={"path": "a.txt"}, cause=cause)

    assert isinstance(error, errors.FileStorageError)
    assert error.cause is cause
    assert error.__cause__ is cause
    assert error.context == {"path": "a.txt"}
    assert str(error) == f"{error_class.summary}. Reason: disk full"
    assert error.was_aborted is False


def test_codes_are_unique_and_namespaced():
    codes = [error_class.code for error_class in OPERATION_ERRORS]

    assert len(set(codes)) == len(codes)
    assert all(code.startswith("filestorage.") for code in codes)


def test_error_to_message_falls_back_to_class_name():
    assert errors.error_to_message(KeyError()) == "KeyError"
    assert errors.error_to_message(ValueError("bad")) == "bad"
    assert errors.error_to_message("plain") == "plain"


class TestUnableToReadFile:
    """Test suite for not-found detection on read errors."""

    def test_was_file_not_found_for_adapter_signal(self):
        cause = errors.FileWasNotFound.at_location("a.txt")
        error = errors.UnableToReadFile.because("missing", cause=cause)

        assert error.was_file_not_found is True

    def test_was_file_not_found_for_os_error(self):
        error = errors.UnableToReadFile.because("missing", cause=FileNotFoundError("a.txt"))

        assert error.was_file_not_found is True

    def test_other_causes_are_not_file_not_found(self):
        error = errors.UnableToReadFile.because("denied", cause=PermissionError("a.txt"))

        assert error.was_file_not_found is False


def test_checksum_not_supported_carries_algo():
    error = errors.ChecksumIsNotAvailable.checksum_not_supported("crc32c", context={"path": "a.txt"})

    assert error.algo == "crc32c"
    assert error.context == {"path": "a.txt", "algo": "crc32c"}


def test_upload_preparation_not_supported_is_an_upload_error():
    error = errors.UploadPreparationNotSupported.for_adapter(object())

    assert isinstance(error, errors.UnableToPrepareUploadRequest)
    assert "object" in str(error)
