from __future__ import annotations

import re
from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from callarchive.domain.errors import UploadError
from callarchive.media.abstract import MediaUploader
from callarchive.media.filenames import SUFFIX_LENGTH, generate_audio_filename
from callarchive.media.s3 import S3MediaUploader

FILENAME = re.compile(r"^(?P<stem>.+)_(?P<millis>\d+)_(?P<suffix>[0-9a-z]+)\.mp3$")


class TestFilenames:
    def test_shape(self):
        match = FILENAME.match(generate_audio_filename("REC-7", timestamp_ms=1714570000123))

        assert match is not None
        assert match["stem"] == "REC-7"
        assert match["millis"] == "1714570000123"
        assert len(match["suffix"]) == SUFFIX_LENGTH

    def test_blank_prefix_falls_back(self):
        assert generate_audio_filename("").startswith("recording_")
        assert generate_audio_filename(None).startswith("recording_")

    def test_names_are_distinct_within_one_millisecond(self):
        names = {generate_audio_filename("r", timestamp_ms=1) for _ in range(50)}
        assert len(names) == 50

    def test_extension(self):
        assert generate_audio_filename("r", extension="wav").endswith(".wav")


@pytest.fixture
def s3_client() -> Mock:
    return Mock()


@pytest.fixture
def uploader(s3_client: Mock) -> S3MediaUploader:
    return S3MediaUploader(
        bucket="call-audio",
        region="us-east-1",
        access_key_id="test-access-key",
        secret_access_key="test-secret-key",
        key_prefix="recordings",
        client=s3_client,
    )


class TestS3MediaUploader:
    def test_is_a_media_uploader(self, uploader):
        assert isinstance(uploader, MediaUploader)

    def test_upload_puts_object_and_returns_public_url(self, uploader, s3_client):
        url = uploader.upload(b"audio", "REC-1_1_abc.mp3")

        s3_client.put_object.assert_called_once_with(
            Bucket="call-audio",
            Key="recordings/REC-1_1_abc.mp3",
            Body=b"audio",
            ContentType="audio/mpeg",
        )
        assert url == "https://call-audio.s3.us-east-1.amazonaws.com/recordings/REC-1_1_abc.mp3"

    def test_custom_content_type_and_empty_prefix(self, s3_client):
        uploader = S3MediaUploader(bucket="b", region="eu-west-1", key_prefix="", client=s3_client)

        url = uploader.upload(b"x", "a.wav", content_type="audio/wav")

        assert s3_client.put_object.call_args.kwargs["Key"] == "a.wav"
        assert s3_client.put_object.call_args.kwargs["ContentType"] == "audio/wav"
        assert url == "https://b.s3.eu-west-1.amazonaws.com/a.wav"

    def test_endpoint_url_addresses_bucket_by_path(self, s3_client):
        uploader = S3MediaUploader(
            bucket="b", endpoint_url="http://minio:9000/", key_prefix="rec", client=s3_client
        )
        assert uploader.upload(b"x", "a.mp3") == "http://minio:9000/b/rec/a.mp3"

    def test_client_error_becomes_upload_error(self, uploader, s3_client):
        s3_client.put_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject"
        )

        with pytest.raises(UploadError, match="Failed to upload audio file: .*AccessDenied"):
            uploader.upload(b"audio", "a.mp3")

    def test_connection_error_becomes_upload_error(self, uploader, s3_client):
        s3_client.put_object.side_effect = EndpointConnectionError(endpoint_url="https://s3")

        with pytest.raises(UploadError):
            uploader.upload(b"audio", "a.mp3")

    def test_missing_bucket_fails_before_any_request(self, s3_client, monkeypatch):
        monkeypatch.delenv("AWS_BUCKET_NAME", raising=False)
        uploader = S3MediaUploader(region="us-east-1", client=s3_client)

        with pytest.raises(UploadError, match="bucket name is not configured"):
            uploader.upload(b"audio", "a.mp3")
        s3_client.put_object.assert_not_called()

    def test_missing_region_without_endpoint_fails(self, s3_client, monkeypatch):
        monkeypatch.delenv("AWS_REGION", raising=False)
        monkeypatch.delenv("S3_ENDPOINT", raising=False)
        uploader = S3MediaUploader(bucket="b", client=s3_client)

        with pytest.raises(UploadError, match="region"):
            uploader.upload(b"audio", "a.mp3")

    def test_settings_supply_defaults(self, monkeypatch, s3_client):
        monkeypatch.setenv("AWS_BUCKET_NAME", "env-bucket")
        monkeypatch.setenv("AWS_REGION", "us-west-2")
        monkeypatch.setenv("UPLOAD_KEY_PREFIX", "calls/")

        uploader = S3MediaUploader(client=s3_client)

        assert uploader.object_key("a.mp3") == "calls/a.mp3"
        assert uploader.upload(b"x", "a.mp3") == "https://env-bucket.s3.us-west-2.amazonaws.com/calls/a.mp3"

    def test_client_is_built_lazily_with_sigv4(self):
        uploader = S3MediaUploader(
            bucket="b", region="us-east-1", access_key_id="k", secret_access_key="s"
        )
        with patch("callarchive.media.s3.boto3.client") as make_client:
            uploader.upload(b"x", "a.mp3")
            uploader.upload(b"y", "b.mp3")

        make_client.assert_called_once()
        args, kwargs = make_client.call_args
        assert args == ("s3",)
        assert kwargs["region_name"] == "us-east-1"
        assert kwargs["aws_access_key_id"] == "k"
        assert kwargs["config"].signature_version == "s3v4"
        assert "endpoint_url" not in kwargs
