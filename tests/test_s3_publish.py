"""
Tests for the S3 extract and publish steps with the S3 hook replaced.

Integration tests: run with --integration; skipped when the Airflow Amazon
provider is not installed.
"""

import pytest

pytestmark = pytest.mark.integration

pytest.importorskip("airflow.providers.amazon.aws.hooks.s3")

from botocore.exceptions import ClientError, NoCredentialsError

from sales_analytics.etl import extract_s3, load_s3_csv


class FakeHook:
    """Stands in for S3Hook; keeps written objects in a dict."""

    objects = {}
    error = None

    def __init__(self, aws_conn_id):
        self.aws_conn_id = aws_conn_id

    def load_string(self, string_data, key, bucket_name, replace):
        if FakeHook.error:
            raise FakeHook.error
        FakeHook.objects[(bucket_name, key)] = string_data

    def read_key(self, key, bucket_name):
        return FakeHook.objects[(bucket_name, key)]


@pytest.fixture
def fake_hook(monkeypatch):
    FakeHook.objects = {}
    FakeHook.error = None
    monkeypatch.setattr(load_s3_csv, "S3Hook", FakeHook)
    monkeypatch.setattr(extract_s3, "S3Hook", FakeHook)
    return FakeHook


def client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "PutObject")


def test_publish_writes_csv(fake_hook, clean_sales_df):
    uri = load_s3_csv.write_sales_clean_csv_to_s3(clean_sales_df, "aws", "bucket", "cleansed-data/x.csv")
    assert uri == "s3://bucket/cleansed-data/x.csv"
    body = fake_hook.objects[("bucket", "cleansed-data/x.csv")]
    assert body.splitlines()[0].startswith("invoice_id,branch,city")
    assert "2022-01-03" in body


def test_raw_extract_round_trip(fake_hook, raw_sales_df):
    fake_hook.objects[("bucket", "raw-data/walmart_sales.csv")] = raw_sales_df.to_csv(index=False)
    df = extract_s3.extract_sales_from_s3("aws", "bucket", "raw-data/walmart_sales.csv")
    assert len(df) == 7
    assert "branch" in df.columns
    assert df["invoice_id"].tolist()[:2] == ["1", "2"]


def test_empty_bucket_rejected(fake_hook, clean_sales_df):
    with pytest.raises(ValueError):
        load_s3_csv.write_sales_clean_csv_to_s3(clean_sales_df, "aws", "", "x.csv")


@pytest.mark.parametrize("code, expected", [
    ("NoSuchBucket", ValueError),
    ("AccessDenied", PermissionError),
    ("SlowDown", RuntimeError),
])
def test_client_errors_mapped(fake_hook, clean_sales_df, code, expected):
    fake_hook.error = client_error(code)
    with pytest.raises(expected):
        load_s3_csv.write_sales_clean_csv_to_s3(clean_sales_df, "aws", "bucket", "x.csv")


def test_missing_credentials(fake_hook, clean_sales_df):
    fake_hook.error = NoCredentialsError()
    with pytest.raises(ValueError, match="Invalid AWS connection"):
        load_s3_csv.write_sales_clean_csv_to_s3(clean_sales_df, "aws", "bucket", "x.csv")
