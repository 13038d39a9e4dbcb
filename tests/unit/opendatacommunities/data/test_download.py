"""
Tests for bulk file download and schema extraction.
"""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pandas as pd
import pytest

from opendatacommunities.core.config import SCHEMA_FILES
from opendatacommunities.core.errors import DataError, ValidationError
from opendatacommunities.data.download import (
    bulk_download,
    extract_member,
    extract_schema,
    files_to_frame,
    filter_files,
    get_schema,
)


CERTIFICATES_CSV = "LMK_KEY,CURRENT_ENERGY_RATING,UPRN\nabc,C,1001\ndef,B,1002\n"
RECOMMENDATIONS_CSV = "LMK_KEY,IMPROVEMENT_ITEM\nabc,1\n"

SCHEMA = {
    "tables": [
        {
            "url": "certificates.csv",
            "tableSchema": {
                "primaryKey": "LMK_KEY",
                "columns": [
                    {"name": "LMK_KEY", "titles": "LMK Key", "datatype": "string"},
                    {
                        "name": "CURRENT_ENERGY_RATING",
                        "datatype": "string",
                        "dc:description": "Current energy rating",
                    },
                ],
            },
        },
        {
            "url": "recommendations.csv",
            "tableSchema": {
                "primaryKey": ["LMK_KEY", "IMPROVEMENT_ITEM"],
                "foreignKeys": [
                    {
                        "columnReference": "LMK_KEY",
                        "reference": {"resource": "certificates.csv", "columnReference": "LMK_KEY"},
                    }
                ],
                "columns": [
                    {"name": "LMK_KEY", "datatype": "string"},
                    {"name": "IMPROVEMENT_ITEM", "datatype": "integer"},
                ],
            },
        },
    ]
}


@pytest.fixture
def download_client(make_zip):
    """Mock client whose download_file writes the given archive."""

    def factory(members):
        archive = make_zip(members)
        client = MagicMock()

        def download_file(file_name, path):
            Path(path).write_bytes(archive)
            return Path(path)

        client.download_file.side_effect = download_file
        return client

    return factory


class TestFileListing:
    """Test files_to_frame and filter_files."""

    def test_files_to_frame(self):
        files = files_to_frame({"files": {"domestic-E08000025.zip": {"size": 10}, "display.zip": 5}})

        assert files.to_dict("records") == [
            {"file_name": "domestic-E08000025.zip", "size": 10},
            {"file_name": "display.zip", "size": 5},
        ]

    def test_empty_listing(self):
        files = files_to_frame({})

        assert files.empty
        assert list(files.columns) == ["file_name", "size"]

    def test_filter_without_criteria(self):
        files = pd.DataFrame({"file_name": ["a.zip", "b.zip"], "size": [1, 2]})

        assert len(filter_files(files)) == 2

    def test_filter_invalid_type(self):
        with pytest.raises(ValidationError):
            filter_files(pd.DataFrame({"file_name": [], "size": []}), "commercial")


class TestExtractMember:
    """Test extract_member."""

    def test_missing_member(self, tmp_path, make_zip):
        zip_path = tmp_path / "archive.zip"
        zip_path.write_bytes(make_zip({"certificates.csv": CERTIFICATES_CSV}))

        with pytest.raises(DataError) as excinfo:
            extract_member(zip_path, "recommendations.csv", tmp_path)

        assert "certificates.csv" in excinfo.value.details["available"]

    def test_bad_zip(self, tmp_path):
        zip_path = tmp_path / "archive.zip"
        zip_path.write_bytes(b"not a zip")

        with pytest.raises(DataError):
            extract_member(zip_path, "certificates.csv", tmp_path)


class TestBulkDownload:
    """Test bulk_download."""

    def test_certificates_saved(self, tmp_path, download_client):
        client = download_client(
            {"certificates.csv": CERTIFICATES_CSV, "recommendations.csv": RECOMMENDATIONS_CSV}
        )

        path = bulk_download(client, "domestic-E08000025.zip", tmp_path)

        assert path == tmp_path / "domestic-E08000025" / "certificates.csv"
        saved = pd.read_csv(path)
        assert list(saved.columns) == ["lmk_key", "current_energy_rating", "uprn"]
        assert saved["lmk_key"].tolist() == ["abc", "def"]
        assert not (tmp_path / "domestic-E08000025.zip").exists()

    def test_recommendations_and_keep_zip(self, tmp_path, download_client):
        client = download_client(
            {"certificates.csv": CERTIFICATES_CSV, "recommendations.csv": RECOMMENDATIONS_CSV}
        )

        path = bulk_download(
            client, "domestic-E08000025.zip", tmp_path, resource="recommendation", keep_zip=True
        )

        assert path.name == "recommendations.csv"
        assert list(pd.read_csv(path).columns) == ["lmk_key", "improvement_item"]
        assert (tmp_path / "domestic-E08000025.zip").exists()

    def test_missing_resource(self, tmp_path, download_client):
        client = download_client({"certificates.csv": CERTIFICATES_CSV})

        with pytest.raises(DataError):
            bulk_download(client, "display-E08000025.zip", tmp_path, resource="recommendation")

    def test_invalid_resource(self, tmp_path):
        client = MagicMock()

        with pytest.raises(ValidationError):
            bulk_download(client, "domestic-E08000025.zip", tmp_path, resource="schema")

        client.download_file.assert_not_called()

    @pytest.mark.parametrize("file_name", ["", None, ["a.zip", "b.zip"]])
    def test_invalid_file_name(self, tmp_path, file_name):
        with pytest.raises(ValidationError):
            bulk_download(MagicMock(), file_name, tmp_path)


class TestExtractSchema:
    """Test extract_schema."""

    def test_certificate_schema(self):
        schema = extract_schema(SCHEMA, "certificate")

        assert list(schema.columns[:3]) == ["name", "primary_key", "column_reference"]
        assert schema["name"].tolist() == ["lmk_key", "current_energy_rating"]
        assert set(schema["primary_key"]) == {"lmk_key"}
        assert schema["column_reference"].isna().all()
        assert "dc_description" in schema.columns
        assert schema.loc[1, "dc_description"] == "Current energy rating"

    def test_recommendation_schema(self):
        schema = extract_schema(SCHEMA, "recommendation")

        assert schema["name"].tolist() == ["lmk_key", "improvement_item"]
        assert schema["primary_key"].iloc[0] == "lmk_key,improvement_item"
        assert schema["column_reference"].iloc[0] == "lmk_key"

    def test_no_matching_table(self):
        schema = extract_schema({"tables": []}, "certificate")

        assert schema.empty
        assert list(schema.columns) == ["name", "primary_key", "column_reference"]

    def test_invalid_resource(self):
        with pytest.raises(ValidationError):
            extract_schema(SCHEMA, "schema")


class TestGetSchema:
    """Test get_schema."""

    def test_reads_schema_from_archive(self, download_client):
        client = download_client({"schema.json": json.dumps(SCHEMA)})

        schema = get_schema(client, "domestic", "certificate")

        assert schema["name"].tolist() == ["lmk_key", "current_energy_rating"]
        assert client.download_file.call_args[0][0] == SCHEMA_FILES["domestic"]

    def test_hyphenated_type(self, download_client):
        client = download_client({"schema.json": json.dumps(SCHEMA)})

        get_schema(client, "non-domestic")

        assert client.download_file.call_args[0][0] == SCHEMA_FILES["non_domestic"]

    def test_invalid_json(self, download_client):
        client = download_client({"schema.json": "{not json"})

        with pytest.raises(DataError):
            get_schema(client, "display")

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            get_schema(MagicMock(), "commercial")
