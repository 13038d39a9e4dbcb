"""
Bulk file utilities.

This module provides the file listing helpers, the bulk ZIP download with
CSV extraction, and the schema introspection built on the ``schema.json``
document shipped inside every archive.
"""

import json
import re
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

import pandas as pd

from ..core.config import BULK, CERTIFICATE_TYPES, SCHEMA_FILES
from ..core.errors import DataError, ValidationError
from ..core.logging import get_logger
from ..utils.data.normalize import clean_frame, clean_name

if TYPE_CHECKING:
    from ..api.client import OpenDataCommunitiesClient


logger = get_logger(__name__)


def files_to_frame(payload: Any) -> pd.DataFrame:
    """
    Convert the file listing payload into a DataFrame.

    The listing maps file names to sizes, nested one level under a top-level
    key. Sizes given as ``{"size": n}`` objects are unwrapped.

    Returns:
        DataFrame with ``file_name`` and ``size`` columns
    """
    entries: List[Dict[str, Any]] = []
    if isinstance(payload, dict):
        for group in payload.values():
            if not isinstance(group, dict):
                continue
            for file_name, size in group.items():
                if isinstance(size, dict):
                    size = size.get("size")
                entries.append({"file_name": str(file_name), "size": size})

    df = pd.DataFrame(entries, columns=["file_name", "size"])
    df["size"] = pd.to_numeric(df["size"], errors="coerce")
    return df


def filter_files(
    files: pd.DataFrame,
    certificate_type: Optional[str] = None,
    local_authority_code: Optional[str] = None,
) -> pd.DataFrame:
    """
    Filter a file listing by certificate type prefix and local authority code.

    Args:
        files: Output of files_to_frame
        certificate_type: Underscore form certificate type
        local_authority_code: Local authority code

    Returns:
        Matching rows with a fresh index
    """
    if certificate_type is not None and certificate_type not in CERTIFICATE_TYPES:
        raise ValidationError(
            f"type should be one of {', '.join(CERTIFICATE_TYPES)}", {"type": certificate_type}
        )

    parts = []
    if certificate_type is not None:
        parts.append("^" + re.escape(certificate_type.replace("_", "-")))
    if local_authority_code is not None:
        parts.append(re.escape(local_authority_code))

    if not parts:
        return files.reset_index(drop=True)

    pattern = "-".join(parts)
    mask = files["file_name"].astype(str).str.contains(pattern, regex=True)
    return files[mask].reset_index(drop=True)


def _resource_member(resource: str) -> str:
    if resource not in BULK["RESOURCES"]:
        raise ValidationError(
            f"resource must be one of {', '.join(BULK['RESOURCES'])}", {"resource": resource}
        )
    return f"{resource}s.csv"


def extract_member(zip_path: Union[str, Path], member: str, destination: Union[str, Path]) -> Path:
    """
    Extract one member of a ZIP archive.

    Raises:
        DataError: If the archive is invalid or does not contain the member
    """
    zip_path = Path(zip_path)
    try:
        with zipfile.ZipFile(zip_path) as archive:
            members = archive.namelist()
            if member not in members:
                raise DataError(
                    f"The requested file '{member}' was not found in the archive '{zip_path.name}'.",
                    {"available": ", ".join(members)},
                )
            return Path(archive.extract(member, path=destination))
    except zipfile.BadZipFile as e:
        raise DataError(f"'{zip_path.name}' is not a valid ZIP archive") from e


def bulk_download(
    client: "OpenDataCommunitiesClient",
    file_name: str,
    destination_path: Union[str, Path],
    resource: str = "certificate",
    keep_zip: bool = False,
) -> Path:
    """
    Download a bulk archive and save one of its CSV files.

    The CSV is read with pandas, its column names are cleaned to snake_case,
    and it is written to ``<destination>/<file stem>/<resource>s.csv``.

    Args:
        client: Client used for the download
        file_name: Archive name, as listed by get_file_list
        destination_path: Directory for the output
        resource: ``certificate`` or ``recommendation``
        keep_zip: Also copy the archive into destination_path

    Returns:
        Path of the saved CSV file

    Raises:
        ValidationError: For an invalid file name or resource
        DataError: If the archive does not contain the resource
    """
    if not isinstance(file_name, str) or not file_name:
        raise ValidationError("No more than one file at a time.", {"file_name": file_name})

    member = _resource_member(resource)
    destination = Path(destination_path)
    temp_dir = Path(tempfile.mkdtemp(prefix="odc-"))

    try:
        zip_path = client.download_file(file_name, temp_dir / Path(file_name).name)
        csv_path = extract_member(zip_path, member, temp_dir)

        data = clean_frame(pd.read_csv(csv_path, low_memory=False))

        output_dir = destination / Path(file_name).stem
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = output_dir / member
        data.to_csv(output_path, index=False)

        if keep_zip:
            destination.mkdir(parents=True, exist_ok=True)
            shutil.copy2(zip_path, destination / Path(file_name).name)
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    logger.info(f"{member} file has been saved to {output_path}")
    return output_path


def extract_schema(schema: Dict[str, Any], resource: str = "certificate") -> pd.DataFrame:
    """
    Turn a CSVW ``schema.json`` document into a column description table.

    Args:
        schema: Parsed schema document
        resource: ``certificate`` or ``recommendation``

    Returns:
        DataFrame with one row per column: ``name``, ``primary_key``,
        ``column_reference`` and the other column attributes in snake_case
    """
    _resource_member(resource)
    table_key = f"{resource}s"

    rows = []
    for table in schema.get("tables", []):
        if table_key not in str(table.get("url", "")):
            continue

        table_schema = table.get("tableSchema", {})
        primary_key = table_schema.get("primaryKey")
        if isinstance(primary_key, str):
            primary_key = [primary_key]
        primary_key = ",".join(clean_name(key) for key in primary_key) if primary_key else None

        references = []
        for foreign_key in table_schema.get("foreignKeys", []):
            reference = foreign_key.get("reference", {})
            column_reference = reference.get("columnReference", foreign_key.get("columnReference"))
            if column_reference:
                references.append(clean_name(column_reference))

        for column in table_schema.get("columns", []):
            row = {clean_name(key): value for key, value in column.items() if key != "name"}
            row["name"] = clean_name(column.get("name"))
            row["primary_key"] = primary_key
            row["column_reference"] = ",".join(references) if references else None
            rows.append(row)

    if not rows:
        return pd.DataFrame(columns=["name", "primary_key", "column_reference"])

    results = pd.DataFrame(rows)
    leading = ["name", "primary_key", "column_reference"]
    results = results[leading + [c for c in results.columns if c not in leading]]
    return results


def get_schema(
    client: "OpenDataCommunitiesClient", certificate_type: str, resource: str = "certificate"
) -> pd.DataFrame:
    """
    Download the schema of a certificate type and describe one resource.

    Args:
        client: Client used for the download
        certificate_type: ``domestic``, ``non_domestic`` or ``display``
        resource: ``certificate`` or ``recommendation``

    Returns:
        Output of extract_schema
    """
    _resource_member(resource)
    cert_type = str(certificate_type).replace("-", "_")
    if cert_type not in SCHEMA_FILES:
        raise ValidationError(
            f"type must be one of {', '.join(SCHEMA_FILES)}", {"type": certificate_type}
        )

    file_name = SCHEMA_FILES[cert_type]
    temp_dir = Path(tempfile.mkdtemp(prefix="odc-schema-"))

    try:
        zip_path = client.download_file(file_name, temp_dir / file_name)
        logger.info("Start parsing the schema to tabular format")
        schema_path = extract_member(zip_path, BULK["SCHEMA_MEMBER"], temp_dir)
        with open(schema_path, "r", encoding="utf-8") as f:
            raw_schema = json.load(f)
    except json.JSONDecodeError as e:
        raise DataError(f"Invalid schema document in '{file_name}'") from e
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    return extract_schema(raw_schema, resource=resource)
