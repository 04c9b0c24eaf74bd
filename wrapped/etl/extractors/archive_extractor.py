"""Strava bulk export importer.

Reads the export ZIP in a single pass, then builds activities from
``activities.csv`` and attaches routes decoded from the referenced GPX/FIT
side files.
"""

import base64
import io
import logging
import time
import zipfile
from pathlib import Path
from typing import BinaryIO, Optional, Union

from wrapped.config import DEFAULT_FIRST_NAME, DEFAULT_LAST_NAME
from wrapped.etl.extractors.csv_extractor import CSVExtractor
from wrapped.etl.transformers.activity_normalizer import ActivityNormalizer
from wrapped.integrations.fit_parser import FITParser
from wrapped.integrations.gpx_parser import GPXParser
from wrapped.integrations.polyline import encode_polyline
from wrapped.models.activity import Activity, Athlete, ImportReport, ImportResult

logger = logging.getLogger(__name__)

ArchiveSource = Union[bytes, str, Path, BinaryIO]

INDEX_TABLE_SUFFIX = "activities.csv"
PROFILE_TABLE_SUFFIX = "profile.csv"
PROFILE_IMAGE_TYPES = {
    "profile.jpg": "image/jpeg",
    "profile.jpeg": "image/jpeg",
    "profile.png": "image/png",
}
GPX_SUFFIXES = (".gpx", ".gpx.gz")
FIT_SUFFIXES = (".fit", ".fit.gz")


class ExportImportError(Exception):
    """Raised when an export archive cannot produce any activities."""


class ArchiveImporter:
    """Import activities and athlete identity from a Strava export ZIP."""

    def __init__(
        self,
        csv_extractor: Optional[CSVExtractor] = None,
        gpx_parser: Optional[GPXParser] = None,
        fit_parser: Optional[FITParser] = None,
    ):
        self.csv_extractor = csv_extractor or CSVExtractor()
        self.gpx_parser = gpx_parser or GPXParser()
        self.fit_parser = fit_parser or FITParser()

    def import_archive(self, source: ArchiveSource) -> ImportResult:
        """Import an export archive.

        Args:
            source: ZIP bytes, a path to the ZIP, or a binary file object

        Returns:
            ImportResult with activities, athlete and import diagnostics

        Raises:
            ExportImportError: If the index table is missing, empty, or no
                row yields an activity
        """
        report = ImportReport()

        try:
            with zipfile.ZipFile(self._open(source)) as archive:
                contents = self.collect_entries(archive, report)
        except zipfile.BadZipFile as e:
            raise ExportImportError(
                "The uploaded file is not a valid ZIP archive. "
                "Please upload the export file downloaded from Strava."
            ) from e

        if contents["index_table"] is None:
            raise ExportImportError(
                "Could not find activities.csv in the ZIP file. "
                "Please make sure you uploaded a valid Strava export."
            )

        rows = self.csv_extractor.parse_bytes(contents["index_table"])
        if len(rows) < 2:
            raise ExportImportError("No activities found in the export file.")

        activities = self.build_activities(rows[1:], contents["side_files"], report)
        if not activities:
            raise ExportImportError("No activities found in the export file.")

        profile_picture = contents["profile_picture"]
        firstname, lastname = contents["athlete_names"]
        athlete = Athlete(
            id=int(time.time() * 1000),
            firstname=firstname,
            lastname=lastname,
            profile=profile_picture or "",
            profile_medium=profile_picture or "",
        )

        logger.info(
            f"Imported {len(activities)} activities "
            f"({report.routes_attached} with routes, {report.rejected_rows} rows rejected)"
        )
        return ImportResult(
            activities=activities,
            athlete=athlete,
            profile_picture=profile_picture,
            report=report,
        )

    def collect_entries(self, archive: zipfile.ZipFile, report: ImportReport) -> dict:
        """Classify every archive entry by name in a single pass.

        Side files are stored raw, keyed by entry name; they are decoded only
        when a row references them.

        Returns:
            Dict with ``index_table`` bytes (or None), ``athlete_names``,
            ``profile_picture`` data URI (or None) and ``side_files``
        """
        contents = {
            "index_table": None,
            "athlete_names": (DEFAULT_FIRST_NAME, DEFAULT_LAST_NAME),
            "profile_picture": None,
            "side_files": {},
        }

        for info in archive.infolist():
            if info.is_dir():
                continue
            report.archive_entries += 1
            name = info.filename
            lower_name = name.lower()

            if lower_name.endswith(INDEX_TABLE_SUFFIX):
                contents["index_table"] = self._read_index_table(archive, info)
            elif lower_name.endswith(PROFILE_TABLE_SUFFIX):
                contents["athlete_names"] = self._read_athlete_names(archive, info, report)
            elif lower_name.endswith(tuple(PROFILE_IMAGE_TYPES)):
                contents["profile_picture"] = self._read_profile_picture(archive, info, report)
            elif lower_name.endswith(GPX_SUFFIXES + FIT_SUFFIXES):
                try:
                    contents["side_files"][name] = archive.read(info)
                    report.side_files_found += 1
                except Exception as e:
                    logger.warning(f"Failed to read track file {name}: {e}")
                    report.side_files_failed += 1

        logger.info(
            f"Scanned {report.archive_entries} archive entries, "
            f"found {report.side_files_found} track files"
        )
        return contents

    def build_activities(
        self,
        data_rows: list[list[str]],
        side_files: dict[str, bytes],
        report: ImportReport,
    ) -> list[Activity]:
        """Normalize data rows and attach routes from matching side files."""
        normalizer = ActivityNormalizer()
        decoded_tracks: dict[str, list] = {}
        activities = []

        for index, values in enumerate(data_rows):
            report.total_rows += 1
            normalized = normalizer.normalize(values, index)
            if normalized is None:
                report.rejected_rows += 1
                continue

            activity = normalized.activity
            entry_name = self.resolve_side_file(normalized.filename, side_files)
            if entry_name is not None:
                if entry_name not in decoded_tracks:
                    decoded_tracks[entry_name] = self.decode_track(entry_name, side_files[entry_name])
                    if not decoded_tracks[entry_name]:
                        report.side_files_failed += 1
                coords = decoded_tracks[entry_name]
                if len(coords) > 1:
                    activity = attach_route(activity, coords)
                    report.routes_attached += 1
            elif normalized.filename:
                report.warnings.append(f"Track file {normalized.filename} not found in archive")

            activities.append(activity)

        report.imported_activities = len(activities)
        return activities

    @staticmethod
    def resolve_side_file(filename: Optional[str], side_files: dict[str, bytes]) -> Optional[str]:
        """Find the archive entry for a filename referenced by the index table."""
        if not filename:
            return None
        for candidate in (filename, f"/{filename}", filename.lstrip("/")):
            if candidate in side_files:
                return candidate
        return None

    def decode_track(self, entry_name: str, data: bytes) -> list:
        """Decode a side file with the decoder matching its format."""
        lower_name = entry_name.lower()
        if lower_name.endswith(GPX_SUFFIXES):
            return self.gpx_parser.parse_coordinates(data, entry_name)
        if lower_name.endswith(FIT_SUFFIXES):
            return self.fit_parser.parse_coordinates(data, entry_name)
        return []

    @staticmethod
    def _read_index_table(archive, info) -> bytes:
        try:
            return archive.read(info)
        except Exception as e:
            logger.error(f"Failed to read {info.filename}: {e}")
            raise ExportImportError(
                f"Could not read activities.csv from the export ({e}). "
                "Please download the export from Strava again."
            ) from e

    def _read_athlete_names(self, archive, info, report: ImportReport) -> tuple[str, str]:
        firstname, lastname = DEFAULT_FIRST_NAME, DEFAULT_LAST_NAME
        try:
            text = archive.read(info).decode("utf-8", errors="replace")
            record = self.csv_extractor.parse_header_record(text)
        except Exception as e:
            logger.warning(f"Failed to parse {info.filename}: {e}")
            report.warnings.append(f"Could not read athlete profile: {e}")
            return firstname, lastname

        if not record:
            return firstname, lastname

        headers = list(record)
        first_header = next((h for h in headers if "first" in h.lower() and "name" in h.lower()), None)
        last_header = next((h for h in headers if "last" in h.lower() and "name" in h.lower()), None)
        if first_header and record[first_header]:
            firstname = record[first_header]
        if last_header and record[last_header]:
            lastname = record[last_header]
        return firstname, lastname

    def _read_profile_picture(self, archive, info, report: ImportReport) -> Optional[str]:
        lower_name = info.filename.lower()
        mime_type = next(
            (mime for suffix, mime in PROFILE_IMAGE_TYPES.items() if lower_name.endswith(suffix)),
            "image/jpeg",
        )
        try:
            encoded = base64.b64encode(archive.read(info)).decode("ascii")
        except Exception as e:
            logger.warning(f"Failed to load profile picture {info.filename}: {e}")
            report.warnings.append(f"Could not read profile picture: {e}")
            return None
        return f"data:{mime_type};base64,{encoded}"

    @staticmethod
    def _open(source: ArchiveSource):
        if isinstance(source, (bytes, bytearray)):
            return io.BytesIO(source)
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.exists():
                raise ExportImportError(f"Export file not found: {path}")
            return path
        return source


def attach_route(activity: Activity, coords: list) -> Activity:
    """Return a copy of ``activity`` carrying the route, its encoding and endpoints."""
    encoded = encode_polyline(coords)
    data = activity.model_dump()
    data.update(
        route=coords,
        start_latlng=coords[0],
        end_latlng=coords[-1],
        map={
            "id": f"map_{activity.id}",
            "summary_polyline": encoded,
            "polyline": encoded,
        },
    )
    return Activity.model_validate(data)


def import_strava_export(source: ArchiveSource) -> ImportResult:
    """Import a Strava export archive with the default parsers."""
    return ArchiveImporter().import_archive(source)
