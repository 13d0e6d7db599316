"""
Scan and diagnosis result rows.

Rows are written once after a scan or diagnosis and only read back for the
dashboard and history lists.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, List

from errors import RecordError
from models import DiagnosisResult, ScanResult

logger = logging.getLogger(__name__)

SCANS_TABLE = "scan_results"
DIAGNOSES_TABLE = "diagnosis_results"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _insert(client, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
    rows = client.table(table).insert(row).execute().data
    return rows[0] if rows else row


def save_scan_result(client, scan: ScanResult) -> ScanResult:
    try:
        row = _insert(client, SCANS_TABLE, scan.to_row())
    except Exception as e:
        logger.error("Error saving scan result: %s", e)
        raise RecordError("Failed to save scan result") from e
    return ScanResult.from_row(row)


def save_diagnosis_result(client, diagnosis: DiagnosisResult) -> DiagnosisResult:
    try:
        row = _insert(client, DIAGNOSES_TABLE, diagnosis.to_row())
    except Exception as e:
        logger.error("Error saving diagnosis result: %s", e)
        raise RecordError("Failed to save diagnosis result") from e
    return DiagnosisResult.from_row(row)


def _recent_rows(client, table: str, user_id: str, limit: int) -> List[Dict[str, Any]]:
    return (
        client.table(table)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
        .data
    ) or []


def list_scan_results(client, user_id: str, limit: int = 20) -> List[ScanResult]:
    try:
        rows = _recent_rows(client, SCANS_TABLE, user_id, limit)
    except Exception as e:
        logger.error("Error loading scan history: %s", e)
        raise RecordError("Failed to load scan history") from e
    return [ScanResult.from_row(r) for r in rows]


def list_diagnosis_results(client, user_id: str, limit: int = 20) -> List[DiagnosisResult]:
    try:
        rows = _recent_rows(client, DIAGNOSES_TABLE, user_id, limit)
    except Exception as e:
        logger.error("Error loading diagnosis history: %s", e)
        raise RecordError("Failed to load diagnosis history") from e
    return [DiagnosisResult.from_row(r) for r in rows]


def _created_at(item: Dict[str, Any]) -> datetime:
    value = item.get("created_at")
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def recent_activity(client, user_id: str, limit: int = 5) -> List[Dict[str, Any]]:
    """
    Latest scans and diagnoses merged into one newest-first list.

    The two tables are read in parallel; there is no consistency guarantee
    between the reads.
    """
    try:
        with ThreadPoolExecutor(max_workers=2) as pool:
            scans = pool.submit(_recent_rows, client, SCANS_TABLE, user_id, limit)
            diagnoses = pool.submit(_recent_rows, client, DIAGNOSES_TABLE, user_id, limit)
            scan_rows = scans.result()
            diagnosis_rows = diagnoses.result()
    except Exception as e:
        logger.error("Error loading recent activity: %s", e)
        raise RecordError("Failed to load recent activity") from e

    activity = [{**row, "type": "scan"} for row in scan_rows]
    activity += [{**row, "type": "diagnosis"} for row in diagnosis_rows]
    activity.sort(key=_created_at, reverse=True)
    return activity[:limit]
