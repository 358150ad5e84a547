"""
Google Drive storage client.

Thin wrapper over the Drive v3 API used as the artifact store:

    create_file()  - upload bytes into a folder, returns id + webViewLink
    find_files()   - every non-trashed file whose name contains a token
    move_file()    - re-parent a file into another folder

Every failure is translated into the PrintPrep exception hierarchy:
HttpError, auth refresh and transport errors -> PublishError,
socket timeout -> UpstreamTimeoutError.

Usage:
    storage = DriveStorageClient.from_service_account("keys.json", timeout_seconds=30)
    artifact = storage.create_file(jpeg_bytes, "1234_processed.jpg", "image/jpeg", folder_id)
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Any, Callable, List, Optional

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from models.artifacts import Artifact
from .exceptions import PublishError, UpstreamTimeoutError
from .google_auth import DRIVE_SCOPES, GoogleSession

FILE_FIELDS = "id, name, webViewLink, parents"


class DriveStorageClient:
    """
    Artifact storage backed by Google Drive.

    Thread Safety:
        The discovery resource only builds request objects. Each request is
        executed on its own HTTP transport from ``http_factory``.
    """

    def __init__(
        self,
        service: Any,
        http_factory: Optional[Callable[[], Any]] = None,
        timeout_seconds: float = 30.0,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            service: Drive v3 resource (``build("drive", "v3", ...)``)
            http_factory: Returns a fresh transport per call (None uses the resource's own)
            timeout_seconds: Reported in UpstreamTimeoutError
            logger: Logger instance (creates default if not provided)
        """
        self._service = service
        self._http_factory = http_factory
        self._timeout = timeout_seconds
        self._logger = logger or logging.getLogger("print_prep.core.drive_client")

    @classmethod
    def from_service_account(cls, credentials_file: str, timeout_seconds: float = 30.0,
                             logger: Optional[logging.Logger] = None) -> "DriveStorageClient":
        session = GoogleSession.from_service_account(
            "drive", "v3", credentials_file, DRIVE_SCOPES, timeout_seconds
        )
        return cls(session.service, session.new_http, timeout_seconds, logger)

    def create_file(self, data: bytes, name: str, mime_type: str, parent_id: str) -> Artifact:
        """
        Upload ``data`` as a new file in ``parent_id``.

        Raises:
            PublishError: Drive rejected the upload
            UpstreamTimeoutError: Upload did not finish in time
        """
        media = MediaIoBaseUpload(BytesIO(data), mimetype=mime_type, resumable=False)
        request = self._service.files().create(
            body={"name": name, "parents": [parent_id]},
            media_body=media,
            fields=FILE_FIELDS,
            supportsAllDrives=True,
        )
        response = self._execute(request, f"upload of {name}")
        self._logger.info(f"Uploaded {name} ({len(data)} bytes) as {response.get('id')}")
        return Artifact.from_api(response)

    def find_files(self, name_contains: str) -> List[Artifact]:
        """
        List non-trashed files whose name contains ``name_contains``.

        Not restricted to one folder, so a re-run confirmation still finds
        files it already moved.
        """
        escaped = name_contains.replace("\\", "\\\\").replace("'", "\\'")
        query = f"name contains '{escaped}' and trashed = false"

        files: List[Artifact] = []
        page_token = None
        while True:
            request = self._service.files().list(
                q=query,
                fields=f"nextPageToken, files({FILE_FIELDS})",
                pageToken=page_token,
                supportsAllDrives=True,
                includeItemsFromAllDrives=True,
            )
            response = self._execute(request, f"search for '{name_contains}'")
            files.extend(Artifact.from_api(item) for item in response.get("files", []))
            page_token = response.get("nextPageToken")
            if not page_token:
                break

        self._logger.debug(f"Found {len(files)} files matching '{name_contains}'")
        return files

    def move_file(self, artifact: Artifact, folder_id: str) -> Artifact:
        """
        Re-parent ``artifact`` into ``folder_id``.

        A file whose only parent is already ``folder_id`` is returned as-is.
        """
        previous = [parent for parent in artifact.parents if parent != folder_id]
        if folder_id in artifact.parents and not previous:
            self._logger.debug(f"{artifact.name} already in folder {folder_id}")
            return artifact

        request = self._service.files().update(
            fileId=artifact.id,
            addParents=folder_id,
            removeParents=",".join(previous) if previous else None,
            fields=FILE_FIELDS,
            supportsAllDrives=True,
        )
        response = self._execute(request, f"move of {artifact.name}")
        self._logger.info(f"Moved {artifact.name} to folder {folder_id}")
        return Artifact.from_api(response)

    def _execute(self, request, operation: str) -> dict:
        try:
            if self._http_factory is not None:
                return request.execute(http=self._http_factory())
            return request.execute()
        except HttpError as exc:
            status = getattr(exc.resp, "status", None)
            self._logger.error(f"Drive {operation} failed ({status}): {exc}")
            raise PublishError(
                f"Drive {operation} failed: {getattr(exc, 'reason', exc)}",
                {"operation": operation, "status": status},
            )
        except TimeoutError:
            self._logger.error(f"Drive {operation} timed out")
            raise UpstreamTimeoutError(f"Drive {operation}", self._timeout)
        except (GoogleAuthError, httplib2.HttpLib2Error, OSError) as exc:
            self._logger.error(f"Drive {operation} failed: {exc}")
            raise PublishError(f"Drive {operation} failed: {exc}", {"operation": operation})
