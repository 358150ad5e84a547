"""
Shared fixtures: in-memory collaborators and small source images.

The fakes implement the same duck-typed interfaces as the Drive, Sheets,
WooCommerce and SMTP clients so services and routes run without network.
"""

import base64
from io import BytesIO

import pytest
from PIL import Image

from config import PipelineSettings
from core.exceptions import PublishError
from models.artifacts import Artifact


def image_bytes(size=(40, 20), color=(0, 0, 255), fmt="PNG", mode="RGB"):
    """Encode a solid-color image."""
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def data_uri(data: bytes, media_type: str = "image/png") -> str:
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


class FakeStorage:
    """Drive stand-in keeping files in a dict."""

    def __init__(self, fail_on_call=None, error=None):
        self.files = {}
        self.calls = []
        self._fail_on_call = fail_on_call
        self._error = error or PublishError("Drive upload failed")
        self._move_error_for = None

    def create_file(self, data, name, mime_type, parent_id):
        self.calls.append(("create", name, mime_type, parent_id))
        if self._fail_on_call is not None and len(self.calls) == self._fail_on_call:
            raise self._error
        file_id = f"file-{len(self.files) + 1}"
        artifact = Artifact(id=file_id, name=name, link=f"https://drive.test/{file_id}",
                            parents=[parent_id])
        self.files[file_id] = {"artifact": artifact, "data": data, "mime_type": mime_type}
        return artifact

    def find_files(self, name_contains):
        self.calls.append(("find", name_contains))
        return [entry["artifact"] for entry in self.files.values()
                if name_contains in entry["artifact"].name]

    def fail_moves_for(self, name_fragment, error=None):
        self._move_error_for = (name_fragment, error or PublishError("Drive move failed"))

    def move_file(self, artifact, folder_id):
        self.calls.append(("move", artifact.name, folder_id))
        if self._move_error_for and self._move_error_for[0] in artifact.name:
            raise self._move_error_for[1]
        moved = Artifact(id=artifact.id, name=artifact.name, link=artifact.link,
                         parents=[folder_id])
        self.files[artifact.id]["artifact"] = moved
        return moved

    def data_named(self, fragment):
        for entry in self.files.values():
            if fragment in entry["artifact"].name:
                return entry["data"]
        raise KeyError(fragment)


class FakeLedger:
    def __init__(self, error=None):
        self.rows = []
        self._error = error

    def append_row(self, values):
        if self._error:
            raise self._error
        self.rows.append(list(values))

    def has_order(self, order_number):
        return any(row[1] == str(order_number) for row in self.rows)


class FakeCommerce:
    def __init__(self, orders=None, error=None):
        self.orders = orders or {}
        self._error = error
        self.lookups = []

    def get_order(self, order_id):
        self.lookups.append(order_id)
        if self._error:
            raise self._error
        return self.orders[order_id]


class FakeMailer:
    def __init__(self, error=None):
        self.sent = []
        self._error = error

    def send(self, recipient, subject, body):
        if self._error:
            raise self._error
        self.sent.append((recipient, subject, body))


def sample_order(order_id="1001", status="processing", email="ada@example.com"):
    """WooCommerce-shaped order resource."""
    return {
        "id": int(order_id) if order_id.isdigit() else order_id,
        "number": order_id,
        "status": status,
        "billing": {"first_name": "Ada", "last_name": "Lovelace", "email": email},
        "shipping": {
            "address_1": "12 Analytical Row",
            "city": "London",
            "postcode": "N1 7AA",
            "country": "GB",
        },
        "line_items": [
            {
                "name": "Fine Art Print",
                "meta_data": [
                    {"key": "Paper Type", "value": "Matte"},
                    {"key": "Paper Size", "value": "A4"},
                    {"key": "Border Size", "value": "10"},
                    {"key": "Orientation", "value": "Portrait"},
                ],
            }
        ],
    }


@pytest.fixture
def settings():
    """Low DPI keeps canvases small; A4 is 248x351 at 30 DPI."""
    return PipelineSettings(dpi=30, border_unit="mm", max_border_size=100, pdf_render_scale=3)


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def mailer():
    return FakeMailer()
