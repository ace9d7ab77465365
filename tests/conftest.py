"""
Shared fakes for tests: a Drive folder held in memory, a scripted Gemini client,
a controllable clock, and small in-memory Office documents.
"""

import io
import zipfile
from typing import Any

import pytest

from app.core.config import MIME_PPTX
from app.core.errors import UpstreamFetchError
from app.services.drive_client import FileRecord


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDrive:
    """In-memory Drive folder. files: list of (name, mime_type, content or Exception)."""

    def __init__(self, files: list[tuple[str, str, Any]] | None = None, list_error: Exception | None = None) -> None:
        self.files = files or []
        self.list_error = list_error
        self.list_calls = 0
        self.downloads: list[str] = []

    def list_files(self, folder_id: str) -> list[FileRecord]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return [FileRecord(id=f"id-{i}", name=name, mime_type=mime) for i, (name, mime, _) in enumerate(self.files)]

    def download(self, file_id: str) -> bytes:
        self.downloads.append(file_id)
        _, _, content = self.files[int(file_id.split("-")[1])]
        if isinstance(content, Exception):
            raise content
        return content


class FakeGemini:
    """Returns a canned Gemini reply and records the contents it was sent."""

    def __init__(self, reply: dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self.reply = reply if reply is not None else gemini_reply("Late work loses 10% per day.")
        self.error = error
        self.calls: list[list[dict[str, Any]]] = []

    async def generate_content(self, contents: list[dict[str, Any]]) -> dict[str, Any]:
        self.calls.append(contents)
        if self.error is not None:
            raise self.error
        return self.reply


def gemini_reply(text: str, finish_reason: str = "STOP") -> dict[str, Any]:
    return {
        "candidates": [
            {
                "content": {"role": "model", "parts": [{"text": text}]},
                "finishReason": finish_reason,
            }
        ]
    }


def make_pptx(*slides: list[str]) -> bytes:
    """Minimal .pptx-like archive: one ppt/slides/slideN.xml per slide with <a:t> runs."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")
        for i, runs in enumerate(slides, start=1):
            body = "".join(f"<a:r><a:t>{run}</a:t></a:r>" for run in runs)
            archive.writestr(
                f"ppt/slides/slide{i}.xml",
                f'<p:sld xmlns:a="a" xmlns:p="p"><p:txBody><a:p>{body}</a:p></p:txBody></p:sld>',
            )
            archive.writestr(f"ppt/slides/_rels/slide{i}.xml.rels", "<Relationships/>")
    return buf.getvalue()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def course_drive() -> FakeDrive:
    return FakeDrive(
        [
            ("intro.pptx", MIME_PPTX, make_pptx(["Welcome", "to CS101"], ["Grading", "policy"])),
            ("broken.pptx", MIME_PPTX, b"not a zip"),
            ("missing.pptx", MIME_PPTX, UpstreamFetchError("404")),
        ]
    )
