"""Shared pytest fixtures for the expense report test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List

import pytest
from PIL import Image

from expense_report.core.models import EmployeeDetails


class RecordingRenderer:
    """Renderer that records layout primitives per page instead of drawing."""

    def __init__(self) -> None:
        self.pages: List[list] = []
        self.rtl = False

    def new_page(self) -> None:
        self.pages.append([])

    def set_rtl(self) -> None:
        self.rtl = True

    def line(self, x1, y1, x2, y2) -> None:
        self.pages[-1].append(("line", x1, y1, x2, y2))

    def image(self, img, x, y, width, height) -> None:
        self.pages[-1].append(("image", img, x, y, width, height))

    def text(self, text, right, y, size=12):
        self.pages[-1].append(("text", text, right, y))
        return len(text) * 2.0, 5.0

    def texts(self, page: int) -> List[str]:
        return [op[1] for op in self.pages[page] if op[0] == "text"]

    def images(self, page: int) -> list:
        return [op for op in self.pages[page] if op[0] == "image"]


@pytest.fixture()
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture()
def employee() -> EmployeeDetails:
    return EmployeeDetails(name="דנה כהן", id="4821")


@pytest.fixture()
def make_image(tmp_path: Path) -> Callable[..., Path]:
    """Write a small solid-colour image and return its path."""

    def _make(name: str = "receipt.png", size=(120, 80)) -> Path:
        path = tmp_path / name
        Image.new("RGB", size, "white").save(path)
        return path

    return _make
