"""Image payloads attached to the repro interaction.

Synthetic images are flat-colour PNGs rendered in memory with Pillow; real
images are read from the fixture directory (`data/` at the repo root unless
overridden).
"""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from PIL import Image

from .config import RunConfig
from .utils import repo_root

Role = Literal["input", "output"]

SYNTHETIC_SIZE = (1920, 1080)
SYNTHETIC_COLORS: dict[str, tuple[int, int, int]] = {
    "input": (255, 0, 0),
    "output": (0, 255, 0),
}
FIXTURE_FILENAMES: dict[str, str] = {
    "input": "input-screenshot.png",
    "output": "output-click-target.png",
}
ATTACHMENT_NAMES: dict[str, str] = {
    "input": "screenshot",
    "output": "click_target",
}


@dataclass(frozen=True)
class ImagePayload:
    role: Role
    name: str
    data: bytes

    def __len__(self) -> int:
        return len(self.data)

    def data_uri(self) -> str:
        return f"data:image/png;base64,{base64.b64encode(self.data).decode('ascii')}"


def default_data_dir() -> Path:
    return repo_root() / "data"


def obtain_image(role: Role, config: RunConfig) -> ImagePayload:
    if role not in ATTACHMENT_NAMES:
        raise ValueError(f"Unknown image role '{role}'.")
    if config.use_real_images:
        data = load_fixture_image(FIXTURE_FILENAMES[role], config.data_dir)
    else:
        data = synthesize_png(SYNTHETIC_COLORS[role])
    return ImagePayload(role=role, name=ATTACHMENT_NAMES[role], data=data)


def synthesize_png(color: tuple[int, int, int], size: tuple[int, int] = SYNTHETIC_SIZE) -> bytes:
    image = Image.new("RGB", size, color)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def load_fixture_image(filename: str, data_dir: Path | None = None) -> bytes:
    # FileNotFoundError propagates to the caller unchanged.
    base_dir = Path(data_dir) if data_dir else default_data_dir()
    return (base_dir / filename).read_bytes()
