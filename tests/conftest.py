"""
Test configuration and fixtures.
"""

import pytest
import cv2
import numpy as np
from fastapi.testclient import TestClient

from matchvision.config import get_settings


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep every test on the offline provider with its own data dir."""
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("VISION_PROVIDER", "stub")
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _write_video(path, n_frames: int, fps: float = 10.0, size=(160, 120)):
    w, h = size
    writer = cv2.VideoWriter(str(path), cv2.VideoWriter_fourcc(*"MJPG"), fps, (w, h))
    assert writer.isOpened()
    for i in range(n_frames):
        frame = np.zeros((h, w, 3), dtype=np.uint8)
        frame[:, :] = (0, 140, 0)  # pitch green
        cv2.circle(frame, (10 + i * 4 % (w - 20), h // 2), 6, (255, 255, 255), -1)
        writer.write(frame)
    writer.release()
    return path


@pytest.fixture
def sample_video(tmp_path):
    """3 seconds of synthetic 160x120 footage."""
    return _write_video(tmp_path / "match.avi", n_frames=30)


@pytest.fixture
def short_video(tmp_path):
    """Half a second of footage, shorter than the capture offset."""
    return _write_video(tmp_path / "short.avi", n_frames=5)


@pytest.fixture
def garbage_video(tmp_path):
    path = tmp_path / "broken.mp4"
    path.write_bytes(b"this is not a video file" * 10)
    return path


@pytest.fixture
def client():
    from matchvision.main import create_app
    return TestClient(create_app())


@pytest.fixture
def sample_analysis():
    return (
        "1. Teams: Arsenal vs Chelsea\n"
        "\n"
        "SCORE: Arsenal lead, score 2 - 1\n"
        "\n"
        "3. Player positions:\n"
        "- Back four holding a high line\n"
        "- Striker isolated up front\n"
        "4. Tactics:\n"
        "Arsenal press high.\n"
        "Chelsea sit deep."
    )
