import json
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from photopicker.config import ProcessingConfig
from photopicker.runners import headless


class FakeVideoWriter:
    instances = []

    def __init__(self, path, width, height, fps=15.0):
        self.path = path
        self.width = width
        self.height = height
        self.fps = fps
        self.frames = []
        FakeVideoWriter.instances.append(self)

    def write_frame(self, frame):
        assert frame.shape == (self.height, self.width, 3)
        self.frames.append(frame)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass


@pytest.fixture(autouse=True)
def fake_writer(monkeypatch):
    FakeVideoWriter.instances = []
    monkeypatch.setattr(headless, "VideoWriter", FakeVideoWriter)


def write_inputs(tmp_path: Path, masks):
    image_path = tmp_path / "photo.png"
    Image.new("RGB", (40, 30), color=(200, 200, 200)).save(image_path)
    masks_path = tmp_path / "masks.json"
    masks_path.write_text(json.dumps({"masks": [{"mask": m} for m in masks]}))
    return str(image_path), str(masks_path)


def rect(top, left):
    mask = np.zeros((30, 40), dtype=np.uint8)
    mask[top : top + 8, left : left + 10] = 1
    return mask.tolist()


def test_run_writes_shuffle_animation(tmp_path: Path, capsys):
    image_path, masks_path = write_inputs(tmp_path, [rect(2, 2), rect(15, 20)])
    snapshot = tmp_path / "final.png"
    config = ProcessingConfig.from_args(
        input_path=image_path,
        output_path=str(tmp_path / "out.mp4"),
        masks_path=masks_path,
        ticks=5,
        seed=11,
        container_width=80,
        container_height=40,
        hold_frames=3,
        snapshot_path=str(snapshot),
    )

    headless.run_headless(config)

    (writer,) = FakeVideoWriter.instances
    assert (writer.width, writer.height) == (80, 40)
    assert writer.fps == pytest.approx(1000 / 150)
    # idle frame + 5 ticks + final pick + 3 held frames
    assert len(writer.frames) == 1 + 5 + 1 + 3
    assert Image.open(snapshot).size == (80, 40)

    out = capsys.readouterr().out
    assert "Loaded 2 candidates" in out
    assert "Selected: object-" in out


def test_run_without_candidates_writes_nothing(tmp_path: Path, capsys):
    image_path, masks_path = write_inputs(tmp_path, [np.zeros((30, 40), dtype=int).tolist()])
    config = ProcessingConfig.from_args(
        input_path=image_path,
        output_path=str(tmp_path / "out.mp4"),
        masks_path=masks_path,
    )

    headless.run_headless(config)

    assert FakeVideoWriter.instances == []
    assert "Nothing to shuffle" in capsys.readouterr().out


def test_run_exits_on_bad_masks_file(tmp_path: Path, capsys):
    image_path, masks_path = write_inputs(tmp_path, [])
    Path(masks_path).write_text("{broken")
    config = ProcessingConfig.from_args(
        input_path=image_path,
        output_path=str(tmp_path / "out.mp4"),
        masks_path=masks_path,
    )

    with pytest.raises(SystemExit) as exc:
        headless.run_headless(config)

    assert exc.value.code == 1
    assert "Segmentation failed" in capsys.readouterr().err
    assert FakeVideoWriter.instances == []


def test_create_segmenter_requires_a_source():
    config = ProcessingConfig.from_args(input_path="x.png", output_path="y.mp4")
    with pytest.raises(ValueError):
        headless.create_segmenter(config)
