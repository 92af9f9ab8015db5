"""Hand landmark session recording and replay.

Recordings hold the raw (unmirrored, un-normalized) detector output so a
session can be fed back through the controller without a camera, for
reproducible tests and headless renders.
"""

from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterator, Optional

import numpy as np

FORMAT_VERSION = 1


@dataclass
class RecordedFrame:
    """One detector callback."""
    timestamp: float  # seconds from recording start
    hands: list  # list of (21, 3) landmarks, nested lists on disk


class SessionRecorder:
    """Collects detector frames and writes them to disk.

    Usage:
        recorder = SessionRecorder()
        recorder.start()
        # In the frame loop:
        recorder.add_frame(hands)
        recorder.save("session.json")
    """

    def __init__(self):
        self._frames: list[RecordedFrame] = []
        self._start_time: Optional[float] = None
        self._recording = False

    def start(self):
        self._frames = []
        self._start_time = time.monotonic()
        self._recording = True

    def stop(self) -> int:
        """Stop recording. Returns number of frames captured."""
        self._recording = False
        return len(self._frames)

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        if not self._frames:
            return 0.0
        return self._frames[-1].timestamp

    def add_frame(self, hands: list[np.ndarray], timestamp: Optional[float] = None):
        """Append a frame. Ignored unless recording."""
        if not self._recording:
            return

        if timestamp is None:
            timestamp = time.monotonic() - self._start_time
        self._frames.append(RecordedFrame(
            timestamp=float(timestamp),
            hands=[np.asarray(h, dtype=np.float32).tolist() for h in hands],
        ))

    def save(self, path: str | Path) -> Path:
        """Write JSON, or compact npz when the path ends in .npz."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if path.suffix == ".npz":
            self._save_compact(path)
            return path

        data = {
            "version": FORMAT_VERSION,
            "frame_count": len(self._frames),
            "duration": self.duration,
            "frames": [asdict(f) for f in self._frames],
        }
        with open(path, "w") as f:
            json.dump(data, f)
        return path

    def _save_compact(self, path: Path):
        n = len(self._frames)
        max_hands = max((len(f.hands) for f in self._frames), default=0)

        hands_array = np.zeros((n, max(1, max_hands), 21, 3), dtype=np.float32)
        hand_counts = np.zeros(n, dtype=np.int32)
        for i, frame in enumerate(self._frames):
            hand_counts[i] = len(frame.hands)
            for j, hand in enumerate(frame.hands):
                hands_array[i, j] = np.array(hand, dtype=np.float32)

        np.savez_compressed(
            path,
            version=np.array([FORMAT_VERSION]),
            timestamps=np.array([f.timestamp for f in self._frames], dtype=np.float64),
            hands=hands_array,
            hand_counts=hand_counts,
        )


class SessionPlayer:
    """Replays a recorded session frame by frame."""

    def __init__(self, frames: list[RecordedFrame]):
        self._frames = frames

    @classmethod
    def load(cls, path: str | Path) -> SessionPlayer:
        path = Path(path)
        if path.suffix == ".npz":
            return cls._load_compact(path)

        with open(path) as f:
            data = json.load(f)

        version = data.get("version", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise ValueError(f"{path}: unsupported recording version {version}")

        return cls([
            RecordedFrame(timestamp=f["timestamp"], hands=f.get("hands", []))
            for f in data["frames"]
        ])

    @classmethod
    def _load_compact(cls, path: Path) -> SessionPlayer:
        data = np.load(path, allow_pickle=False)
        timestamps = data["timestamps"]
        hands_array = data["hands"]
        hand_counts = data["hand_counts"]

        frames = []
        for i in range(len(timestamps)):
            n_hands = int(hand_counts[i])
            frames.append(RecordedFrame(
                timestamp=float(timestamps[i]),
                hands=[hands_array[i, j].tolist() for j in range(n_hands)],
            ))
        return cls(frames)

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def duration(self) -> float:
        if not self._frames:
            return 0.0
        return self._frames[-1].timestamp

    def play(self) -> Iterator[RecordedFrame]:
        """Yield frames instantly, hands as numpy arrays."""
        for frame in self._frames:
            yield RecordedFrame(
                timestamp=frame.timestamp,
                hands=[np.array(h, dtype=np.float32) for h in frame.hands],
            )

    def play_realtime(self, speed: float = 1.0) -> Iterator[RecordedFrame]:
        """Yield frames at their recorded pace (scaled by ``speed``)."""
        start = time.monotonic()
        for frame in self.play():
            target = frame.timestamp / speed
            elapsed = time.monotonic() - start
            if target > elapsed:
                time.sleep(target - elapsed)
            yield frame
