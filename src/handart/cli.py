"""HandArt CLI.

Usage:
    handart run          — Draw in the air with your webcam
    handart record       — Record hand landmarks from the camera
    handart replay       — Render a recorded session to PNG
    handart init-config  — Write the default configuration to YAML

Window keys (run):
    d / p     draw / particle mode
    z / y     undo / redo
    c         clear canvas
    s         save PNG
    b         toggle background blur
    1-8       palette colours
    + / -     brush size
    q / Esc   quit
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Optional

import typer

from handart.config import AppConfig, load_config

app = typer.Typer(
    name="handart",
    help="🖐  Draw and paint particles in the air with hand gestures.",
    add_completion=False,
)

logger = logging.getLogger("handart.cli")

# Consecutive failed camera reads before the run loop gives up
MAX_READ_FAILURES = 100


def _setup_logging(level: str):
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load(config_path: Optional[str]) -> AppConfig:
    if config_path and not Path(config_path).exists():
        typer.echo(f"❌ Config not found: {config_path}", err=True)
        raise typer.Exit(1)
    try:
        return load_config(config_path)
    except ValueError as e:
        typer.echo(f"❌ Invalid config: {e}", err=True)
        raise typer.Exit(1)


def _parse_mode(value: str):
    from handart.controller import Mode

    try:
        return Mode(value)
    except ValueError:
        typer.echo(f"❌ Unknown mode: {value} (expected draw or particle)", err=True)
        raise typer.Exit(1)


def _save_png(data: bytes, directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"hand-art-{int(time.time() * 1000)}.png"
    path.write_bytes(data)
    return path


def handle_key(controller, key: int, output_dir: Path) -> bool:
    """Apply a window key press. Returns False when the user quits."""
    from handart.controller import Mode

    if key in (ord("q"), 27):
        return False

    ch = chr(key) if 0 <= key < 256 else ""
    brush = controller.session.brush
    palette = controller.config.brush.palette

    if ch == "d":
        controller.set_mode(Mode.DRAW)
    elif ch == "p":
        controller.set_mode(Mode.PARTICLE)
    elif ch == "z":
        controller.undo()
    elif ch == "y":
        controller.redo()
    elif ch == "c":
        controller.clear()
    elif ch == "s":
        path = _save_png(controller.save_png(), output_dir)
        typer.echo(f"💾 Saved {path}")
    elif ch == "b":
        enabled = controller.toggle_blur()
        logger.info("Background blur %s", "on" if enabled else "off")
    elif ch.isdigit() and 1 <= int(ch) <= len(palette):
        controller.set_brush_color(palette[int(ch) - 1])
    elif ch in ("+", "="):
        cfg = controller.config.brush
        controller.set_brush_size(min(cfg.max_size, brush.size + 1))
    elif ch in ("-", "_"):
        cfg = controller.config.brush
        controller.set_brush_size(max(cfg.min_size, brush.size - 1))
    return True


@app.command()
def run(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    camera: Optional[int] = typer.Option(None, help="Camera device index (overrides config)"),
    mode: str = typer.Option("draw", help="Start mode: draw or particle"),
    output_dir: str = typer.Option(".", "--output-dir", help="Where saved PNGs go"),
    log_level: str = typer.Option("info", help="Log level"),
):
    """Open the webcam and draw with hand gestures."""
    import cv2
    from handart.controller import InteractionController
    from handart.detector import HandDetector, SelfieSegmenter
    from handart import overlay

    _setup_logging(log_level)
    cfg = _load(config)
    if camera is not None:
        cfg.camera.index = camera

    controller = InteractionController(cfg)
    controller.set_mode(_parse_mode(mode))

    cap = cv2.VideoCapture(cfg.camera.index)
    if not cap.isOpened():
        controller.set_camera_status("camera not found")
        typer.echo(f"❌ Could not open camera {cfg.camera.index}", err=True)
        raise typer.Exit(1)
    cap.set(cv2.CAP_PROP_FRAME_WIDTH, cfg.camera.width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, cfg.camera.height)

    try:
        detector = HandDetector.from_config(cfg.detector)
        segmenter = SelfieSegmenter(model_selection=cfg.detector.segmentation_model)
    except ImportError as e:
        cap.release()
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    controller.set_camera_status("running")
    typer.echo("🎥 Camera running. Point your index finger to draw, press q to quit.")

    out = Path(output_dir)
    failures = 0
    try:
        while True:
            ret, frame = cap.read()
            hands = []
            preview = None
            if ret:
                failures = 0
                controller.set_camera_status("running")
            else:
                failures += 1
                controller.set_camera_status("no frame")
                if failures >= MAX_READ_FAILURES:
                    typer.echo(f"❌ Camera stopped delivering frames ({failures} failed reads)", err=True)
                    break

            controller.animation_tick()

            if ret:
                frame_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
                hands = detector.detect(frame_rgb)
                controller.on_results(hands)
                preview = segmenter.preview(frame_rgb, blur=controller.session.blur_enabled)

            # Only a pose the controller accepted is drawn as a skeleton
            accepted = hands[0] if hands and controller.session.hand_detected else None
            display = overlay.compose(
                controller.surface.image,
                controller.status,
                landmarks=accepted,
                cursor=controller.session.cursor,
                brush_color=controller.session.brush.color,
                preview_rgb=preview,
            )
            cv2.imshow("HandArt", display)

            key = cv2.waitKey(1) & 0xFF
            if key != 0xFF and not handle_key(controller, key, out):
                break
    except KeyboardInterrupt:
        pass
    finally:
        cap.release()
        detector.close()
        segmenter.close()
        cv2.destroyAllWindows()


@app.command()
def record(
    output: str = typer.Option("session.json", "-o", help="Output file (.json or .npz)"),
    duration: float = typer.Option(0, help="Recording duration in seconds (0 = until Ctrl+C)"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    camera: Optional[int] = typer.Option(None, help="Camera device index"),
):
    """Record raw hand landmarks from the camera."""
    import cv2
    from handart.detector import HandDetector
    from handart.recorder import SessionRecorder

    cfg = _load(config)
    index = cfg.camera.index if camera is None else camera

    cap = cv2.VideoCapture(index)
    if not cap.isOpened():
        typer.echo(f"❌ Could not open camera {index}", err=True)
        raise typer.Exit(1)

    try:
        detector = HandDetector.from_config(cfg.detector)
    except ImportError as e:
        cap.release()
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    recorder = SessionRecorder()
    typer.echo(f"🎥 Recording from camera {index}... (Ctrl+C to stop)")
    recorder.start()
    start = time.monotonic()

    try:
        while True:
            ret, frame = cap.read()
            if not ret:
                continue
            hands = detector.detect(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
            recorder.add_frame(hands)

            if recorder.frame_count % 30 == 0:
                typer.echo(f"\r   Frames: {recorder.frame_count} | Hands: {len(hands)}", nl=False)

            if duration > 0 and (time.monotonic() - start) >= duration:
                break
    except KeyboardInterrupt:
        pass
    finally:
        recorder.stop()
        cap.release()
        detector.close()

    path = recorder.save(output)
    typer.echo(f"\n📼 Recorded {recorder.frame_count} frames ({recorder.duration:.1f}s) to {path}")


async def _replay_realtime(controller, player, speed: float):
    """Feed frames at their recorded pace while the fade loop ticks on its own."""
    fade = asyncio.create_task(controller.animation.run())
    loop = asyncio.get_running_loop()
    start = loop.time()
    try:
        for frame in player.play():
            delay = frame.timestamp / speed - (loop.time() - start)
            if delay > 0:
                await asyncio.sleep(delay)
            controller.on_results(frame.hands)
    finally:
        controller.animation.stop()
        await fade


@app.command()
def replay(
    recording: str = typer.Argument(..., help="Path to recording (.json or .npz)"),
    output: str = typer.Option("replay.png", "-o", help="Output PNG path"),
    mode: str = typer.Option("draw", help="Mode to replay in: draw or particle"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    seed: Optional[int] = typer.Option(None, help="Particle random seed"),
    realtime: bool = typer.Option(False, "--realtime", help="Replay at the recorded pace with a free-running fade loop"),
    speed: float = typer.Option(1.0, help="Playback speed for --realtime"),
):
    """Feed a recorded session through the controller and save the result."""
    from handart.controller import InteractionController
    from handart.recorder import SessionPlayer

    path = Path(recording)
    if not path.exists():
        typer.echo(f"❌ Recording not found: {recording}", err=True)
        raise typer.Exit(1)

    cfg = _load(config)
    if seed is not None:
        cfg.particles.seed = seed

    replay_mode = _parse_mode(mode)

    player = SessionPlayer.load(path)
    controller = InteractionController(cfg)
    controller.set_mode(replay_mode)

    typer.echo(f"▶️  Replaying {path.name} ({player.frame_count} frames, {player.duration:.1f}s)")
    if realtime:
        if speed <= 0:
            typer.echo(f"❌ Speed must be positive, got {speed}", err=True)
            raise typer.Exit(1)
        asyncio.run(_replay_realtime(controller, player, speed))
    else:
        for frame in player.play():
            controller.animation_tick()
            controller.on_results(frame.hands)

    out = Path(output)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(controller.save_png())

    status = controller.status
    typer.echo(f"✅ Wrote {out} ({status.history} history entries)")


@app.command("init-config")
def init_config(
    output: str = typer.Option("handart.yml", "-o", help="Where to write the config"),
):
    """Write the default configuration to a YAML file."""
    AppConfig().to_yaml(output)
    typer.echo(f"💾 Wrote default config to {output}")


def main():
    app()


if __name__ == "__main__":
    main()
