"""HandArt - Draw and paint particles in the air with hand gestures."""

__version__ = "0.1.0"

from handart.gestures import Gesture, GestureRule, FingerStates, InvalidPoseError, classify
from handart.smoothing import CoordinateSmoother
from handart.canvas import DrawCommand
from handart.surface import DrawingSurface
from handart.stroke import StrokeBuilder, StrokeUpdate, StrokeState
from handart.particles import Particle, ParticleField
from handart.history import DrawingHistory
from handart.animation import AnimationLoop
from handart.config import AppConfig, load_config
from handart.controller import InteractionController, Mode, Session, FrameStatus
from handart.recorder import SessionRecorder, SessionPlayer
