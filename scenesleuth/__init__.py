"""Public entry points for the SceneSleuth resolver and its HTTP app."""

from __future__ import annotations

from app.main import app, create_app
from app.models import Artifact, ResolutionResult
from app.services.resolver import ResolutionController

__all__ = [
    "Artifact",
    "ResolutionController",
    "ResolutionResult",
    "app",
    "create_app",
]
