"""ASGI entrypoint for the photo survey."""

from photo_survey.api.app import create_app
from photo_survey.containers import build_container

app = create_app(build_container())
