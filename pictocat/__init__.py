"""PictoCat - gamified AAC pictogram board backend."""

__version__ = "1.0.0"
