"""ExaPrep: practice exams generated from course material."""

__version__ = "0.1.0"
