"""Turn PDF and Word documents into interactive multiple-choice quizzes."""

__version__ = "0.1.0"
