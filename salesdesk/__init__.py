"""SalesDesk API: meeting logs, rubric evaluations and AI transcript analysis for design sales teams."""

__version__ = "0.1.0"
