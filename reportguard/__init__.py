"""reportguard: triage engines for a school incident-reporting platform.

Two heuristic engines live here:
- the content-moderation pipeline (pre-filter, classifier adapters, verdict)
- the false-report risk engine (content, behavior, timing, location)
"""

__version__ = "0.1.0"
