"""Content moderation pipeline.

- precheck: zero-network keyword, length and repetition screen
- engine: combines the pre-filter with the optional classifiers
- fallback: local heuristics for degraded mode
"""
