"""Remote software-engineering job aggregator.

``providers/`` holds one adapter per upstream board, ``services/`` the
normalizers, whitelist matcher, job store and the fetch orchestrator.
"""
