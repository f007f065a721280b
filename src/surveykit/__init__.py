"""
surveykit: survey definition, response collection and aggregation engine.

This package is the state core of a survey builder:

    - model / answers     data shapes of surveys, questions and responses
    - commands / store    the closed command set and its dispatcher
    - validation          the pre-submission gate
    - aggregator / export read-only summaries and CSV export
    - serialization       lossless JSON/YAML form of the full state
    - backends / config   where and how the state blob is kept

This package contains ZERO knowledge of page rendering, routing or
authentication. Those are collaborators of the caller.
"""

__version__ = "0.1.0"
